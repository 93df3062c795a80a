from pathlib import Path


# --- Versions (core) ---
ENGINE_VERSION = "0.3.0"
PROTOCOL_VERSION = "wall_protocol_v1"

REPO_ROOT = Path(__file__).resolve().parents[2]

# --- Message types ---
REQUEST_WALL_TARGET = "REQUEST_WALL_TARGET"
ATTEMPT_WALL_MATCH = "ATTEMPT_WALL_MATCH"
UPDATE_WALL_TARGET = "UPDATE_WALL_TARGET"
UPDATE_CARRY_STATE = "UPDATE_CARRY_STATE"
PLAY_MATCH_FAILURE = "PLAY_MATCH_FAILURE"
WALL_SUCCESS_CELEBRATION = "WALL_SUCCESS_CELEBRATION"

CLIENT_MESSAGE_TYPES = (
    REQUEST_WALL_TARGET,
    ATTEMPT_WALL_MATCH,
)
SERVER_MESSAGE_TYPES = (
    UPDATE_WALL_TARGET,
    UPDATE_CARRY_STATE,
    PLAY_MATCH_FAILURE,
    WALL_SUCCESS_CELEBRATION,
)

# --- Target selection ---
INITIAL_TARGET_VALUE = 1
INITIAL_TARGET_SHAPE_INDEX = 0
REROLL_PROBABILITY = 0.8

# --- Server delivery ---
SEND_TIMEOUT_SEC = 5.0

# --- Client timings (seconds) ---
CELEBRATION_DURATION_SEC = 3.0
INITIAL_TARGET_GRACE_SEC = 2.0
RECONNECT_ATTEMPTS = 5
RECONNECT_DELAY_SEC = 1.0
RECONNECT_DELAY_MAX_SEC = 5.0
