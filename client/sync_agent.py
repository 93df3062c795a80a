from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Protocol

from api.engine.constants import (
    ATTEMPT_WALL_MATCH,
    CELEBRATION_DURATION_SEC,
    INITIAL_TARGET_GRACE_SEC,
    PLAY_MATCH_FAILURE,
    REQUEST_WALL_TARGET,
    UPDATE_CARRY_STATE,
    UPDATE_WALL_TARGET,
    WALL_SUCCESS_CELEBRATION,
)
from client import carry_state
from client.carry_state import IDLE, CarryState, Carrying
from engine.shape_catalog import is_valid_target


logger = logging.getLogger(__name__)


class WallScene(Protocol):
    def apply_wall_hole(self, value: int, shape_index: int) -> None: ...

    def apply_wall_solid(self) -> None: ...


class AudioSink(Protocol):
    def play(self, signal: str) -> None: ...


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


Scheduler = Callable[[float, Callable[[], None]], TimerHandle]
SendMessage = Callable[[Dict[str, Any]], bool]


class WallMode(str, Enum):
    NORMAL = "NORMAL"
    CELEBRATING = "CELEBRATING"


@dataclass(frozen=True)
class PendingTarget:
    value: int
    shape_index: int


def _loop_scheduler(delay: float, callback: Callable[[], None]) -> TimerHandle:
    return asyncio.get_running_loop().call_later(delay, callback)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class ClientSyncAgent:
    """Client mirror of the wall protocol.

    Owns the optimistic carry state and keeps a new wall target from showing
    while a celebration is still running.
    """

    def __init__(
        self,
        send: SendMessage,
        scene: WallScene,
        audio: AudioSink,
        scheduler: Scheduler = _loop_scheduler,
        celebration_duration: float = CELEBRATION_DURATION_SEC,
        initial_target_grace: float = INITIAL_TARGET_GRACE_SEC,
    ) -> None:
        self._send = send
        self.scene = scene
        self.audio = audio
        self._schedule = scheduler
        self.celebration_duration = celebration_duration
        self.initial_target_grace = initial_target_grace

        self.carry: CarryState = IDLE
        self.wall_mode = WallMode.NORMAL
        self.pending_target: Optional[PendingTarget] = None
        self.displayed_target: Optional[PendingTarget] = None
        self.target_received = False
        self._celebration_timer: Optional[TimerHandle] = None
        self._next_attempt_id = 1

    # --- local intents ---

    def pickup(self, value: int, shape_index: int = 0) -> bool:
        next_state = carry_state.pickup(self.carry, value, shape_index)
        if next_state is None:
            return False
        self.carry = next_state
        self.audio.play("pickup")
        return True

    def transform(self) -> bool:
        next_state = carry_state.transform(self.carry)
        if next_state == self.carry:
            return False
        self.carry = next_state
        self.audio.play("transform")
        return True

    def drop(self) -> Optional[Carrying]:
        self.carry, dropped = carry_state.drop(self.carry)
        if dropped is not None:
            self.audio.play("drop")
        return dropped

    def mirror(self) -> List[Carrying]:
        """Hand the carried block to the mirror; returns the two copies it produces."""
        self.carry, copies = carry_state.mirror_duplicate(self.carry)
        if copies:
            self.audio.play("mirror")
        return copies

    def breakdown(self, value: int) -> List[int]:
        pieces = carry_state.split_block(value)
        if pieces:
            self.audio.play("split")
        return pieces

    def combine(self, value_a: int, value_b: int) -> Optional[List[int]]:
        """Combine two ground blocks.

        Returns the values of the blocks left on the ground, or None when the
        sum would exceed the largest block. A combined 5 splits back into five
        1-blocks.
        """
        result = carry_state.combine_blocks(value_a, value_b)
        if result is None:
            return None
        self.audio.play(f"combine_{value_a}_{value_b}")
        if carry_state.should_split_after_combine(result):
            self.audio.play("split")
            return carry_state.split_block(result)
        return [result]

    def attempt_wall_match(self) -> bool:
        # Carry state is kept until the server confirms a success.
        if not isinstance(self.carry, Carrying):
            return False
        payload = {
            "carriedValue": self.carry.value,
            "carriedShapeIndex": self.carry.shape_index,
            "attemptId": self._next_attempt_id,
        }
        self._next_attempt_id += 1
        return self._send_message(ATTEMPT_WALL_MATCH, payload)

    def request_wall_target(self) -> bool:
        return self._send_message(REQUEST_WALL_TARGET, {})

    def on_connected(self) -> None:
        self.target_received = False
        self._schedule(self.initial_target_grace, self._request_if_no_target)

    def _request_if_no_target(self) -> None:
        if not self.target_received:
            logger.info("No wall target received yet. Requesting one...")
            self.request_wall_target()

    def _send_message(self, message_type: str, payload: Dict[str, Any]) -> bool:
        try:
            sent = bool(self._send({"type": message_type, "payload": payload}))
        except Exception as exc:
            logger.error("Error sending %s: %s", message_type, exc)
            return False
        if not sent:
            logger.warning("Cannot send %s, not connected to server", message_type)
        return sent

    # --- server messages ---

    def handle_server_message(self, message: Any) -> None:
        if not isinstance(message, dict):
            logger.warning("Ignoring non-object server message: %r", message)
            return
        message_type = message.get("type")
        payload = message.get("payload") if isinstance(message.get("payload"), dict) else {}

        if message_type == UPDATE_WALL_TARGET:
            self._on_wall_target(payload)
        elif message_type == WALL_SUCCESS_CELEBRATION:
            self._on_celebration()
        elif message_type == UPDATE_CARRY_STATE:
            self._on_carry_state(payload)
        elif message_type == PLAY_MATCH_FAILURE:
            self.audio.play("wrong_match")
        else:
            logger.info("Unknown message type: %s", message_type)

    def _on_wall_target(self, payload: Dict[str, Any]) -> None:
        value = payload.get("targetShape")
        shape_index = payload.get("shapeIndex", 0)
        if not is_valid_target(value, shape_index):
            logger.error("Invalid shape configuration: %r, %r", value, shape_index)
            return
        self.target_received = True
        target = PendingTarget(value=value, shape_index=shape_index)
        if self.wall_mode is WallMode.CELEBRATING:
            logger.info("Celebration in progress, queuing wall update")
            self.pending_target = target
            return
        self._apply_target(target)

    def _apply_target(self, target: PendingTarget) -> None:
        self.displayed_target = target
        self.scene.apply_wall_hole(target.value, target.shape_index)

    def _on_celebration(self) -> None:
        self.wall_mode = WallMode.CELEBRATING
        self.scene.apply_wall_solid()
        self.audio.play("fanfare")
        if self._celebration_timer is not None:
            self._celebration_timer.cancel()
        self._celebration_timer = self._schedule(self.celebration_duration, self._end_celebration)

    def _end_celebration(self) -> None:
        self._celebration_timer = None
        self.wall_mode = WallMode.NORMAL
        pending, self.pending_target = self.pending_target, None
        if pending is not None:
            self._apply_target(pending)

    def _on_carry_state(self, payload: Dict[str, Any]) -> None:
        value = payload.get("carriedValue", 0)
        shape_index = payload.get("carriedShapeIndex", 0)
        self.carry = carry_state.from_server(
            bool(payload.get("isCarrying", False)),
            value if _is_int(value) else 0,
            shape_index if _is_int(shape_index) else 0,
        )
        self.audio.play("drop")
