from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from api.engine.constants import (
    ATTEMPT_WALL_MATCH,
    PLAY_MATCH_FAILURE,
    REQUEST_WALL_TARGET,
    UPDATE_CARRY_STATE,
    UPDATE_WALL_TARGET,
    WALL_SUCCESS_CELEBRATION,
)
from api.engine.match_evaluator_v1 import MatchAttempt
from api.engine.wall_target_state_v1 import WallTarget


@dataclass(frozen=True)
class RequestWallTarget:
    pass


@dataclass(frozen=True)
class AttemptWallMatch:
    attempt: MatchAttempt
    attempt_id: Optional[int] = None


@dataclass(frozen=True)
class UnknownMessage:
    message_type: str


@dataclass(frozen=True)
class MalformedMessage:
    message_type: str
    reason: str


ClientMessage = Union[RequestWallTarget, AttemptWallMatch, UnknownMessage, MalformedMessage]


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _decode_attempt(payload: Dict[str, Any]) -> ClientMessage:
    if "carriedValue" not in payload or payload.get("carriedValue") is None:
        return MalformedMessage(ATTEMPT_WALL_MATCH, "missing carriedValue")

    carried_value = payload.get("carriedValue")
    if not _is_int(carried_value):
        return MalformedMessage(ATTEMPT_WALL_MATCH, "carriedValue must be int")

    carried_shape_index = payload.get("carriedShapeIndex", 0)
    if carried_shape_index is None:
        carried_shape_index = 0
    if not _is_int(carried_shape_index):
        return MalformedMessage(ATTEMPT_WALL_MATCH, "carriedShapeIndex must be int")

    attempt_id = payload.get("attemptId")
    if not _is_int(attempt_id):
        attempt_id = None

    return AttemptWallMatch(
        attempt=MatchAttempt(carried_value=int(carried_value), carried_shape_index=int(carried_shape_index)),
        attempt_id=attempt_id,
    )


def decode_client_message(message_type: str, payload: Optional[Dict[str, Any]]) -> ClientMessage:
    payload_obj = payload if isinstance(payload, dict) else {}

    if message_type == REQUEST_WALL_TARGET:
        return RequestWallTarget()
    if message_type == ATTEMPT_WALL_MATCH:
        return _decode_attempt(payload_obj)
    return UnknownMessage(message_type)


def envelope(message_type: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "type": message_type,
        "payload": dict(payload) if isinstance(payload, dict) else {},
    }


def _with_attempt_id(payload: Dict[str, Any], attempt_id: Optional[int]) -> Dict[str, Any]:
    if attempt_id is not None:
        payload["attemptId"] = attempt_id
    return payload


def update_wall_target_message(target: WallTarget) -> Dict[str, Any]:
    return envelope(UPDATE_WALL_TARGET, target.to_payload())


def update_carry_state_message(attempt_id: Optional[int] = None) -> Dict[str, Any]:
    payload = {
        "isCarrying": False,
        "carriedValue": 0,
        "carriedShapeIndex": 0,
    }
    return envelope(UPDATE_CARRY_STATE, _with_attempt_id(payload, attempt_id))


def play_match_failure_message(attempt_id: Optional[int] = None) -> Dict[str, Any]:
    return envelope(PLAY_MATCH_FAILURE, _with_attempt_id({}, attempt_id))


def wall_success_celebration_message() -> Dict[str, Any]:
    return envelope(WALL_SUCCESS_CELEBRATION)
