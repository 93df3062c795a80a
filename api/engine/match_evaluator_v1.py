from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from api.engine.wall_target_state_v1 import WallTarget
from engine.shape_catalog import shape_at


class MatchResult(str, Enum):
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


class MatchReason(str, Enum):
    VALUE_MISMATCH = "VALUE_MISMATCH"
    UNKNOWN_SHAPE = "UNKNOWN_SHAPE"
    DIRECT = "DIRECT"
    MIRROR = "MIRROR"
    SHAPE_MISMATCH = "SHAPE_MISMATCH"


@dataclass(frozen=True)
class MatchAttempt:
    carried_value: int
    carried_shape_index: int


@dataclass(frozen=True)
class MatchVerdict:
    result: MatchResult
    reason: MatchReason

    @property
    def success(self) -> bool:
        return self.result is MatchResult.SUCCESS


def explain(attempt: MatchAttempt, target: WallTarget) -> MatchVerdict:
    if attempt.carried_value != target.value:
        return MatchVerdict(MatchResult.FAILURE, MatchReason.VALUE_MISMATCH)

    if attempt.carried_shape_index == target.shape_index:
        return MatchVerdict(MatchResult.SUCCESS, MatchReason.DIRECT)

    carried_shape = shape_at(attempt.carried_value, attempt.carried_shape_index)
    if carried_shape is None:
        return MatchVerdict(MatchResult.FAILURE, MatchReason.UNKNOWN_SHAPE)

    target_shape = target.shape
    if len(carried_shape) == len(target_shape) and tuple(reversed(carried_shape)) == target_shape:
        return MatchVerdict(MatchResult.SUCCESS, MatchReason.MIRROR)

    return MatchVerdict(MatchResult.FAILURE, MatchReason.SHAPE_MISMATCH)


def evaluate(attempt: MatchAttempt, target: WallTarget) -> MatchResult:
    return explain(attempt, target).result
