from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict

from api.engine.constants import INITIAL_TARGET_SHAPE_INDEX, INITIAL_TARGET_VALUE
from engine.shape_catalog import Shape, is_valid_target, shape_at, shape_count


logger = logging.getLogger(__name__)


def _runtime_error(code: str, detail: str) -> RuntimeError:
    return RuntimeError(f"{code}: {detail}")


@dataclass(frozen=True)
class WallTarget:
    value: int
    shape_index: int

    def __post_init__(self) -> None:
        if not is_valid_target(self.value, self.shape_index):
            raise _runtime_error(
                "WALL_TARGET_V1_INVALID",
                f"value={self.value!r} shape_index={self.shape_index!r}",
            )

    @property
    def shape(self) -> Shape:
        shape = shape_at(self.value, self.shape_index)
        if shape is None:
            raise _runtime_error(
                "WALL_TARGET_V1_INVALID",
                f"no catalog shape for value={self.value!r} shape_index={self.shape_index!r}",
            )
        return shape

    def to_payload(self) -> Dict[str, Any]:
        return {
            "targetShape": self.value,
            "shapeIndex": self.shape_index,
        }

    def describe(self) -> str:
        return f"{self.value} (shape {self.shape_index + 1}/{shape_count(self.value)})"


INITIAL_WALL_TARGET = WallTarget(value=INITIAL_TARGET_VALUE, shape_index=INITIAL_TARGET_SHAPE_INDEX)


class GameSession:
    """Server-owned wall state.

    The target is only ever replaced as a whole through :meth:`apply_new_target`,
    so value and shape index cannot drift apart.
    """

    def __init__(self, initial_target: WallTarget = INITIAL_WALL_TARGET) -> None:
        self._target = initial_target
        self._generation = 0

    @property
    def target(self) -> WallTarget:
        return self._target

    @property
    def generation(self) -> int:
        return self._generation

    def apply_new_target(self, target: WallTarget) -> WallTarget:
        if not isinstance(target, WallTarget):
            raise _runtime_error("WALL_TARGET_V1_INVALID", f"expected WallTarget, got {type(target).__name__}")
        previous = self._target
        self._target = target
        self._generation += 1
        logger.info("New wall target is %s (was %s)", target.describe(), previous.describe())
        return previous
