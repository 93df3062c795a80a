from __future__ import annotations

from typing import Protocol

from api.engine.constants import REROLL_PROBABILITY
from api.engine.wall_target_state_v1 import GameSession, WallTarget
from engine.shape_catalog import MAX_BLOCK_VALUE, MIN_BLOCK_VALUE, shapes_for


class RandomSource(Protocol):
    def randrange(self, stop: int) -> int: ...

    def random(self) -> float: ...


def _roll_value(rng: RandomSource) -> int:
    return MIN_BLOCK_VALUE + rng.randrange(MAX_BLOCK_VALUE - MIN_BLOCK_VALUE + 1)


def pick_next(current: WallTarget, rng: RandomSource) -> WallTarget:
    """Choose the following wall target, softly biased away from ``current``.

    A repeated value is re-rolled at most once, with probability
    ``REROLL_PROBABILITY``; the same holds for a repeated shape of the same value
    when that value has more than one shape. Repeats therefore stay possible.
    """
    value = _roll_value(rng)
    if value == current.value and rng.random() < REROLL_PROBABILITY:
        value = _roll_value(rng)

    shapes = shapes_for(value)
    shape_index = rng.randrange(len(shapes))
    if (
        value == current.value
        and shape_index == current.shape_index
        and len(shapes) > 1
        and rng.random() < REROLL_PROBABILITY
    ):
        shape_index = rng.randrange(len(shapes))

    return WallTarget(value=value, shape_index=shape_index)


def advance_target(session: GameSession, rng: RandomSource) -> WallTarget:
    target = pick_next(session.target, rng)
    session.apply_new_target(target)
    return target
