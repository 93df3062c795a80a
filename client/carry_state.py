from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from engine.shape_catalog import MAX_BLOCK_VALUE, MIN_BLOCK_VALUE, is_valid_target, next_shape_index


logger = logging.getLogger(__name__)

MAX_CARRY_VALUE = MAX_BLOCK_VALUE


@dataclass(frozen=True)
class Idle:
    is_carrying = False
    value = 0
    shape_index = 0


@dataclass(frozen=True)
class Carrying:
    value: int
    shape_index: int = 0

    is_carrying = True


CarryState = Union[Idle, Carrying]

IDLE = Idle()


def _is_block_value(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and MIN_BLOCK_VALUE <= value <= MAX_BLOCK_VALUE


def pickup(state: CarryState, value: int, shape_index: int = 0) -> Optional[CarryState]:
    """Return the carry state after picking up a block, or None if refused.

    Stacking onto an existing carry reverts to the default shape.
    """
    if not _is_block_value(value):
        return None
    if isinstance(state, Idle):
        if not is_valid_target(value, shape_index):
            shape_index = 0
        return Carrying(value=value, shape_index=shape_index)
    total = state.value + value
    if total > MAX_CARRY_VALUE:
        logger.info("Cannot pick up - would exceed max capacity: %d + %d > %d", state.value, value, MAX_CARRY_VALUE)
        return None
    return Carrying(value=total, shape_index=0)


def transform(state: CarryState) -> CarryState:
    if isinstance(state, Idle):
        return state
    return Carrying(value=state.value, shape_index=next_shape_index(state.value, state.shape_index))


def drop(state: CarryState) -> Tuple[CarryState, Optional[Carrying]]:
    if isinstance(state, Idle):
        return state, None
    return IDLE, state


def from_server(is_carrying: bool, value: int, shape_index: int) -> CarryState:
    if not is_carrying or not _is_block_value(value):
        return IDLE
    return Carrying(value=value, shape_index=shape_index if is_valid_target(value, shape_index) else 0)


def mirror_duplicate(state: CarryState) -> Tuple[CarryState, List[Carrying]]:
    if isinstance(state, Idle):
        return state, []
    return IDLE, [Carrying(state.value, state.shape_index), Carrying(state.value, state.shape_index)]


def combine_blocks(value_a: int, value_b: int) -> Optional[int]:
    if not _is_block_value(value_a) or not _is_block_value(value_b):
        return None
    total = value_a + value_b
    return total if total <= MAX_CARRY_VALUE else None


def should_split_after_combine(result: Optional[int]) -> bool:
    return result == MAX_CARRY_VALUE


def split_block(value: int) -> List[int]:
    if not _is_block_value(value):
        return []
    return [1] * value
