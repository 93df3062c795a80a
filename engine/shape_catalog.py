from __future__ import annotations

from typing import Any, Dict, Tuple

from engine.determinism import sha256_hex, stable_json_dumps


SHAPE_CATALOG_VERSION = "shape_catalog_v1"

MIN_BLOCK_VALUE = 1
MAX_BLOCK_VALUE = 5

Shape = Tuple[int, ...]

# Order is part of the wire protocol: shape indices are sent as bare integers.
BLOCK_SHAPES: Dict[int, Tuple[Shape, ...]] = {
    1: (
        (1,),
    ),
    2: (
        (2,),
        (1, 1),
    ),
    3: (
        (3,),
        (2, 1),
        (1, 2),
        (1, 1, 1),
    ),
    4: (
        (4,),
        (3, 1),
        (2, 2),
        (1, 3),
        (2, 1, 1),
        (1, 2, 1),
        (1, 1, 2),
        (1, 1, 1, 1),
    ),
    5: (
        (5,),
        (4, 1),
        (3, 2),
        (2, 3),
        (1, 4),
        (3, 1, 1),
        (2, 2, 1),
        (2, 1, 2),
        (1, 2, 2),
        (2, 1, 1, 1),
        (1, 2, 1, 1),
        (1, 1, 2, 1),
        (1, 1, 1, 2),
        (1, 1, 1, 1, 1),
    ),
}


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def shapes_for(value: Any) -> Tuple[Shape, ...]:
    if not _is_int(value):
        return ()
    return BLOCK_SHAPES.get(int(value), ())


def shape_count(value: Any) -> int:
    return len(shapes_for(value))


def shape_at(value: Any, shape_index: Any) -> Shape | None:
    shapes = shapes_for(value)
    if not shapes or not _is_int(shape_index):
        return None
    if shape_index < 0 or shape_index >= len(shapes):
        return None
    return shapes[shape_index]


def is_valid_target(value: Any, shape_index: Any) -> bool:
    return shape_at(value, shape_index) is not None


def next_shape_index(value: Any, shape_index: Any) -> int:
    """Cycle to the following arrangement of ``value``; single-shape values stay at 0."""
    count = shape_count(value)
    if count <= 1:
        return 0
    current = int(shape_index) if _is_int(shape_index) and 0 <= shape_index < count else 0
    return (current + 1) % count


def catalog_fingerprint() -> str:
    payload = {
        "version": SHAPE_CATALOG_VERSION,
        "shapes": {str(value): [list(shape) for shape in shapes] for value, shapes in BLOCK_SHAPES.items()},
    }
    return sha256_hex(stable_json_dumps(payload))
