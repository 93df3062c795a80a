"""Engine package shared by the wall server and its clients."""

__all__ = [
    "determinism",
    "shape_catalog",
]
