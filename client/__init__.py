"""Client-side counterpart of the wall protocol."""

__all__ = [
    "carry_state",
    "connection",
    "sync_agent",
]
