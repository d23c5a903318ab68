"""Application lifecycle state machine."""

from .controller import LifecycleController, StatusChange

__all__ = [
    "LifecycleController",
    "StatusChange",
]
