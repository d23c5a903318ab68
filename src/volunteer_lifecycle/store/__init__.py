"""Application storage."""

from .base import ApplicationStore
from .memory import InMemoryApplicationStore

__all__ = [
    "ApplicationStore",
    "InMemoryApplicationStore",
]
