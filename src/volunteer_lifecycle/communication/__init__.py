"""Application communication history."""

from .log import CommunicationLog

__all__ = [
    "CommunicationLog",
]
