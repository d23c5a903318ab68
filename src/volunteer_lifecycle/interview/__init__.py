"""Interview scheduling."""

from .scheduler import InterviewScheduler

__all__ = [
    "InterviewScheduler",
]
