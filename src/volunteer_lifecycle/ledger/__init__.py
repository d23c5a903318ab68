"""Volunteered hours ledger."""

from .hours import MAX_HOURS, MIN_HOURS, HoursLedger

__all__ = [
    "HoursLedger",
    "MAX_HOURS",
    "MIN_HOURS",
]
