"""Volunteer-to-opportunity matching."""

from .engine import (
    FACTOR_WEIGHTS,
    FactorContribution,
    MatchBreakdown,
    MatchingEngine,
    recommendation_level,
    round_half_away,
    score_factors,
)

__all__ = [
    "FACTOR_WEIGHTS",
    "FactorContribution",
    "MatchBreakdown",
    "MatchingEngine",
    "recommendation_level",
    "round_half_away",
    "score_factors",
]
