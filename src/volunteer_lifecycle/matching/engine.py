"""Weighted compatibility scoring between a volunteer and an opportunity."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional, Tuple, Union

from pydantic import ValidationError

from volunteer_lifecycle.config import Settings, settings as default_settings
from volunteer_lifecycle.core.clock import Clock, utc_now
from volunteer_lifecycle.core.errors import ApplicationValidationError
from volunteer_lifecycle.core.models import (
    MatchingFactors,
    ReviewRecommendation,
    VolunteerApplication,
)
from volunteer_lifecycle.utils.logging import get_logger

logger = get_logger(__name__)


# Ordered (factor, weight) table. Weights sum to 1.0.
FACTOR_WEIGHTS: Tuple[Tuple[str, float], ...] = (
    ("skills", 0.30),
    ("location", 0.20),
    ("availability", 0.25),
    ("experience", 0.15),
    ("interest", 0.10),
)

FACTOR_REASONS: Dict[str, str] = {
    "skills": "your skills align with the role",
    "location": "the location is convenient for you",
    "availability": "the schedule matches your availability",
    "experience": "your experience is highly relevant",
    "interest": "this matches your interests",
}


@dataclass
class FactorContribution:
    """One factor's share of the aggregate score."""
    factor: str
    weight: float
    score: Optional[float]

    @property
    def used(self) -> bool:
        return self.score is not None

    @property
    def weighted_score(self) -> float:
        return self.score * self.weight if self.score is not None else 0.0


@dataclass
class MatchBreakdown:
    """Explains how an ``ai_score`` was reached."""
    ai_score: int
    contributions: List[FactorContribution]
    total_weighted_score: float
    total_weight_used: float


def round_half_away(value: float) -> int:
    """Round to the nearest integer, ties away from zero."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def factor_scores(factors: MatchingFactors) -> List[FactorContribution]:
    """Pair each weighted factor with its score, in weight-table order."""
    contributions = []
    for name, weight in FACTOR_WEIGHTS:
        factor = getattr(factors, name)
        score = factor.score if factor is not None else None
        contributions.append(FactorContribution(factor=name, weight=weight, score=score))
    return contributions


def score_factors(factors: MatchingFactors) -> MatchBreakdown:
    """Weighted average over the factors that carry a score."""
    contributions = factor_scores(factors)

    total_score = 0.0
    total_weight = 0.0
    for contribution in contributions:
        if not contribution.used:
            continue
        total_score += contribution.weighted_score
        total_weight += contribution.weight

    ai_score = round_half_away(total_score / total_weight) if total_weight > 0 else 0
    ai_score = max(0, min(100, ai_score))

    return MatchBreakdown(
        ai_score=ai_score,
        contributions=contributions,
        total_weighted_score=total_score,
        total_weight_used=total_weight
    )


def recommendation_level(score: float) -> ReviewRecommendation:
    """Map a 0-100 match score onto a recommendation."""
    if score >= 85:
        return ReviewRecommendation.STRONGLY_RECOMMEND
    if score >= 70:
        return ReviewRecommendation.RECOMMEND
    if score >= 50:
        return ReviewRecommendation.NEUTRAL
    if score >= 30:
        return ReviewRecommendation.NOT_RECOMMEND
    return ReviewRecommendation.STRONGLY_NOT_RECOMMEND


class MatchingEngine:
    """Computes and records the compatibility score of an application."""

    def __init__(self, clock: Clock = utc_now, config: Optional[Settings] = None):
        self.clock = clock
        self.config = config if config is not None else default_settings
        self.logger = logger.bind(component="matching_engine")

    def calculate_matching_score(self, application: VolunteerApplication) -> int:
        """
        Recompute ``matching.ai_score`` from the present factors.

        Factors without a score are skipped entirely, so the average is
        renormalised over the weight that was actually scored.

        Args:
            application: Application whose matching block is updated

        Returns:
            The new ai_score (0 when no factor is scored)
        """
        breakdown = score_factors(application.matching.matching_factors)
        now = self.clock()

        application.matching.ai_score = breakdown.ai_score
        application.matching.calculated_at = now
        application.updated_at = now

        self.logger.info(
            "Matching score calculated",
            application_id=application.id,
            ai_score=breakdown.ai_score,
            factors_used=[c.factor for c in breakdown.contributions if c.used],
            weight_used=round(breakdown.total_weight_used, 4)
        )
        return breakdown.ai_score

    def record_factors(
        self,
        application: VolunteerApplication,
        factors: Union[MatchingFactors, Dict]
    ) -> MatchingFactors:
        """Replace the factor breakdown and refresh the recommendation reason."""
        try:
            factors = MatchingFactors.model_validate(factors)
        except ValidationError as e:
            self.logger.warning(
                "Rejected matching factors",
                application_id=application.id,
                error_count=e.error_count()
            )
            raise ApplicationValidationError.from_pydantic("record_factors", e) from e

        reason = self.recommendation_reason(factors)
        application.matching.matching_factors = factors
        application.matching.recommendation_reason = reason
        application.updated_at = self.clock()

        self.logger.debug(
            "Matching factors recorded",
            application_id=application.id,
            scored=[c.factor for c in factor_scores(factors) if c.used]
        )
        return factors

    def recommendation_reason(self, factors: MatchingFactors) -> Optional[str]:
        """Explain a match by its strongest factors, or None if none stand out."""
        strong = [
            c for c in factor_scores(factors)
            if c.used and c.score >= self.config.strong_match_threshold
        ]
        if not strong:
            return None

        # sorted() is stable, so equal scores keep weight-table order
        strong = sorted(strong, key=lambda c: c.score, reverse=True)
        reasons = [f"We recommend this opportunity because {FACTOR_REASONS[strong[0].factor]}"]
        if len(strong) > 1:
            reasons.append(f"Additionally, {FACTOR_REASONS[strong[1].factor]}")
        return ". ".join(reasons) + "."
