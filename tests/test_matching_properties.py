"""Property-based tests for the matching engine."""

from datetime import datetime, timezone
from typing import Dict, Optional

import pytest
from hypothesis import given, strategies as st, settings

from volunteer_lifecycle.config import Settings
from volunteer_lifecycle.core.clock import ManualClock
from volunteer_lifecycle.core.errors import ApplicationValidationError
from volunteer_lifecycle.core.models import (
    AvailabilityFactor,
    ExperienceFactor,
    InterestFactor,
    LocationFactor,
    MatchingFactors,
    ReviewRecommendation,
    SkillsFactor,
)
from volunteer_lifecycle.lifecycle.controller import LifecycleController
from volunteer_lifecycle.matching.engine import (
    FACTOR_WEIGHTS,
    MatchingEngine,
    recommendation_level,
    round_half_away,
    score_factors,
)


START = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)

FACTOR_TYPES = {
    "skills": SkillsFactor,
    "location": LocationFactor,
    "availability": AvailabilityFactor,
    "experience": ExperienceFactor,
    "interest": InterestFactor,
}


def build_factors(scores: Dict[str, Optional[float]]) -> MatchingFactors:
    return MatchingFactors(**{
        name: FACTOR_TYPES[name](score=score)
        for name, score in scores.items()
        if score is not None
    })


factor_scores_strategy = st.fixed_dictionaries({
    name: st.one_of(st.none(), st.floats(min_value=0, max_value=100, allow_nan=False))
    for name, _ in FACTOR_WEIGHTS
})


class TestMatchingEngine:
    """Scenario tests for score calculation."""

    @pytest.fixture
    def clock(self):
        return ManualClock(START)

    @pytest.fixture
    def engine(self, clock):
        return MatchingEngine(clock)

    @pytest.fixture
    def application(self, clock):
        return LifecycleController(clock).submit("opp-1", "camp-1", "vol-1")

    def test_weights_sum_to_one(self):
        assert sum(weight for _, weight in FACTOR_WEIGHTS) == pytest.approx(1.0)
        assert [name for name, _ in FACTOR_WEIGHTS] == [
            "skills", "location", "availability", "experience", "interest"
        ]

    def test_partial_factors_are_renormalised(self, engine, clock, application):
        application.matching.matching_factors = build_factors({"skills": 80, "location": 60})
        clock.advance(minutes=5)

        assert engine.calculate_matching_score(application) == 72
        assert application.matching.ai_score == 72
        assert application.matching.calculated_at == clock()

    def test_no_factors_scores_zero(self, engine, clock, application):
        assert engine.calculate_matching_score(application) == 0
        assert application.matching.calculated_at == clock()

    def test_factor_without_score_is_ignored(self, engine, application):
        application.matching.matching_factors = MatchingFactors(
            skills=SkillsFactor(score=50),
            location=LocationFactor(score=None, distance_km=12.5),
        )
        assert engine.calculate_matching_score(application) == 50

    def test_all_factors_full_marks(self, engine, application):
        application.matching.matching_factors = build_factors({name: 100 for name, _ in FACTOR_WEIGHTS})
        assert engine.calculate_matching_score(application) == 100

    def test_recalculation_overwrites(self, engine, clock, application):
        application.matching.matching_factors = build_factors({"interest": 40})
        engine.calculate_matching_score(application)

        application.matching.matching_factors = build_factors({"interest": 90})
        clock.advance(days=1)
        assert engine.calculate_matching_score(application) == 90
        assert application.matching.calculated_at == clock()

    def test_rounding_ties_go_up(self):
        assert round_half_away(72.5) == 73
        assert round_half_away(0.5) == 1
        assert round_half_away(2.4999) == 2
        assert round_half_away(99.5) == 100

    def test_record_factors_sets_reason(self, engine, application):
        engine.record_factors(application, {"skills": {"score": 90}, "availability": {"score": 75}})

        reason = application.matching.recommendation_reason
        assert reason.startswith("We recommend this opportunity because your skills")
        assert "Additionally, the schedule matches your availability" in reason

    def test_no_reason_without_strong_factor(self, engine, application):
        engine.record_factors(application, {"skills": {"score": 40}})
        assert application.matching.recommendation_reason is None

    def test_threshold_is_configurable(self, clock, application):
        engine = MatchingEngine(clock, Settings(strong_match_threshold=30))
        engine.record_factors(application, {"location": {"score": 40}})
        assert "location is convenient" in application.matching.recommendation_reason

    def test_invalid_factor_score_rejected(self, engine, application):
        engine.record_factors(application, {"skills": {"score": 60}})
        with pytest.raises(ApplicationValidationError):
            engine.record_factors(application, {"skills": {"score": 160}})
        assert application.matching.matching_factors.skills.score == 60

    @pytest.mark.parametrize("score,expected", [
        (95, ReviewRecommendation.STRONGLY_RECOMMEND),
        (85, ReviewRecommendation.STRONGLY_RECOMMEND),
        (70, ReviewRecommendation.RECOMMEND),
        (50, ReviewRecommendation.NEUTRAL),
        (30, ReviewRecommendation.NOT_RECOMMEND),
        (29, ReviewRecommendation.STRONGLY_NOT_RECOMMEND),
    ])
    def test_recommendation_level(self, score, expected):
        assert recommendation_level(score) == expected


class TestMatchingProperties:
    """Invariants of the weighted score."""

    @given(factor_scores_strategy)
    @settings(max_examples=100, deadline=None)
    def test_score_is_weighted_average_of_present_factors(self, scores):
        breakdown = score_factors(build_factors(scores))

        total = 0.0
        weight_used = 0.0
        for name, weight in FACTOR_WEIGHTS:
            if scores[name] is not None:
                total += scores[name] * weight
                weight_used += weight

        expected = round_half_away(total / weight_used) if weight_used else 0
        assert breakdown.ai_score == expected
        assert 0 <= breakdown.ai_score <= 100

        present = [s for s in scores.values() if s is not None]
        if present:
            assert min(present) - 1 <= breakdown.ai_score <= max(present) + 1

    @given(factor_scores_strategy)
    @settings(max_examples=30, deadline=None)
    def test_calculation_is_idempotent(self, scores):
        clock = ManualClock(START)
        application = LifecycleController(clock).submit("opp-1", "camp-1", "vol-1")
        application.matching.matching_factors = build_factors(scores)
        engine = MatchingEngine(clock)

        first = engine.calculate_matching_score(application)
        second = engine.calculate_matching_score(application)
        assert first == second == application.matching.ai_score
