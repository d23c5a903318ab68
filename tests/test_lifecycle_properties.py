"""Property-based tests for status transitions and the timeline."""

from datetime import datetime, timedelta, timezone
from typing import List

import pytest
from hypothesis import given, strategies as st, settings, HealthCheck

from volunteer_lifecycle.core.clock import ManualClock
from volunteer_lifecycle.core.errors import ApplicationValidationError
from volunteer_lifecycle.core.models import (
    TIMELINE_FIELDS,
    ApplicationStatus,
    NotificationType,
    ReviewRecommendation,
    ReviewScore,
)
from volunteer_lifecycle.lifecycle.controller import LifecycleController, StatusChange


START = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


class TestLifecycleController:
    """Scenario tests for the lifecycle controller."""

    @pytest.fixture
    def clock(self):
        return ManualClock(START)

    @pytest.fixture
    def controller(self, clock):
        return LifecycleController(clock)

    @pytest.fixture
    def application(self, controller):
        return controller.submit("opp-1", "camp-1", "vol-1")

    def test_accepting_stamps_timeline_and_notifies(self, controller, clock, application):
        clock.advance(days=2)
        change = controller.transition_status(application, ApplicationStatus.ACCEPTED, "reviewer-7")

        assert isinstance(change, StatusChange)
        assert application.status == ApplicationStatus.ACCEPTED
        assert application.timeline.accepted_at == clock()
        assert change.timeline_stamped
        assert change.old_status == ApplicationStatus.SUBMITTED
        assert change.acting_identity == "reviewer-7"

        notifications = application.communication.notifications
        assert len(notifications) == 1
        assert notifications[0].type == NotificationType.STATUS_UPDATE
        assert '"submitted"' in notifications[0].body
        assert '"accepted"' in notifications[0].body
        assert notifications[0] == change.notification

    def test_repeated_transition_stamps_once_notifies_twice(self, controller, clock, application):
        clock.advance(hours=1)
        first_time = clock()
        controller.transition_status(application, ApplicationStatus.SHORTLISTED, "reviewer-7")

        clock.advance(hours=5)
        change = controller.transition_status(application, ApplicationStatus.SHORTLISTED, "reviewer-7")

        assert not change.timeline_stamped
        assert application.timeline.shortlisted_at == first_time
        assert len(application.communication.notifications) == 2
        assert application.updated_at == clock()

    def test_reentering_after_other_statuses_keeps_first_stamp(self, controller, clock, application):
        controller.transition_status(application, ApplicationStatus.UNDER_REVIEW, "r")
        reviewed_at = application.timeline.reviewed_at
        clock.advance(days=1)
        controller.transition_status(application, ApplicationStatus.SHORTLISTED, "r")
        clock.advance(days=1)
        controller.transition_status(application, ApplicationStatus.UNDER_REVIEW, "r")

        assert application.status == ApplicationStatus.UNDER_REVIEW
        assert application.timeline.reviewed_at == reviewed_at

    def test_returning_to_submitted_keeps_submission_time(self, controller, clock, application):
        controller.transition_status(application, ApplicationStatus.ACCEPTED, "r")
        clock.advance(days=3)
        change = controller.transition_status(application, ApplicationStatus.SUBMITTED, "r")

        assert application.status == ApplicationStatus.SUBMITTED
        assert application.timeline.submitted_at == START
        assert not change.timeline_stamped

    def test_status_accepts_plain_strings(self, controller, application):
        controller.transition_status(application, "interview-scheduled", "r")
        assert application.status == ApplicationStatus.INTERVIEW_SCHEDULED
        assert application.timeline.interview_scheduled_at is not None

    def test_unknown_status_leaves_application_untouched(self, controller, application):
        before = application.model_copy(deep=True)
        with pytest.raises(ApplicationValidationError):
            controller.transition_status(application, "archived", "r")
        assert application == before

    def test_transition_requires_actor(self, controller, application):
        with pytest.raises(ApplicationValidationError):
            controller.transition_status(application, ApplicationStatus.REJECTED, "")
        assert application.communication.notifications == ()

    def test_record_review(self, controller, clock, application):
        review = controller.record_review(
            application,
            "reviewer-7",
            score=ReviewScore(overall=82, skill_match=90),
            notes="Strong logistics background",
            strengths=["Reliable"],
            concerns=["Limited weekday availability"],
            recommendation=ReviewRecommendation.RECOMMEND,
        )

        assert application.review == review
        assert review.reviewed_at == clock()
        assert application.status == ApplicationStatus.SUBMITTED

    def test_invalid_review_is_rejected(self, controller, application):
        with pytest.raises(ApplicationValidationError):
            controller.record_review(application, "reviewer-7", strengths=["x" * 101])
        assert application.review.reviewed_by is None


class TestTimelineProperties:
    """Invariants over arbitrary transition sequences."""

    @given(st.lists(st.sampled_from(list(ApplicationStatus)), min_size=1, max_size=12))
    @settings(max_examples=50, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_timeline_records_first_entry_only(self, statuses: List[ApplicationStatus]):
        """
        For any sequence of transitions, each reached status keeps the time of
        its first entry, the status is the last one requested, and every call
        appends exactly one notification.
        """
        clock = ManualClock(START)
        controller = LifecycleController(clock)
        application = controller.submit("opp-1", "camp-1", "vol-1")

        first_entry = {ApplicationStatus.SUBMITTED: START}
        for status in statuses:
            clock.advance(minutes=7)
            first_entry.setdefault(status, clock())
            controller.transition_status(application, status, "actor")

        assert application.status == statuses[-1]
        assert len(application.communication.notifications) == len(statuses)

        for status, field_name in TIMELINE_FIELDS.items():
            assert getattr(application.timeline, field_name) == first_entry.get(status)

    @given(st.sampled_from(list(ApplicationStatus)), st.integers(min_value=2, max_value=6))
    @settings(max_examples=25, deadline=None)
    def test_repeating_one_status(self, status: ApplicationStatus, repeats: int):
        clock = ManualClock(START)
        controller = LifecycleController(clock)
        application = controller.submit("opp-1", "camp-1", "vol-1")

        stamps = []
        for _ in range(repeats):
            clock.advance(hours=1)
            controller.transition_status(application, status, "actor")
            stamps.append(application.timeline.reached_at(status))

        assert len(set(stamps)) == 1
        assert all(n.type == NotificationType.STATUS_UPDATE for n in application.communication.notifications)
        assert len(application.communication.notifications) == repeats
