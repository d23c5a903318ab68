"""Interview scheduling, rescheduling and feedback."""

from datetime import datetime
from typing import List, Optional

from pydantic import ValidationError

from volunteer_lifecycle.config import Settings, settings as default_settings
from volunteer_lifecycle.core.clock import Clock, utc_now
from volunteer_lifecycle.core.errors import ApplicationValidationError
from volunteer_lifecycle.core.models import (
    InterviewFeedback,
    InterviewRecommendation,
    InterviewType,
    Notification,
    NotificationType,
    RescheduleRecord,
    RescheduleRequester,
    VolunteerApplication,
)
from volunteer_lifecycle.utils.logging import get_logger

logger = get_logger(__name__)


def _require_aware(operation: str, field: str, value: datetime) -> None:
    if not isinstance(value, datetime):
        raise ApplicationValidationError(f"{operation}: {field} must be a datetime")
    if value.tzinfo is None or value.utcoffset() is None:
        raise ApplicationValidationError(f"{operation}: {field} must carry a timezone")


class InterviewScheduler:
    """Manages the interview block of an application."""

    def __init__(self, clock: Clock = utc_now, config: Optional[Settings] = None):
        self.clock = clock
        self.config = config if config is not None else default_settings
        self.logger = logger.bind(component="interview_scheduler")

    def schedule(
        self,
        application: VolunteerApplication,
        scheduled_date: datetime,
        duration_minutes: Optional[int] = None,
        interview_type: InterviewType = InterviewType.VIDEO,
        location: Optional[str] = None,
        meeting_link: Optional[str] = None,
        interviewers: Optional[List[str]] = None
    ) -> Notification:
        """
        Set up the interview and notify the volunteer.

        The application status is not touched; callers move it to
        ``interview-scheduled`` through the lifecycle controller.
        """
        duration = duration_minutes
        if duration is None:
            duration = self.config.default_interview_duration_minutes
        if not isinstance(duration, int) or isinstance(duration, bool) or duration < 1:
            raise ApplicationValidationError("schedule: duration must be at least one minute")
        try:
            interview_type = InterviewType(interview_type)
        except ValueError as e:
            raise ApplicationValidationError(f"schedule: unknown interview type {interview_type!r}") from e
        _require_aware("schedule", "scheduled_date", scheduled_date)

        now = self.clock()
        notification = Notification(
            type=NotificationType.INTERVIEW_SCHEDULED,
            title="Interview Scheduled",
            body=(
                f"Your {interview_type.value} interview is scheduled for "
                f"{scheduled_date.isoformat()} ({duration} minutes)"
            ),
            sent_at=now,
            action_required=True
        )

        interview = application.interview
        interview.is_required = True
        interview.scheduled_date = scheduled_date
        interview.duration_minutes = duration
        interview.type = interview_type
        interview.location = location
        interview.meeting_link = meeting_link
        interview.interviewers = list(interviewers or [])
        application.communication.append_notification(notification)
        application.updated_at = now

        self.logger.info(
            "Interview scheduled",
            application_id=application.id,
            scheduled_date=scheduled_date.isoformat(),
            interview_type=interview_type.value,
            interviewers=len(interview.interviewers)
        )
        return notification

    def reschedule(
        self,
        application: VolunteerApplication,
        new_date: datetime,
        reason: str,
        requested_by: RescheduleRequester
    ) -> RescheduleRecord:
        """Move an already scheduled interview and keep the history."""
        original_date = application.interview.scheduled_date
        if original_date is None:
            raise ApplicationValidationError("reschedule: no interview is scheduled")
        _require_aware("reschedule", "new_date", new_date)
        if reason and len(reason) > self.config.reschedule_reason_max_length:
            self.logger.warning(
                "Rejected reschedule",
                application_id=application.id,
                reason_length=len(reason)
            )
            raise ApplicationValidationError(
                f"reschedule: reason must be at most "
                f"{self.config.reschedule_reason_max_length} characters"
            )

        now = self.clock()
        try:
            record = RescheduleRecord(
                original_date=original_date,
                new_date=new_date,
                reason=reason,
                requested_by=requested_by,
                rescheduled_at=now
            )
        except ValidationError as e:
            raise ApplicationValidationError.from_pydantic("reschedule", e) from e

        notification = Notification(
            type=NotificationType.INTERVIEW_SCHEDULED,
            title="Interview Rescheduled",
            body=(
                f"Your interview has moved from {original_date.isoformat()} "
                f"to {new_date.isoformat()}: {reason}"
            ),
            sent_at=now,
            action_required=True
        )

        application.interview.append_reschedule(record)
        application.interview.scheduled_date = new_date
        application.communication.append_notification(notification)
        application.updated_at = now

        self.logger.info(
            "Interview rescheduled",
            application_id=application.id,
            requested_by=record.requested_by.value,
            reschedule_count=len(application.interview.rescheduled)
        )
        return record

    def record_feedback(
        self,
        application: VolunteerApplication,
        rating: int,
        notes: Optional[str] = None,
        recommendation: Optional[InterviewRecommendation] = None
    ) -> InterviewFeedback:
        """Store interview feedback, replacing any earlier feedback."""
        try:
            feedback = InterviewFeedback(rating=rating, notes=notes, recommendation=recommendation)
        except ValidationError as e:
            raise ApplicationValidationError.from_pydantic("record_interview_feedback", e) from e

        application.interview.feedback = feedback
        application.updated_at = self.clock()

        self.logger.info(
            "Interview feedback recorded",
            application_id=application.id,
            rating=feedback.rating,
            recommendation=feedback.recommendation.value if feedback.recommendation else None
        )
        return feedback
