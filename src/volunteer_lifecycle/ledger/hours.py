"""Append-only ledger of volunteered hours."""

from datetime import datetime
from typing import Dict, Optional, Union

from pydantic import ValidationError

from volunteer_lifecycle.core.clock import Clock, utc_now
from volunteer_lifecycle.core.errors import ApplicationValidationError
from volunteer_lifecycle.core.models import (
    CompletionStatus,
    FeedbackAuthor,
    FeedbackBlock,
    HoursEntry,
    PerformanceRating,
    VolunteerApplication,
)
from volunteer_lifecycle.utils.logging import get_logger

logger = get_logger(__name__)

MIN_HOURS = 0.0
MAX_HOURS = 24.0


class HoursLedger:
    """
    Records worked time and the performance record of a volunteer.

    ``total_hours`` only ever moves by appending an entry; there is no way to
    edit or void an entry once it is logged.
    """

    def __init__(self, clock: Clock = utc_now):
        self.clock = clock
        self.logger = logger.bind(component="hours_ledger")

    def log_hours(
        self,
        application: VolunteerApplication,
        date: datetime,
        hours: float,
        activity: str,
        verifier_id: Optional[str] = None
    ) -> HoursEntry:
        """
        Append a ledger entry and grow the running total.

        Args:
            application: Application whose record is updated
            date: When the work happened
            hours: Hours worked, between 0 and 24 inclusive
            activity: What was done
            verifier_id: Identity confirming the entry, if any

        Returns:
            The appended entry
        """
        if isinstance(hours, bool) or not isinstance(hours, (int, float)):
            raise ApplicationValidationError(f"log_hours: hours must be a number, got {hours!r}")
        if not MIN_HOURS <= hours <= MAX_HOURS:
            self.logger.warning(
                "Rejected hours entry",
                application_id=application.id,
                hours=hours
            )
            raise ApplicationValidationError(
                f"log_hours: hours must be between {MIN_HOURS:g} and {MAX_HOURS:g}, got {hours}"
            )

        now = self.clock()
        try:
            entry = HoursEntry(
                date=date,
                hours=float(hours),
                activity=activity,
                verified_by=verifier_id,
                verified_at=now if verifier_id else None
            )
        except ValidationError as e:
            self.logger.warning(
                "Rejected hours entry",
                application_id=application.id,
                error_count=e.error_count()
            )
            raise ApplicationValidationError.from_pydantic("log_hours", e) from e

        application.volunteering_record.append_hours(entry)
        application.updated_at = now

        self.logger.info(
            "Hours logged",
            application_id=application.id,
            hours=entry.hours,
            total_hours=application.volunteering_record.total_hours,
            verified=entry.verified_by is not None
        )
        return entry

    def begin_service(self, application: VolunteerApplication, start_date: datetime) -> None:
        record = application.volunteering_record
        record.start_date = start_date
        record.completion_status = CompletionStatus.IN_PROGRESS
        application.updated_at = self.clock()

        self.logger.info("Volunteering started", application_id=application.id)

    def set_completion_status(
        self,
        application: VolunteerApplication,
        status: CompletionStatus,
        end_date: Optional[datetime] = None
    ) -> None:
        try:
            status = CompletionStatus(status)
        except ValueError as e:
            raise ApplicationValidationError(
                f"set_completion_status: unknown completion status {status!r}"
            ) from e

        record = application.volunteering_record
        record.completion_status = status
        if end_date is not None:
            record.end_date = end_date
        application.updated_at = self.clock()

        self.logger.info(
            "Completion status updated",
            application_id=application.id,
            completion_status=status.value
        )

    def record_performance_rating(
        self,
        application: VolunteerApplication,
        rating: Union[PerformanceRating, Dict]
    ) -> PerformanceRating:
        try:
            rating = PerformanceRating.model_validate(rating)
        except ValidationError as e:
            raise ApplicationValidationError.from_pydantic("record_performance_rating", e) from e

        application.volunteering_record.performance_rating = rating
        application.updated_at = self.clock()

        self.logger.info(
            "Performance rated",
            application_id=application.id,
            overall=rating.overall
        )
        return rating

    def record_feedback(
        self,
        application: VolunteerApplication,
        author: FeedbackAuthor,
        feedback: Union[FeedbackBlock, Dict]
    ) -> FeedbackBlock:
        """Replace the volunteer- or organization-authored feedback block."""
        try:
            author = FeedbackAuthor(author)
        except ValueError as e:
            raise ApplicationValidationError(f"record_feedback: unknown author {author!r}") from e
        try:
            feedback = FeedbackBlock.model_validate(feedback)
        except ValidationError as e:
            raise ApplicationValidationError.from_pydantic("record_feedback", e) from e

        blocks = application.volunteering_record.feedback
        if author == FeedbackAuthor.VOLUNTEER:
            blocks.volunteer_feedback = feedback
        else:
            blocks.organization_feedback = feedback
        application.updated_at = self.clock()

        self.logger.info(
            "Volunteering feedback recorded",
            application_id=application.id,
            author=author.value,
            rating=feedback.rating
        )
        return feedback
