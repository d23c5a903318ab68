"""Application status state machine and timeline stamping."""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from pydantic import ValidationError

from volunteer_lifecycle.core.clock import Clock, utc_now
from volunteer_lifecycle.core.errors import ApplicationValidationError
from volunteer_lifecycle.core.models import (
    ApplicationData,
    ApplicationMetadata,
    ApplicationStatus,
    Notification,
    NotificationType,
    Review,
    ReviewRecommendation,
    ReviewScore,
    Timeline,
    VolunteerApplication,
)
from volunteer_lifecycle.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class StatusChange:
    """Outcome of a status transition."""
    application_id: str
    old_status: ApplicationStatus
    new_status: ApplicationStatus
    acting_identity: str
    changed_at: datetime
    timeline_stamped: bool
    notification: Notification


class LifecycleController:
    """
    Creates applications and moves them between statuses.

    Transition legality is left to the caller: any status may follow any
    other. What the controller guarantees is the bookkeeping around each
    move: the status is always overwritten, the timeline slot is stamped only
    on first entry, and a ``status-update`` notification is appended.
    """

    def __init__(self, clock: Clock = utc_now):
        self.clock = clock
        self.logger = logger.bind(component="lifecycle_controller")

    def submit(
        self,
        opportunity_id: str,
        campaign_id: str,
        volunteer_id: str,
        application_data: Optional[ApplicationData] = None,
        metadata: Optional[ApplicationMetadata] = None
    ) -> VolunteerApplication:
        """
        Create a freshly submitted application.

        Args:
            opportunity_id: Opportunity applied to
            campaign_id: Campaign owning the opportunity
            volunteer_id: Applying volunteer
            application_data: Answers, documents, availability and so on
            metadata: Provenance of the submission

        Returns:
            New application with status ``submitted``
        """
        now = self.clock()
        try:
            application = VolunteerApplication(
                opportunity_id=opportunity_id,
                campaign_id=campaign_id,
                volunteer_id=volunteer_id,
                application_data=application_data or ApplicationData(),
                metadata=metadata or ApplicationMetadata(),
                timeline=Timeline(submitted_at=now),
                created_at=now,
                updated_at=now
            )
        except ValidationError as e:
            self.logger.warning("Rejected application submission", error_count=e.error_count())
            raise ApplicationValidationError.from_pydantic("submit", e) from e

        self.logger.info(
            "Application submitted",
            application_id=application.id,
            opportunity_id=opportunity_id,
            volunteer_id=volunteer_id
        )
        return application

    def transition_status(
        self,
        application: VolunteerApplication,
        new_status: ApplicationStatus,
        acting_identity: str
    ) -> StatusChange:
        """Record ``new_status`` on the application."""
        try:
            new_status = ApplicationStatus(new_status)
        except ValueError as e:
            raise ApplicationValidationError(f"transition_status: unknown status {new_status!r}") from e
        if not acting_identity:
            raise ApplicationValidationError("transition_status: acting identity is required")

        now = self.clock()
        old_status = application.status
        notification = Notification(
            type=NotificationType.STATUS_UPDATE,
            title="Application Status Updated",
            body=(
                f'Your application status has been updated from "{old_status.value}" '
                f'to "{new_status.value}"'
            ),
            sent_at=now
        )

        application.status = new_status
        stamped = application.timeline.stamp(new_status, now)
        application.communication.append_notification(notification)
        application.updated_at = now

        self.logger.info(
            "Application status updated",
            application_id=application.id,
            old_status=old_status.value,
            new_status=new_status.value,
            acting_identity=acting_identity,
            timeline_stamped=stamped
        )

        return StatusChange(
            application_id=application.id,
            old_status=old_status,
            new_status=new_status,
            acting_identity=acting_identity,
            changed_at=now,
            timeline_stamped=stamped,
            notification=notification
        )

    def record_review(
        self,
        application: VolunteerApplication,
        reviewer_id: str,
        score: Optional[ReviewScore] = None,
        notes: Optional[str] = None,
        strengths: Optional[List[str]] = None,
        concerns: Optional[List[str]] = None,
        recommendation: ReviewRecommendation = ReviewRecommendation.NEUTRAL
    ) -> Review:
        """Replace the review block. The status is left alone."""
        now = self.clock()
        try:
            review = Review(
                reviewed_by=reviewer_id,
                reviewed_at=now,
                score=score or ReviewScore(),
                notes=notes,
                strengths=strengths or [],
                concerns=concerns or [],
                recommendation=recommendation
            )
        except ValidationError as e:
            self.logger.warning(
                "Rejected review",
                application_id=application.id,
                error_count=e.error_count()
            )
            raise ApplicationValidationError.from_pydantic("record_review", e) from e

        application.review = review
        application.updated_at = now

        self.logger.info(
            "Review recorded",
            application_id=application.id,
            reviewer_id=reviewer_id,
            overall=review.score.overall,
            recommendation=review.recommendation.value
        )
        return review
