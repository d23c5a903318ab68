"""Application service: read-modify-write of one aggregate per call."""

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar, Union

from volunteer_lifecycle.communication.log import CommunicationLog
from volunteer_lifecycle.config import Settings, settings as default_settings
from volunteer_lifecycle.core.clock import Clock, utc_now
from volunteer_lifecycle.core.errors import LifecycleError, StorageOperationError
from volunteer_lifecycle.core.models import (
    ApplicationData,
    ApplicationMetadata,
    ApplicationStatus,
    Attachment,
    CompletionStatus,
    FeedbackAuthor,
    FeedbackBlock,
    InterviewRecommendation,
    InterviewType,
    MatchingFactors,
    Notification,
    NotificationType,
    PerformanceRating,
    RescheduleRequester,
    ReviewRecommendation,
    ReviewScore,
    VolunteerApplication,
)
from volunteer_lifecycle.interview.scheduler import InterviewScheduler
from volunteer_lifecycle.ledger.hours import HoursLedger
from volunteer_lifecycle.lifecycle.controller import LifecycleController
from volunteer_lifecycle.matching.engine import MatchingEngine
from volunteer_lifecycle.store.base import ApplicationStore
from volunteer_lifecycle.store.memory import InMemoryApplicationStore
from volunteer_lifecycle.utils.logging import get_logger, log_application_state

logger = get_logger(__name__)

T = TypeVar("T")

NotificationSubscriber = Callable[[VolunteerApplication, List[Notification]], None]


class ApplicationService:
    """
    Entry point for callers that address applications by id.

    Each mutating call loads the aggregate, applies one component operation
    to a private deep copy and writes the copy back only if nobody else wrote
    in between. A lost race surfaces as ``ApplicationConflictError``; the
    service never retries on its own because only the caller knows whether
    repeating the call is safe.
    """

    def __init__(
        self,
        store: Optional[ApplicationStore] = None,
        clock: Clock = utc_now,
        config: Optional[Settings] = None
    ):
        self.store = store if store is not None else InMemoryApplicationStore()
        self.clock = clock
        self.config = config if config is not None else default_settings
        self.logger = logger.bind(component="application_service")

        self.lifecycle = LifecycleController(clock)
        self.matching = MatchingEngine(clock, self.config)
        self.ledger = HoursLedger(clock)
        self.interviews = InterviewScheduler(clock, self.config)
        self.communication = CommunicationLog(clock)

        self._subscribers: List[NotificationSubscriber] = []

    # --- plumbing -------------------------------------------------------------

    def subscribe(self, callback: NotificationSubscriber) -> None:
        """Receive notifications appended by every committed mutation."""
        self._subscribers.append(callback)

    def _storage_call(self, operation: str, func: Callable[..., T], *args: Any) -> T:
        try:
            return func(*args)
        except LifecycleError:
            raise
        except Exception as e:
            self.logger.error(
                "Storage failure",
                operation=operation,
                error=str(e),
                error_type=type(e).__name__
            )
            raise StorageOperationError(operation, e) from e

    def _publish(self, application: VolunteerApplication, notifications: List[Notification]) -> None:
        if not notifications:
            return
        for callback in self._subscribers:
            try:
                callback(application, notifications)
            except Exception as e:
                # The write is already committed; delivery problems stay with the subscriber.
                self.logger.error(
                    "Notification subscriber failed",
                    application_id=application.id,
                    subscriber=getattr(callback, "__name__", repr(callback)),
                    error=str(e)
                )

    def _mutate(
        self,
        operation: str,
        application_id: str,
        mutation: Callable[[VolunteerApplication], T]
    ) -> Tuple[VolunteerApplication, T]:
        current = self._storage_call(operation, self.store.get, application_id)
        working = current.model_copy(deep=True)
        cursor = len(working.communication.notifications)

        result = mutation(working)

        stored = self._storage_call(operation, self.store.replace, working, current.version)
        self.logger.debug(
            "Application updated",
            operation=operation,
            **log_application_state(stored)
        )
        self._publish(stored, list(stored.communication.notifications[cursor:]))
        return stored, result

    # --- reads ------------------------------------------------------------------

    def get_application(self, application_id: str) -> VolunteerApplication:
        return self._storage_call("get_application", self.store.get, application_id)

    def overdue_interviews(self, now: Optional[datetime] = None) -> List[VolunteerApplication]:
        """Applications still waiting on an interview whose date has passed."""
        now = now or self.clock()
        scheduled = self._storage_call(
            "overdue_interviews", self.store.by_status, ApplicationStatus.INTERVIEW_SCHEDULED
        )
        return [app for app in scheduled if app.is_interview_overdue(now)]

    # --- lifecycle ----------------------------------------------------------------

    def submit_application(
        self,
        opportunity_id: str,
        campaign_id: str,
        volunteer_id: str,
        application_data: Optional[Union[ApplicationData, Dict]] = None,
        metadata: Optional[Union[ApplicationMetadata, Dict]] = None
    ) -> VolunteerApplication:
        application = self.lifecycle.submit(
            opportunity_id, campaign_id, volunteer_id, application_data, metadata
        )
        return self._storage_call("submit_application", self.store.insert, application)

    def transition_status(
        self,
        application_id: str,
        new_status: ApplicationStatus,
        acting_identity: str
    ) -> VolunteerApplication:
        stored, _ = self._mutate(
            "transition_status",
            application_id,
            lambda app: self.lifecycle.transition_status(app, new_status, acting_identity)
        )
        return stored

    def record_review(
        self,
        application_id: str,
        reviewer_id: str,
        score: Optional[ReviewScore] = None,
        notes: Optional[str] = None,
        strengths: Optional[List[str]] = None,
        concerns: Optional[List[str]] = None,
        recommendation: ReviewRecommendation = ReviewRecommendation.NEUTRAL
    ) -> VolunteerApplication:
        stored, _ = self._mutate(
            "record_review",
            application_id,
            lambda app: self.lifecycle.record_review(
                app, reviewer_id, score, notes, strengths, concerns, recommendation
            )
        )
        return stored

    # --- matching -------------------------------------------------------------------

    def calculate_matching_score(
        self,
        application_id: str,
        factors: Optional[Union[MatchingFactors, Dict]] = None
    ) -> VolunteerApplication:
        """Optionally replace the factors, then recompute ai_score."""

        def mutation(app: VolunteerApplication) -> int:
            if factors is not None:
                self.matching.record_factors(app, factors)
            return self.matching.calculate_matching_score(app)

        stored, _ = self._mutate("calculate_matching_score", application_id, mutation)
        return stored

    # --- hours ledger -------------------------------------------------------------------

    def log_hours(
        self,
        application_id: str,
        date: datetime,
        hours: float,
        activity: str,
        verifier_id: Optional[str] = None
    ) -> VolunteerApplication:
        stored, _ = self._mutate(
            "log_hours",
            application_id,
            lambda app: self.ledger.log_hours(app, date, hours, activity, verifier_id)
        )
        return stored

    def begin_service(self, application_id: str, start_date: datetime) -> VolunteerApplication:
        stored, _ = self._mutate(
            "begin_service",
            application_id,
            lambda app: self.ledger.begin_service(app, start_date)
        )
        return stored

    def set_completion_status(
        self,
        application_id: str,
        status: CompletionStatus,
        end_date: Optional[datetime] = None
    ) -> VolunteerApplication:
        stored, _ = self._mutate(
            "set_completion_status",
            application_id,
            lambda app: self.ledger.set_completion_status(app, status, end_date)
        )
        return stored

    def record_performance_rating(
        self,
        application_id: str,
        rating: Union[PerformanceRating, Dict]
    ) -> VolunteerApplication:
        stored, _ = self._mutate(
            "record_performance_rating",
            application_id,
            lambda app: self.ledger.record_performance_rating(app, rating)
        )
        return stored

    def record_volunteering_feedback(
        self,
        application_id: str,
        author: FeedbackAuthor,
        feedback: Union[FeedbackBlock, Dict]
    ) -> VolunteerApplication:
        stored, _ = self._mutate(
            "record_volunteering_feedback",
            application_id,
            lambda app: self.ledger.record_feedback(app, author, feedback)
        )
        return stored

    # --- interviews ---------------------------------------------------------------------

    def schedule_interview(
        self,
        application_id: str,
        scheduled_date: datetime,
        duration_minutes: Optional[int] = None,
        interview_type: InterviewType = InterviewType.VIDEO,
        location: Optional[str] = None,
        meeting_link: Optional[str] = None,
        interviewers: Optional[List[str]] = None
    ) -> VolunteerApplication:
        stored, _ = self._mutate(
            "schedule_interview",
            application_id,
            lambda app: self.interviews.schedule(
                app, scheduled_date, duration_minutes, interview_type,
                location, meeting_link, interviewers
            )
        )
        return stored

    def reschedule_interview(
        self,
        application_id: str,
        new_date: datetime,
        reason: str,
        requested_by: RescheduleRequester
    ) -> VolunteerApplication:
        stored, _ = self._mutate(
            "reschedule_interview",
            application_id,
            lambda app: self.interviews.reschedule(app, new_date, reason, requested_by)
        )
        return stored

    def record_interview_feedback(
        self,
        application_id: str,
        rating: int,
        notes: Optional[str] = None,
        recommendation: Optional[InterviewRecommendation] = None
    ) -> VolunteerApplication:
        stored, _ = self._mutate(
            "record_interview_feedback",
            application_id,
            lambda app: self.interviews.record_feedback(app, rating, notes, recommendation)
        )
        return stored

    # --- communication --------------------------------------------------------------------

    def send_message(
        self,
        application_id: str,
        sender_id: str,
        recipient_id: str,
        subject: str,
        body: str,
        attachments: Optional[Sequence[Union[Attachment, Dict]]] = None
    ) -> VolunteerApplication:
        stored, _ = self._mutate(
            "send_message",
            application_id,
            lambda app: self.communication.send_message(
                app, sender_id, recipient_id, subject, body, attachments
            )
        )
        return stored

    def add_notification(
        self,
        application_id: str,
        notification_type: NotificationType,
        title: str,
        body: str,
        action_required: bool = False
    ) -> VolunteerApplication:
        stored, _ = self._mutate(
            "add_notification",
            application_id,
            lambda app: self.communication.add_notification(
                app, notification_type, title, body, action_required
            )
        )
        return stored
