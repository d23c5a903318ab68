"""In-process document store."""

import threading
from typing import Callable, Dict, List, Optional, Tuple

from volunteer_lifecycle.core.errors import (
    ApplicationConflictError,
    ApplicationNotFoundError,
    DuplicateApplicationError,
)
from volunteer_lifecycle.core.models import ApplicationStatus, VolunteerApplication
from volunteer_lifecycle.store.base import ApplicationStore
from volunteer_lifecycle.utils.logging import get_logger

logger = get_logger(__name__)


class InMemoryApplicationStore(ApplicationStore):
    """
    Keeps each application as a serialized JSON document.

    Every read deserializes a fresh aggregate, so callers never share mutable
    state with the store or with each other.
    """

    def __init__(self):
        self.logger = logger.bind(component="application_store")
        self._documents: Dict[str, str] = {}
        self._versions: Dict[str, int] = {}
        self._pairs: Dict[Tuple[str, str], str] = {}
        self._lock = threading.Lock()

    def _load(self, application_id: str) -> VolunteerApplication:
        return VolunteerApplication.model_validate_json(self._documents[application_id])

    def _all(self) -> List[VolunteerApplication]:
        with self._lock:
            documents = list(self._documents.values())
        return [VolunteerApplication.model_validate_json(doc) for doc in documents]

    def _where(self, predicate: Callable[[VolunteerApplication], bool]) -> List[VolunteerApplication]:
        return [app for app in self._all() if predicate(app)]

    def __len__(self) -> int:
        return len(self._documents)

    def get(self, application_id: str) -> VolunteerApplication:
        with self._lock:
            if application_id not in self._documents:
                raise ApplicationNotFoundError(application_id)
            return self._load(application_id)

    def insert(self, application: VolunteerApplication) -> VolunteerApplication:
        pair = (application.opportunity_id, application.volunteer_id)
        with self._lock:
            existing = self._pairs.get(pair)
            if existing is not None:
                raise DuplicateApplicationError(*pair, existing_id=existing)
            if application.id in self._documents:
                raise ApplicationConflictError(application.id, 0, self._versions[application.id])

            stored = application.model_copy(update={"version": 1})
            self._documents[stored.id] = stored.model_dump_json()
            self._versions[stored.id] = stored.version
            self._pairs[pair] = stored.id

        self.logger.debug("Application inserted", application_id=stored.id)
        return stored

    def replace(self, application: VolunteerApplication, expected_version: int) -> VolunteerApplication:
        with self._lock:
            current = self._versions.get(application.id)
            if current is None:
                raise ApplicationNotFoundError(application.id)
            if current != expected_version:
                self.logger.info(
                    "Version conflict",
                    application_id=application.id,
                    expected_version=expected_version,
                    actual_version=current
                )
                raise ApplicationConflictError(application.id, expected_version, current)

            stored = application.model_copy(update={"version": current + 1})
            self._documents[stored.id] = stored.model_dump_json()
            self._versions[stored.id] = stored.version

        self.logger.debug("Application replaced", application_id=stored.id, version=stored.version)
        return stored

    def find_by_pair(self, opportunity_id: str, volunteer_id: str) -> Optional[VolunteerApplication]:
        with self._lock:
            application_id = self._pairs.get((opportunity_id, volunteer_id))
            if application_id is None:
                return None
            return self._load(application_id)

    def by_campaign(self, campaign_id: str) -> List[VolunteerApplication]:
        return self._where(lambda app: app.campaign_id == campaign_id)

    def by_volunteer(self, volunteer_id: str) -> List[VolunteerApplication]:
        return self._where(lambda app: app.volunteer_id == volunteer_id)

    def by_status(self, status: ApplicationStatus) -> List[VolunteerApplication]:
        status = ApplicationStatus(status)
        return self._where(lambda app: app.status == status)

    def most_recent(self, limit: int = 10) -> List[VolunteerApplication]:
        applications = sorted(self._all(), key=lambda app: app.timeline.submitted_at, reverse=True)
        return applications[:limit]

    def top_matches(self, limit: int = 10) -> List[VolunteerApplication]:
        applications = sorted(self._all(), key=lambda app: app.matching.ai_score, reverse=True)
        return applications[:limit]

    def top_reviewed(self, limit: int = 10) -> List[VolunteerApplication]:
        reviewed = self._where(lambda app: app.review.score.overall is not None)
        reviewed.sort(key=lambda app: app.review.score.overall, reverse=True)
        return reviewed[:limit]

    def upcoming_interviews(self, limit: int = 10) -> List[VolunteerApplication]:
        scheduled = self._where(lambda app: app.interview.scheduled_date is not None)
        scheduled.sort(key=lambda app: app.interview.scheduled_date)
        return scheduled[:limit]
