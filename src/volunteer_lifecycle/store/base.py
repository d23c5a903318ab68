"""Persistence boundary for application aggregates."""

from abc import ABC, abstractmethod
from typing import List, Optional

from volunteer_lifecycle.core.models import ApplicationStatus, VolunteerApplication


class ApplicationStore(ABC):
    """
    Document store holding one record per application.

    Implementations must enforce uniqueness of (opportunity_id, volunteer_id)
    on insert and compare-and-swap on ``version`` in ``replace``.
    """

    @abstractmethod
    def get(self, application_id: str) -> VolunteerApplication:
        """Load an application. Raises ApplicationNotFoundError."""

    @abstractmethod
    def insert(self, application: VolunteerApplication) -> VolunteerApplication:
        """Store a new application. Raises DuplicateApplicationError."""

    @abstractmethod
    def replace(self, application: VolunteerApplication, expected_version: int) -> VolunteerApplication:
        """
        Overwrite the stored document if its version is ``expected_version``.

        Returns the stored application with its version incremented. Raises
        ApplicationConflictError when another writer got there first.
        """

    @abstractmethod
    def find_by_pair(self, opportunity_id: str, volunteer_id: str) -> Optional[VolunteerApplication]:
        ...

    @abstractmethod
    def by_campaign(self, campaign_id: str) -> List[VolunteerApplication]:
        ...

    @abstractmethod
    def by_volunteer(self, volunteer_id: str) -> List[VolunteerApplication]:
        ...

    @abstractmethod
    def by_status(self, status: ApplicationStatus) -> List[VolunteerApplication]:
        ...

    @abstractmethod
    def most_recent(self, limit: int = 10) -> List[VolunteerApplication]:
        """Newest submissions first."""

    @abstractmethod
    def top_matches(self, limit: int = 10) -> List[VolunteerApplication]:
        """Highest ai_score first."""

    @abstractmethod
    def top_reviewed(self, limit: int = 10) -> List[VolunteerApplication]:
        """Highest overall review score first; unreviewed applications are left out."""

    @abstractmethod
    def upcoming_interviews(self, limit: int = 10) -> List[VolunteerApplication]:
        """Scheduled interviews, earliest first."""
