"""
Volunteer Application Lifecycle Engine.

Tracks a volunteer's application to an opportunity from submission through
resolution: the status state machine with its once-only timeline, a weighted
compatibility score, interview scheduling, an append-only hours ledger and the
communication history that notification delivery reads from.
"""

__version__ = "0.1.0"

from volunteer_lifecycle.communication.log import CommunicationLog
from volunteer_lifecycle.core.clock import ManualClock, utc_now
from volunteer_lifecycle.core.models import ApplicationStatus, VolunteerApplication
from volunteer_lifecycle.interview.scheduler import InterviewScheduler
from volunteer_lifecycle.ledger.hours import HoursLedger
from volunteer_lifecycle.lifecycle.controller import LifecycleController
from volunteer_lifecycle.matching.engine import MatchingEngine
from volunteer_lifecycle.service import ApplicationService
from volunteer_lifecycle.store.memory import InMemoryApplicationStore

__all__ = [
    "ApplicationService",
    "ApplicationStatus",
    "CommunicationLog",
    "HoursLedger",
    "InMemoryApplicationStore",
    "InterviewScheduler",
    "LifecycleController",
    "ManualClock",
    "MatchingEngine",
    "VolunteerApplication",
    "utc_now",
]
