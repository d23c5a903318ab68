"""Core data models for the volunteer application aggregate.

Every sub-record is a value type owned by ``VolunteerApplication``. Append-only
histories (hours, reschedules, messages, notifications) are tuples of frozen
models and only grow through the owning model's ``append_*`` method.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, model_validator

from volunteer_lifecycle.core.clock import utc_now


class ApplicationStatus(str, Enum):
    """Lifecycle status of an application."""
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under-review"
    SHORTLISTED = "shortlisted"
    INTERVIEW_SCHEDULED = "interview-scheduled"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


PENDING_STATUSES = frozenset({
    ApplicationStatus.SUBMITTED,
    ApplicationStatus.UNDER_REVIEW,
    ApplicationStatus.SHORTLISTED,
    ApplicationStatus.INTERVIEW_SCHEDULED,
})

# Timeline slot stamped the first time each status is entered.
TIMELINE_FIELDS: Dict[ApplicationStatus, str] = {
    ApplicationStatus.SUBMITTED: "submitted_at",
    ApplicationStatus.UNDER_REVIEW: "reviewed_at",
    ApplicationStatus.SHORTLISTED: "shortlisted_at",
    ApplicationStatus.INTERVIEW_SCHEDULED: "interview_scheduled_at",
    ApplicationStatus.ACCEPTED: "accepted_at",
    ApplicationStatus.REJECTED: "rejected_at",
    ApplicationStatus.WITHDRAWN: "withdrawn_at",
}

if set(TIMELINE_FIELDS) != set(ApplicationStatus):
    raise RuntimeError("TIMELINE_FIELDS must cover every ApplicationStatus")


class AnswerType(str, Enum):
    TEXT = "text"
    TEXTAREA = "textarea"
    MULTIPLE_CHOICE = "multiple-choice"
    FILE = "file"


class Weekday(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


class SkillLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


class ReviewRecommendation(str, Enum):
    STRONGLY_RECOMMEND = "strongly-recommend"
    RECOMMEND = "recommend"
    NEUTRAL = "neutral"
    NOT_RECOMMEND = "not-recommend"
    STRONGLY_NOT_RECOMMEND = "strongly-not-recommend"


class InterviewType(str, Enum):
    PHONE = "phone"
    VIDEO = "video"
    IN_PERSON = "in-person"


class InterviewRecommendation(str, Enum):
    ACCEPT = "accept"
    REJECT = "reject"
    SECOND_INTERVIEW = "second-interview"


class RescheduleRequester(str, Enum):
    VOLUNTEER = "volunteer"
    ORGANIZATION = "organization"


class NotificationType(str, Enum):
    STATUS_UPDATE = "status-update"
    INTERVIEW_SCHEDULED = "interview-scheduled"
    DOCUMENT_REQUIRED = "document-required"
    REMINDER = "reminder"
    DEADLINE_APPROACHING = "deadline-approaching"


class CompletionStatus(str, Enum):
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    DROPPED_OUT = "dropped-out"
    PAUSED = "paused"


class FeedbackAuthor(str, Enum):
    VOLUNTEER = "volunteer"
    ORGANIZATION = "organization"


class ApplicationSource(str, Enum):
    WEB = "web"
    MOBILE = "mobile"
    API = "api"
    REFERRAL = "referral"


# --- application data -----------------------------------------------------

class Answer(BaseModel):
    """Answer to an opportunity question."""
    question_id: str = Field(..., min_length=1, description="Question identifier")
    question: str = Field(..., min_length=1, description="Question text")
    answer: Any = Field(..., description="Answer value")
    type: AnswerType = Field(..., description="Question input type")


class ApplicationDocumentMeta(BaseModel):
    """Metadata of an uploaded document."""
    document_name: str = Field(..., min_length=1)
    original_name: str = Field(..., min_length=1)
    file_url: str = Field(..., min_length=1)
    file_type: str = Field(..., min_length=1)
    file_size: int = Field(..., ge=0, description="Size in bytes")
    uploaded_at: datetime = Field(default_factory=utc_now)


class TimeSlot(BaseModel):
    start: str = Field(..., pattern=r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")
    end: str = Field(..., pattern=r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")


class DaySchedule(BaseModel):
    day: Weekday
    time_slots: List[TimeSlot] = Field(default_factory=list)


class Availability(BaseModel):
    """Weekly availability of the volunteer."""
    preferred_schedule: List[DaySchedule] = Field(default_factory=list)
    hours_per_week: Optional[float] = Field(None, ge=1, le=40)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class PreviousVolunteering(BaseModel):
    organization: str = Field(..., min_length=1)
    role: str = Field(..., min_length=1)
    duration: str = Field(..., min_length=1)
    description: Optional[str] = Field(None, max_length=300)


class SkillEntry(BaseModel):
    skill: str = Field(..., min_length=1)
    level: SkillLevel
    years_of_experience: float = Field(0, ge=0)


class VolunteerExperience(BaseModel):
    relevant_experience: Optional[str] = Field(None, max_length=500)
    previous_volunteering: List[PreviousVolunteering] = Field(default_factory=list)
    skills: List[SkillEntry] = Field(default_factory=list)


class Reference(BaseModel):
    """Personal reference supplied by the volunteer."""
    name: str = Field(..., min_length=1, description="Reference name")
    relationship: str = Field(..., min_length=1, description="Relationship to volunteer")
    email: Optional[str] = Field(None, pattern=r"^\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+$")
    phone: Optional[str] = Field(None, pattern=r"^[+]?[\d\s\-\(\)]+$")
    contacted_at: Optional[datetime] = None
    response: Optional[str] = Field(None, max_length=500)


class ApplicationData(BaseModel):
    """Everything the volunteer submitted."""
    answers: List[Answer] = Field(default_factory=list)
    documents: List[ApplicationDocumentMeta] = Field(default_factory=list)
    motivation: Optional[str] = Field(None, max_length=1000)
    availability: Optional[Availability] = None
    experience: VolunteerExperience = Field(default_factory=VolunteerExperience)
    references: List[Reference] = Field(default_factory=list)


# --- timeline and review ---------------------------------------------------

class Timeline(BaseModel):
    """Once-only timestamps marking first entry into each status."""
    submitted_at: datetime
    reviewed_at: Optional[datetime] = None
    shortlisted_at: Optional[datetime] = None
    interview_scheduled_at: Optional[datetime] = None
    accepted_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    withdrawn_at: Optional[datetime] = None

    def reached_at(self, status: ApplicationStatus) -> Optional[datetime]:
        return getattr(self, TIMELINE_FIELDS[status])

    def stamp(self, status: ApplicationStatus, moment: datetime) -> bool:
        """Set the slot for ``status`` unless it is already set."""
        field_name = TIMELINE_FIELDS[status]
        if getattr(self, field_name) is not None:
            return False
        setattr(self, field_name, moment)
        return True


class ReviewScore(BaseModel):
    overall: Optional[float] = Field(None, ge=0, le=100)
    skill_match: Optional[float] = Field(None, ge=0, le=100)
    experience_match: Optional[float] = Field(None, ge=0, le=100)
    motivation_score: Optional[float] = Field(None, ge=0, le=100)
    availability_match: Optional[float] = Field(None, ge=0, le=100)


class Review(BaseModel):
    """Reviewer assessment of the application."""
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    score: ReviewScore = Field(default_factory=ReviewScore)
    notes: Optional[str] = Field(None, max_length=1000)
    strengths: List[str] = Field(default_factory=list)
    concerns: List[str] = Field(default_factory=list)
    recommendation: ReviewRecommendation = ReviewRecommendation.NEUTRAL

    @model_validator(mode="after")
    def check_item_lengths(self) -> "Review":
        for label, items in (("strengths", self.strengths), ("concerns", self.concerns)):
            for item in items:
                if len(item) > 100:
                    raise ValueError(f"{label} entries must be at most 100 characters")
        return self


# --- interview --------------------------------------------------------------

class InterviewFeedback(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    notes: Optional[str] = Field(None, max_length=1000)
    recommendation: Optional[InterviewRecommendation] = None


class RescheduleRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    original_date: AwareDatetime
    new_date: AwareDatetime
    reason: str = Field(..., min_length=1)
    requested_by: RescheduleRequester
    rescheduled_at: datetime


class Interview(BaseModel):
    """Interview arrangements and the latest feedback."""
    is_required: bool = False
    scheduled_date: Optional[AwareDatetime] = None
    duration_minutes: int = Field(30, ge=1)
    type: InterviewType = InterviewType.VIDEO
    location: Optional[str] = None
    meeting_link: Optional[str] = None
    interviewers: List[str] = Field(default_factory=list)
    feedback: Optional[InterviewFeedback] = None
    rescheduled: Tuple[RescheduleRecord, ...] = ()

    def append_reschedule(self, record: RescheduleRecord) -> None:
        self.rescheduled = self.rescheduled + (record,)


# --- communication ------------------------------------------------------------

class Attachment(BaseModel):
    model_config = ConfigDict(frozen=True)

    file_name: str
    file_url: str
    file_size: Optional[int] = Field(None, ge=0)


class Message(BaseModel):
    model_config = ConfigDict(frozen=True)

    sender_id: str = Field(..., min_length=1)
    recipient_id: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1, max_length=200)
    body: str = Field(..., min_length=1, max_length=2000)
    sent_at: datetime
    read_at: Optional[datetime] = None
    attachments: Tuple[Attachment, ...] = ()


class Notification(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: NotificationType
    title: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)
    sent_at: datetime
    read_at: Optional[datetime] = None
    action_required: bool = False


class Communication(BaseModel):
    """Append-only message and notification history."""
    messages: Tuple[Message, ...] = ()
    notifications: Tuple[Notification, ...] = ()

    def append_message(self, message: Message) -> None:
        self.messages = self.messages + (message,)

    def append_notification(self, notification: Notification) -> None:
        self.notifications = self.notifications + (notification,)


# --- matching -----------------------------------------------------------------

class SkillMatchDetail(BaseModel):
    skill: str
    required: bool = False
    volunteer_level: Optional[str] = None
    required_level: Optional[str] = None
    match: bool = False


class SkillsFactor(BaseModel):
    score: Optional[float] = Field(None, ge=0, le=100)
    details: List[SkillMatchDetail] = Field(default_factory=list)


class LocationFactor(BaseModel):
    score: Optional[float] = Field(None, ge=0, le=100)
    distance_km: Optional[float] = Field(None, ge=0)


class AvailabilityFactor(BaseModel):
    score: Optional[float] = Field(None, ge=0, le=100)
    overlapping_hours: Optional[float] = Field(None, ge=0)


class ExperienceFactor(BaseModel):
    score: Optional[float] = Field(None, ge=0, le=100)
    relevant_experience: bool = False


class InterestFactor(BaseModel):
    score: Optional[float] = Field(None, ge=0, le=100)
    matching_interests: List[str] = Field(default_factory=list)


class MatchingFactors(BaseModel):
    """Independently scored compatibility factors."""
    skills: Optional[SkillsFactor] = None
    location: Optional[LocationFactor] = None
    availability: Optional[AvailabilityFactor] = None
    experience: Optional[ExperienceFactor] = None
    interest: Optional[InterestFactor] = None


class Matching(BaseModel):
    ai_score: int = Field(0, ge=0, le=100)
    matching_factors: MatchingFactors = Field(default_factory=MatchingFactors)
    recommendation_reason: Optional[str] = Field(None, max_length=500)
    calculated_at: Optional[datetime] = None


# --- volunteering record --------------------------------------------------------

class HoursEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: datetime = Field(..., description="When the work happened")
    hours: float = Field(..., ge=0, le=24)
    activity: str = Field(..., min_length=1, max_length=200)
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None


class PerformanceRating(BaseModel):
    punctuality: Optional[int] = Field(None, ge=1, le=5)
    quality: Optional[int] = Field(None, ge=1, le=5)
    teamwork: Optional[int] = Field(None, ge=1, le=5)
    communication: Optional[int] = Field(None, ge=1, le=5)
    reliability: Optional[int] = Field(None, ge=1, le=5)
    overall: Optional[int] = Field(None, ge=1, le=5)


class FeedbackBlock(BaseModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    comments: Optional[str] = Field(None, max_length=1000)
    would_recommend: Optional[bool] = None
    improvements: Optional[str] = Field(None, max_length=500)


class VolunteeringFeedback(BaseModel):
    volunteer_feedback: Optional[FeedbackBlock] = None
    organization_feedback: Optional[FeedbackBlock] = None


class VolunteeringRecord(BaseModel):
    """Worked hours ledger plus performance and feedback."""
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    hours_logged: Tuple[HoursEntry, ...] = ()
    total_hours: float = Field(0.0, ge=0)
    completion_status: CompletionStatus = CompletionStatus.IN_PROGRESS
    performance_rating: Optional[PerformanceRating] = None
    feedback: VolunteeringFeedback = Field(default_factory=VolunteeringFeedback)

    @model_validator(mode="after")
    def check_total_matches_entries(self) -> "VolunteeringRecord":
        if self.total_hours != sum(entry.hours for entry in self.hours_logged):
            raise ValueError("total_hours must equal the sum of hours_logged")
        return self

    def append_hours(self, entry: HoursEntry) -> None:
        self.hours_logged = self.hours_logged + (entry,)
        self.total_hours += entry.hours


class ApplicationMetadata(BaseModel):
    source: ApplicationSource = ApplicationSource.WEB
    referral_code: Optional[str] = None
    utm_source: Optional[str] = None
    utm_campaign: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


# --- aggregate --------------------------------------------------------------------

class VolunteerApplication(BaseModel):
    """A volunteer's application to one opportunity, with all its history."""
    id: str = Field(default_factory=lambda: uuid4().hex, frozen=True)
    opportunity_id: str = Field(..., min_length=1, frozen=True)
    campaign_id: str = Field(..., min_length=1, frozen=True)
    volunteer_id: str = Field(..., min_length=1, frozen=True)
    version: int = Field(0, ge=0, description="Optimistic concurrency counter")

    application_data: ApplicationData = Field(default_factory=ApplicationData)
    status: ApplicationStatus = ApplicationStatus.SUBMITTED
    timeline: Timeline
    review: Review = Field(default_factory=Review)
    interview: Interview = Field(default_factory=Interview)
    communication: Communication = Field(default_factory=Communication)
    matching: Matching = Field(default_factory=Matching)
    volunteering_record: VolunteeringRecord = Field(default_factory=VolunteeringRecord)
    metadata: ApplicationMetadata = Field(default_factory=ApplicationMetadata)

    created_at: datetime
    updated_at: datetime

    @property
    def is_pending(self) -> bool:
        return self.status in PENDING_STATUSES

    def application_age_days(self, now: Optional[datetime] = None) -> int:
        """Whole days elapsed since submission."""
        now = now or utc_now()
        return (now - self.timeline.submitted_at).days

    def is_interview_overdue(self, now: Optional[datetime] = None) -> bool:
        scheduled = self.interview.scheduled_date
        if scheduled is None:
            return False
        now = now or utc_now()
        return now > scheduled and self.status == ApplicationStatus.INTERVIEW_SCHEDULED
