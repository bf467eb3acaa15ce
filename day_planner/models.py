"""
Pydantic models for messages, extracted facts, categories, summaries,
reminders and the derived analytics records.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, ConfigDict


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Category(str, Enum):
    BILLS = "Bills"
    STUDENT_MEETINGS = "Student Meetings"
    JOB_MEETINGS = "Job Meetings"
    INTERNSHIP_MEETINGS = "Internship Meetings"
    MEETINGS = "Meetings"
    PROMOTIONS = "Promotions"
    OTP = "OTP"
    JOBS = "Jobs"
    ATTACHMENTS = "Attachments"
    OTHER = "Other"

    @property
    def is_meeting(self) -> bool:
        return self in MEETING_CATEGORIES


MEETING_CATEGORIES = frozenset(
    {
        Category.MEETINGS,
        Category.STUDENT_MEETINGS,
        Category.JOB_MEETINGS,
        Category.INTERNSHIP_MEETINGS,
    }
)


class Urgency(str, Enum):
    PAST = "past"
    TODAY = "today"
    TOMORROW = "tomorrow"
    UPCOMING = "upcoming"


class StressLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class DeadlineStatus(str, Enum):
    OVERDUE = "overdue"
    TODAY = "today"
    TOMORROW = "tomorrow"
    UPCOMING = "upcoming"


class TomorrowEventType(str, Enum):
    MEETING = "meeting"
    BILL = "bill"
    JOB = "job"
    TASK = "task"


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


class Attachment(BaseModel):
    filename: str = ""
    mime_type: str = ""
    size: int = 0

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
    )


class Message(BaseModel):
    """
    A decoded inbox message as handed over by the message source.

    Never mutated by the pipeline.
    """

    id: str
    thread_id: Optional[str] = None
    subject: str = ""
    sender: str = ""
    recipient: str = ""
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    body_text: str = ""
    body_html: str = ""
    snippet: str = ""
    attachments: List[Attachment] = Field(default_factory=list)

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
    )


class ExtractedData(BaseModel):
    """
    Facts pulled out of a message's text, each list in first-occurrence order.
    """

    amounts: List[str] = Field(default_factory=list)
    due_dates: List[date] = Field(default_factory=list)
    times: List[str] = Field(default_factory=list)
    urls: List[str] = Field(default_factory=list)
    otp_codes: List[str] = Field(default_factory=list)

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
    )


class ProcessedMessage(Message):
    """
    A message together with its category, extracted facts and importance score.
    """

    category: Category = Category.OTHER
    extracted: ExtractedData = Field(default_factory=ExtractedData)
    importance_score: int = Field(default=0, ge=0, le=100)


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------


class Summary(BaseModel):
    """
    Snapshot of the day's processed messages grouped by category.

    `important` holds every message at or above `threshold`, independently of
    its category bucket.
    """

    buckets: Dict[Category, List[ProcessedMessage]] = Field(default_factory=dict)
    important: List[ProcessedMessage] = Field(default_factory=list)
    threshold: int = 8
    generated_at: datetime = Field(default_factory=datetime.now)

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
    )

    def bucket(self, category: Category) -> List[ProcessedMessage]:
        return self.buckets.get(category, [])

    @property
    def total(self) -> int:
        return sum(len(items) for items in self.buckets.values())


# ---------------------------------------------------------------------------
# Reminders
# ---------------------------------------------------------------------------


class Reminder(BaseModel):
    text: str
    resolved_date: Optional[date] = None
    time: Optional[str] = None
    urgency: Urgency = Urgency.UPCOMING
    source: str = "text"

    model_config = ConfigDict(
        populate_by_name=True,
    )


class ScheduledReminder(BaseModel):
    """
    A reminder request handed to the scheduling collaborator.

    The core stores the request; delivery happens elsewhere.
    """

    id: str
    recipient: str
    subject: str
    source: str = ""
    body: str = ""
    scheduled_time: datetime
    sent: bool = False

    model_config = ConfigDict(
        populate_by_name=True,
    )


# ---------------------------------------------------------------------------
# Analytics records
# ---------------------------------------------------------------------------


class DuplicateReport(BaseModel):
    unique: List[ProcessedMessage] = Field(default_factory=list)
    duplicates: List[ProcessedMessage] = Field(default_factory=list)


class NoiseReport(BaseModel):
    clean: List[ProcessedMessage] = Field(default_factory=list)
    noise: List[ProcessedMessage] = Field(default_factory=list)


class StressAnalysis(BaseModel):
    level: StressLevel
    score: int = Field(ge=0, le=100)
    urgent_tasks: int = 0
    meetings_today: int = 0
    deadlines_today: int = 0
    financial_mails: int = 0
    message: str = ""


class TomorrowEvent(BaseModel):
    type: TomorrowEventType
    title: str
    time: Optional[str] = None
    message_id: str


class OtpEntry(BaseModel):
    service: str
    code: str
    timestamp: datetime
    message_id: str


class MeetingEvent(BaseModel):
    minutes: int = Field(ge=0, lt=24 * 60)
    title: str
    message_id: str
    raw_time: str

    @property
    def time(self) -> str:
        return f"{self.minutes // 60:02d}:{self.minutes % 60:02d}"


class TimelineConflict(BaseModel):
    time: str
    titles: List[str]


class DeadlineItem(BaseModel):
    title: str
    due_date: date
    days_remaining: int
    status: DeadlineStatus
    message_id: str


class ExtractedTask(BaseModel):
    task: str
    deadline: Optional[str] = None
    message_id: str
    subject: str = ""


# ---------------------------------------------------------------------------
# File-level containers
# ---------------------------------------------------------------------------


class SavedMessagesFile(BaseModel):
    """
    Container for saved_messages.json (the user's starred items).
    """

    messages: List[ProcessedMessage] = Field(default_factory=list)

    model_config = ConfigDict(
        populate_by_name=True,
    )


class ScheduledRemindersFile(BaseModel):
    """
    Container for scheduled_reminders.json.
    """

    reminders: List[ScheduledReminder] = Field(default_factory=list)

    model_config = ConfigDict(
        populate_by_name=True,
    )


__all__ = [
    "Category",
    "MEETING_CATEGORIES",
    "Urgency",
    "StressLevel",
    "DeadlineStatus",
    "TomorrowEventType",
    "Attachment",
    "Message",
    "ExtractedData",
    "ProcessedMessage",
    "Summary",
    "Reminder",
    "ScheduledReminder",
    "DuplicateReport",
    "NoiseReport",
    "StressAnalysis",
    "TomorrowEvent",
    "OtpEntry",
    "MeetingEvent",
    "TimelineConflict",
    "DeadlineItem",
    "ExtractedTask",
    "SavedMessagesFile",
    "ScheduledRemindersFile",
]
