"""
Inbox insights derived from processed messages: duplicates, stress level,
tomorrow preview, promotional noise and the OTP center.
"""

from datetime import date, timedelta
import logging
import re
from typing import Iterable, List, Optional

from .models import (
    Category,
    DuplicateReport,
    NoiseReport,
    OtpEntry,
    ProcessedMessage,
    StressAnalysis,
    StressLevel,
    TomorrowEvent,
    TomorrowEventType,
)
from .patterns import NOISE_KEYWORDS, contains_any

logger = logging.getLogger(__name__)

_REPLY_PREFIX = re.compile(r"^\s*(?:(?:re|fwd?|fw)\s*:\s*)+", re.IGNORECASE)

TITLE_CHARS = 40


# ---------------------------------------------------------------------------
# Duplicates
# ---------------------------------------------------------------------------


class DuplicateDetector:
    key_length = 50

    def key_for(self, message: ProcessedMessage) -> str:
        subject = _REPLY_PREFIX.sub("", (message.subject or "").lower()).strip()
        sender = (message.sender or "").lower().strip()
        return f"{sender}:{subject[: self.key_length]}"

    def detect(self, messages: Iterable[ProcessedMessage]) -> DuplicateReport:
        seen = set()
        unique: List[ProcessedMessage] = []
        duplicates: List[ProcessedMessage] = []

        for message in messages:
            key = self.key_for(message)
            if key in seen:
                duplicates.append(message)
            else:
                seen.add(key)
                unique.append(message)

        return DuplicateReport(unique=unique, duplicates=duplicates)


# ---------------------------------------------------------------------------
# Stress
# ---------------------------------------------------------------------------

URGENT_SCORE = 8

URGENT_WEIGHT = 10
MEETING_WEIGHT = 8
DEADLINE_WEIGHT = 15
BILL_WEIGHT = 3

# (minimum score, level), highest first
STRESS_THRESHOLDS = (
    (70, StressLevel.CRITICAL),
    (45, StressLevel.HIGH),
    (20, StressLevel.MEDIUM),
    (0, StressLevel.LOW),
)


class StressIndicator:
    def analyze(
        self,
        messages: Iterable[ProcessedMessage],
        today: Optional[date] = None,
    ) -> StressAnalysis:
        today = today or date.today()

        urgent_tasks = 0
        meetings_today = 0
        deadlines_today = 0
        financial_mails = 0

        for message in messages:
            if message.importance_score >= URGENT_SCORE:
                urgent_tasks += 1
            if message.category.is_meeting and message.extracted.times:
                meetings_today += 1
            deadlines_today += sum(1 for d in message.extracted.due_dates if d == today)
            if message.category == Category.BILLS:
                financial_mails += 1

        raw_score = (
            urgent_tasks * URGENT_WEIGHT
            + meetings_today * MEETING_WEIGHT
            + deadlines_today * DEADLINE_WEIGHT
            + financial_mails * BILL_WEIGHT
        )
        score = min(raw_score, 100)
        level = next(lvl for floor, lvl in STRESS_THRESHOLDS if score >= floor)

        if level == StressLevel.CRITICAL:
            text = (
                f"You have {urgent_tasks} urgent tasks, {meetings_today} meetings, "
                f"and {deadlines_today} deadlines today."
            )
        elif level == StressLevel.HIGH:
            text = f"You have {urgent_tasks} urgent tasks and {meetings_today} meetings today."
        elif level == StressLevel.MEDIUM:
            text = f"Moderate workload with {urgent_tasks} important items."
        else:
            text = "Your inbox is under control today."

        return StressAnalysis(
            level=level,
            score=score,
            urgent_tasks=urgent_tasks,
            meetings_today=meetings_today,
            deadlines_today=deadlines_today,
            financial_mails=financial_mails,
            message=text,
        )


# ---------------------------------------------------------------------------
# Tomorrow preview
# ---------------------------------------------------------------------------


def _event_type_for(category: Category) -> TomorrowEventType:
    if category == Category.BILLS:
        return TomorrowEventType.BILL
    if category == Category.JOBS:
        return TomorrowEventType.JOB
    return TomorrowEventType.TASK


class TomorrowPredictor:
    def predict(
        self,
        messages: Iterable[ProcessedMessage],
        today: Optional[date] = None,
    ) -> List[TomorrowEvent]:
        tomorrow = (today or date.today()) + timedelta(days=1)
        events: List[TomorrowEvent] = []

        for message in messages:
            title = (message.subject or "")[:TITLE_CHARS]

            if message.category == Category.MEETINGS:
                times = message.extracted.times
                events.append(
                    TomorrowEvent(
                        type=TomorrowEventType.MEETING,
                        title=title,
                        time=times[0] if times else None,
                        message_id=message.id,
                    )
                )

            for due in message.extracted.due_dates:
                if due == tomorrow:
                    events.append(
                        TomorrowEvent(
                            type=_event_type_for(message.category),
                            title=title,
                            message_id=message.id,
                        )
                    )

        # Timed events first; stable within each group.
        return sorted(events, key=lambda e: e.time is None)


# ---------------------------------------------------------------------------
# Noise
# ---------------------------------------------------------------------------


class NoiseFilter:
    def __init__(self, keywords: Iterable[str] = NOISE_KEYWORDS) -> None:
        self.keywords = tuple(keywords)

    def is_noise(self, message: ProcessedMessage) -> bool:
        text = f"{message.subject or ''} {message.body_text or ''}"
        return contains_any(text, self.keywords)

    def filter(self, messages: Iterable[ProcessedMessage]) -> NoiseReport:
        clean: List[ProcessedMessage] = []
        noise: List[ProcessedMessage] = []
        for message in messages:
            (noise if self.is_noise(message) else clean).append(message)
        return NoiseReport(clean=clean, noise=noise)


# ---------------------------------------------------------------------------
# OTP center
# ---------------------------------------------------------------------------

_DISPLAY_NAME = re.compile(r"^\s*\"?([^<@\"]+?)\"?\s*<")
_DOMAIN = re.compile(r"@([^.>\s]+)")


def service_name(sender: str) -> str:
    """Best-effort service name from a From header."""
    sender = sender or ""
    match = _DISPLAY_NAME.match(sender)
    if match:
        name = match.group(1).strip()
        if 0 < len(name) < 30:
            return name
    match = _DOMAIN.search(sender)
    if match:
        return match.group(1).capitalize()
    return "Unknown"


class OtpCenter:
    def collect(self, messages: Iterable[ProcessedMessage]) -> List[OtpEntry]:
        entries: List[OtpEntry] = []
        for message in messages:
            if message.category != Category.OTP:
                continue
            service = service_name(message.sender)
            for code in message.extracted.otp_codes:
                entries.append(
                    OtpEntry(
                        service=service,
                        code=code,
                        timestamp=message.timestamp,
                        message_id=message.id,
                    )
                )
        return sorted(entries, key=lambda e: e.timestamp, reverse=True)

