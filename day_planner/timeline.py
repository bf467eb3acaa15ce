"""
Timeline views over processed messages:
- MeetingTimeline: meeting times as minutes since midnight, plus conflicts
- DeadlineCountdown: due dates with days remaining
- TaskExtractor: action phrases pulled from subject and body
"""

from datetime import date
import logging
import re
from typing import Dict, Iterable, List, Optional

from .extractor import clock_time_to_minutes
from .models import (
    Category,
    DeadlineItem,
    DeadlineStatus,
    ExtractedTask,
    MeetingEvent,
    ProcessedMessage,
    TimelineConflict,
)
from .patterns import TASK_PATTERNS

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]")
_NUMERIC_DATE = re.compile(r"\d{1,2}[/-]\d{1,2}[/-]\d{4}")
_TODAY = re.compile(r"\btoday\b", re.IGNORECASE)
_TOMORROW = re.compile(r"\btomorrow\b", re.IGNORECASE)


def format_time(minutes: int) -> str:
    """Minutes since midnight as "09:30 AM"."""
    hour, minute = divmod(minutes % (24 * 60), 60)
    period = "PM" if hour >= 12 else "AM"
    display = hour % 12 or 12
    return f"{display:02d}:{minute:02d} {period}"


class MeetingTimeline:
    title_chars = 50
    key_chars = 30

    def _title_key(self, subject: str) -> str:
        return _NON_ALNUM.sub("", (subject or "").lower())[: self.key_chars]

    def extract_events(self, messages: Iterable[ProcessedMessage]) -> List[MeetingEvent]:
        events: List[MeetingEvent] = []
        seen = set()

        for message in messages:
            if not message.category.is_meeting:
                continue
            key = self._title_key(message.subject)
            for raw in message.extracted.times:
                minutes = clock_time_to_minutes(raw)
                if minutes is None:
                    logger.debug("Skipping unparseable time %r on %s", raw, message.id)
                    continue
                if (minutes, key) in seen:
                    continue
                seen.add((minutes, key))
                events.append(
                    MeetingEvent(
                        minutes=minutes,
                        title=(message.subject or "")[: self.title_chars],
                        message_id=message.id,
                        raw_time=raw,
                    )
                )

        return sorted(events, key=lambda e: e.minutes)

    def detect_conflicts(self, events: Iterable[MeetingEvent]) -> List[TimelineConflict]:
        by_minute: Dict[int, List[str]] = {}
        for event in events:
            titles = by_minute.setdefault(event.minutes, [])
            if event.title not in titles:
                titles.append(event.title)

        return [
            TimelineConflict(time=format_time(minutes), titles=titles)
            for minutes, titles in sorted(by_minute.items())
            if len(titles) >= 2
        ]

    format_time = staticmethod(format_time)


class DeadlineCountdown:
    title_chars = 40

    def extract(
        self,
        messages: Iterable[ProcessedMessage],
        today: Optional[date] = None,
    ) -> List[DeadlineItem]:
        today = today or date.today()
        items: List[DeadlineItem] = []

        for message in messages:
            for due in message.extracted.due_dates:
                days = (due - today).days
                if days < 0:
                    status = DeadlineStatus.OVERDUE
                elif days == 0:
                    status = DeadlineStatus.TODAY
                elif days == 1:
                    status = DeadlineStatus.TOMORROW
                else:
                    status = DeadlineStatus.UPCOMING
                items.append(
                    DeadlineItem(
                        title=(message.subject or "")[: self.title_chars],
                        due_date=due,
                        days_remaining=days,
                        status=status,
                        message_id=message.id,
                    )
                )

        return sorted(items, key=lambda i: i.due_date)


def format_countdown(item: DeadlineItem) -> str:
    if item.status == DeadlineStatus.OVERDUE:
        days = abs(item.days_remaining)
        return f"Overdue by {days} day{'s' if days != 1 else ''}"
    if item.status == DeadlineStatus.TODAY:
        return "Due today"
    if item.status == DeadlineStatus.TOMORROW:
        return "Due in 1 day"
    return f"Due in {item.days_remaining} days"


TASK_CATEGORIES = frozenset({Category.BILLS, Category.JOBS})


class TaskExtractor:
    min_length = 5
    max_length = 100
    subject_chars = 30
    key_chars = 30

    def __init__(self, patterns=TASK_PATTERNS) -> None:
        self.patterns = tuple(patterns)

    @staticmethod
    def deadline_from_text(text: str) -> Optional[str]:
        match = _NUMERIC_DATE.search(text)
        if match:
            return match.group(0)
        if _TODAY.search(text):
            return "today"
        if _TOMORROW.search(text):
            return "tomorrow"
        return None

    def extract(self, messages: Iterable[ProcessedMessage]) -> List[ExtractedTask]:
        tasks: List[ExtractedTask] = []

        for message in messages:
            subject = message.subject or ""
            text = f"{subject} {message.body_text or ''}"
            due_dates = message.extracted.due_dates
            first_due = due_dates[0].isoformat() if due_dates else None

            for pattern in self.patterns:
                for match in pattern.finditer(text):
                    task = (match.group(1) or "").strip()
                    if not self.min_length < len(task) < self.max_length:
                        continue
                    tasks.append(
                        ExtractedTask(
                            task=task,
                            deadline=self.deadline_from_text(task) or first_due,
                            message_id=message.id,
                            subject=subject[: self.subject_chars],
                        )
                    )

            if first_due and (message.category in TASK_CATEGORIES or message.category.is_meeting):
                tasks.append(
                    ExtractedTask(
                        task=subject[:60],
                        deadline=first_due,
                        message_id=message.id,
                        subject=subject[: self.subject_chars],
                    )
                )

        return self._deduplicate(tasks)

    def _deduplicate(self, tasks: List[ExtractedTask]) -> List[ExtractedTask]:
        seen = set()
        unique: List[ExtractedTask] = []
        for task in tasks:
            key = task.task.lower()[: self.key_chars]
            if key in seen:
                continue
            seen.add(key)
            unique.append(task)
        return unique
