"""
Importance scoring (0-100) from category, extracted facts and keyword density.
"""

from datetime import date, datetime, timedelta
from typing import List, Optional

from .extractor import clock_time_to_minutes
from .models import Category, ProcessedMessage
from .patterns import URGENT_KEYWORDS, contains_keyword

MAX_SCORE = 100
FLOOR_SCORE = 1

BILL_DUE_TODAY = 15
BILL_DUE_TOMORROW = 10
BILL_DUE_SOON = 5
BILL_BASE = 1

JOB_DUE_TODAY = 12
JOB_DUE_SOON = 8
JOB_BASE = 2

MEETING_IMMINENT = 10
MEETING_TODAY = 6
MEETING_BASE = 2

ATTACHMENT = 3
ATTACHMENT_URGENT = 6
ATTACHMENT_MULTIPLE = 2

KEYWORD_POINTS = 3
KEYWORD_CAP = 15

SOON_DAYS = 3
IMMINENT_WINDOW = timedelta(hours=3)
MINUTES_PER_DAY = 24 * 60

JOB_CATEGORIES = frozenset(
    {Category.JOBS, Category.JOB_MEETINGS, Category.INTERNSHIP_MEETINGS}
)


def days_until_earliest(due_dates: List[date], today: date) -> Optional[int]:
    """
    Days from today to the nearest due date that is today or later.

    Past dates (issue dates, earlier statements) are skipped; when every date
    is in the past the message counts as overdue, i.e. 0.
    """
    if not due_dates:
        return None
    upcoming = [(d - today).days for d in due_dates if d >= today]
    if upcoming:
        return min(upcoming)
    return 0


class Scorer:
    def calculate_score(self, message: ProcessedMessage, now: Optional[datetime] = None) -> int:
        now = now or datetime.now()
        today = now.date()
        extracted = message.extracted
        category = message.category
        score = 0

        # Bills
        if category == Category.BILLS:
            days = days_until_earliest(extracted.due_dates, today)
            if days == 0:
                score += BILL_DUE_TODAY
            elif days == 1:
                score += BILL_DUE_TOMORROW
            elif days is not None and days <= SOON_DAYS:
                score += BILL_DUE_SOON
            else:
                score += BILL_BASE

        # Jobs and job/internship meetings
        if category in JOB_CATEGORIES:
            days = days_until_earliest(extracted.due_dates, today)
            if days == 0:
                score += JOB_DUE_TODAY
            elif days is not None and days <= SOON_DAYS:
                score += JOB_DUE_SOON
            else:
                score += JOB_BASE

        # Meetings of any kind
        if category.is_meeting:
            if self.has_meeting_within(extracted.times, now, IMMINENT_WINDOW):
                score += MEETING_IMMINENT
            elif extracted.times:
                score += MEETING_TODAY
            else:
                score += MEETING_BASE

        text = f"{message.subject} {message.body_text}"
        keyword_hits = sum(1 for kw in URGENT_KEYWORDS if contains_keyword(text, kw))

        # Attachments
        if message.attachments:
            score += ATTACHMENT_URGENT if keyword_hits else ATTACHMENT
            if len(message.attachments) > 1:
                score += ATTACHMENT_MULTIPLE

        # Urgent keyword density
        score += min(keyword_hits * KEYWORD_POINTS, KEYWORD_CAP)

        if score <= 0:
            score = FLOOR_SCORE

        return min(score, MAX_SCORE)

    @staticmethod
    def has_meeting_within(times: List[str], now: datetime, window: timedelta) -> bool:
        """True if any clock time falls between now and now + window, wrapping past midnight."""
        now_minutes = now.hour * 60 + now.minute
        window_minutes = int(window.total_seconds() // 60)
        for value in times:
            minutes = clock_time_to_minutes(value)
            if minutes is not None and (minutes - now_minutes) % MINUTES_PER_DAY <= window_minutes:
                return True
        return False
