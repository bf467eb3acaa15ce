"""
Reminder extraction from free text (a message body or pasted text).

Text is cleaned of HTML, split into lines and filtered for junk; each
surviving line contributes reminders built from verb-led phrases, with the
first date and clock time found on the line. Relative dates resolve against
`today`, which callers may inject.
"""

from datetime import date, timedelta
import html
import logging
import re
from typing import Iterable, List, Optional, Tuple

from .extractor import normalize_clock_time, parse_day_month_year
from .message_source import html_to_text
from .models import Message, Reminder, Urgency
from .patterns import (
    ABSOLUTE_DATE_PATTERNS,
    HTML_ENTITY,
    HTML_TAG,
    JUNK_LINE_PATTERNS,
    JUNK_PHRASE_PATTERNS,
    MONTHS,
    RELATIVE_DATE_PATTERNS,
    REMINDER_FALLBACK_WORDS,
    REMINDER_PHRASE_PATTERNS,
    REMINDER_TIME_PATTERN,
    TOMORROW_WORD,
    URGENT_TODAY_WORDS,
    WEEKDAYS,
)

logger = logging.getLogger(__name__)

_LETTER = re.compile(r"[A-Za-z]")
_REPLY_PREFIX = re.compile(r"^(?:re|fwd):", re.IGNORECASE)

LINE_MIN = 10
LINE_MAX = 200
PHRASE_MIN = 10
PHRASE_MAX = 150
FALLBACK_LINE_CHARS = 80
DEDUP_KEY_CHARS = 30


def clean_lines(text: str) -> List[str]:
    """Strip tags and entities, collapse whitespace, keep line structure."""
    text = HTML_TAG.sub(" ", text)
    text = HTML_ENTITY.sub(" ", html.unescape(text))
    return [" ".join(line.split()) for line in text.splitlines()]


def is_junk_line(line: str) -> bool:
    if not LINE_MIN <= len(line) <= LINE_MAX:
        return True
    if not _LETTER.search(line):
        return True
    return any(p.search(line) for p in JUNK_LINE_PATTERNS)


def is_valid_reminder(text: str) -> bool:
    """At least two real words, mostly letters, and not legal boilerplate."""
    words = [w for w in text.split() if len(w) > 2]
    if len(words) < 2:
        return False
    if len(_LETTER.findall(text)) < len(text) * 0.4:
        return False
    return not any(p.search(text) for p in JUNK_PHRASE_PATTERNS)


def resolve_weekday(name: str, today: date) -> date:
    """Next occurrence of the weekday strictly after today."""
    delta = (WEEKDAYS.index(name.lower()) - today.weekday()) % 7
    return today + timedelta(days=delta or 7)


class ReminderExtractor:
    def __init__(self, phrase_patterns=REMINDER_PHRASE_PATTERNS) -> None:
        self.phrase_patterns = tuple(phrase_patterns)

    # -- dates and times --------------------------------------------------

    def _absolute_dates(self, line: str) -> List[Tuple[int, date]]:
        found: List[Tuple[int, date]] = []
        for kind, pattern in ABSOLUTE_DATE_PATTERNS:
            for match in pattern.finditer(line):
                if kind == "dmy":
                    day, month, year = match.group(1), match.group(2), match.group(3)
                elif kind == "d_month_y":
                    day, month, year = match.group(1), MONTHS[match.group(2).lower()], match.group(3)
                else:
                    month, day, year = MONTHS[match.group(1).lower()], match.group(2), match.group(3)
                parsed = parse_day_month_year(day, str(month), year)
                if parsed is not None:
                    found.append((match.start(), parsed))
        return found

    def _relative_dates(self, line: str, today: date) -> List[Tuple[int, date]]:
        found: List[Tuple[int, date]] = []
        for kind, pattern in RELATIVE_DATE_PATTERNS:
            for match in pattern.finditer(line):
                if kind == "today":
                    found.append((match.start(), today))
                elif kind == "tomorrow":
                    found.append((match.start(), today + timedelta(days=1)))
                else:
                    found.append((match.start(), resolve_weekday(match.group(1), today)))
        return found

    def extract_dates(self, line: str, today: date) -> List[date]:
        """Every date on the line, in the order it appears."""
        found = self._absolute_dates(line) + self._relative_dates(line, today)
        return [d for _, d in sorted(found, key=lambda item: item[0])]

    @staticmethod
    def extract_times(line: str) -> List[str]:
        times: List[str] = []
        for match in REMINDER_TIME_PATTERN.finditer(line):
            value = normalize_clock_time(match.group(1), match.group(2), match.group(3))
            if value:
                times.append(value)
        return times

    # -- phrases ----------------------------------------------------------

    def extract_phrases(self, line: str) -> List[str]:
        candidates: List[Tuple[int, int]] = []
        for pattern in self.phrase_patterns:
            for match in pattern.finditer(line):
                if PHRASE_MIN < len(match.group(0).strip()) < PHRASE_MAX:
                    candidates.append(match.span())

        # Longest first; a span inside one already kept is the same reminder.
        kept: List[Tuple[int, int]] = []
        for start, end in sorted(candidates, key=lambda span: span[0] - span[1]):
            if not any(k_start <= start and end <= k_end for k_start, k_end in kept):
                kept.append((start, end))
        phrases = [line[start:end].strip() for start, end in sorted(kept)]

        if not phrases and any(word in line.lower() for word in REMINDER_FALLBACK_WORDS):
            cleaned = _REPLY_PREFIX.sub("", line).strip()
            if PHRASE_MIN < len(cleaned) < PHRASE_MAX:
                phrases.append(cleaned)

        return phrases

    # -- urgency ----------------------------------------------------------

    @staticmethod
    def urgency_for(resolved: Optional[date], line: str, today: date) -> Urgency:
        # A resolved date always wins over wording like "urgent".
        if resolved is not None:
            if resolved < today:
                return Urgency.PAST
            if resolved == today:
                return Urgency.TODAY
            if resolved == today + timedelta(days=1):
                return Urgency.TOMORROW
            return Urgency.UPCOMING
        if URGENT_TODAY_WORDS.search(line):
            return Urgency.TODAY
        if TOMORROW_WORD.search(line):
            return Urgency.TOMORROW
        return Urgency.UPCOMING

    # -- entry points -----------------------------------------------------

    def extract(self, text: str, source: str = "text", today: Optional[date] = None) -> List[Reminder]:
        if not text or not isinstance(text, str):
            return []
        today = today or date.today()
        reminders: List[Reminder] = []

        for line in clean_lines(text):
            if is_junk_line(line):
                continue

            dates = self.extract_dates(line, today)
            times = self.extract_times(line)
            resolved = dates[0] if dates else None
            time = times[0] if times else None
            urgency = self.urgency_for(resolved, line, today)

            phrases = self.extract_phrases(line)
            if not phrases and (dates or times):
                phrases = [line[:FALLBACK_LINE_CHARS]]

            for phrase in phrases:
                if not is_valid_reminder(phrase):
                    continue
                reminders.append(
                    Reminder(
                        text=phrase,
                        resolved_date=resolved,
                        time=time,
                        urgency=urgency,
                        source=source,
                    )
                )

        unique = self._deduplicate(reminders)
        logger.debug("Extracted %d reminders from %s", len(unique), source)
        return unique

    def extract_from_message(self, message: Message, today: Optional[date] = None) -> List[Reminder]:
        body = message.body_text or html_to_text(message.body_html)
        return self.extract(body, source=message.subject or "message", today=today)

    @staticmethod
    def _deduplicate(reminders: Iterable[Reminder]) -> List[Reminder]:
        seen = set()
        unique: List[Reminder] = []
        for reminder in reminders:
            key = reminder.text.lower()[:DEDUP_KEY_CHARS]
            if key in seen:
                continue
            seen.add(key)
            unique.append(reminder)
        return unique
