"""
Field extraction: amounts, due dates, clock times, URLs and one-time codes.

Every method takes arbitrary text and returns a list; malformed or empty
input simply yields no matches.
"""

from datetime import date
import logging
from typing import List, Optional

from .models import ExtractedData
from .patterns import (
    DEFAULT_OTP_POLICY,
    EXTRACTION_PATTERNS,
    URL_TRAILING_PUNCTUATION,
    YEAR_LIKE,
    OtpPolicy,
    keyword_pattern,
)

logger = logging.getLogger(__name__)


def parse_day_month_year(day: str, month: str, year: str) -> Optional[date]:
    """Build a real calendar date from DD, MM, YYYY strings, or None."""
    try:
        d, m, y = int(day), int(month), int(year)
    except (TypeError, ValueError):
        return None
    if not 1900 <= y <= 2100:
        return None
    try:
        return date(y, m, d)
    except ValueError:
        # day > 31, month > 12, Feb 30 and friends
        return None


def normalize_clock_time(hour: str, minute: Optional[str], period: str) -> Optional[str]:
    """Return "H:MM AM"/"H:MM PM", or None when the parts are out of range."""
    try:
        h = int(hour)
        m = int(minute) if minute else 0
    except (TypeError, ValueError):
        return None
    if not 1 <= h <= 12 or not 0 <= m <= 59:
        return None
    return f"{h}:{m:02d} {period.upper()}"


def clock_time_to_minutes(value: str) -> Optional[int]:
    """Minutes since midnight for an "H:MM AM" string, or None."""
    match = EXTRACTION_PATTERNS["times"].search(value or "")
    if not match:
        return None
    hour, minute, period = int(match.group(1)), int(match.group(2)), match.group(3).upper()
    if not 1 <= hour <= 12 or not 0 <= minute <= 59:
        return None
    if period == "PM" and hour != 12:
        hour += 12
    if period == "AM" and hour == 12:
        hour = 0
    return hour * 60 + minute


class Extractor:
    def __init__(
        self,
        otp_min_length: int = 4,
        otp_max_length: int = 8,
        otp_policy: OtpPolicy = DEFAULT_OTP_POLICY,
    ) -> None:
        if otp_min_length > otp_max_length:
            raise ValueError("otp_min_length must not exceed otp_max_length")
        self.otp_min_length = otp_min_length
        self.otp_max_length = otp_max_length
        self.otp_policy = otp_policy

    def extract_amounts(self, text: str) -> List[str]:
        if not text or not isinstance(text, str):
            return []
        return EXTRACTION_PATTERNS["amounts"].findall(text)

    def extract_due_dates(self, text: str) -> List[date]:
        if not text or not isinstance(text, str):
            return []
        dates: List[date] = []
        for match in EXTRACTION_PATTERNS["due_dates"].finditer(text):
            parsed = parse_day_month_year(*match.groups())
            if parsed is None:
                logger.debug("Dropping invalid date candidate %r", match.group(0))
                continue
            dates.append(parsed)
        return dates

    def extract_urls(self, text: str) -> List[str]:
        if not text or not isinstance(text, str):
            return []
        urls = []
        for raw in EXTRACTION_PATTERNS["urls"].findall(text):
            url = raw.rstrip(URL_TRAILING_PUNCTUATION)
            if len(url) > len("https://"):
                urls.append(url)
        return urls

    def extract_times(self, text: str) -> List[str]:
        if not text or not isinstance(text, str):
            return []
        times = []
        for match in EXTRACTION_PATTERNS["times"].finditer(text):
            normalized = normalize_clock_time(*match.groups())
            if normalized is not None:
                times.append(normalized)
        return times

    def extract_otp_codes(self, text: str) -> List[str]:
        """
        Numeric codes near an OTP context keyword.

        No context keyword anywhere in the text means no codes at all. When
        keywords exist but none sits close to a candidate, the first
        standalone 6-digit token is used instead.
        """
        if not text or not isinstance(text, str):
            return []

        keyword_spans = []
        for keyword in self.otp_policy.context_keywords:
            for match in keyword_pattern(keyword).finditer(text):
                keyword_spans.append((match.start(), match.end()))
        if not keyword_spans:
            return []

        window = self.otp_policy.context_window
        codes: List[str] = []
        standalone: List[str] = []

        for match in EXTRACTION_PATTERNS["otp_codes"].finditer(text):
            token = match.group(1)
            if YEAR_LIKE.match(token):
                continue
            if len(token) == 6:
                standalone.append(token)
            if not self.otp_min_length <= len(token) <= self.otp_max_length:
                continue
            start, end = match.span(1)
            near = any(
                k_end <= start and start - k_end <= window
                or k_start >= end and k_start - end <= window
                for k_start, k_end in keyword_spans
            )
            if near:
                codes.append(token)

        if codes:
            return codes
        return standalone[:1]

    def extract_all(self, text: str) -> ExtractedData:
        return ExtractedData(
            amounts=self.extract_amounts(text),
            due_dates=self.extract_due_dates(text),
            times=self.extract_times(text),
            urls=self.extract_urls(text),
            otp_codes=self.extract_otp_codes(text),
        )
