"""
Pattern tables for extraction, classification and scoring.

Everything heuristic lives here as data so the rule set can be tested and
swapped without touching the pipeline code.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List, Pattern, Tuple

from .models import Category


# ---------------------------------------------------------------------------
# Keyword matching
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1024)
def keyword_pattern(keyword: str) -> Pattern[str]:
    """
    Compile a case-insensitive pattern for `keyword`.

    Word boundaries are only enforced on sides that start/end with a word
    character, so "%off" and ".edu" still match inside longer text.
    """
    escaped = re.escape(keyword.lower())
    prefix = r"(?<!\w)" if keyword[:1].isalnum() else ""
    suffix = r"(?!\w)" if keyword[-1:].isalnum() else ""
    return re.compile(prefix + escaped + suffix, re.IGNORECASE)


def contains_keyword(text: str, keyword: str) -> bool:
    if not text or not keyword:
        return False
    return keyword_pattern(keyword).search(text) is not None


def contains_any(text: str, keywords) -> bool:
    return any(contains_keyword(text, kw) for kw in keywords)


# ---------------------------------------------------------------------------
# Extraction patterns (semantic field -> regex)
# ---------------------------------------------------------------------------

CURRENCY_SYMBOLS = "₹$€£"

EXTRACTION_PATTERNS: Dict[str, Pattern[str]] = {
    "amounts": re.compile(r"[₹$€£]\s?\d+(?:,\d{3})*(?:\.\d{1,2})?(?!\d)"),
    "due_dates": re.compile(r"(?<!\d)(\d{1,2})[/-](\d{1,2})[/-](\d{4})(?!\d)"),
    "times": re.compile(r"(?<!\d)(\d{1,2}):(\d{2})\s?(AM|PM)\b", re.IGNORECASE),
    "urls": re.compile(r"https?://\S+"),
    # Bare digit runs that are not glued to dates, times, amounts or decimals.
    # A colon only disqualifies when it follows a digit ("10:30"), not "OTP:".
    "otp_codes": re.compile(r"(?<![\d₹$€£/.,-])(?<!\d:)(\d+)(?![\d/:]|[.,]\d)"),
}

URL_TRAILING_PUNCTUATION = ".,;:!?)]}>\"'"

YEAR_LIKE = re.compile(r"^(19|20)\d{2}$")


# ---------------------------------------------------------------------------
# OTP policy
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OtpPolicy:
    """
    Tunable rules for recognising one-time-code mail.

    The exclusion keywords keep digests and newsletters that merely mention a
    code out of the OTP bucket.
    """

    strong_phrases: Tuple[str, ...] = (
        "verification code",
        "otp",
        "one-time password",
        "one time password",
        "security code",
        "authentication code",
        "login code",
        "access code",
        "verify your",
        "confirm your account",
        "verification pin",
    )
    code_prompts: Tuple[str, ...] = (
        "your code is",
        "code:",
        "otp:",
        "pin:",
        "verification:",
    )
    exclusion_keywords: Tuple[str, ...] = (
        "summary",
        "digest",
        "newsletter",
        "weekly",
        "report",
    )
    noreply_markers: Tuple[str, ...] = ("noreply", "no-reply")
    context_keywords: Tuple[str, ...] = (
        "otp",
        "code",
        "passcode",
        "verification",
        "verify",
        "authenticate",
        "pin",
    )
    context_window: int = 40


DEFAULT_OTP_POLICY = OtpPolicy()


# ---------------------------------------------------------------------------
# Classification tables
# ---------------------------------------------------------------------------

CATEGORY_KEYWORDS: Dict[Category, List[str]] = {
    Category.BILLS: [
        "invoice",
        "payment due",
        "amount due",
        "due date",
        "receipt",
        "subscription charge",
        "transaction receipt",
        "billing statement",
        "pay your bill",
    ],
    Category.STUDENT_MEETINGS: [
        "class",
        "lecture",
        "assignment",
        "exam",
        "course",
        "professor",
        "university",
        "college",
        "semester",
        "degree",
        "education",
        "training program",
    ],
    Category.JOB_MEETINGS: [
        "interview",
        "job interview",
        "recruiter",
        "hiring manager",
        "career opportunity",
    ],
    Category.INTERNSHIP_MEETINGS: [
        "internship",
        "intern interview",
        "intern opportunity",
        "associate consultant intern",
    ],
    Category.MEETINGS: [
        "meeting",
        "google meet",
        "zoom",
        "teams meeting",
        "conference call",
        "call scheduled",
        "join the call",
    ],
    Category.PROMOTIONS: [
        "offer",
        "discount",
        "sale",
        "deal",
        "promo",
        "coupon",
        "limited time",
        "free shipping",
    ],
    Category.JOBS: [
        "job alert",
        "hiring for the role",
        "apply now",
        "position available",
        "vacancy",
        "employment opportunity",
        "is hiring",
        "job opening",
    ],
}

# Points per keyword hit, by where the keyword appears.
KEYWORD_WEIGHTS = {
    "subject": 5,
    "body": 2,
    "sender": 3,
}

# (keywords matched against the sender, category, points)
SENDER_HINTS: List[Tuple[Tuple[str, ...], Category, int]] = [
    (("billing", "invoice", "payment"), Category.BILLS, 8),
    (("recruit", "careers", "jobs"), Category.JOBS, 8),
    (("marketing", "promo", "newsletter"), Category.PROMOTIONS, 8),
    (("deals", "offers", "shop"), Category.PROMOTIONS, 10),
    ((".edu", "university", "college"), Category.STUDENT_MEETINGS, 8),
]

# Sender looks automated and the body reads like marketing.
NOREPLY_PROMO_SENDERS = ("noreply", "no-reply")
NOREPLY_PROMO_BODY = ("unsubscribe", "promotional")
NOREPLY_PROMO_POINTS = 10

# (subject regex, category, points); negative points suppress a category.
SUBJECT_OVERRIDES: List[Tuple[Pattern[str], Category, int]] = [
    (re.compile(r"\bintern", re.I), Category.INTERNSHIP_MEETINGS, 10),
    (re.compile(r"\bintern", re.I), Category.JOBS, -5),
    (re.compile(r"\binterview", re.I), Category.JOB_MEETINGS, 10),
    (re.compile(r"\b(?:invoice|receipt|payment)", re.I), Category.BILLS, 8),
    (re.compile(r"\b(?:meet|zoom|teams)\b", re.I), Category.MEETINGS, 8),
    (re.compile(r"\b(?:discount|sale|deal)\b|%\s?off", re.I), Category.PROMOTIONS, 8),
    (re.compile(r"\bshared\b|\binvited you\b", re.I), Category.ATTACHMENTS, 10),
    (re.compile(r"\bshared\b|\binvited you\b", re.I), Category.PROMOTIONS, -8),
]

# (body regex, category, points)
BODY_HINTS: List[Tuple[Pattern[str], Category, int]] = [
    (re.compile(r"unsubscribe|opt-out|manage preferences", re.I), Category.PROMOTIONS, 6),
]

# Tie-break order; earlier wins on equal score.
CATEGORY_PRIORITY: Tuple[Category, ...] = (
    Category.BILLS,
    Category.STUDENT_MEETINGS,
    Category.INTERNSHIP_MEETINGS,
    Category.JOB_MEETINGS,
    Category.JOBS,
    Category.MEETINGS,
    Category.PROMOTIONS,
    Category.ATTACHMENTS,
)


# ---------------------------------------------------------------------------
# Scoring / analytics keyword sets
# ---------------------------------------------------------------------------

URGENT_KEYWORDS: Tuple[str, ...] = (
    "urgent",
    "important",
    "action required",
    "reminder",
    "final notice",
    "deadline",
)

NOISE_KEYWORDS: Tuple[str, ...] = (
    "unsubscribe",
    "newsletter",
    "promotion",
    "deal",
    "offer",
    "discount",
    "sale",
    "marketing",
    "advertisement",
    "subscribe now",
    "limited time",
    "buy now",
    "shop now",
    "free shipping",
    "coupon",
    "promo code",
)

# Ordered; group 1 is the task text.
TASK_PATTERNS: Tuple[Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"please submit (?:.*?)(?:before|by) (.*?)(?:\.|$)",
        r"action required[:\s]+(.*?)(?:\.|$)",
        r"respond by (.*?)(?:\.|$)",
        r"complete (?:this )?task[:\s]+(.*?)(?:\.|$)",
        r"upload (?:your )?document[:\s]+(.*?)(?:\.|$)",
        r"(?:your )?assignment is due (.*?)(?:\.|$)",
        r"deadline[:\s]+(.*?)(?:\.|$)",
        r"due date[:\s]+(.*?)(?:\.|$)",
        r"submit (?:.*?)(?:before|by) (.*?)(?:\.|$)",
        r"apply (?:before|by) (.*?)(?:\.|$)",
        r"registration closes (?:on )?(.*?)(?:\.|$)",
        r"last date[:\s]+(.*?)(?:\.|$)",
        r"(?:must|should) (?:be )?(?:completed|submitted|done) (?:before|by) (.*?)(?:\.|$)",
        r"(?:payment|bill) due[:\s]+(.*?)(?:\.|$)",
    )
)


# ---------------------------------------------------------------------------
# Reminder extraction tables
# ---------------------------------------------------------------------------

MONTHS = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

_MONTH = r"(jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*"
_WEEKDAY = "(" + "|".join(WEEKDAYS) + ")"

# (kind, regex); kind tells the parser how to read the groups.
ABSOLUTE_DATE_PATTERNS: Tuple[Tuple[str, Pattern[str]], ...] = (
    ("dmy", re.compile(r"\b(\d{1,2})[/-](\d{1,2})[/-](\d{4})\b")),
    ("d_month_y", re.compile(r"\b(\d{1,2})\s+" + _MONTH + r"\.?,?\s+(\d{4})\b", re.I)),
    ("month_d_y", re.compile(r"\b" + _MONTH + r"\.?\s+(\d{1,2}),?\s+(\d{4})\b", re.I)),
)

RELATIVE_DATE_PATTERNS: Tuple[Tuple[str, Pattern[str]], ...] = (
    ("today", re.compile(r"\b(?:today|tonight)\b", re.I)),
    ("tomorrow", re.compile(r"\btomorrow\b", re.I)),
    ("weekday", re.compile(r"\b(?:next|by)\s+" + _WEEKDAY + r"\b", re.I)),
)

REMINDER_TIME_PATTERN = re.compile(r"(?<![\d:])(\d{1,2})(?::(\d{2}))?\s*(AM|PM)\b", re.I)

REMINDER_PHRASE_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(
        r"\b(?:pay|submit|attend|complete|finish|send|upload|apply|review|check)\s+[^.!?\n]{5,60}",
        re.I,
    ),
    re.compile(r"\b(?:reminder|deadline|due date|action required)[:\s]+[^.!?\n]{5,60}", re.I),
    re.compile(r"(?:don'?t forget|remember to)\s+[^.!?\n]{5,60}", re.I),
)

REMINDER_FALLBACK_WORDS = ("due", "deadline", "submit")

URGENT_TODAY_WORDS = re.compile(r"\b(?:today|tonight|urgent|asap)\b", re.I)
TOMORROW_WORD = re.compile(r"\btomorrow\b", re.I)

JUNK_LINE_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"href|src=|http|www\.|mailto:|style=|class=", re.I),
    re.compile(r"^(?:VISA|UPI|MasterCard|RuPay|Maestro|©|®|™)", re.I),
)

JUNK_PHRASE_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"^(?:all applicable|personally identifiable|service-related|keep your searches)", re.I),
    re.compile(r"^(?:your profile|all refunds|to such rights)", re.I),
    re.compile(r"^(?:us via the email|you service-related)", re.I),
)

HTML_TAG = re.compile(r"<[^>]*>")
HTML_ENTITY = re.compile(r"&(?:[a-z]+|#\d+);", re.I)
