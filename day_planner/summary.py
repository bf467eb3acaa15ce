"""
Summary generation: bucket processed messages by category plus an
"important" bucket for high scores.
"""

from datetime import datetime
import logging
from typing import Dict, Iterable, List

from .models import Category, ProcessedMessage, Summary

logger = logging.getLogger(__name__)

DEFAULT_IMPORTANT_THRESHOLD = 8

# Display order of the digest sections; must name every category.
BUCKET_ORDER = (
    Category.BILLS,
    Category.STUDENT_MEETINGS,
    Category.JOB_MEETINGS,
    Category.INTERNSHIP_MEETINGS,
    Category.MEETINGS,
    Category.JOBS,
    Category.OTP,
    Category.ATTACHMENTS,
    Category.PROMOTIONS,
    Category.OTHER,
)

_missing = set(Category) - set(BUCKET_ORDER)
if _missing:
    raise RuntimeError(f"Summary buckets missing categories: {sorted(c.value for c in _missing)}")


def _by_score(messages: List[ProcessedMessage]) -> List[ProcessedMessage]:
    # sorted() is stable, so equal scores keep their arrival order.
    return sorted(messages, key=lambda m: m.importance_score, reverse=True)


class SummaryGenerator:
    def __init__(self, threshold: int = DEFAULT_IMPORTANT_THRESHOLD) -> None:
        self.threshold = threshold

    def generate(self, messages: Iterable[ProcessedMessage]) -> Summary:
        buckets: Dict[Category, List[ProcessedMessage]] = {c: [] for c in BUCKET_ORDER}
        important: List[ProcessedMessage] = []

        for message in messages:
            buckets[Category(message.category)].append(message)
            if message.importance_score >= self.threshold:
                important.append(message)

        summary = Summary(
            buckets={c: _by_score(items) for c, items in buckets.items()},
            important=_by_score(important),
            threshold=self.threshold,
            generated_at=datetime.now(),
        )
        logger.info(
            "Generated summary: %d messages, %d important.",
            summary.total,
            len(summary.important),
        )
        return summary
