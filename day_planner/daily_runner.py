"""
Daily digest: run the pipeline over a message source, then format and
write the markdown digest.
"""

from datetime import date, datetime
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .config import Config
from .insights import StressIndicator, TomorrowPredictor
from .message_source import MessageSource
from .models import Category, ProcessedMessage, StressAnalysis, Summary, TomorrowEvent
from .rule_engine import build_rule_engine
from .summary import BUCKET_ORDER, SummaryGenerator

logger = logging.getLogger(__name__)


def run_daily_digest(
    config: Config,
    source: MessageSource,
    now: Optional[datetime] = None,
) -> Tuple[List[ProcessedMessage], Summary]:
    """Fetch, process and summarize every message from the source."""
    messages = source.fetch_messages()
    logger.info("Fetched %d messages.", len(messages))

    processed = build_rule_engine(config).process_batch(messages, now=now)
    summary = SummaryGenerator(threshold=config.important_threshold).generate(processed)
    return processed, summary


def _message_line(message: ProcessedMessage) -> str:
    line = f"- **[{message.importance_score}]** {message.subject or '(no subject)'}"
    if message.sender:
        line += f" _({message.sender})_"
    extracted = message.extracted
    facts = []
    if extracted.amounts:
        facts.append("amount " + ", ".join(extracted.amounts))
    if extracted.due_dates:
        facts.append("due " + ", ".join(d.isoformat() for d in extracted.due_dates))
    if extracted.times:
        facts.append("at " + ", ".join(extracted.times))
    if facts:
        line += " — " + "; ".join(facts)
    return line


def generate_digest_text(
    summary: Summary,
    stress: Optional[StressAnalysis] = None,
    tomorrow: Optional[Sequence[TomorrowEvent]] = None,
    digest_date: Optional[date] = None,
) -> str:
    """Convert a Summary into a human-readable markdown string."""
    digest_date = digest_date or summary.generated_at.date()
    lines: List[str] = []

    lines.append(f"# Daily Digest — {digest_date.isoformat()}")
    lines.append("")

    if stress is not None:
        lines.append(f"**Stress level:** {stress.level.value} ({stress.score}/100). {stress.message}")
        lines.append("")

    # ------------------------------------------------------------------
    # Important
    # ------------------------------------------------------------------
    lines.append(f"## Important (score >= {summary.threshold})")
    lines.append("")
    if not summary.important:
        lines.append("_Nothing important today._")
    else:
        for message in summary.important:
            lines.append(_message_line(message))
    lines.append("")

    # ------------------------------------------------------------------
    # Category buckets
    # ------------------------------------------------------------------
    for category in BUCKET_ORDER:
        # OTP codes are short-lived; promotions are noise.
        if category in (Category.OTP, Category.PROMOTIONS):
            count = len(summary.bucket(category))
            if count:
                lines.append(f"## {category.value}")
                lines.append("")
                lines.append(f"_{count} message{'s' if count != 1 else ''}._")
                lines.append("")
            continue

        items = summary.bucket(category)
        if not items:
            continue
        lines.append(f"## {category.value}")
        lines.append("")
        for message in items:
            lines.append(_message_line(message))
        lines.append("")

    # ------------------------------------------------------------------
    # Tomorrow
    # ------------------------------------------------------------------
    if tomorrow:
        lines.append("## Tomorrow")
        lines.append("")
        for event in tomorrow:
            when = f" at {event.time}" if event.time else ""
            lines.append(f"- {event.type.value}: {event.title}{when}")
        lines.append("")

    return "\n".join(lines)


def build_digest(config: Config, source: MessageSource, now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    processed, summary = run_daily_digest(config, source, now=now)
    stress = StressIndicator().analyze(processed, today=now.date())
    tomorrow = TomorrowPredictor().predict(processed, today=now.date())
    return generate_digest_text(summary, stress=stress, tomorrow=tomorrow, digest_date=now.date())


def write_digest_to_file(config: Config, digest_text: str) -> Path:
    """Write the digest text to the configured output path."""
    path: Path = config.digest_output_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(digest_text, encoding="utf-8")
    return path
