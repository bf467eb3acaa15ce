import argparse
import logging
import sys
from datetime import datetime
from typing import List, Optional

from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from .config import Config, load_config
from .daily_runner import build_digest, write_digest_to_file
from .insights import DuplicateDetector, NoiseFilter, OtpCenter, StressIndicator, TomorrowPredictor
from .logging_config import LoggingPolicy, setup_logging
from .message_source import JsonFileMessageSource, MessageSourceError
from .models import ProcessedMessage
from .reminders import ReminderExtractor
from .rule_engine import build_rule_engine
from .storage import (
    delete_reminder,
    ensure_data_files_exist,
    load_saved_messages,
    mark_reminder_sent,
    pending_reminders,
    remove_message,
    save_message,
    schedule_reminder,
)
from .timeline import DeadlineCountdown, MeetingTimeline, TaskExtractor, format_countdown


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _setup(config: Config) -> None:
    level = getattr(logging, config.log_level.upper(), logging.INFO)
    policy = LoggingPolicy() if config.redact_logs else None
    setup_logging(level=level, log_to_file=config.log_to_file, policy=policy)
    ensure_data_files_exist(config)


def _load_processed(config: Config, path: str, now: Optional[datetime] = None) -> List[ProcessedMessage]:
    messages = JsonFileMessageSource(path).fetch_messages()
    return build_rule_engine(config).process_batch(messages, now=now)


def _render_messages_table(title: str, messages: List[ProcessedMessage]) -> None:
    console = Console()
    table = Table(title=title)

    table.add_column("ID")
    table.add_column("Score")
    table.add_column("Category")
    table.add_column("From")
    table.add_column("Subject")

    for m in messages:
        table.add_row(m.id, str(m.importance_score), m.category.value, m.sender, m.subject)

    console.print(table)


def _parse_datetime(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO datetime: {value!r}")


# ---------------------------------------------------------------------------
# Commands: pipeline views
# ---------------------------------------------------------------------------


def cmd_digest(args: argparse.Namespace) -> None:
    config = load_config()
    _setup(config)

    text = build_digest(config, JsonFileMessageSource(args.input))
    print(text)
    if args.write:
        path = write_digest_to_file(config, text)
        logging.info("Digest written to %s", path)


def cmd_insights(args: argparse.Namespace) -> None:
    config = load_config()
    _setup(config)

    now = datetime.now()
    processed = _load_processed(config, args.input, now=now)
    console = Console()

    stress = StressIndicator().analyze(processed, today=now.date())
    console.print(f"[bold]Stress:[/bold] {stress.level.value} ({stress.score}/100) {stress.message}")

    duplicates = DuplicateDetector().detect(processed)
    noise = NoiseFilter().filter(processed)
    console.print(f"Duplicates: {len(duplicates.duplicates)}  Noise: {len(noise.noise)}")

    table = Table(title="Tomorrow")
    table.add_column("Type")
    table.add_column("Time")
    table.add_column("Title")
    for event in TomorrowPredictor().predict(processed, today=now.date()):
        table.add_row(event.type.value, event.time or "", event.title)
    console.print(table)

    table = Table(title="One-time codes")
    table.add_column("Service")
    table.add_column("Code")
    table.add_column("Received")
    for entry in OtpCenter().collect(processed):
        table.add_row(entry.service, entry.code, entry.timestamp.isoformat())
    console.print(table)


def cmd_timeline(args: argparse.Namespace) -> None:
    config = load_config()
    _setup(config)

    now = datetime.now()
    processed = _load_processed(config, args.input, now=now)
    console = Console()

    timeline = MeetingTimeline()
    events = timeline.extract_events(processed)
    table = Table(title="Meetings")
    table.add_column("Time")
    table.add_column("Title")
    for event in events:
        table.add_row(timeline.format_time(event.minutes), event.title)
    console.print(table)

    for conflict in timeline.detect_conflicts(events):
        console.print(f"[red]Conflict at {conflict.time}:[/red] " + " / ".join(conflict.titles))

    table = Table(title="Deadlines")
    table.add_column("Due")
    table.add_column("Countdown")
    table.add_column("Title")
    for item in DeadlineCountdown().extract(processed, today=now.date()):
        table.add_row(item.due_date.isoformat(), format_countdown(item), item.title)
    console.print(table)

    table = Table(title="Tasks")
    table.add_column("Task")
    table.add_column("Deadline")
    table.add_column("Subject")
    for task in TaskExtractor().extract(processed):
        table.add_row(task.task, task.deadline or "", task.subject)
    console.print(table)


def cmd_reminders(args: argparse.Namespace) -> None:
    config = load_config()
    _setup(config)

    extractor = ReminderExtractor()
    if args.text:
        reminders = extractor.extract(args.text, source="pasted text")
    else:
        reminders = []
        for message in JsonFileMessageSource(args.input).fetch_messages():
            reminders.extend(extractor.extract_from_message(message))

    table = Table(title="Reminders")
    table.add_column("Urgency")
    table.add_column("Date")
    table.add_column("Time")
    table.add_column("Text")
    table.add_column("Source")
    for r in reminders:
        table.add_row(
            r.urgency.value,
            r.resolved_date.isoformat() if r.resolved_date else "",
            r.time or "",
            r.text,
            r.source,
        )
    Console().print(table)


# ---------------------------------------------------------------------------
# Commands: saved messages
# ---------------------------------------------------------------------------


def cmd_save(args: argparse.Namespace) -> None:
    config = load_config()
    _setup(config)

    processed = _load_processed(config, args.input)
    matches = [m for m in processed if m.id == args.id]
    if not matches:
        print(f"No message with id {args.id!r} in {args.input}.")
        sys.exit(1)

    if save_message(config, matches[0]):
        print(f"Saved message {args.id!r}.")
    else:
        print(f"Message {args.id!r} is already saved.")


def cmd_unsave(args: argparse.Namespace) -> None:
    config = load_config()
    _setup(config)

    if remove_message(config, args.id):
        print(f"Removed message {args.id!r}.")
    else:
        print(f"Message {args.id!r} was not saved.")


def cmd_saved() -> None:
    config = load_config()
    _setup(config)

    _render_messages_table("Saved messages", load_saved_messages(config))


# ---------------------------------------------------------------------------
# Commands: scheduled reminders
# ---------------------------------------------------------------------------


def cmd_schedule_reminder(args: argparse.Namespace) -> None:
    config = load_config()
    _setup(config)

    reminder = schedule_reminder(
        config,
        recipient=args.recipient,
        subject=args.subject,
        source=args.source,
        body=args.body,
        scheduled_time=args.at,
    )
    print(f"Scheduled reminder {reminder.id} for {reminder.scheduled_time.isoformat()}.")


def cmd_due_reminders(args: argparse.Namespace) -> None:
    config = load_config()
    _setup(config)

    due = pending_reminders(config)
    table = Table(title="Due reminders")
    table.add_column("ID")
    table.add_column("When")
    table.add_column("To")
    table.add_column("Subject")
    for r in due:
        table.add_row(r.id, r.scheduled_time.isoformat(), r.recipient, r.subject)
    Console().print(table)

    if args.mark_sent:
        for r in due:
            mark_reminder_sent(config, r.id)
        print(f"Marked {len(due)} reminder(s) as sent.")
    if args.delete:
        if delete_reminder(config, args.delete):
            print(f"Deleted reminder {args.delete!r}.")
        else:
            print(f"No reminder with id {args.delete!r}.")


# ---------------------------------------------------------------------------
# Main CLI entrypoint
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="day-planner",
        description="Rule-based inbox triage and daily planner.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # digest
    p_digest = subparsers.add_parser("digest", help="Build the daily digest from a messages file.")
    p_digest.add_argument("--input", required=True, help="JSON file of messages.")
    p_digest.add_argument(
        "--write",
        action="store_true",
        help="Also write the digest to DIGEST_OUTPUT_PATH.",
    )

    # insights
    p_insights = subparsers.add_parser(
        "insights",
        help="Show stress level, duplicates, tomorrow preview and one-time codes.",
    )
    p_insights.add_argument("--input", required=True, help="JSON file of messages.")

    # timeline
    p_timeline = subparsers.add_parser("timeline", help="Show meetings, deadlines and tasks.")
    p_timeline.add_argument("--input", required=True, help="JSON file of messages.")

    # reminders
    p_reminders = subparsers.add_parser("reminders", help="Extract reminders from text or messages.")
    group = p_reminders.add_mutually_exclusive_group(required=True)
    group.add_argument("--text", type=str, help="Free text to scan.")
    group.add_argument("--input", type=str, help="JSON file of messages.")

    # save / unsave / saved
    p_save = subparsers.add_parser("save", help="Star a message from a messages file.")
    p_save.add_argument("id", type=str, help="Message ID.")
    p_save.add_argument("--input", required=True, help="JSON file of messages.")

    p_unsave = subparsers.add_parser("unsave", help="Remove a starred message.")
    p_unsave.add_argument("id", type=str, help="Message ID.")

    subparsers.add_parser("saved", help="List starred messages.")

    # schedule-reminder
    p_schedule = subparsers.add_parser(
        "schedule-reminder",
        help="Record a reminder request for later delivery.",
    )
    p_schedule.add_argument("recipient", type=str, help="Recipient address.")
    p_schedule.add_argument("subject", type=str, help="Reminder subject.")
    p_schedule.add_argument(
        "--at",
        type=_parse_datetime,
        required=True,
        help="When to deliver, ISO format (e.g. 2025-12-15T09:00).",
    )
    p_schedule.add_argument("--body", type=str, default="", help="Reminder body.")
    p_schedule.add_argument(
        "--source",
        type=str,
        default="manual",
        help="Where the reminder came from. Default: 'manual'.",
    )

    # due-reminders
    p_due = subparsers.add_parser("due-reminders", help="List scheduled reminders that are due.")
    p_due.add_argument("--mark-sent", action="store_true", help="Mark the listed reminders as sent.")
    p_due.add_argument("--delete", type=str, default=None, help="Delete the reminder with this ID.")

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.command == "digest":
            cmd_digest(args)
        elif args.command == "insights":
            cmd_insights(args)
        elif args.command == "timeline":
            cmd_timeline(args)
        elif args.command == "reminders":
            cmd_reminders(args)
        elif args.command == "save":
            cmd_save(args)
        elif args.command == "unsave":
            cmd_unsave(args)
        elif args.command == "saved":
            cmd_saved()
        elif args.command == "schedule-reminder":
            cmd_schedule_reminder(args)
        elif args.command == "due-reminders":
            cmd_due_reminders(args)
        else:
            parser.error(f"Unknown command: {args.command!r}")
    except (MessageSourceError, ValidationError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
