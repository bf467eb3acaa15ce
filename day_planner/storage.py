"""
Storage helpers for the two JSON state files: starred messages and
scheduled reminder requests.
"""

from datetime import datetime
import logging
from pathlib import Path
from typing import List, Optional
import uuid

from .config import Config
from .models import ProcessedMessage, SavedMessagesFile, ScheduledReminder, ScheduledRemindersFile

logger = logging.getLogger(__name__)


def _write_model(path: Path, model) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(model.model_dump_json(indent=2), encoding="utf-8")


def ensure_data_files_exist(config: Config) -> None:
    """
    Ensure that the data directory and core files exist.

    Creates:
      - saved_messages.json
      - scheduled_reminders.json
    """
    config.data_dir.mkdir(parents=True, exist_ok=True)

    if not config.saved_messages_path.exists():
        _write_model(config.saved_messages_path, SavedMessagesFile())

    if not config.scheduled_reminders_path.exists():
        _write_model(config.scheduled_reminders_path, ScheduledRemindersFile())


# ---------------------------------------------------------------------------
# Saved (starred) messages
# ---------------------------------------------------------------------------


def load_saved_file(config: Config) -> SavedMessagesFile:
    path = config.saved_messages_path
    if not path.exists():
        return SavedMessagesFile()
    text = path.read_text(encoding="utf-8")
    return SavedMessagesFile.model_validate_json(text)


def save_saved_file(config: Config, saved: SavedMessagesFile) -> None:
    _write_model(config.saved_messages_path, saved)


def load_saved_messages(config: Config) -> List[ProcessedMessage]:
    return list(load_saved_file(config).messages)


def is_message_saved(config: Config, message_id: str) -> bool:
    return any(m.id == message_id for m in load_saved_file(config).messages)


def save_message(config: Config, message: ProcessedMessage) -> bool:
    """
    Star a message. Returns False if a message with the same id is already saved.
    """
    saved = load_saved_file(config)
    if any(m.id == message.id for m in saved.messages):
        return False
    saved.messages.append(message)
    save_saved_file(config, saved)
    logger.info("Saved message id=%s", message.id)
    return True


def remove_message(config: Config, message_id: str) -> bool:
    saved = load_saved_file(config)
    remaining = [m for m in saved.messages if m.id != message_id]
    if len(remaining) == len(saved.messages):
        return False
    save_saved_file(config, SavedMessagesFile(messages=remaining))
    logger.info("Removed saved message id=%s", message_id)
    return True


def clear_saved_messages(config: Config) -> None:
    save_saved_file(config, SavedMessagesFile())


# ---------------------------------------------------------------------------
# Scheduled reminders
# ---------------------------------------------------------------------------


def load_reminders_file(config: Config) -> ScheduledRemindersFile:
    path = config.scheduled_reminders_path
    if not path.exists():
        return ScheduledRemindersFile()
    text = path.read_text(encoding="utf-8")
    return ScheduledRemindersFile.model_validate_json(text)


def save_reminders_file(config: Config, reminders_file: ScheduledRemindersFile) -> None:
    _write_model(config.scheduled_reminders_path, reminders_file)


def load_scheduled_reminders(config: Config) -> List[ScheduledReminder]:
    return list(load_reminders_file(config).reminders)


def schedule_reminder(
    config: Config,
    recipient: str,
    subject: str,
    source: str,
    body: str,
    scheduled_time: datetime,
) -> ScheduledReminder:
    """
    Record a reminder request for later delivery. Nothing is sent here.
    """
    reminder = ScheduledReminder(
        id=uuid.uuid4().hex,
        recipient=recipient,
        subject=subject,
        source=source,
        body=body,
        scheduled_time=scheduled_time,
    )
    reminders_file = load_reminders_file(config)
    reminders_file.reminders.append(reminder)
    save_reminders_file(config, reminders_file)
    logger.info("Scheduled reminder id=%s for %s", reminder.id, scheduled_time.isoformat())
    return reminder


def pending_reminders(config: Config, now: Optional[datetime] = None) -> List[ScheduledReminder]:
    """Unsent reminders whose scheduled time has passed, oldest first."""
    now = now or datetime.now()
    due = [
        r
        for r in load_reminders_file(config).reminders
        if not r.sent and _comparable(r.scheduled_time, now) <= now
    ]
    return sorted(due, key=lambda r: _comparable(r.scheduled_time, now))


def _comparable(value: datetime, now: datetime) -> datetime:
    # Naive and aware datetimes cannot be compared; align to `now`.
    if (value.tzinfo is None) == (now.tzinfo is None):
        return value
    if now.tzinfo is None:
        return value.astimezone().replace(tzinfo=None)
    return value.replace(tzinfo=now.tzinfo)


def mark_reminder_sent(config: Config, reminder_id: str) -> bool:
    reminders_file = load_reminders_file(config)
    updated = False
    reminders: List[ScheduledReminder] = []
    for r in reminders_file.reminders:
        if r.id == reminder_id and not r.sent:
            r = r.model_copy(update={"sent": True})
            updated = True
        reminders.append(r)
    if updated:
        save_reminders_file(config, ScheduledRemindersFile(reminders=reminders))
    return updated


def delete_reminder(config: Config, reminder_id: str) -> bool:
    reminders_file = load_reminders_file(config)
    remaining = [r for r in reminders_file.reminders if r.id != reminder_id]
    if len(remaining) == len(reminders_file.reminders):
        return False
    save_reminders_file(config, ScheduledRemindersFile(reminders=remaining))
    return True
