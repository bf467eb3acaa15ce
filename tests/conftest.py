"""
Shared fixtures: a message factory and a fixed clock.
"""

from datetime import date, datetime, timezone

import pytest

from day_planner.config import Config
from day_planner.models import Attachment, Message

# Monday 15 December 2025, 09:00
NOW = datetime(2025, 12, 15, 9, 0, 0)
TODAY = date(2025, 12, 15)


def make_message(
    id="m1",
    subject="",
    body_text="",
    sender="someone@example.com",
    attachments=(),
    **extra,
) -> Message:
    return Message(
        id=id,
        subject=subject,
        body_text=body_text,
        sender=sender,
        recipient="me@example.com",
        timestamp=extra.pop("timestamp", datetime(2025, 12, 15, 8, 0, tzinfo=timezone.utc)),
        attachments=[Attachment(filename=name, mime_type="application/pdf", size=1024) for name in attachments],
        **extra,
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def config(tmp_path):
    return Config(
        data_dir=tmp_path,
        saved_messages_path=tmp_path / "saved_messages.json",
        scheduled_reminders_path=tmp_path / "scheduled_reminders.json",
        digest_output_path=tmp_path / "digest.md",
    )
