"""
Smoke tests for the command-line entry point
"""

import json

import pytest

from day_planner import cli


@pytest.fixture
def env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("SAVED_MESSAGES_PATH", str(tmp_path / "data" / "saved.json"))
    monkeypatch.setenv("SCHEDULED_REMINDERS_PATH", str(tmp_path / "data" / "reminders.json"))
    monkeypatch.setenv("DIGEST_OUTPUT_PATH", str(tmp_path / "data" / "digest.md"))
    messages = tmp_path / "messages.json"
    messages.write_text(
        json.dumps(
            [
                {"id": "bill", "subject": "Invoice due", "body_text": "Payment due 15/12/2025 of $150"},
                {"id": "meet", "subject": "Zoom meeting", "body_text": "Starts 10:00 AM"},
            ]
        ),
        encoding="utf-8",
    )
    return tmp_path, messages


def test_digest_writes_file(env, capsys):
    tmp_path, messages = env
    cli.main(["digest", "--input", str(messages), "--write"])

    assert "# Daily Digest" in capsys.readouterr().out
    assert (tmp_path / "data" / "digest.md").exists()


def test_save_and_unsave(env, capsys):
    _, messages = env
    cli.main(["save", "bill", "--input", str(messages)])
    cli.main(["save", "bill", "--input", str(messages)])
    cli.main(["unsave", "bill"])

    out = capsys.readouterr().out
    assert "Saved message 'bill'." in out
    assert "already saved" in out
    assert "Removed message 'bill'." in out


def test_schedule_and_due_reminders(env, capsys):
    cli.main(["schedule-reminder", "me@example.com", "Pay rent", "--at", "2000-01-01T09:00"])
    cli.main(["due-reminders", "--mark-sent"])

    out = capsys.readouterr().out
    assert "Scheduled reminder" in out
    assert "Marked 1 reminder(s) as sent." in out


def test_missing_input_exits_non_zero(env):
    tmp_path, _ = env
    with pytest.raises(SystemExit) as exc:
        cli.main(["timeline", "--input", str(tmp_path / "nope.json")])
    assert exc.value.code == 1


def test_reminders_from_text(env, capsys):
    cli.main(["reminders", "--text", "Submit report by tomorrow 5 PM"])
    assert "Reminders" in capsys.readouterr().out
