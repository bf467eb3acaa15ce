"""
Unit tests for meeting timeline, deadline countdown and task extraction
"""

from datetime import date, timedelta

import pytest

from conftest import TODAY, make_message
from day_planner.models import Category, DeadlineStatus, ExtractedData, ProcessedMessage
from day_planner.timeline import (
    DeadlineCountdown,
    MeetingTimeline,
    TaskExtractor,
    format_countdown,
    format_time,
)


def processed(id="m1", category=Category.OTHER, subject="", body_text="", **extracted):
    fields = dict(make_message(id=id, subject=subject, body_text=body_text))
    fields.update(category=category, extracted=ExtractedData(**extracted))
    return ProcessedMessage(**fields)


# ---------------------------------------------------------------------------
# Meeting timeline
# ---------------------------------------------------------------------------


def test_events_sorted_and_only_meetings():
    messages = [
        processed(id="a", category=Category.MEETINGS, subject="Standup", times=["2:00 PM"]),
        processed(id="b", category=Category.STUDENT_MEETINGS, subject="Lecture", times=["9:15 AM"]),
        processed(id="c", category=Category.BILLS, subject="Bill", times=["8:00 AM"]),
    ]
    events = MeetingTimeline().extract_events(messages)

    assert [e.message_id for e in events] == ["b", "a"]
    assert [e.minutes for e in events] == [9 * 60 + 15, 14 * 60]
    assert events[0].time == "09:15"


def test_same_title_same_time_deduplicated():
    messages = [
        processed(id="a", category=Category.MEETINGS, subject="Weekly Sync!", times=["10:00 AM"]),
        processed(id="b", category=Category.MEETINGS, subject="weekly sync", times=["10:00 AM"]),
    ]
    assert len(MeetingTimeline().extract_events(messages)) == 1


def test_conflicts_need_two_distinct_titles():
    timeline = MeetingTimeline()
    messages = [
        processed(id="a", category=Category.MEETINGS, subject="Design review", times=["3:00 PM"]),
        processed(id="b", category=Category.JOB_MEETINGS, subject="Interview with Acme", times=["3:00 PM"]),
        processed(id="c", category=Category.MEETINGS, subject="1:1", times=["4:00 PM"]),
    ]

    conflicts = timeline.detect_conflicts(timeline.extract_events(messages))

    assert len(conflicts) == 1
    assert conflicts[0].time == "03:00 PM"
    assert conflicts[0].titles == ["Design review", "Interview with Acme"]


def test_no_conflicts_for_single_meetings():
    timeline = MeetingTimeline()
    events = timeline.extract_events([processed(category=Category.MEETINGS, subject="Solo", times=["9:00 AM"])])
    assert timeline.detect_conflicts(events) == []


@pytest.mark.parametrize(
    "minutes,expected",
    [(0, "12:00 AM"), (9 * 60 + 30, "09:30 AM"), (12 * 60, "12:00 PM"), (23 * 60 + 59, "11:59 PM")],
)
def test_format_time(minutes, expected):
    assert format_time(minutes) == expected
    assert MeetingTimeline.format_time(minutes) == expected


# ---------------------------------------------------------------------------
# Deadline countdown
# ---------------------------------------------------------------------------


def test_deadline_statuses_and_order():
    messages = [
        processed(id="later", subject="Tax filing", due_dates=[TODAY + timedelta(days=5)]),
        processed(id="past", subject="Library book", due_dates=[TODAY - timedelta(days=2)]),
        processed(id="now", subject="Rent", due_dates=[TODAY]),
        processed(id="next", subject="Essay", due_dates=[TODAY + timedelta(days=1)]),
    ]

    items = DeadlineCountdown().extract(messages, today=TODAY)

    assert [i.message_id for i in items] == ["past", "now", "next", "later"]
    assert [i.status for i in items] == [
        DeadlineStatus.OVERDUE,
        DeadlineStatus.TODAY,
        DeadlineStatus.TOMORROW,
        DeadlineStatus.UPCOMING,
    ]
    assert [i.days_remaining for i in items] == [-2, 0, 1, 5]
    assert [format_countdown(i) for i in items] == [
        "Overdue by 2 days",
        "Due today",
        "Due in 1 day",
        "Due in 5 days",
    ]


def test_overdue_by_one_day_is_singular():
    items = DeadlineCountdown().extract([processed(due_dates=[TODAY - timedelta(days=1)])], today=TODAY)
    assert format_countdown(items[0]) == "Overdue by 1 day"


# ---------------------------------------------------------------------------
# Task extraction
# ---------------------------------------------------------------------------


def test_action_phrase_becomes_task():
    message = processed(subject="Course update", body_text="Action required: upload the signed consent form.")
    tasks = TaskExtractor().extract([message])

    assert [t.task for t in tasks] == ["upload the signed consent form"]
    assert tasks[0].deadline is None
    assert tasks[0].subject == "Course update"


def test_deadline_taken_from_task_text():
    message = processed(body_text="Please respond by tomorrow morning.")
    tasks = TaskExtractor().extract([message])
    assert tasks[0].task == "tomorrow morning"
    assert tasks[0].deadline == "tomorrow"


def test_deadline_falls_back_to_due_date():
    message = processed(body_text="Deadline: final project report.", due_dates=[date(2025, 12, 20)])
    tasks = TaskExtractor().extract([message])
    assert tasks[0].deadline == "2025-12-20"


def test_bill_with_due_date_yields_subject_task():
    message = processed(category=Category.BILLS, subject="Electricity bill ready", due_dates=[date(2025, 12, 20)])
    tasks = TaskExtractor().extract([message])
    assert [t.task for t in tasks] == ["Electricity bill ready"]


def test_short_and_duplicate_tasks_dropped():
    messages = [
        processed(id="a", body_text="Deadline: soon."),
        processed(id="b", body_text="Action required: renew your parking permit."),
        processed(id="c", body_text="Action required: renew your parking permit."),
    ]
    tasks = TaskExtractor().extract(messages)
    assert [t.message_id for t in tasks] == ["b"]
