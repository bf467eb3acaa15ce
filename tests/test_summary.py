"""
Unit tests for summary bucketing
"""

import pytest

from conftest import NOW, make_message
from day_planner.models import Category
from day_planner.rule_engine import RuleEngine
from day_planner.summary import BUCKET_ORDER, SummaryGenerator


@pytest.fixture
def processed_batch():
    messages = [
        make_message(id="bill", subject="Invoice due", body_text="Payment due 15/12/2025 of $150"),
        make_message(id="otp", subject="Your code is 482913", body_text="verify your login"),
        make_message(id="meet", subject="Zoom meeting", body_text="Starts 10:00 AM"),
        make_message(id="promo", subject="Big sale", body_text="Unsubscribe anytime"),
        make_message(id="other", subject="Hello", body_text="How are you?"),
        make_message(id="file", subject="Notes", body_text="attached", attachments=("notes.pdf",)),
    ]
    return RuleEngine().process_batch(messages, now=NOW)


def test_every_category_has_a_bucket():
    assert set(BUCKET_ORDER) == set(Category)


def test_buckets_partition_messages(processed_batch):
    summary = SummaryGenerator().generate(processed_batch)

    seen = []
    for category, items in summary.buckets.items():
        for message in items:
            assert message.category == category
            seen.append(message.id)

    assert sorted(seen) == sorted(m.id for m in processed_batch)
    assert len(seen) == len(set(seen))
    assert summary.total == len(processed_batch)


def test_important_bucket_uses_threshold(processed_batch):
    summary = SummaryGenerator(threshold=8).generate(processed_batch)

    assert {m.id for m in summary.important} == {m.id for m in processed_batch if m.importance_score >= 8}
    assert "bill" in {m.id for m in summary.important}
    assert "other" not in {m.id for m in summary.important}


def test_buckets_sorted_by_score_descending(processed_batch):
    summary = SummaryGenerator(threshold=0).generate(processed_batch)
    scores = [m.importance_score for m in summary.important]
    assert scores == sorted(scores, reverse=True)


def test_empty_input_still_has_all_buckets():
    summary = SummaryGenerator().generate([])
    assert summary.total == 0
    assert summary.important == []
    for category in Category:
        assert summary.bucket(category) == []
