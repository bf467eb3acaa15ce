"""
Unit tests for the rule-engine pipeline and batch fault isolation
"""

from datetime import date
import logging

import pytest

from conftest import NOW, make_message
from day_planner.config import Config
from day_planner.extractor import Extractor
from day_planner.models import Category, ExtractedData, Message
from day_planner.rule_engine import RuleEngine, build_rule_engine, message_text


class ExplodingExtractor(Extractor):
    """Fails on any text mentioning 'boom'."""

    def extract_all(self, text):
        if "boom" in text:
            raise RuntimeError("extractor exploded")
        return super().extract_all(text)


@pytest.fixture
def engine():
    return RuleEngine()


def test_invoice_scenario(engine):
    message = make_message(subject="Invoice due", body_text="Payment due 15/12/2025 of $150")
    result = engine.process(message, now=NOW)

    assert result.category == Category.BILLS
    assert result.extracted.amounts == ["$150"]
    assert result.extracted.due_dates == [date(2025, 12, 15)]
    assert result.importance_score == 15


def test_otp_scenario(engine):
    message = make_message(subject="Your code is 482913", body_text="verify your login")
    result = engine.process(message, now=NOW)

    assert result.category == Category.OTP
    assert result.extracted.otp_codes == ["482913"]


def test_process_keeps_message_fields(engine):
    message = make_message(id="abc", subject="Hello", body_text="Just checking in")
    result = engine.process(message, now=NOW)

    assert result.id == "abc"
    assert result.subject == "Hello"
    assert result.category == Category.OTHER
    assert result.importance_score == 1


def test_html_only_body_is_used_for_extraction(engine):
    message = make_message(subject="Bill", body_html="<p>Amount due <b>$42.10</b> by 20/12/2025</p>")
    result = engine.process(message, now=NOW)

    assert result.extracted.amounts == ["$42.10"]
    assert result.extracted.due_dates == [date(2025, 12, 20)]


def test_message_text_joins_parts():
    message = make_message(subject="S", body_text="B", snippet="N")
    assert message_text(message) == "S B N"


def test_batch_isolates_failures():
    engine = RuleEngine(extractor=ExplodingExtractor(), fallback_score=3)
    messages = [
        make_message(id="1", subject="Invoice due", body_text="Payment due 15/12/2025"),
        make_message(id="2", subject="boom", body_text="this one fails"),
        make_message(id="3", subject="Zoom meeting", body_text="at 10:00 AM"),
    ]

    results = engine.process_batch(messages, now=NOW)

    assert len(results) == len(messages)
    assert [r.id for r in results] == ["1", "2", "3"]
    assert results[0].category == Category.BILLS
    assert results[1].category == Category.OTHER
    assert results[1].extracted == ExtractedData()
    assert results[1].importance_score == 3
    assert results[2].category == Category.MEETINGS


def test_batch_survives_malformed_message(engine):
    malformed = Message.model_construct(id="bad", subject=None, body_text=12345, attachments=None)
    good = make_message(id="good", subject="Hello")

    results = engine.process_batch([malformed, good], now=NOW)

    assert len(results) == 2
    assert results[0].id == "bad"
    assert results[0].category == Category.OTHER
    assert results[1].id == "good"


def test_empty_batch(engine):
    assert engine.process_batch([], now=NOW) == []


def test_build_rule_engine_uses_config():
    config = Config(FALLBACK_SCORE=2, OTP_MIN_LENGTH=6, OTP_MAX_LENGTH=6, CLASSIFIER_BODY_CHARS=50)
    engine = build_rule_engine(config)

    assert engine.fallback_score == 2
    assert engine.extractor.otp_min_length == 6
    assert engine.classifier.body_chars == 50


def test_batch_failure_log_omits_message_content(engine, caplog):
    malformed = Message.model_construct(
        id="bad",
        subject=["Your salary slip for Alice Smith"],
        body_text="",
        attachments=(),
    )

    with caplog.at_level(logging.WARNING, logger="day_planner.rule_engine"):
        results = engine.process_batch([malformed], now=NOW)

    assert results[0].category == Category.OTHER
    assert "id=bad" in caplog.text
    assert "Alice Smith" not in caplog.text
