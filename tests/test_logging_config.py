"""
Unit tests for log redaction
"""

import logging

from day_planner.logging_config import LoggingPolicy, RedactingFilter, setup_logging
from day_planner.models import Attachment


def test_redacts_long_strings():
    policy = LoggingPolicy(max_string_length=10)
    assert policy.redact("short") == "short"
    assert policy.redact("a much longer string") == "[REDACTED - long string]"


def test_redacts_sensitive_keys_recursively():
    policy = LoggingPolicy()
    value = {"id": "m1", "subject": "Salary slip", "nested": [{"body": "secret", "score": 9}]}

    assert policy.redact(value) == {
        "id": "m1",
        "subject": "[REDACTED]",
        "nested": [{"body": "[REDACTED]", "score": 9}],
    }


def test_redacts_models():
    policy = LoggingPolicy(sensitive_keys={"filename"})
    assert policy.redact(Attachment(filename="salary.pdf", size=3)) == {
        "filename": "[REDACTED]",
        "mime_type": "",
        "size": 3,
    }


def test_disabled_policy_passes_through():
    policy = LoggingPolicy(enabled=False)
    value = {"body": "x" * 500}
    assert policy.redact(value) is value


def test_filter_rewrites_record_args():
    record = logging.LogRecord("t", logging.INFO, __file__, 1, "msg %s %s", ("ok", "y" * 200), None)
    assert RedactingFilter(LoggingPolicy()).filter(record)
    assert record.args == ("ok", "[REDACTED - long string]")
    assert record.getMessage() == "msg ok [REDACTED - long string]"


def test_setup_logging_installs_filter():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging(level=logging.DEBUG, policy=LoggingPolicy())
        assert root.handlers
        assert all(any(isinstance(f, RedactingFilter) for f in h.filters) for h in root.handlers)
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
