"""
day_planner package

Rule-based inbox triage: classification, extraction, scoring and the
daily planning views built on top of them.
"""

__all__ = [
    "config",
    "logging_config",
    "models",
    "patterns",
    "extractor",
    "classifier",
    "scorer",
    "rule_engine",
    "summary",
    "insights",
    "timeline",
    "reminders",
    "message_source",
    "storage",
    "daily_runner",
]
