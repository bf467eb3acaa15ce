import logging
from pathlib import Path
from typing import Any, Iterable, Optional


SENSITIVE_KEYS = frozenset(
    {
        "body",
        "body_text",
        "body_html",
        "snippet",
        "subject",
        "sender",
        "recipient",
        "data",
    }
)


class LoggingPolicy:
    """
    Decides what message content may reach log output.

    Built once at start-up and handed to whatever needs sanitized output.
    """

    def __init__(
        self,
        enabled: bool = True,
        max_string_length: int = 100,
        sensitive_keys: Iterable[str] = SENSITIVE_KEYS,
    ) -> None:
        self.enabled = enabled
        self.max_string_length = max_string_length
        self.sensitive_keys = frozenset(sensitive_keys)

    def redact(self, value: Any) -> Any:
        """Return a copy of `value` with message content masked."""
        if not self.enabled or value is None:
            return value

        if isinstance(value, str):
            if len(value) > self.max_string_length:
                return "[REDACTED - long string]"
            return value

        if isinstance(value, dict):
            return {
                key: "[REDACTED]" if key in self.sensitive_keys else self.redact(item)
                for key, item in value.items()
            }

        if isinstance(value, (list, tuple)):
            return type(value)(self.redact(item) for item in value)

        # pydantic models
        if hasattr(value, "model_dump"):
            return self.redact(value.model_dump())

        return value


class RedactingFilter(logging.Filter):
    """Apply a LoggingPolicy to every record's arguments."""

    def __init__(self, policy: LoggingPolicy) -> None:
        super().__init__()
        self.policy = policy

    def filter(self, record: logging.LogRecord) -> bool:
        if record.args:
            if isinstance(record.args, dict):
                record.args = self.policy.redact(record.args)
            else:
                record.args = tuple(self.policy.redact(arg) for arg in record.args)
        return True


def setup_logging(
    level: int = logging.INFO,
    log_to_file: bool = False,
    policy: Optional[LoggingPolicy] = None,
) -> None:
    """Configure root logging for the application."""
    log_format = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"
    handlers = [logging.StreamHandler()]

    if log_to_file:
        logs_dir = Path("logs")
        logs_dir.mkdir(exist_ok=True)
        file_handler = logging.FileHandler(logs_dir / "day_planner.log")
        handlers.append(file_handler)

    if policy is not None:
        for handler in handlers:
            handler.addFilter(RedactingFilter(policy))

    logging.basicConfig(
        level=level,
        format=log_format,
        handlers=handlers,
        force=True,
    )
