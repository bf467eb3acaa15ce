"""
Message source integration.

Fetching from a mail provider happens outside this package; what arrives
here is either an already-decoded message record or a raw Gmail API message
resource. Provides:
- MessageSource: the protocol the pipeline consumes
- parse_gmail_message: Gmail API resource -> Message
- JsonFileMessageSource: load a JSON list of either shape from disk
"""

import base64
import html
import json
import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Tuple, runtime_checkable

from pydantic import ValidationError

from .models import Attachment, Message
from .patterns import HTML_ENTITY, HTML_TAG

logger = logging.getLogger(__name__)


class MessageSourceError(Exception):
    """Raised when a message source cannot produce messages."""


@runtime_checkable
class MessageSource(Protocol):
    """Anything that can hand the pipeline a list of decoded messages."""

    def fetch_messages(self) -> List[Message]:
        ...


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------


def html_to_text(value: Any) -> str:
    """Crude tag strip for HTML-only bodies; keeps line breaks."""
    if not value or not isinstance(value, str):
        return ""
    text = HTML_TAG.sub(" ", value)
    text = html.unescape(text)
    # Whatever survived unescaping (unknown entities) is noise.
    text = HTML_ENTITY.sub(" ", text)
    lines = [" ".join(line.split()) for line in text.splitlines()]
    return "\n".join(line for line in lines if line)


# ---------------------------------------------------------------------------
# Helpers for parsing Gmail message payloads
# ---------------------------------------------------------------------------


def _parse_header(headers: List[dict], name: str) -> Optional[str]:
    """Extract a header value (case-insensitive) from Gmail message headers."""
    for h in headers:
        if h.get("name", "").lower() == name.lower():
            return h.get("value")
    return None


def _parse_date(date_value: str, internal_date: Optional[str]) -> datetime:
    """
    Parse RFC 2822 date header into an aware UTC datetime.

    Falls back to Gmail's internalDate (epoch millis), then to UTC 'now'.
    """
    if date_value:
        try:
            dt = parsedate_to_datetime(date_value)
            if dt.tzinfo is None:
                # Assume UTC if no timezone
                dt = dt.replace(tzinfo=timezone.utc)
            return dt.astimezone(timezone.utc)
        except (TypeError, ValueError):
            logger.warning("Failed to parse Date header %r.", date_value)

    if internal_date:
        try:
            return datetime.fromtimestamp(int(internal_date) / 1000.0, tz=timezone.utc)
        except (TypeError, ValueError, OverflowError, OSError):
            logger.warning("Failed to parse internalDate %r.", internal_date)

    return datetime.now(timezone.utc)


def _decode_body(body: dict) -> str:
    data = body.get("data")
    if not data:
        return ""
    try:
        padded = data + "=" * (-len(data) % 4)
        decoded_bytes = base64.urlsafe_b64decode(padded.encode("utf-8"))
        return decoded_bytes.decode("utf-8", errors="replace")
    except (ValueError, TypeError):
        logger.exception("Error decoding message body.")
        return ""


def _walk_payload(payload: dict) -> Tuple[str, str, List[Attachment]]:
    """
    Collect plain-text body, HTML body and attachment metadata from a payload.
    """
    mime_type = payload.get("mimeType", "") or ""
    filename = payload.get("filename", "") or ""
    body = payload.get("body", {}) or {}

    if filename:
        attachment = Attachment(
            filename=filename,
            mime_type=mime_type,
            size=int(body.get("size", 0) or 0),
        )
        return "", "", [attachment]

    if mime_type == "text/plain":
        return _decode_body(body), "", []
    if mime_type == "text/html":
        return "", _decode_body(body), []

    if mime_type.startswith("multipart/") or payload.get("parts"):
        text_chunks: List[str] = []
        html_chunks: List[str] = []
        attachments: List[Attachment] = []
        for part in payload.get("parts", []) or []:
            part_text, part_html, part_attachments = _walk_payload(part)
            if part_text:
                text_chunks.append(part_text)
            if part_html:
                html_chunks.append(part_html)
            attachments.extend(part_attachments)
        return "\n".join(text_chunks).strip(), "\n".join(html_chunks).strip(), attachments

    # Fallback: try decoding the body directly
    return _decode_body(body), "", []


def parse_gmail_message(resource: Dict[str, Any]) -> Message:
    """Convert a Gmail API `users.messages.get(format=full)` resource to a Message."""
    payload = resource.get("payload", {}) or {}
    headers = payload.get("headers", []) or []
    snippet = html.unescape(resource.get("snippet", "") or "")

    body_text, body_html, attachments = _walk_payload(payload)
    if not body_text:
        body_text = html_to_text(body_html) or snippet

    return Message(
        id=resource.get("id", ""),
        thread_id=resource.get("threadId"),
        subject=_parse_header(headers, "Subject") or "",
        sender=_parse_header(headers, "From") or "",
        recipient=_parse_header(headers, "To") or "",
        timestamp=_parse_date(_parse_header(headers, "Date") or "", resource.get("internalDate")),
        body_text=body_text,
        body_html=body_html,
        snippet=snippet,
        attachments=attachments,
    )


def parse_message_record(record: Dict[str, Any]) -> Message:
    """Accept either a decoded message record or a raw Gmail resource."""
    if "payload" in record:
        return parse_gmail_message(record)
    return Message.model_validate(record)


# ---------------------------------------------------------------------------
# JSON file source
# ---------------------------------------------------------------------------


class JsonFileMessageSource:
    """
    Reads messages from a JSON file holding a list of message records.

    Records that fail validation are skipped with a warning.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def fetch_messages(self) -> List[Message]:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise MessageSourceError(f"Could not read messages from {self.path}: {e}") from e

        if isinstance(raw, dict):
            raw = raw.get("messages", [])
        if not isinstance(raw, list):
            raise MessageSourceError(f"{self.path} does not contain a list of messages.")

        messages: List[Message] = []
        for index, record in enumerate(raw):
            if not isinstance(record, dict):
                logger.warning("Skipping non-object message record at index %d.", index)
                continue
            try:
                messages.append(parse_message_record(record))
            except ValidationError as ve:
                logger.warning("Skipping invalid message record at index %d: %s", index, ve)

        logger.info("Loaded %d messages from %s", len(messages), self.path)
        return messages
