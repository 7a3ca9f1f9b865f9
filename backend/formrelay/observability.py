from __future__ import annotations

from contextvars import ContextVar, Token
from datetime import datetime, timezone
import json
import logging
import re
from typing import Any, Mapping
from uuid import uuid4


REQUEST_ID_CONTEXT: ContextVar[str] = ContextVar("request_id", default="-")
REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,127}$")

REDACTED = "[REDACTED]"
TRUNCATION_MARKER = "...[truncated]"

# Keys that are always secret or personal, compared after lower-casing and
# folding dashes to underscores.
SENSITIVE_KEYS = frozenset(
    {
        "authorization",
        "cookie",
        "set_cookie",
        "email",
        "phone",
        "webhook_url",
    }
)
SENSITIVE_KEY_PATTERN = re.compile(r"password|secret|token|api_?key")

# Applied in order; credentials go before the personal-data rules so a token
# that happens to contain digits is not half-masked as a phone number.
REDACTION_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"(?i)\bBearer\s+[A-Za-z0-9\-._~+/]+=*"), "Bearer " + REDACTED),
    (re.compile(r"(https://hooks\.slack\.com/services/)[A-Za-z0-9/_-]+"), r"\1" + REDACTED),
    (re.compile(r"(?i)([?&](?:api_?key|token|key)=)[^&\s]+"), r"\1" + REDACTED),
    (re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"), "[REDACTED_EMAIL]"),
    (re.compile(r"(?:\+?1[-.\s]?)?\(?\b\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}\b"), "[REDACTED_PHONE]"),
)


def normalize_request_id(candidate: str | None) -> str:
    """Return the caller's request id when it is safe to echo, else a fresh UUID."""
    trimmed = (candidate or "").strip()
    return trimmed if REQUEST_ID_PATTERN.fullmatch(trimmed) else str(uuid4())


def set_request_id(request_id: str) -> Token[str]:
    return REQUEST_ID_CONTEXT.set(request_id)


def reset_request_id(token: Token[str]) -> None:
    REQUEST_ID_CONTEXT.reset(token)


def get_request_id() -> str:
    return REQUEST_ID_CONTEXT.get()


def is_sensitive_key(key: str) -> bool:
    folded = key.strip().lower().replace("-", "_")
    return folded in SENSITIVE_KEYS or SENSITIVE_KEY_PATTERN.search(folded) is not None


def redact_text(text: str, *, max_length: int = 240) -> str:
    for pattern, replacement in REDACTION_RULES:
        text = pattern.sub(replacement, text)
    if len(text) > max_length:
        text = text[:max_length] + TRUNCATION_MARKER
    return text


def sanitize_for_logging(value: Any, *, max_string_length: int = 240) -> Any:
    """Mask secrets and personal data in a value headed for a log record.

    Mappings drop the values of sensitive keys entirely; strings are scrubbed
    with `REDACTION_RULES` and truncated. Raw bytes (uploaded files) are
    reduced to their size.
    """
    def walk(item: Any) -> Any:
        if isinstance(item, str):
            return redact_text(item, max_length=max_string_length)
        if isinstance(item, bytes):
            return f"[{len(item)} bytes]"
        if isinstance(item, Mapping):
            return {
                str(key): REDACTED if is_sensitive_key(str(key)) else walk(child)
                for key, child in item.items()
            }
        if isinstance(item, list):
            return [walk(child) for child in item]
        if isinstance(item, tuple):
            return tuple(walk(child) for child in item)
        return item

    return walk(value)


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = getattr(record, "request_id", None) or get_request_id()
        return True


_RESERVED_RECORD_FIELDS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime", "request_id"}


def record_extras(record: logging.LogRecord) -> dict[str, Any]:
    """Fields passed through `extra=` on a log call, sanitized."""
    return {
        key: sanitize_for_logging(value)
        for key, value in vars(record).items()
        if key not in _RESERVED_RECORD_FIELDS
    }


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None) or get_request_id(),
        }
        entry.update(record_extras(record))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=True, default=str)


class JsonLogHandler(logging.StreamHandler):
    """Stream handler that writes one JSON document per record."""

    def __init__(self) -> None:
        super().__init__()
        self.setFormatter(JsonFormatter())
        self.addFilter(RequestIdFilter())


def configure_logging(level_name: str) -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level_name.upper(), logging.INFO))
    if not any(isinstance(handler, JsonLogHandler) for handler in root.handlers):
        root.addHandler(JsonLogHandler())
