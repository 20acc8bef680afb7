"""Logging setup for SwipeChef.

Two things must never reach a log line intact: credentials (the API token and
the generative provider key, in headers, query strings or bare) and whole model
replies, which can be many kilobytes. :class:`RedactingFilter` scrubs the first
and bounds the second before any handler formats a record.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

REDACTED = "[redacted]"
DEFAULT_MAX_MESSAGE_CHARS = 4000

# Each pattern keeps group 1 and replaces the credential that follows it.
_PREFIXED_CREDENTIALS = (
    re.compile(r"(Bearer\s+)[A-Za-z0-9\-._~+/=]+", re.IGNORECASE),
    re.compile(r"(api_token=)[^&\s]+", re.IGNORECASE),
    re.compile(r"(x-api-key[=:]\s*)[^&\s,]+", re.IGNORECASE),
    re.compile(r"(x-goog-api-key[=:]\s*)[^&\s,]+", re.IGNORECASE),
    re.compile(r"([?&]key=)[^&\s]+", re.IGNORECASE),
)
# Google API keys are recognizable on their own.
_GOOGLE_KEY = re.compile(r"AIza[0-9A-Za-z_\-]{20,}")

_CONTEXT_FIELDS = ("request_id", "list_id", "provider")
_RECORD_ATTRIBUTES = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def redact(text: str, secrets: Sequence[str] = ()) -> str:
    """Return ``text`` with configured secrets and known credential shapes masked."""

    for pattern in _PREFIXED_CREDENTIALS:
        text = pattern.sub(lambda match: match.group(1) + REDACTED, text)
    text = _GOOGLE_KEY.sub(REDACTED, text)
    for secret in secrets:
        text = text.replace(secret, REDACTED)
    return text


class RedactingFilter(logging.Filter):
    """Mask credentials and cap message length on every record it sees."""

    def __init__(
        self,
        secrets: Iterable[str],
        *,
        max_chars: Optional[int] = DEFAULT_MAX_MESSAGE_CHARS,
    ) -> None:
        super().__init__()
        # Longest first so a secret containing another is masked whole.
        self._secrets = sorted(
            {secret.strip() for secret in secrets if secret and secret.strip()},
            key=len,
            reverse=True,
        )
        self._max_chars = max_chars

    def filter(self, record: logging.LogRecord) -> bool:
        message = redact(record.getMessage(), self._secrets)
        if self._max_chars is not None and len(message) > self._max_chars:
            omitted = len(message) - self._max_chars
            message = f"{message[: self._max_chars]}...({omitted} chars omitted)"
        record.msg = message
        record.args = ()

        for key, value in vars(record).items():
            if key not in _RECORD_ATTRIBUTES and isinstance(value, str):
                setattr(record, key, redact(value, self._secrets))
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line, carrying request and generation context."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in _CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class PlainFormatter(logging.Formatter):
    """Human-readable lines with the request id appended when one is known."""

    def __init__(self) -> None:
        super().__init__(
            "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        request_id = getattr(record, "request_id", None)
        if request_id:
            line = f"{line} | request_id={request_id}"
        return line


def configure_logging(level_name: str, fmt: str, secrets: Iterable[str]) -> None:
    """Install a single redacting root handler in plain or JSON format."""

    level = getattr(logging, (level_name or "INFO").upper(), logging.INFO)
    use_json = (fmt or "plain").strip().lower() == "json"

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter() if use_json else PlainFormatter())
    redactor = RedactingFilter(secrets)
    handler.addFilter(redactor)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)
    logging.captureWarnings(True)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        server_logger = logging.getLogger(name)
        server_logger.handlers = []
        server_logger.propagate = True
        server_logger.setLevel(level)

    # httpx logs every provider call at INFO; the access log already covers requests.
    logging.getLogger("httpx").setLevel(logging.DEBUG if level <= logging.DEBUG else logging.WARNING)


__all__ = [
    "DEFAULT_MAX_MESSAGE_CHARS",
    "JsonFormatter",
    "PlainFormatter",
    "REDACTED",
    "RedactingFilter",
    "configure_logging",
    "redact",
]
