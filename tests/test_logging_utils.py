"""Tests for logging utilities and sensitive data redaction."""

from __future__ import annotations

import json
import logging

import pytest

from swipechef.logging_utils import RedactingFilter, configure_logging


def _format(record: logging.LogRecord) -> str:
    handler = logging.getLogger().handlers[0]
    for filter_ in handler.filters:
        filter_.filter(record)
    return handler.format(record)


def _record(msg: str, *args) -> logging.LogRecord:
    return logging.LogRecord(
        name="swipechef.test.redaction",
        level=logging.INFO,
        pathname=__file__,
        lineno=0,
        msg=msg,
        args=args,
        exc_info=None,
    )


@pytest.mark.parametrize("fmt", ["plain", "json"])
def test_sensitive_data_filter_redacts_tokens(fmt):
    secret = "top-secret-token"
    configure_logging("INFO", fmt, [secret])

    formatted = _format(_record("Authorization header Bearer %s", secret))

    assert secret not in formatted
    assert "[redacted]" in formatted


def test_provider_key_in_url_is_redacted():
    configure_logging("INFO", "plain", [])

    formatted = _format(
        _record("POST %s", "https://generativelanguage.googleapis.com/v1beta/models?key=AIza-123")
    )

    assert "AIza-123" not in formatted
    assert "key=[redacted]" in formatted


def test_json_format_includes_request_id():
    configure_logging("DEBUG", "json", [])
    record = _record("hello")
    record.request_id = "req-1"

    payload = json.loads(_format(record))

    assert payload["message"] == "hello"
    assert payload["request_id"] == "req-1"
    assert payload["level"] == "INFO"


def test_bare_provider_key_is_redacted():
    configure_logging("INFO", "plain", [])
    provider_key = "AIza" + "Sy" + "A1b2C3d4E5f6G7h8I9j0K1l2M3n4O5p6"

    formatted = _format(_record("Gemini request failed for key %s", provider_key))

    assert provider_key not in formatted
    assert "[redacted]" in formatted


def test_long_model_reply_is_truncated():
    record = _record("Model reply: %s", "x" * 500)

    RedactingFilter([], max_chars=100).filter(record)

    assert record.getMessage().startswith("Model reply: x")
    assert record.getMessage().endswith("...(413 chars omitted)")
    assert record.args == ()


def test_string_extras_are_redacted():
    record = _record("calling provider")
    record.provider = "gemini key=secret-value"

    RedactingFilter(["secret-value"]).filter(record)

    assert "secret-value" not in record.provider


def test_httpx_is_quiet_unless_debugging():
    configure_logging("INFO", "plain", [])
    assert logging.getLogger("httpx").level == logging.WARNING

    configure_logging("DEBUG", "plain", [])
    assert logging.getLogger("httpx").level == logging.DEBUG
