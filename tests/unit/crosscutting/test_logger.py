"""
Name: JSON Logger Tests

Responsibilities:
  - Records are formatted as JSON with request context
  - Passwords, tokens and secrets are redacted
"""

import json
import logging

import pytest

from sees_console.context import clear_context, request_id_var
from sees_console.crosscutting.logger import JSONFormatter

pytestmark = pytest.mark.unit


def _record(msg: str = "Test message") -> logging.LogRecord:
    return logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname="test.py",
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )


def test_formatter_basic_log():
    data = json.loads(JSONFormatter().format(_record()))

    assert data["level"] == "INFO"
    assert data["message"] == "Test message"
    assert "timestamp" in data


def test_formatter_includes_context():
    request_id_var.set("ctx-456")
    try:
        data = json.loads(JSONFormatter().format(_record()))
    finally:
        clear_context()

    assert data["request_id"] == "ctx-456"


def test_formatter_redacts_credentials():
    record = _record()
    record.password = "secret-pass"
    record.reset_token = "tok-123"
    record.details = {"session_token": "abc", "email": "a@example.com"}
    record.safe_field = "visible"

    result = JSONFormatter().format(record)

    assert "secret-pass" not in result
    assert "tok-123" not in result
    assert '"abc"' not in result
    assert "a@example.com" in result
    assert "visible" in result


def test_formatter_truncates_long_strings():
    record = _record()
    record.body = "x" * 10_000

    data = json.loads(JSONFormatter().format(record))

    assert data["body"].endswith("...(truncated)")
    assert len(data["body"]) < 10_000
