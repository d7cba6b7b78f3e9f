"""
===============================================================================
MODULE: Structured (JSON) logger with request context
===============================================================================

Goal
----
One JSON object per line, carrying the request_id / user_id of the request
that produced it. Credentials handled by the console (passwords, session
cookies, reset tokens, the Azure client secret) never reach the output.

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Component:
  JSONFormatter + setup_logger()

Responsibilities:
  - Format records as JSON
  - Enrich with request context (request_id, method, path, user_id)
  - Mask credential-like fields and cap sizes

Collaborators:
  - sees_console/context.py (ContextVars)
  - crosscutting/config.py (level and format)
===============================================================================
"""

from __future__ import annotations

import json
import logging
import os
import sys
import traceback
from datetime import datetime, timezone
from typing import Any

# Attributes every LogRecord carries; anything else came in through extra=.
_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime"}

REDACTED = "***REDACTED***"
TRUNCATED = "***TRUNCATED***"


class _Redactor:
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Class:
      _Redactor

    Responsibilities:
      - Mask values whose key names a credential (password_hash, reset_token,
        Set-Cookie, azure_client_secret, ...)
      - Cap long strings and deep structures

    Collaborators:
      - JSONFormatter
    ----------------------------------------------------------------------------
    """

    # R: matched as substrings of the lower-cased key.
    FRAGMENTS = (
        "password",
        "passwd",
        "secret",
        "token",
        "cookie",
        "authorization",
        "api_key",
        "credential",
    )
    EXACT = frozenset({"session", "hash"})

    def __init__(self, max_str: int = 8_000, max_depth: int = 4):
        self._max_str = max_str
        self._max_depth = max_depth

    def is_sensitive(self, key: str | None) -> bool:
        if not key:
            return False
        lowered = key.lower().replace("-", "_")
        return lowered in self.EXACT or any(f in lowered for f in self.FRAGMENTS)

    def sanitize(self, value: Any, *, depth: int = 0, key: str | None = None) -> Any:
        if self.is_sensitive(key):
            return REDACTED
        if depth > self._max_depth:
            return TRUNCATED

        if isinstance(value, str):
            return self._clip(value)
        if isinstance(value, (bytes, bytearray)):
            return f"<bytes {len(value)}B>"
        if isinstance(value, dict):
            return {
                str(k): self.sanitize(v, depth=depth + 1, key=str(k))
                for k, v in value.items()
            }
        if isinstance(value, (list, tuple, set, frozenset)):
            return [self.sanitize(v, depth=depth + 1, key=key) for v in value]
        if value is None or isinstance(value, (bool, int, float)):
            return value
        # UUIDs, datetimes, enums (UserRole) and the like.
        return self._clip(str(value))

    def _clip(self, text: str) -> str:
        if len(text) <= self._max_str:
            return text
        return text[: self._max_str] + "...(truncated)"


def _exception_block(exc_info) -> dict[str, Any]:
    exc_type, exc, tb = exc_info
    return {
        "type": exc_type.__name__ if exc_type else None,
        "message": str(exc) if exc else None,
        "stacktrace": traceback.format_exception(exc_type, exc, tb),
    }


class JSONFormatter(logging.Formatter):
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Class:
      JSONFormatter

    Responsibilities:
      - LogRecord -> JSON
      - Attach request context
      - Attach the stacktrace when there is an exception (server logs only)

    Collaborators:
      - sees_console/context.get_context_dict()
      - _Redactor
    ----------------------------------------------------------------------------
    """

    def __init__(self):
        super().__init__()
        self._redactor = _Redactor()

    def format(self, record: logging.LogRecord) -> str:
        from ..context import get_context_dict

        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "pid": os.getpid(),
            **get_context_dict(),
        }

        extras = {
            k: v for k, v in record.__dict__.items() if k not in _STANDARD_ATTRS
        }
        for key, value in extras.items():
            payload[key] = self._redactor.sanitize(value, key=key)

        if record.exc_info:
            payload["exception"] = _exception_block(record.exc_info)

        return json.dumps(
            payload, ensure_ascii=False, default=str, separators=(",", ":")
        )


def _resolve_output() -> tuple[int, bool]:
    """Level and JSON switch from Settings, or INFO/JSON when they cannot load."""
    # R: settings may be invalid at import time (e.g. missing DATABASE_URL);
    # the logger must still come up so the startup error itself gets logged.
    try:
        from .config import get_settings

        settings = get_settings()
    except ValueError:
        return logging.INFO, True
    level = logging.getLevelName((settings.log_level or "INFO").upper())
    return (level if isinstance(level, int) else logging.INFO), bool(
        settings.log_json
    )


def setup_logger(name: str = "sees-console") -> logging.Logger:
    """Create the console logger once; re-imports do not add handlers."""
    log = logging.getLogger(name)
    level, use_json = _resolve_output()
    log.setLevel(level)

    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            JSONFormatter()
            if use_json
            else logging.Formatter("%(asctime)s %(levelname)s %(message)s")
        )
        log.addHandler(handler)

    return log


logger = setup_logger()
