"""
===============================================================================
MODULE: HTTP middlewares (request context)
===============================================================================

Goal
----
RequestContextMiddleware:
  - Generate/propagate X-Request-Id
  - Set contextvars (method/path)
  - Log and record metrics per request

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Components:
  - RequestContextMiddleware

Responsibilities:
  - Observability (request_id + logs + metrics)

Collaborators:
  - sees_console/context.py
  - crosscutting/metrics.py
===============================================================================
"""

from __future__ import annotations

import re
import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from ..context import clear_context, set_request_context
from .logger import logger
from .metrics import record_request_metrics

# R: echoed in a response header and written to logs; no spaces or CR/LF.
_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")

# Probes and scrapes are not worth a log line each.
_QUIET_PATHS = frozenset({"/healthz", "/readyz", "/metrics"})


def resolve_request_id(incoming: str | None) -> str:
    """Keep a well-formed client id, otherwise mint a UUID."""
    value = (incoming or "").strip()
    return value if _REQUEST_ID_RE.match(value) else str(uuid.uuid4())


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Class:
      RequestContextMiddleware

    Responsibilities:
      - Accept or generate X-Request-Id and echo it on the response
      - Set contextvars for log correlation
      - Emit one log line and metrics per request
      - Always clear_context() so a pooled task never inherits a user id

    Collaborators:
      - crosscutting.metrics.record_request_metrics
      - crosscutting.logger
    ----------------------------------------------------------------------------
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = resolve_request_id(request.headers.get("x-request-id"))
        path = request.url.path

        set_request_context(request_id=request_id, method=request.method, path=path)
        request.state.request_id = request_id

        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["X-Request-Id"] = request_id
            return response
        except Exception:
            logger.exception("request failed", extra={"status_code": 500})
            raise
        finally:
            latency = time.perf_counter() - start
            record_request_metrics(
                endpoint=path,
                method=request.method,
                status_code=status_code,
                latency_seconds=latency,
            )
            if path not in _QUIET_PATHS:
                logger.info(
                    "request completed",
                    extra={
                        "status_code": status_code,
                        "latency_ms": round(latency * 1000, 2),
                    },
                )
            clear_context()
