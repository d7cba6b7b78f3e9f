"""
===============================================================================
FILE: crosscutting/metrics.py
===============================================================================
CRC CARD (Module)
-------------------------------------------------------------------------------
Name:
    Metrics (Prometheus)
Responsibilities:
    - Request count/latency per route template.
    - Outcomes of the best-effort Azure steps (provision, teardown, deferred
      custom domain registration).
    - Render the private registry for /metrics.
Collaborators:
    - crosscutting.middleware: HTTP latency and counts.
    - application.provisioning: provisioning and domain registration outcomes.
Notes:
    - Labels never carry user ids, draft ids, task ids or domains.
===============================================================================
"""

from __future__ import annotations

import re

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

_registry = CollectorRegistry()

_requests_total = Counter(
    "sees_requests_total",
    "HTTP requests by route, method and status class",
    ["endpoint", "method", "status"],
    registry=_registry,
)
_request_latency = Histogram(
    "sees_request_latency_seconds",
    "HTTP request latency (seconds)",
    ["endpoint", "method"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
    registry=_registry,
)
_provisioning_total = Counter(
    "sees_provisioning_total",
    "Static Web App provisioning/teardown attempts",
    ["operation", "outcome"],
    registry=_registry,
)
_domain_registration_total = Counter(
    "sees_domain_registration_total",
    "Deferred custom domain registrations by final status",
    ["status"],
    registry=_registry,
)

# Segments after these are free-form ids (draft ids, task ids, preview keys).
_OPAQUE_AFTER = re.compile(r"/(draft|preview|domain-tasks)/[^/]+")
# SEES ids ("7", "0007") and user UUIDs.
_ID_SEGMENT = re.compile(r"/(\d+|[0-9a-fA-F-]{36})(?=/|$)")


def route_label(path: str) -> str:
    """/api/sees/0007/render -> /api/sees/{id}/render."""
    path = _OPAQUE_AFTER.sub(lambda m: f"/{m.group(1)}/{{id}}", path)
    return _ID_SEGMENT.sub("/{id}", path)


def record_request_metrics(
    endpoint: str,
    method: str,
    status_code: int,
    latency_seconds: float,
) -> None:
    label = route_label(endpoint)
    status = f"{status_code // 100}xx" if 100 <= status_code < 600 else "other"
    _requests_total.labels(endpoint=label, method=method, status=status).inc()
    _request_latency.labels(endpoint=label, method=method).observe(latency_seconds)


def record_provisioning(operation: str, outcome: str) -> None:
    """operation: provision|teardown, outcome: succeeded|failed|skipped."""
    _provisioning_total.labels(operation=operation, outcome=outcome).inc()


def record_domain_registration(status: str) -> None:
    _domain_registration_total.labels(status=status).inc()


def get_metrics_response() -> tuple[bytes, str]:
    return generate_latest(_registry), CONTENT_TYPE_LATEST
