"""
Name: Metrics Tests

Responsibilities:
  - Route labels do not leak ids into Prometheus label values
"""

import pytest

from sees_console.crosscutting.metrics import (
    get_metrics_response,
    record_request_metrics,
    route_label,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "path, expected",
    [
        ("/api/sees", "/api/sees"),
        ("/api/sees/0007", "/api/sees/{id}"),
        ("/api/sees/12/render", "/api/sees/{id}/render"),
        ("/api/sees/draft/any-draft", "/api/sees/draft/{id}"),
        ("/api/sees/preview/tmp-key", "/api/sees/preview/{id}"),
        ("/api/sees/domain-tasks/abc", "/api/sees/domain-tasks/{id}"),
        (
            "/api/users/5f0c6d1e-2b7a-4c3e-9d8f-0a1b2c3d4e5f",
            "/api/users/{id}",
        ),
        ("/api/sees/placeholders/validate", "/api/sees/placeholders/validate"),
    ],
)
def test_route_label(path, expected):
    assert route_label(path) == expected


def test_recorded_requests_are_exposed():
    record_request_metrics("/api/sees/0042", "GET", 404, 0.01)

    body, content_type = get_metrics_response()

    assert content_type.startswith("text/plain")
    text = body.decode()
    assert 'endpoint="/api/sees/{id}"' in text
    assert 'status="4xx"' in text
    assert "0042" not in text
