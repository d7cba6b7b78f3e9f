"""
Name: Auth Routes Tests

Responsibilities:
  - login sets an HttpOnly session cookie; failures never do
  - /me reflects the session snapshot; logout invalidates the session
  - a session store outage is a 401, never a pass
  - change-password and the reset flow over HTTP
"""

from unittest.mock import AsyncMock

import pytest

from sees_console.crosscutting.exceptions import KeyValueStoreError

pytestmark = pytest.mark.unit

COOKIE = "seesuid"


def test_login_sets_http_only_cookie(client, editor_user):
    response = client.post(
        "/api/auth/login",
        json={"email": "EDITOR@example.com", "password": "secret-pass"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["user"] == {
        "id": str(editor_user.id),
        "name": "Editor",
        "email": "editor@example.com",
        "role": 1,
    }
    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith(f"{COOKIE}=")
    assert "HttpOnly" in set_cookie
    assert "samesite=lax" in set_cookie.lower()


def test_login_failures_share_message_and_set_no_cookie(client, editor_user):
    wrong = client.post(
        "/api/auth/login",
        json={"email": "editor@example.com", "password": "wrong-pass"},
    )
    unknown = client.post(
        "/api/auth/login",
        json={"email": "nobody@example.com", "password": "secret-pass"},
    )

    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json()["detail"] == unknown.json()["detail"]
    assert "set-cookie" not in wrong.headers
    assert COOKIE not in client.cookies


def test_login_requires_fields(client):
    response = client.post("/api/auth/login", json={"email": "a@example.com"})

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_me_requires_session(client):
    response = client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.headers["content-type"].startswith("application/problem+json")


def test_me_returns_session_user(client, admin_user, login):
    login("admin@example.com")

    response = client.get("/api/auth/me")

    assert response.status_code == 200
    assert response.json()["user"] == {
        "userId": str(admin_user.id),
        "name": "Admin",
        "email": "admin@example.com",
        "role": 2,
    }


def test_forged_cookie_is_rejected(client):
    response = client.get(
        "/api/auth/me", headers={"Cookie": f"{COOKIE}=not-a-real-token"}
    )

    assert response.status_code == 401


def test_store_outage_fails_closed(
    client, container, viewer_user, login, monkeypatch
):
    login("viewer@example.com")
    monkeypatch.setattr(
        container.store,
        "get_json",
        AsyncMock(side_effect=KeyValueStoreError("Redis unavailable")),
    )

    response = client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.json()["code"] == "UNAUTHORIZED"


def test_logout_invalidates_session(client, viewer_user, login):
    login("viewer@example.com")
    token = client.cookies.get(COOKIE)

    response = client.post("/api/auth/logout")

    assert response.status_code == 200
    assert response.json()["success"] is True
    replay = client.get("/api/auth/me", headers={"Cookie": f"{COOKIE}={token}"})
    assert replay.status_code == 401


def test_logout_without_session_still_succeeds(client):
    response = client.post("/api/auth/logout")

    assert response.status_code == 200
    assert f"{COOKIE}=" in response.headers["set-cookie"]


def test_change_password(client, editor_user, login):
    login("editor@example.com")

    mismatch = client.post(
        "/api/auth/change-password",
        json={"currentPassword": "wrong-pass", "newPassword": "changed-pass"},
    )
    changed = client.post(
        "/api/auth/change-password",
        json={"currentPassword": "secret-pass", "newPassword": "changed-pass"},
    )

    assert mismatch.status_code == 401
    assert changed.status_code == 200
    login("editor@example.com", "changed-pass")


def test_change_password_requires_session(client):
    response = client.post(
        "/api/auth/change-password",
        json={"currentPassword": "secret-pass", "newPassword": "changed-pass"},
    )

    assert response.status_code == 401


def test_reset_flow(client, viewer_user, login):
    issued = client.post(
        "/api/auth/reset-password", json={"email": "viewer@example.com"}
    )
    assert issued.status_code == 200
    token = issued.json()["token"]

    short = client.post(
        "/api/auth/reset-password/confirm",
        json={"token": token, "newPassword": "123"},
    )
    confirmed = client.post(
        "/api/auth/reset-password/confirm",
        json={"token": token, "newPassword": "reset-pass"},
    )
    replayed = client.post(
        "/api/auth/reset-password/confirm",
        json={"token": token, "newPassword": "other-pass"},
    )

    assert short.status_code == 400
    assert confirmed.status_code == 200
    assert replayed.status_code == 404
    login("viewer@example.com", "reset-pass")


def test_reset_request_does_not_reveal_unknown_email(client, viewer_user):
    known = client.post(
        "/api/auth/reset-password", json={"email": "viewer@example.com"}
    )
    unknown = client.post(
        "/api/auth/reset-password", json={"email": "nobody@example.com"}
    )

    assert known.status_code == unknown.status_code == 200
    assert known.json()["message"] == unknown.json()["message"]
    assert known.json().keys() == unknown.json().keys()
