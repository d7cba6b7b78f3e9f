"""
===============================================================================
CRC CARD — identity/auth_users.py
===============================================================================
Module:
    HTTP session glue (cookie <-> session store)

Responsibilities:
    - Set / clear the session cookie (HttpOnly, SameSite=Lax, path "/").
    - Resolve the current user from the cookie through the SessionStore.
    - Expose FastAPI dependencies: require_user, require_permission
      (role -> permission mapping from identity.rbac).
    - Fail closed: a store outage while resolving a session is a 401.

Collaborators:
    - identity.sessions.SessionStore (via app.state.container)
    - identity.rbac (permissions)
    - crosscutting.error_responses: unauthorized / forbidden
    - context.set_user_context (user id on every log line)

Notes:
    - The cookie carries only the opaque token; never log it.
===============================================================================
"""

from __future__ import annotations

from typing import Callable

from fastapi import Request, Response

from ..context import set_user_context
from ..crosscutting.config import Settings
from ..crosscutting.error_responses import forbidden, unauthorized
from ..crosscutting.exceptions import KeyValueStoreError
from ..crosscutting.logger import logger
from .rbac import Permission, has_permission
from .sessions import SessionStore
from .users import SessionUser

MSG_NOT_AUTHENTICATED = "Authentication required"
MSG_FORBIDDEN = "You do not have permission to perform this action"


def _settings(request: Request) -> Settings:
    return request.app.state.container.settings


def _sessions(request: Request) -> SessionStore:
    return request.app.state.container.sessions


# ---------------------------------------------------------------------------
# Cookie helpers
# ---------------------------------------------------------------------------


def set_session_cookie(
    response: Response, token: str, *, settings: Settings, max_age: int
) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        httponly=True,
        secure=settings.cookie_secure(),
        samesite="lax",
        max_age=max_age,
        path="/",
    )


def clear_session_cookie(response: Response, *, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        samesite="lax",
        secure=settings.cookie_secure(),
        httponly=True,
    )


def extract_session_token(request: Request) -> str | None:
    token = request.cookies.get(_settings(request).session_cookie_name)
    return token.strip() if token and token.strip() else None


# ---------------------------------------------------------------------------
# Current user
# ---------------------------------------------------------------------------


async def get_current_user(request: Request) -> SessionUser | None:
    """Session snapshot for the request cookie, or None."""
    token = extract_session_token(request)
    if token is None:
        return None
    try:
        user = await _sessions(request).get_session(token)
    except KeyValueStoreError as exc:
        logger.error(
            "Session lookup failed, denying access",
            extra={"error_id": exc.error_id, "error": exc.message},
        )
        return None
    if user is not None:
        request.state.user = user
        set_user_context(user.user_id)
    return user


# ---------------------------------------------------------------------------
# FastAPI dependencies
# ---------------------------------------------------------------------------


def require_user() -> Callable:
    """Dependency: a valid session is required (401 otherwise)."""

    async def dependency(request: Request) -> SessionUser:
        user = await get_current_user(request)
        if user is None:
            raise unauthorized(MSG_NOT_AUTHENTICATED)
        return user

    return dependency


def require_permission(permission: Permission) -> Callable:
    """Dependency: the session role grants `permission`."""

    async def dependency(request: Request) -> SessionUser:
        user = await require_user()(request)
        if not has_permission(user.role, permission):
            logger.warning(
                "Permission denied",
                extra={"role": user.role.label, "permission": permission.value},
            )
            raise forbidden(MSG_FORBIDDEN)
        return user

    return dependency
