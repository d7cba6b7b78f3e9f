"""
===============================================================================
CRC CARD — api/auth_routes.py (Session authentication)
===============================================================================

Responsibilities:
  - login / logout / me over an opaque session cookie.
  - change-password for the signed-in user.
  - Password reset: request a token, confirm it with a new password.

Patterns:
  - Thin controller: CredentialManager and SessionStore hold the rules.
  - Fail-safe: unknown email and wrong password answer the same 401.

Collaborators:
  - identity.credentials.CredentialManager
  - identity.sessions.SessionStore
  - identity.auth_users: cookie helpers, require_user
===============================================================================
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel

from ..crosscutting.config import Settings
from ..crosscutting.error_responses import OPENAPI_ERROR_RESPONSES, unauthorized
from ..crosscutting.exceptions import KeyValueStoreError
from ..crosscutting.logger import logger
from ..identity.auth_users import (
    MSG_NOT_AUTHENTICATED,
    clear_session_cookie,
    extract_session_token,
    require_user,
    set_session_cookie,
)
from ..identity.credentials import CredentialManager
from ..identity.sessions import SessionStore
from ..identity.users import SessionUser
from .dependencies import get_app_settings, get_credentials, get_session_store

router = APIRouter(prefix="/api/auth", tags=["auth"], responses=OPENAPI_ERROR_RESPONSES)


# -----------------------------------------------------------------------------
# HTTP models (DTOs)
# -----------------------------------------------------------------------------


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class LoginUser(BaseModel):
    id: str
    name: str
    email: str
    role: int


class LoginResponse(BaseModel):
    success: bool = True
    user: LoginUser


class MeUser(BaseModel):
    userId: str
    name: str
    email: str
    role: int


class MeResponse(BaseModel):
    user: MeUser


class ChangePasswordRequest(BaseModel):
    currentPassword: str | None = None
    newPassword: str | None = None


class ResetPasswordRequest(BaseModel):
    email: str | None = None


class ResetPasswordResponse(BaseModel):
    success: bool = True
    token: str
    message: str


class ResetPasswordConfirmRequest(BaseModel):
    token: str | None = None
    newPassword: str | None = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str | None = None


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------


@router.post("/login", response_model=LoginResponse)
async def login(
    req: LoginRequest,
    response: Response,
    credentials: CredentialManager = Depends(get_credentials),
    sessions: SessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_app_settings),
):
    """Verify credentials, open a session and set the session cookie."""
    user = await credentials.authenticate(req.email or "", req.password or "")
    snapshot = SessionUser.from_user(user)
    token = await sessions.create_session(snapshot)
    set_session_cookie(
        response, token, settings=settings, max_age=sessions.ttl_seconds
    )
    return LoginResponse(
        user=LoginUser(
            id=str(user.id), name=user.name, email=user.email, role=int(user.role)
        )
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    sessions: SessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_app_settings),
):
    """Destroy the session (if any) and always clear the cookie."""
    token = extract_session_token(request)
    try:
        await sessions.destroy_session(token)
    except KeyValueStoreError as exc:
        # R: the cookie is cleared anyway; the key expires with its TTL.
        logger.error(
            "Session delete failed on logout", extra={"error_id": exc.error_id}
        )
    clear_session_cookie(response, settings=settings)
    return MessageResponse()


@router.get("/me", response_model=MeResponse)
async def me(user: SessionUser = Depends(require_user())):
    return MeResponse(
        user=MeUser(
            userId=user.user_id, name=user.name, email=user.email, role=int(user.role)
        )
    )


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    req: ChangePasswordRequest,
    user: SessionUser = Depends(require_user()),
    credentials: CredentialManager = Depends(get_credentials),
):
    try:
        user_id = UUID(user.user_id)
    except ValueError as exc:
        raise unauthorized(MSG_NOT_AUTHENTICATED) from exc
    await credentials.change_password(
        user_id, req.currentPassword or "", req.newPassword or ""
    )
    return MessageResponse(message="Password changed")


@router.post("/reset-password", response_model=ResetPasswordResponse)
async def reset_password(
    req: ResetPasswordRequest,
    credentials: CredentialManager = Depends(get_credentials),
):
    """
    Issue a reset token.

    The response is identical whether or not the email exists; the token is
    returned directly because no mail delivery is wired in.
    """
    token = await credentials.request_reset(req.email or "")
    return ResetPasswordResponse(token=token, message="Reset token issued")


@router.post("/reset-password/confirm", response_model=MessageResponse)
async def reset_password_confirm(
    req: ResetPasswordConfirmRequest,
    credentials: CredentialManager = Depends(get_credentials),
):
    await credentials.confirm_reset(req.token or "", req.newPassword or "")
    return MessageResponse(message="Password has been reset")


__all__ = ["router"]
