"""
===============================================================================
USE CASE: Create user (admin)
===============================================================================

Rules:
    - Admin only (checked before anything else).
    - name, email and password are required.
    - Password policy (minimum length) is enforced before hashing.
    - Email is unique (normalized); duplicates -> ConflictError (409).
    - Role defaults to Viewer; anything outside 0/1/2 -> ValidationError.

CRC:
    Collaborators:
      - identity.rbac.ensure_permission
      - identity.credentials.CredentialManager.hash_password
      - UserRepository.get_user_by_email / create_user
===============================================================================
"""

from __future__ import annotations

from typing import Any, Optional

from ....crosscutting.exceptions import ConflictError, ValidationError
from ....crosscutting.logger import logger
from ....domain.repositories import UserRepository
from ....identity.credentials import CredentialManager
from ....identity.rbac import Permission, ensure_permission
from ....identity.users import SessionUser, UserRole, normalize_email
from .user_results import UserResult, UserView

MSG_REQUIRED = "Name, email and password are required"
MSG_DUPLICATE_EMAIL = "A user with this email already exists"
MSG_INVALID_ROLE = "Role must be 0 (Viewer), 1 (Editor) or 2 (Admin)"


def parse_role(value: Any, *, default: Optional[UserRole] = None) -> UserRole:
    """0/1/2 (or their names); None falls back to `default` when given."""
    if value is None and default is not None:
        return default
    try:
        return UserRole.parse(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(MSG_INVALID_ROLE, errors=["role is invalid"]) from exc


class CreateUserUseCase:
    def __init__(
        self, user_repository: UserRepository, credentials: CredentialManager
    ) -> None:
        self._users = user_repository
        self._credentials = credentials

    async def execute(
        self,
        *,
        actor: Optional[SessionUser],
        name: Optional[str],
        email: Optional[str],
        password: Optional[str],
        role: Any = None,
    ) -> UserResult:
        actor = ensure_permission(actor, Permission.USERS_MANAGE)

        missing = [
            key
            for key, value in (
                ("name", name),
                ("email", email),
                ("password", password),
            )
            if not (value or "").strip()
        ]
        if missing:
            raise ValidationError(
                MSG_REQUIRED, errors=[f"{key} is required" for key in missing]
            )
        new_role = parse_role(role, default=UserRole.VIEWER)
        password_hash = self._credentials.hash_password(password)

        normalized = normalize_email(email)
        if await self._users.get_user_by_email(normalized) is not None:
            raise ConflictError(MSG_DUPLICATE_EMAIL)

        user = await self._users.create_user(
            name=name.strip(),
            email=normalized,
            password_hash=password_hash,
            role=new_role,
        )
        logger.info(
            "User created",
            extra={
                "user_id": actor.user_id,
                "created_user_id": str(user.id),
                "role": user.role.label,
            },
        )
        return UserResult(user=UserView.from_user(user))
