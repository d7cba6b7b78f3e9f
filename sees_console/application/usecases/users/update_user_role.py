"""
USE CASE: Change a user's role (admin)

Role must be 0/1/2. A missing user -> NotFoundError. Sessions already issued
keep their snapshot until the next login.
"""

from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

from ....crosscutting.exceptions import UserNotFoundError, ValidationError
from ....crosscutting.logger import logger
from ....domain.repositories import UserRepository
from ....identity.rbac import Permission, ensure_permission
from ....identity.users import SessionUser
from .create_user import parse_role
from .user_results import UserResult, UserView

MSG_USER_NOT_FOUND = "User not found"


class UpdateUserRoleUseCase:
    def __init__(self, user_repository: UserRepository) -> None:
        self._users = user_repository

    async def execute(
        self, *, actor: Optional[SessionUser], user_id: UUID, role: Any
    ) -> UserResult:
        actor = ensure_permission(actor, Permission.USERS_MANAGE)
        if role is None:
            raise ValidationError("Role is required", errors=["role is required"])
        new_role = parse_role(role)

        user = await self._users.update_user_role(user_id, new_role)
        if user is None:
            raise UserNotFoundError(MSG_USER_NOT_FOUND)

        logger.info(
            "User role updated",
            extra={
                "user_id": actor.user_id,
                "target_user_id": str(user_id),
                "role": new_role.label,
            },
        )
        return UserResult(user=UserView.from_user(user))
