"""
USE CASE: Delete user (admin)

An admin cannot delete their own account (ValidationError); a missing user
-> NotFoundError.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from ....crosscutting.exceptions import UserNotFoundError, ValidationError
from ....crosscutting.logger import logger
from ....domain.repositories import UserRepository
from ....identity.rbac import Permission, ensure_permission
from ....identity.users import SessionUser
from .update_user_role import MSG_USER_NOT_FOUND
from .user_results import DeleteUserResult


class DeleteUserUseCase:
    def __init__(self, user_repository: UserRepository) -> None:
        self._users = user_repository

    async def execute(
        self, *, actor: Optional[SessionUser], user_id: UUID
    ) -> DeleteUserResult:
        actor = ensure_permission(actor, Permission.USERS_MANAGE)
        if str(user_id) == actor.user_id:
            raise ValidationError(
                "You cannot delete your own account",
                errors=["cannot delete the signed-in user"],
            )

        if not await self._users.delete_user(user_id):
            raise UserNotFoundError(MSG_USER_NOT_FOUND)

        logger.info(
            "User deleted",
            extra={"user_id": actor.user_id, "deleted_user_id": str(user_id)},
        )
        return DeleteUserResult(deleted=True)
