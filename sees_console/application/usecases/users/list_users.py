"""
USE CASE: List users (admin)

Newest first; password hashes are stripped from the result.
"""

from __future__ import annotations

from typing import Optional

from ....domain.repositories import UserRepository
from ....identity.rbac import Permission, ensure_permission
from ....identity.users import SessionUser
from .user_results import ListUsersResult, UserView


class ListUsersUseCase:
    def __init__(self, user_repository: UserRepository) -> None:
        self._users = user_repository

    async def execute(self, *, actor: Optional[SessionUser]) -> ListUsersResult:
        ensure_permission(actor, Permission.USERS_READ)
        users = await self._users.list_users()
        return ListUsersResult(users=[UserView.from_user(u) for u in users])
