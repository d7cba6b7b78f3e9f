"""
USER MANAGEMENT USE CASES (Public API / Exports)
"""

from __future__ import annotations

from .create_user import CreateUserUseCase
from .delete_user import DeleteUserUseCase
from .list_users import ListUsersUseCase
from .update_user_role import UpdateUserRoleUseCase
from .user_results import DeleteUserResult, ListUsersResult, UserResult, UserView

__all__ = [
    "ListUsersUseCase",
    "CreateUserUseCase",
    "UpdateUserRoleUseCase",
    "DeleteUserUseCase",
    "ListUsersResult",
    "UserResult",
    "DeleteUserResult",
    "UserView",
]
