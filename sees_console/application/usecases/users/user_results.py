"""
USER MANAGEMENT USE CASE RESULTS

Typed success results for the admin user-management use cases. Failures are
raised as crosscutting.exceptions. Results never carry password hashes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from ....identity.users import User, UserRole


@dataclass(frozen=True)
class UserView:
    """User without credentials."""

    id: UUID
    name: str
    email: str
    role: UserRole
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    @classmethod
    def from_user(cls, user: User) -> "UserView":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


@dataclass
class ListUsersResult:
    users: List[UserView]


@dataclass
class UserResult:
    user: UserView


@dataclass
class DeleteUserResult:
    deleted: bool
