"""
===============================================================================
CRC CARD — identity/users.py
===============================================================================

Module:
    User models (session auth)

Responsibilities:
    - Define the closed, ordered role enum (Viewer < Editor < Admin).
    - Define the User record and the session identity snapshot.
    - Keep the auth data contract centralized and stable.

Collaborators:
    - identity/sessions.py: serializes SessionUser into the key-value store.
    - identity/credentials.py: reads/writes User.password_hash.
    - infrastructure/repositories/*/user.py: map rows -> User.

Notes:
    - Roles are persisted as 0/1/2; constructing UserRole from any other value
      raises ValueError, so invalid roles never reach storage.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from typing import Any
from uuid import UUID


class UserRole(IntEnum):
    """Console roles. Integer values are the persisted representation."""

    VIEWER = 0
    EDITOR = 1
    ADMIN = 2

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def parse(cls, value: Any) -> "UserRole":
        """Parse 0/1/2, "1" or "editor". Raises ValueError otherwise."""
        if isinstance(value, UserRole):
            return value
        if isinstance(value, bool):
            raise ValueError(f"invalid role: {value!r}")
        if isinstance(value, int):
            return cls(value)
        text = str(value).strip()
        if text.isdigit():
            return cls(int(text))
        try:
            return cls[text.upper()]
        except KeyError as exc:
            raise ValueError(f"invalid role: {value!r}") from exc


@dataclass(frozen=True, slots=True)
class User:
    """User record as owned by the user repository."""

    id: UUID
    name: str
    email: str
    password_hash: str
    role: UserRole
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class SessionUser:
    """
    Identity snapshot stored per session.

    Never mutated in place: a role change takes effect on the next login.
    """

    user_id: str
    name: str
    email: str
    role: UserRole

    @classmethod
    def from_user(cls, user: User) -> "SessionUser":
        return cls(
            user_id=str(user.id), name=user.name, email=user.email, role=user.role
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "userId": self.user_id,
            "name": self.name,
            "email": self.email,
            "role": int(self.role),
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "SessionUser":
        return cls(
            user_id=str(payload["userId"]),
            name=str(payload["name"]),
            email=str(payload["email"]),
            role=UserRole.parse(payload["role"]),
        )


def normalize_email(email: str | None) -> str:
    """Emails are compared trimmed and lower-cased."""
    return (email or "").strip().lower()
