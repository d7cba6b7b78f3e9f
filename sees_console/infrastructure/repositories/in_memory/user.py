"""
============================================================
CRC CARD — infrastructure/repositories/in_memory/user.py
============================================================
Class: InMemoryUserRepository

Responsibilities:
  - Store users in memory (tests / APP_ENV=test).
  - Enforce the unique-email constraint like Postgres does (ConflictError).
  - Keep ordering aligned with Postgres: ORDER BY created_at DESC.

Collaborators:
  - identity.users.User, UserRole
  - domain.repositories.UserRepository (contract)

Constraints / Notes:
  - Thread-safe: every access happens under a Lock.
  - User is frozen; updates replace the stored instance.
============================================================
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, List, Optional
from uuid import UUID, uuid4

from ....crosscutting.exceptions import ConflictError
from ....identity.users import User, UserRole, normalize_email


class InMemoryUserRepository:
    def __init__(self) -> None:
        self._lock = Lock()
        self._users: Dict[UUID, User] = {}
        self._order: Dict[UUID, int] = {}

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    async def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        with self._lock:
            return self._users.get(user_id)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        normalized = normalize_email(email)
        with self._lock:
            for user in self._users.values():
                if user.email == normalized:
                    return user
        return None

    async def list_users(self) -> List[User]:
        with self._lock:
            users = list(self._users.values())
        # R: insertion order breaks created_at ties (same clock tick).
        return sorted(
            users, key=lambda u: (u.created_at, self._order.get(u.id, 0)), reverse=True
        )

    async def create_user(
        self, *, name: str, email: str, password_hash: str, role: UserRole
    ) -> User:
        normalized = normalize_email(email)
        with self._lock:
            if any(u.email == normalized for u in self._users.values()):
                raise ConflictError("A user with this email already exists")
            now = self._now()
            user = User(
                id=uuid4(),
                name=name.strip(),
                email=normalized,
                password_hash=password_hash,
                role=UserRole(role),
                created_at=now,
                updated_at=now,
            )
            self._users[user.id] = user
            self._order[user.id] = len(self._order) + 1
            return user

    async def update_user_password(self, user_id: UUID, password_hash: str) -> bool:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return False
            self._users[user_id] = replace(
                user, password_hash=password_hash, updated_at=self._now()
            )
            return True

    async def update_user_role(self, user_id: UUID, role: UserRole) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            updated = replace(user, role=UserRole(role), updated_at=self._now())
            self._users[user_id] = updated
            return updated

    async def delete_user(self, user_id: UUID) -> bool:
        with self._lock:
            return self._users.pop(user_id, None) is not None
