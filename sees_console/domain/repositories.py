"""
CRC — domain/repositories.py

Name
- Domain Repository Interfaces (Protocols)

Responsibilities
- Define persistence contracts (ports) for users, SEES records and the
  TTL-bearing key-value store.
- Keep application code independent from PostgreSQL / Redis.
- Enable dependency inversion and in-memory implementations for tests.

Collaborators
- domain.entities: Sees, SeesCreate
- identity.users: User, UserRole
- infrastructure.repositories: postgres/*, in_memory/*
- infrastructure.kv: RedisKeyValueStore, InMemoryKeyValueStore

Constraints
- Pure interfaces only: no side effects, no SQL, no client imports.
- All I/O methods are coroutines.

Notes
- Unique violations surface as crosscutting.exceptions.ConflictError,
  backend failures as InfrastructureError subclasses.
"""

from __future__ import annotations

from typing import Any, List, Optional, Protocol
from uuid import UUID

from ..identity.users import User, UserRole
from .entities import Sees, SeesCreate


class UserRepository(Protocol):
    """
    R: Interface for user persistence.

    Emails are stored normalized (lower-case); lookups normalize as well.
    """

    async def get_user_by_id(self, user_id: UUID) -> Optional[User]: ...

    async def get_user_by_email(self, email: str) -> Optional[User]: ...

    async def list_users(self) -> List[User]:
        """R: Newest first."""
        ...

    async def create_user(
        self, *, name: str, email: str, password_hash: str, role: UserRole
    ) -> User:
        """R: Raises ConflictError on duplicate email."""
        ...

    async def update_user_password(self, user_id: UUID, password_hash: str) -> bool:
        """R: False if the user does not exist."""
        ...

    async def update_user_role(self, user_id: UUID, role: UserRole) -> Optional[User]:
        ...

    async def delete_user(self, user_id: UUID) -> bool: ...


class SeesRepository(Protocol):
    """
    R: Interface for SEES records and their NS record children.

    Deleting a record cascades to its NS records.
    """

    async def list_sees(self) -> List[Sees]:
        """R: Newest first, NS records included."""
        ...

    async def get_sees(self, sees_id: int) -> Optional[Sees]: ...

    async def create_sees(self, data: SeesCreate) -> Sees:
        """R: Raises ConflictError on duplicate target domain."""
        ...

    async def update_sees(
        self,
        sees_id: int,
        *,
        redirect_url: str,
        note: Optional[str],
        preview_url: Optional[str],
        template_variables: dict[str, Any],
    ) -> Optional[Sees]: ...

    async def attach_cloud_resources(
        self,
        sees_id: int,
        *,
        static_app_name: str,
        static_app_url: str,
        dns_zone_name: str,
        name_servers: List[str],
    ) -> Optional[Sees]:
        """R: Stores provisioning output and replaces the NS records."""
        ...

    async def delete_sees(self, sees_id: int) -> bool: ...

    async def ping(self) -> bool: ...


class KeyValueStore(Protocol):
    """
    R: String-keyed, TTL-bearing store with JSON values.

    Single-key atomicity is all callers rely on.
    """

    async def get_json(self, key: str) -> Any | None:
        """R: None when the key is absent or expired."""
        ...

    async def set_json(self, key: str, value: Any, ttl_seconds: int) -> None: ...

    async def delete(self, key: str) -> None:
        """R: Idempotent."""
        ...

    async def ping(self) -> bool: ...

    async def close(self) -> None: ...
