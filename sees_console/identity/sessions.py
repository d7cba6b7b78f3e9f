"""
===============================================================================
CRC CARD — identity/sessions.py
===============================================================================

Module:
    Session Store (opaque tokens -> identity snapshots)

Responsibilities:
    - Issue cryptographically random session tokens.
    - Persist `session:{token}` = {userId, name, email, role} with a TTL.
    - Resolve and destroy sessions.

Collaborators:
    - domain.repositories.KeyValueStore (Redis in production)
    - identity.users.SessionUser
    - identity.auth_users: cookie transport + FastAPI dependencies

Constraints:
    - The key's existence in the store is the only proof of validity;
      there is no signature and no expiry check beyond the store TTL.
    - Store failures propagate as KeyValueStoreError; the HTTP layer turns
      them into 401 (fail-closed).
===============================================================================
"""

from __future__ import annotations

import secrets
from typing import Final

from ..crosscutting.logger import logger
from ..domain.repositories import KeyValueStore
from .users import SessionUser

SESSION_KEY_PREFIX: Final[str] = "session:"
DEFAULT_SESSION_TTL_SECONDS: Final[int] = 24 * 60 * 60
_TOKEN_BYTES: Final[int] = 32


def new_token() -> str:
    """Opaque URL-safe token (256 bits of entropy)."""
    return secrets.token_urlsafe(_TOKEN_BYTES)


def session_key(token: str) -> str:
    return f"{SESSION_KEY_PREFIX}{token}"


class SessionStore:
    """create_session / get_session / destroy_session over a KeyValueStore."""

    def __init__(
        self, store: KeyValueStore, *, ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS
    ) -> None:
        self._store = store
        self._ttl_seconds = ttl_seconds

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    async def create_session(self, user: SessionUser) -> str:
        token = new_token()
        await self._store.set_json(
            session_key(token), user.to_payload(), self._ttl_seconds
        )
        logger.info(
            "Session created",
            extra={"user_id": user.user_id, "role": int(user.role)},
        )
        return token

    async def get_session(self, token: str | None) -> SessionUser | None:
        """Absent, expired or unreadable sessions all resolve to None."""
        if not token or not token.strip():
            return None

        payload = await self._store.get_json(session_key(token.strip()))
        if not isinstance(payload, dict):
            return None

        try:
            return SessionUser.from_payload(payload)
        except (KeyError, ValueError):
            logger.warning("Discarding malformed session payload")
            return None

    async def destroy_session(self, token: str | None) -> None:
        if not token or not token.strip():
            return
        await self._store.delete(session_key(token.strip()))
