"""
===============================================================================
CRC CARD — identity/credentials.py
===============================================================================

Module:
    Credential Manager (passwords + one-time reset tokens)

Responsibilities:
    - Hash and verify passwords (Argon2id, fixed parameters, salt in the hash).
    - Enforce the password policy before any hashing.
    - Authenticate email/password pairs without revealing which part failed.
    - Issue password-reset tokens (`reset:{token}`, 30 min TTL) and consume
      them exactly once.
    - Change a password after verifying the current one.

Collaborators:
    - domain.repositories.UserRepository (reads users, writes password_hash)
    - domain.repositories.KeyValueStore (reset tokens)
    - identity.sessions.new_token (same token shape as sessions)

Security notes:
    - request_reset for an unknown email still returns a token of the same
      shape; it is never stored, so it can never be confirmed.
    - A mismatching current password leaves the stored hash untouched.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final
from uuid import UUID

from argon2 import PasswordHasher
from argon2.exceptions import VerificationError, VerifyMismatchError

from ..crosscutting.exceptions import (
    AuthenticationError,
    InvalidCredentialError,
    NotFoundError,
    UserNotFoundError,
    ValidationError,
)
from ..crosscutting.logger import logger
from ..domain.repositories import KeyValueStore, UserRepository
from .sessions import new_token
from .users import User, normalize_email

RESET_KEY_PREFIX: Final[str] = "reset:"
DEFAULT_RESET_TTL_SECONDS: Final[int] = 30 * 60
DEFAULT_MIN_PASSWORD_LENGTH: Final[int] = 6

INVALID_LOGIN_MESSAGE: Final[str] = "Invalid email or password"

# R: fixed work factor; changing it only affects newly written hashes.
_password_hasher = PasswordHasher(
    time_cost=3, memory_cost=64 * 1024, parallelism=4, hash_len=32, salt_len=16
)


def reset_key(token: str) -> str:
    return f"{RESET_KEY_PREFIX}{token}"


# ---------------------------------------------------------------------------
# Passwords (Argon2)
# ---------------------------------------------------------------------------


def hash_password(password: str) -> str:
    """Hash a password with Argon2id."""
    return _password_hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against a stored hash.

    Returns False on mismatch. A malformed hash raises
    argon2.exceptions.InvalidHashError (a ValueError).
    """
    try:
        return _password_hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError):
        return False


def check_password_policy(
    password: str | None, *, min_length: int = DEFAULT_MIN_PASSWORD_LENGTH
) -> str:
    """Minimum length only; no maximum or complexity rule."""
    value = password or ""
    if len(value) < min_length:
        raise ValidationError(
            f"Password must be at least {min_length} characters",
            errors=[f"password must be at least {min_length} characters"],
        )
    return value


@dataclass(frozen=True, slots=True)
class ResetGrant:
    """Value stored under reset:{token}."""

    user_id: str
    email: str

    def to_payload(self) -> dict[str, str]:
        return {"userId": self.user_id, "email": self.email}


class CredentialManager:
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Class:
      CredentialManager

    Responsibilities:
      - authenticate / request_reset / confirm_reset / change_password

    Collaborators:
      - UserRepository, KeyValueStore
    ----------------------------------------------------------------------------
    """

    def __init__(
        self,
        users: UserRepository,
        store: KeyValueStore,
        *,
        reset_ttl_seconds: int = DEFAULT_RESET_TTL_SECONDS,
        min_password_length: int = DEFAULT_MIN_PASSWORD_LENGTH,
    ) -> None:
        self._users = users
        self._store = store
        self._reset_ttl_seconds = reset_ttl_seconds
        self._min_password_length = min_password_length

    @property
    def min_password_length(self) -> int:
        return self._min_password_length

    def hash_password(self, password: str) -> str:
        check_password_policy(password, min_length=self._min_password_length)
        return hash_password(password)

    def verify_password(self, password: str, password_hash: str) -> bool:
        return verify_password(password, password_hash)

    # ------------------------------------------------------------------
    # Login
    # ------------------------------------------------------------------

    async def authenticate(self, email: str, password: str) -> User:
        """
        Validate credentials and return the user.

        Unknown email and wrong password raise the same AuthenticationError.
        """
        normalized = normalize_email(email)
        if not normalized or not password:
            raise ValidationError("Email and password are required")

        user = await self._users.get_user_by_email(normalized)
        if user is None:
            logger.info("Login failed", extra={"reason": "unknown_email"})
            raise AuthenticationError(INVALID_LOGIN_MESSAGE)

        try:
            ok = verify_password(password, user.password_hash)
        except ValueError:
            logger.error(
                "Stored password hash is malformed", extra={"user_id": str(user.id)}
            )
            raise AuthenticationError(INVALID_LOGIN_MESSAGE)

        if not ok:
            logger.info(
                "Login failed",
                extra={"reason": "password_mismatch", "user_id": str(user.id)},
            )
            raise AuthenticationError(INVALID_LOGIN_MESSAGE)

        return user

    # ------------------------------------------------------------------
    # Password reset
    # ------------------------------------------------------------------

    async def request_reset(self, email: str) -> str:
        """
        Issue a reset token for `email`.

        Unknown emails get a token of the same shape that is never stored.
        """
        normalized = normalize_email(email)
        if not normalized:
            raise ValidationError("Email is required")

        token = new_token()
        user = await self._users.get_user_by_email(normalized)
        if user is None:
            logger.info("Password reset requested", extra={"issued": False})
            return token

        grant = ResetGrant(user_id=str(user.id), email=user.email)
        await self._store.set_json(
            reset_key(token), grant.to_payload(), self._reset_ttl_seconds
        )
        logger.info(
            "Password reset requested",
            extra={"issued": True, "user_id": grant.user_id},
        )
        return token

    async def confirm_reset(self, token: str, new_password: str) -> None:
        """Consume a reset token and set the new password (single use)."""
        if not token or not token.strip():
            raise ValidationError("Token and new password are required")
        check_password_policy(new_password, min_length=self._min_password_length)

        key = reset_key(token.strip())
        payload = await self._store.get_json(key)
        if not isinstance(payload, dict) or "userId" not in payload:
            raise NotFoundError("Reset token is invalid or has expired")

        try:
            user_id = UUID(str(payload["userId"]))
        except ValueError:
            await self._store.delete(key)
            raise NotFoundError("Reset token is invalid or has expired")

        user = await self._users.get_user_by_id(user_id)
        if user is None:
            raise UserNotFoundError("User not found")

        await self._users.update_user_password(user.id, hash_password(new_password))
        await self._store.delete(key)
        logger.info("Password reset completed", extra={"user_id": str(user.id)})

    # ------------------------------------------------------------------
    # Change password
    # ------------------------------------------------------------------

    async def change_password(
        self, user_id: UUID, current_password: str, new_password: str
    ) -> None:
        if not current_password or not new_password:
            raise ValidationError("Current and new password are required")
        check_password_policy(new_password, min_length=self._min_password_length)

        user = await self._users.get_user_by_id(user_id)
        if user is None:
            raise UserNotFoundError("User not found")

        if not verify_password(current_password, user.password_hash):
            logger.info(
                "Password change rejected", extra={"user_id": str(user.id)}
            )
            raise InvalidCredentialError("Current password is incorrect")

        await self._users.update_user_password(user.id, hash_password(new_password))
        logger.info("Password changed", extra={"user_id": str(user.id)})
