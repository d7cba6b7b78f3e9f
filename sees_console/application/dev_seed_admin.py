# =============================================================================
# FILE: application/dev_seed_admin.py
# =============================================================================
"""
===============================================================================
TASK: Dev Seed Admin (local/development only)
===============================================================================

What it is:
    Makes sure an Admin account exists when DEV_SEED_ADMIN is enabled, so a
    fresh local database can be signed into without running the CLI.

Safety:
    - Strict guard: only runs when app_env is "local" or "development".
      Any other environment aborts startup instead of touching accounts.

Patterns:
    - Task orchestration (seed)
    - Dependency Injection (repo + hasher)
    - Fail-fast guard (safety boundary)
    - Idempotent (ensure-create / optional reset)

CRC:
    Component: ensure_dev_admin
    Responsibilities:
      - Check the environment guard
      - Resolve the seed inputs from Settings
      - Ensure the user (create, or reset when force_reset)
    Collaborators:
      - UserRepository
      - password hasher (CredentialManager.hash_password)
      - Settings
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Final

from ..crosscutting.config import Settings
from ..crosscutting.logger import logger
from ..domain.repositories import UserRepository
from ..identity.users import UserRole, normalize_email

_ALLOWED_ENVS: Final[frozenset[str]] = frozenset({"local", "development"})


@dataclass(frozen=True, slots=True)
class _AdminSeedSpec:
    """Resolved seed configuration (no I/O)."""

    name: str
    email: str
    password: str
    force_reset: bool


def _resolve_seed_spec(settings: Settings) -> _AdminSeedSpec:
    return _AdminSeedSpec(
        name=(settings.dev_seed_admin_name or "").strip() or "Administrator",
        email=normalize_email(settings.dev_seed_admin_email),
        password=settings.dev_seed_admin_password or "",
        force_reset=bool(settings.dev_seed_admin_force_reset),
    )


def _assert_allowed_environment(settings: Settings) -> None:
    env = (settings.app_env or "").strip().lower()
    if env not in _ALLOWED_ENVS:
        raise RuntimeError(
            f"FATAL: DEV_SEED_ADMIN is enabled but APP_ENV is '{env}' "
            f"(must be one of {sorted(_ALLOWED_ENVS)}). "
            "Safety guard prevents accidental overrides."
        )


async def ensure_dev_admin(
    settings: Settings,
    *,
    user_repo: UserRepository,
    password_hasher: Callable[[str], str],
) -> None:
    """
    Ensure a development admin user exists if configured.

    Behavior:
      - If disabled: no-op
      - If enabled:
          - Create the Admin if missing
          - If force_reset: reset password and role of the existing account
          - Otherwise: skip if it exists
    """
    if not settings.dev_seed_admin:
        return

    _assert_allowed_environment(settings)

    spec = _resolve_seed_spec(settings)
    if not spec.email or not spec.password:
        raise ValueError("Dev seed admin is enabled but email/password are empty")

    logger.info(
        "Dev seed admin: ensuring admin user",
        extra={"email": spec.email, "force_reset": spec.force_reset},
    )

    existing = await user_repo.get_user_by_email(spec.email)

    if existing is None:
        await user_repo.create_user(
            name=spec.name,
            email=spec.email,
            password_hash=password_hasher(spec.password),
            role=UserRole.ADMIN,
        )
        logger.info("Dev seed admin: user created", extra={"email": spec.email})
        return

    if spec.force_reset:
        await user_repo.update_user_password(
            existing.id, password_hasher(spec.password)
        )
        await user_repo.update_user_role(existing.id, UserRole.ADMIN)
        logger.info("Dev seed admin: user reset applied", extra={"email": spec.email})
        return

    logger.info("Dev seed admin: user exists; skipping", extra={"email": spec.email})
