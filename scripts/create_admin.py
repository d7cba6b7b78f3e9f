"""
Name: Admin Bootstrap Script

Responsibilities:
  - Create the first Admin user of the console (idempotent)
  - Optionally promote an existing account to Admin (--promote)
  - Go through PostgresUserRepository so email normalization, Argon2 hashing
    and the password policy are the ones the API applies

Usage:
    DATABASE_URL=postgresql://... python scripts/create_admin.py --email a@b.c
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
import os
import sys

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from sees_console.crosscutting.exceptions import (  # noqa: E402
    SeesConsoleError,
    ValidationError,
)
from sees_console.identity.credentials import (  # noqa: E402
    check_password_policy,
    hash_password,
)
from sees_console.identity.users import UserRole, normalize_email  # noqa: E402
from sees_console.infrastructure.db.pool import close_pool, open_pool  # noqa: E402
from sees_console.infrastructure.repositories.postgres import (  # noqa: E402
    PostgresUserRepository,
)


def _ask(label: str, value: str | None) -> str:
    answer = (value or "").strip() or input(f"{label}: ").strip()
    if not answer:
        raise SystemExit(f"{label} is required.")
    return answer


def _ask_password(value: str | None) -> str:
    if value:
        return value
    password = getpass.getpass("Password: ")
    if password != getpass.getpass("Confirm password: "):
        raise SystemExit("Passwords do not match.")
    return password


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    argv = list(sys.argv[1:] if argv is None else argv)
    if argv[:1] == ["--"]:
        argv = argv[1:]
    parser = argparse.ArgumentParser(
        description="Create the first Admin user of the SEES console."
    )
    parser.add_argument("--name", help="Display name")
    parser.add_argument("--email", help="Login email (normalized to lower case)")
    parser.add_argument("--password", help="Omit to be prompted without echo")
    parser.add_argument(
        "--promote",
        action="store_true",
        help="If the email already exists, raise its role to Admin",
    )
    return parser.parse_args(argv)


async def _bootstrap(
    database_url: str, *, name: str, email: str, password: str, promote: bool
) -> str:
    pool = await open_pool(database_url, min_size=1, max_size=1)
    try:
        users = PostgresUserRepository(pool)
        existing = await users.get_user_by_email(email)
        if existing is None:
            user = await users.create_user(
                name=name,
                email=email,
                password_hash=hash_password(password),
                role=UserRole.ADMIN,
            )
            return f"Created admin: id={user.id} email={user.email}"
        if promote and existing.role is not UserRole.ADMIN:
            await users.update_user_role(existing.id, UserRole.ADMIN)
            return f"Promoted to admin: id={existing.id} email={existing.email}"
        return (
            f"User already exists: id={existing.id} email={existing.email} "
            f"role={existing.role.label}"
        )
    finally:
        await close_pool(pool)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        raise SystemExit("DATABASE_URL is required to create a user.")

    name = _ask("Name", args.name)
    email = normalize_email(_ask("Email", args.email))
    password = _ask_password(args.password)
    try:
        check_password_policy(password)
    except ValidationError as exc:
        raise SystemExit(exc.message) from exc

    try:
        message = asyncio.run(
            _bootstrap(
                database_url,
                name=name,
                email=email,
                password=password,
                promote=args.promote,
            )
        )
    except SeesConsoleError as exc:
        raise SystemExit(f"Failed: {exc.message}") from exc
    print(message)


if __name__ == "__main__":
    main()
