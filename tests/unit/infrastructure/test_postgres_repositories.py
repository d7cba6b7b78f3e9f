"""
Name: PostgreSQL Repository Tests

Responsibilities:
  - Row mapping (users) and role drift detection
  - psycopg errors mapped to ConflictError / DatabaseError
  - Pool lifecycle helpers

Notes:
  - Offline: the pool is a mock whose connection() yields a mock connection
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
from psycopg import OperationalError
from psycopg.errors import UniqueViolation

from sees_console.crosscutting.exceptions import ConflictError, DatabaseError
from sees_console.identity.users import UserRole
from sees_console.infrastructure.db.pool import close_pool, open_pool
from sees_console.infrastructure.repositories.postgres import PostgresUserRepository

pytestmark = pytest.mark.unit

NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _pool_returning(*, fetchone=None, fetchall=None, error=None):
    cursor = MagicMock()
    cursor.fetchone = AsyncMock(return_value=fetchone)
    cursor.fetchall = AsyncMock(return_value=fetchall or [])
    conn = MagicMock()
    conn.execute = AsyncMock(return_value=cursor, side_effect=error)

    @asynccontextmanager
    async def connection():
        yield conn

    pool = MagicMock()
    pool.connection = connection
    return pool, conn


def _row(role=1):
    return (uuid4(), "Alice", "alice@example.com", "$argon2id$x", role, NOW, NOW)


async def test_get_user_by_email_normalizes_and_maps():
    pool, conn = _pool_returning(fetchone=_row())
    repo = PostgresUserRepository(pool)

    user = await repo.get_user_by_email("  Alice@Example.COM ")

    assert user.role is UserRole.EDITOR
    assert user.email == "alice@example.com"
    assert conn.execute.call_args.args[1] == ("alice@example.com",)


async def test_missing_user_is_none():
    pool, _ = _pool_returning(fetchone=None)

    assert await PostgresUserRepository(pool).get_user_by_id(uuid4()) is None


async def test_role_drift_is_database_error():
    pool, _ = _pool_returning(fetchone=_row(role=9))

    with pytest.raises(DatabaseError):
        await PostgresUserRepository(pool).get_user_by_id(uuid4())


async def test_unique_violation_is_conflict():
    pool, _ = _pool_returning(error=UniqueViolation("duplicate key"))

    with pytest.raises(ConflictError):
        await PostgresUserRepository(pool).create_user(
            name="Alice",
            email="alice@example.com",
            password_hash="$argon2id$x",
            role=UserRole.VIEWER,
        )


async def test_driver_errors_are_database_errors():
    pool, _ = _pool_returning(error=OperationalError("connection lost"))

    with pytest.raises(DatabaseError):
        await PostgresUserRepository(pool).list_users()


async def test_delete_reports_whether_a_row_was_removed():
    pool, _ = _pool_returning(fetchone=(uuid4(),))
    assert await PostgresUserRepository(pool).delete_user(uuid4()) is True

    pool, _ = _pool_returning(fetchone=None)
    assert await PostgresUserRepository(pool).delete_user(uuid4()) is False


# ============================================================================
# Pool lifecycle
# ============================================================================


async def test_open_pool_requires_url():
    with pytest.raises(ValueError):
        await open_pool("", min_size=1, max_size=2)


async def test_open_pool_opens_explicitly():
    with patch("sees_console.infrastructure.db.pool.AsyncConnectionPool") as MockPool:
        instance = MockPool.return_value
        instance.open = AsyncMock()

        pool = await open_pool("postgresql://test", min_size=1, max_size=4)

    assert pool is instance
    assert MockPool.call_args.kwargs["open"] is False
    instance.open.assert_awaited_once()


async def test_close_pool_is_idempotent():
    pool = MagicMock()
    pool.closed = False
    pool.close = AsyncMock()

    await close_pool(pool)
    pool.closed = True
    await close_pool(pool)
    await close_pool(None)

    pool.close.assert_awaited_once()
