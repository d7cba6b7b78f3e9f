"""
============================================================
CRC CARD — infrastructure/repositories/postgres/user.py
============================================================
Class: PostgresUserRepository

Responsibilities:
  - Load users for authentication (by email / by id) and administration.
  - Create users and update administrable fields (password, role).
  - Run parameterized SQL against `users` (contract with migrations).
  - Map raw rows -> domain `User`, validating `UserRole` strictly.
  - Surface unique violations as ConflictError, everything else as
    DatabaseError, with structured logging.

Collaborators:
  - psycopg_pool.AsyncConnectionPool (injected)
  - identity.users.User / UserRole
  - crosscutting.exceptions.DatabaseError / ConflictError

Constraints / Notes:
  - Pure repository: no business rules (role policy lives in use cases).
  - Returns None when the resource does not exist.
  - Stable ordering in listings: created_at DESC, id DESC.
============================================================
"""

from __future__ import annotations

from typing import Iterable, Optional
from uuid import UUID, uuid4

from psycopg import Error as PsycopgError
from psycopg.errors import UniqueViolation
from psycopg_pool import AsyncConnectionPool

from ....crosscutting.exceptions import ConflictError, DatabaseError
from ....crosscutting.logger import logger
from ....identity.users import User, UserRole, normalize_email

# ============================================================
# SQL contract
# ============================================================
_USER_COLUMNS = "id, name, email, password_hash, role, created_at, updated_at"
_USER_ORDER_BY = "created_at DESC, id DESC"


# ============================================================
# Internal helpers: mapping + execution
# ============================================================
def _row_to_user(row: tuple) -> User:
    """
    Map a `users` row to `User`.

    A persisted role outside 0..2 means schema drift -> DatabaseError.
    """
    try:
        role = UserRole(row[4])
    except ValueError as exc:
        raise DatabaseError(f"Invalid user role in database: {row[4]}") from exc

    return User(
        id=row[0],
        name=row[1],
        email=row[2],
        password_hash=row[3],
        role=role,
        created_at=row[5],
        updated_at=row[6],
    )


class PostgresUserRepository:
    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool

    async def _fetchone(
        self,
        *,
        query: str,
        params: Iterable[object],
        log_msg: str,
        log_extra: dict[str, object],
    ) -> tuple | None:
        try:
            async with self._pool.connection() as conn:
                cur = await conn.execute(query, tuple(params))
                return await cur.fetchone()
        except UniqueViolation as exc:
            logger.warning(log_msg, extra={**log_extra, "reason": "unique_violation"})
            raise ConflictError("A user with this email already exists") from exc
        except PsycopgError as exc:
            logger.exception(log_msg, extra={**log_extra, "error": str(exc)})
            raise DatabaseError(
                "Database operation failed", original_error=exc
            ) from exc

    async def _fetchall(
        self,
        *,
        query: str,
        params: Iterable[object] = (),
        log_msg: str,
        log_extra: dict[str, object],
    ) -> list[tuple]:
        try:
            async with self._pool.connection() as conn:
                cur = await conn.execute(query, tuple(params))
                return await cur.fetchall()
        except PsycopgError as exc:
            logger.exception(log_msg, extra={**log_extra, "error": str(exc)})
            raise DatabaseError(
                "Database operation failed", original_error=exc
            ) from exc

    # ========================================================
    # Reads
    # ========================================================
    async def get_user_by_email(self, email: str) -> Optional[User]:
        normalized = normalize_email(email)
        row = await self._fetchone(
            query=f"SELECT {_USER_COLUMNS} FROM users WHERE email = %s",
            params=(normalized,),
            log_msg="PostgresUserRepository: get_user_by_email failed",
            log_extra={},
        )
        return _row_to_user(row) if row else None

    async def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        row = await self._fetchone(
            query=f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s",
            params=(user_id,),
            log_msg="PostgresUserRepository: get_user_by_id failed",
            log_extra={"user_id": str(user_id)},
        )
        return _row_to_user(row) if row else None

    async def list_users(self) -> list[User]:
        rows = await self._fetchall(
            query=f"SELECT {_USER_COLUMNS} FROM users ORDER BY {_USER_ORDER_BY}",
            log_msg="PostgresUserRepository: list_users failed",
            log_extra={},
        )
        return [_row_to_user(r) for r in rows]

    # ========================================================
    # Writes
    # ========================================================
    async def create_user(
        self, *, name: str, email: str, password_hash: str, role: UserRole
    ) -> User:
        row = await self._fetchone(
            query=f"""
                INSERT INTO users (id, name, email, password_hash, role)
                VALUES (%s, %s, %s, %s, %s)
                RETURNING {_USER_COLUMNS}
            """,
            params=(
                uuid4(),
                name.strip(),
                normalize_email(email),
                password_hash,
                int(role),
            ),
            log_msg="PostgresUserRepository: create_user failed",
            log_extra={"role": int(role)},
        )
        if not row:
            raise DatabaseError("Create user returned no row")
        return _row_to_user(row)

    async def update_user_password(self, user_id: UUID, password_hash: str) -> bool:
        row = await self._fetchone(
            query="""
                UPDATE users
                SET password_hash = %s, updated_at = now()
                WHERE id = %s
                RETURNING id
            """,
            params=(password_hash, user_id),
            log_msg="PostgresUserRepository: update_user_password failed",
            log_extra={"user_id": str(user_id)},
        )
        return row is not None

    async def update_user_role(self, user_id: UUID, role: UserRole) -> Optional[User]:
        row = await self._fetchone(
            query=f"""
                UPDATE users
                SET role = %s, updated_at = now()
                WHERE id = %s
                RETURNING {_USER_COLUMNS}
            """,
            params=(int(role), user_id),
            log_msg="PostgresUserRepository: update_user_role failed",
            log_extra={"user_id": str(user_id), "role": int(role)},
        )
        return _row_to_user(row) if row else None

    async def delete_user(self, user_id: UUID) -> bool:
        row = await self._fetchone(
            query="DELETE FROM users WHERE id = %s RETURNING id",
            params=(user_id,),
            log_msg="PostgresUserRepository: delete_user failed",
            log_extra={"user_id": str(user_id)},
        )
        return row is not None
