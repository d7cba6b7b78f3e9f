"""
============================================================
CRC CARD — infrastructure/repositories/postgres/sees.py
============================================================
Class: PostgresSeesRepository

Responsibilities:
  - Persist SEES records (`sees`) and their name servers (`ns_records`).
  - Load records with their NS records attached (one extra query per call,
    never one per record).
  - Insert a record and its NS records in a single transaction.
  - Map unique violations on target_domain to ConflictError.

Collaborators:
  - psycopg_pool.AsyncConnectionPool (injected)
  - psycopg.types.json.Jsonb (template_variables column)
  - domain.entities.Sees / NsRecord / SeesCreate

Constraints / Notes:
  - ns_records.sees_id has ON DELETE CASCADE: deleting the parent is enough.
  - Ordering: created_at DESC, id DESC.
============================================================
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Optional

from psycopg import AsyncConnection
from psycopg import Error as PsycopgError
from psycopg.errors import UniqueViolation
from psycopg.types.json import Jsonb
from psycopg_pool import AsyncConnectionPool

from ....crosscutting.exceptions import ConflictError, DatabaseError
from ....crosscutting.logger import logger
from ....domain.entities import NsRecord, Sees, SeesCreate

_SEES_COLUMNS = (
    "id, title, target_domain, redirect_url, note, preview_url, "
    "template_variables, static_app_name, static_app_url, dns_zone_name, "
    "created_at, updated_at"
)
_SEES_ORDER_BY = "created_at DESC, id DESC"
_DUPLICATE_DOMAIN_MESSAGE = "A SEES record for this domain already exists"


def _row_to_sees(row: tuple, ns_records: list[NsRecord]) -> Sees:
    return Sees(
        id=row[0],
        title=row[1],
        target_domain=row[2],
        redirect_url=row[3],
        note=row[4],
        preview_url=row[5],
        template_variables=dict(row[6] or {}),
        static_app_name=row[7],
        static_app_url=row[8],
        dns_zone_name=row[9],
        ns_records=ns_records,
        created_at=row[10],
        updated_at=row[11],
    )


async def _load_ns_records(
    conn: AsyncConnection, sees_ids: list[int]
) -> dict[int, list[NsRecord]]:
    grouped: dict[int, list[NsRecord]] = defaultdict(list)
    if not sees_ids:
        return grouped
    cur = await conn.execute(
        """
        SELECT id, sees_id, name_server
        FROM ns_records
        WHERE sees_id = ANY(%s)
        ORDER BY id ASC
        """,
        (sees_ids,),
    )
    for ns_id, sees_id, name_server in await cur.fetchall():
        grouped[sees_id].append(
            NsRecord(id=ns_id, sees_id=sees_id, name_server=name_server)
        )
    return grouped


async def _insert_ns_records(
    conn: AsyncConnection, sees_id: int, name_servers: list[str]
) -> None:
    for name_server in name_servers:
        await conn.execute(
            "INSERT INTO ns_records (sees_id, name_server) VALUES (%s, %s)",
            (sees_id, name_server),
        )


class PostgresSeesRepository:
    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool

    def _fail(self, log_msg: str, exc: PsycopgError, **extra: object) -> DatabaseError:
        logger.exception(log_msg, extra={**extra, "error": str(exc)})
        return DatabaseError("Database operation failed", original_error=exc)

    # ========================================================
    # Reads
    # ========================================================
    async def list_sees(self) -> list[Sees]:
        try:
            async with self._pool.connection() as conn:
                cur = await conn.execute(
                    f"SELECT {_SEES_COLUMNS} FROM sees ORDER BY {_SEES_ORDER_BY}"
                )
                rows = await cur.fetchall()
                ns = await _load_ns_records(conn, [r[0] for r in rows])
        except PsycopgError as exc:
            raise self._fail("PostgresSeesRepository: list_sees failed", exc) from exc
        return [_row_to_sees(r, ns.get(r[0], [])) for r in rows]

    async def get_sees(self, sees_id: int) -> Optional[Sees]:
        try:
            async with self._pool.connection() as conn:
                cur = await conn.execute(
                    f"SELECT {_SEES_COLUMNS} FROM sees WHERE id = %s", (sees_id,)
                )
                row = await cur.fetchone()
                if row is None:
                    return None
                ns = await _load_ns_records(conn, [sees_id])
        except PsycopgError as exc:
            raise self._fail(
                "PostgresSeesRepository: get_sees failed", exc, sees_id=sees_id
            ) from exc
        return _row_to_sees(row, ns.get(sees_id, []))

    # ========================================================
    # Writes
    # ========================================================
    async def create_sees(self, data: SeesCreate) -> Sees:
        try:
            async with self._pool.connection() as conn:
                async with conn.transaction():
                    cur = await conn.execute(
                        f"""
                        INSERT INTO sees (
                            title, target_domain, redirect_url, note,
                            preview_url, template_variables
                        )
                        VALUES (%s, %s, %s, %s, %s, %s)
                        RETURNING {_SEES_COLUMNS}
                        """,
                        (
                            data.title,
                            data.target_domain.strip().lower(),
                            data.redirect_url,
                            data.note,
                            data.preview_url,
                            Jsonb(dict(data.template_variables)),
                        ),
                    )
                    row = await cur.fetchone()
                    await _insert_ns_records(conn, row[0], data.name_servers)
                    ns = await _load_ns_records(conn, [row[0]])
        except UniqueViolation as exc:
            logger.warning(
                "PostgresSeesRepository: duplicate target domain",
                extra={"target_domain": data.target_domain},
            )
            raise ConflictError(_DUPLICATE_DOMAIN_MESSAGE) from exc
        except PsycopgError as exc:
            raise self._fail("PostgresSeesRepository: create_sees failed", exc) from exc
        return _row_to_sees(row, ns.get(row[0], []))

    async def update_sees(
        self,
        sees_id: int,
        *,
        redirect_url: str,
        note: Optional[str],
        preview_url: Optional[str],
        template_variables: dict[str, Any],
    ) -> Optional[Sees]:
        try:
            async with self._pool.connection() as conn:
                cur = await conn.execute(
                    f"""
                    UPDATE sees
                    SET redirect_url = %s, note = %s, preview_url = %s,
                        template_variables = %s, updated_at = now()
                    WHERE id = %s
                    RETURNING {_SEES_COLUMNS}
                    """,
                    (
                        redirect_url,
                        note,
                        preview_url,
                        Jsonb(dict(template_variables)),
                        sees_id,
                    ),
                )
                row = await cur.fetchone()
                if row is None:
                    return None
                ns = await _load_ns_records(conn, [sees_id])
        except PsycopgError as exc:
            raise self._fail(
                "PostgresSeesRepository: update_sees failed", exc, sees_id=sees_id
            ) from exc
        return _row_to_sees(row, ns.get(sees_id, []))

    async def attach_cloud_resources(
        self,
        sees_id: int,
        *,
        static_app_name: str,
        static_app_url: str,
        dns_zone_name: str,
        name_servers: list[str],
    ) -> Optional[Sees]:
        try:
            async with self._pool.connection() as conn:
                async with conn.transaction():
                    cur = await conn.execute(
                        f"""
                        UPDATE sees
                        SET static_app_name = %s, static_app_url = %s,
                            dns_zone_name = %s, updated_at = now()
                        WHERE id = %s
                        RETURNING {_SEES_COLUMNS}
                        """,
                        (static_app_name, static_app_url, dns_zone_name, sees_id),
                    )
                    row = await cur.fetchone()
                    if row is None:
                        return None
                    await conn.execute(
                        "DELETE FROM ns_records WHERE sees_id = %s", (sees_id,)
                    )
                    await _insert_ns_records(conn, sees_id, name_servers)
                    ns = await _load_ns_records(conn, [sees_id])
        except PsycopgError as exc:
            raise self._fail(
                "PostgresSeesRepository: attach_cloud_resources failed",
                exc,
                sees_id=sees_id,
            ) from exc
        return _row_to_sees(row, ns.get(sees_id, []))

    async def delete_sees(self, sees_id: int) -> bool:
        try:
            async with self._pool.connection() as conn:
                cur = await conn.execute(
                    "DELETE FROM sees WHERE id = %s RETURNING id", (sees_id,)
                )
                row = await cur.fetchone()
        except PsycopgError as exc:
            raise self._fail(
                "PostgresSeesRepository: delete_sees failed", exc, sees_id=sees_id
            ) from exc
        return row is not None

    async def ping(self) -> bool:
        try:
            async with self._pool.connection() as conn:
                await conn.execute("SELECT 1")
            return True
        except PsycopgError:
            return False
