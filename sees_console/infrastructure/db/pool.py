"""
===============================================================================
CRC CARD — infrastructure/db/pool.py
===============================================================================
Component:
  PostgreSQL connection pool (async)

Responsibilities:
  - Build, open and close the pool explicitly (owned by the app lifespan).
  - Configure each connection: statement_timeout guardrail.

Collaborators:
  - psycopg_pool.AsyncConnectionPool
  - api.main lifespan (construct at startup, close on shutdown)
  - infrastructure/repositories/postgres/* (receive the pool by injection)

Principles:
  - No module-level singleton: whoever opens the pool closes it.
===============================================================================
"""

from __future__ import annotations

from psycopg import AsyncConnection
from psycopg_pool import AsyncConnectionPool

from ...crosscutting.logger import logger


def _make_configure(statement_timeout_ms: int):
    async def _configure_connection(conn: AsyncConnection) -> None:
        """Runs when the pool creates a connection."""
        if statement_timeout_ms > 0:
            await conn.execute(f"SET statement_timeout = {int(statement_timeout_ms)}")
            await conn.commit()

    return _configure_connection


async def open_pool(
    database_url: str,
    *,
    min_size: int,
    max_size: int,
    statement_timeout_ms: int = 0,
) -> AsyncConnectionPool:
    """Create and open the pool (once per process)."""
    if not database_url:
        raise ValueError("database_url is required")

    logger.info(
        "Opening DB pool",
        extra={"min_size": min_size, "max_size": max_size},
    )
    pool = AsyncConnectionPool(
        conninfo=database_url,
        min_size=min_size,
        max_size=max_size,
        configure=_make_configure(statement_timeout_ms),
        open=False,
    )
    await pool.open()
    logger.info("DB pool opened", extra={"min_size": min_size, "max_size": max_size})
    return pool


async def close_pool(pool: AsyncConnectionPool | None) -> None:
    """Close the pool (idempotent)."""
    if pool is None or pool.closed:
        return
    logger.info("Closing DB pool")
    await pool.close()
    logger.info("DB pool closed")

