"""
============================================================
CRC CARD — infrastructure/kv/redis_store.py
============================================================
Module: Redis key-value store (sessions, reset tokens, drafts)

Responsibilities:
  - Implement domain.repositories.KeyValueStore on redis-py (asyncio API).
  - Serialize values as JSON and expire them with native TTL (SET ... EX).
  - Retry transient connection/timeout errors with exponential backoff.
  - Translate every Redis failure into KeyValueStoreError (retryable).

Collaborators:
  - redis.asyncio client (constructed once per process, closed on shutdown)
  - crosscutting.exceptions.KeyValueStoreError
  - crosscutting.logger

Policy / Design Notes:
  - The store is NOT best-effort: a session lookup that cannot reach Redis
    must fail (callers decide to fail closed), never read as "absent".
  - A value that cannot be decoded is treated as absent and logged.
============================================================
"""

from __future__ import annotations

import json
from typing import Any

from redis.asyncio import Redis
from redis.asyncio.retry import Retry
from redis.backoff import ExponentialBackoff
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from ...crosscutting.exceptions import KeyValueStoreError
from ...crosscutting.logger import logger


class RedisKeyValueStore:
    """
    ------------------------------------------------------------
    CRC (Class Card)
    ------------------------------------------------------------
    Class:
      RedisKeyValueStore

    Responsibilities:
      - get_json / set_json / delete / ping / close

    Collaborators:
      - redis.asyncio.Redis
    ------------------------------------------------------------
    """

    def __init__(self, client: Redis) -> None:
        self._client = client

    @classmethod
    def from_url(
        cls,
        redis_url: str,
        *,
        max_retries: int = 3,
        socket_timeout: float = 5.0,
    ) -> "RedisKeyValueStore":
        if not redis_url:
            raise ValueError("redis_url is required")

        client = Redis.from_url(
            redis_url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
            retry=Retry(ExponentialBackoff(cap=2.0, base=0.05), max_retries),
            retry_on_error=[RedisConnectionError, RedisTimeoutError],
            health_check_interval=30,
        )
        return cls(client)

    async def get_json(self, key: str) -> Any | None:
        try:
            raw = await self._client.get(key)
        except RedisError as exc:
            logger.error("Redis GET failed", extra={"key_prefix": _prefix(key)})
            raise KeyValueStoreError(
                "Key-value store unavailable", original_error=exc
            ) from exc

        if raw is None:
            return None

        try:
            return json.loads(raw)
        except ValueError:
            logger.warning(
                "Undecodable value in key-value store",
                extra={"key_prefix": _prefix(key)},
            )
            return None

    async def set_json(self, key: str, value: Any, ttl_seconds: int) -> None:
        payload = json.dumps(value, ensure_ascii=False, separators=(",", ":"))
        try:
            await self._client.set(key, payload, ex=int(ttl_seconds))
        except RedisError as exc:
            logger.error("Redis SET failed", extra={"key_prefix": _prefix(key)})
            raise KeyValueStoreError(
                "Key-value store unavailable", original_error=exc
            ) from exc

    async def delete(self, key: str) -> None:
        try:
            await self._client.delete(key)
        except RedisError as exc:
            logger.error("Redis DEL failed", extra={"key_prefix": _prefix(key)})
            raise KeyValueStoreError(
                "Key-value store unavailable", original_error=exc
            ) from exc

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except RedisError:
            return False

    async def close(self) -> None:
        logger.info("Closing Redis client")
        await self._client.aclose()


def _prefix(key: str) -> str:
    """Log only the key namespace (never the token part)."""
    head, sep, _ = key.rpartition(":")
    return f"{head}{sep}*" if sep else "*"
