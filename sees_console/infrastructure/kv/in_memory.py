"""
============================================================
CRC CARD — infrastructure/kv/in_memory.py
============================================================
Module: In-memory key-value store (tests / local dev)

Responsibilities:
  - Implement domain.repositories.KeyValueStore without Redis.
  - Expire entries by deadline, computed from an injectable monotonic clock
    so tests can move time forward.
  - Store JSON round-tripped copies so callers never share mutable state.

Collaborators:
  - threading.Lock (TestClient drives the app from another thread)
============================================================
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Dict


@dataclass(frozen=True, slots=True)
class _Entry:
    payload: str
    expires_at: float


class InMemoryKeyValueStore:
    """Dict-backed store with per-key TTL."""

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._data: Dict[str, _Entry] = {}
        self._lock = Lock()

    async def get_json(self, key: str) -> Any | None:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            if self._clock() >= entry.expires_at:
                del self._data[key]
                return None
            return json.loads(entry.payload)

    async def set_json(self, key: str, value: Any, ttl_seconds: int) -> None:
        payload = json.dumps(value, ensure_ascii=False)
        with self._lock:
            self._data[key] = _Entry(
                payload=payload, expires_at=self._clock() + float(ttl_seconds)
            )

    async def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        with self._lock:
            self._data.clear()

    def keys(self) -> list[str]:
        """Live keys (test helper)."""
        now = self._clock()
        with self._lock:
            return [k for k, e in self._data.items() if now < e.expires_at]
