"""Key-value store adapters (sessions, reset tokens, drafts)."""

from .in_memory import InMemoryKeyValueStore
from .redis_store import RedisKeyValueStore

__all__ = ["InMemoryKeyValueStore", "RedisKeyValueStore"]
