"""
============================================================
CRC CARD — infrastructure/repositories/__init__.py
============================================================
Module: infrastructure.repositories (public export surface)

Responsibilities:
  - Stable import path for the concrete repositories.
  - Postgres first, then InMemory.

Policy:
  - Re-exports only; no side effects.
============================================================
"""

from .in_memory import InMemorySeesRepository, InMemoryUserRepository
from .postgres import PostgresSeesRepository, PostgresUserRepository

__all__ = [
    "PostgresSeesRepository",
    "PostgresUserRepository",
    "InMemorySeesRepository",
    "InMemoryUserRepository",
]
