"""PostgreSQL repositories (psycopg 3, async pool)."""

from .sees import PostgresSeesRepository
from .user import PostgresUserRepository

__all__ = ["PostgresSeesRepository", "PostgresUserRepository"]
