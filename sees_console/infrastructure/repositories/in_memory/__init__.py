"""
In-memory repositories.

For testing and local development. NOT FOR PRODUCTION.
Data is lost on process restart.
"""

from .sees import InMemorySeesRepository
from .user import InMemoryUserRepository

__all__ = ["InMemorySeesRepository", "InMemoryUserRepository"]
