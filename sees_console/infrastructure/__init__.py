"""Infrastructure adapters: Redis, PostgreSQL, Azure, in-memory fakes."""
