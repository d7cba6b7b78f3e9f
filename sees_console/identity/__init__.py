"""Identity: users, roles, sessions and credentials."""
