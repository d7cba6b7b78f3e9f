"""HTTP surface: routers, dependencies, exception handlers, app factory."""
