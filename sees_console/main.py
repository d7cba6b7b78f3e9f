"""
Name: ASGI Entrypoint (sees_console.main)

Responsibilities:
  - Build and expose the FastAPI app for ASGI servers
  - Keep the import path used by uvicorn stable: sees_console.main:app

Notes/Constraints:
  - Settings are validated here (missing DATABASE_URL fails at import).
  - No business logic lives here.
"""

from .api.main import create_app

app = create_app()

__all__ = ["app"]
