"""
Name: FastAPI Application Factory

Responsibilities:
  - Build the FastAPI application with metadata (title, version)
  - Configure middleware (CORS, security headers, request context)
  - Mount the auth, SEES and user routers under /api
  - Expose health, readiness and metrics endpoints

Collaborators:
  - container.build_container: adapters and services for the environment
  - application.dev_seed_admin: local Admin bootstrap
  - RequestContextMiddleware / SecurityHeadersMiddleware
  - api.exception_handlers: RFC 7807 error mapping

Constraints:
  - CORS configurable via ALLOWED_ORIGINS (comma-separated); credentials are
    allowed because the session travels in a cookie.
  - Settings are validated when the app is created (fail fast).

Notes:
  - Middleware order matters: RequestContext -> SecurityHeaders -> CORS -> routes
  - /healthz is liveness only; /readyz pings the key-value store and database
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from ..application.dev_seed_admin import ensure_dev_admin
from ..container import AppContainer, build_container
from ..crosscutting.config import Settings, get_settings
from ..crosscutting.logger import logger
from ..crosscutting.metrics import get_metrics_response
from ..crosscutting.middleware import RequestContextMiddleware
from ..crosscutting.security import SecurityHeadersMiddleware
from .auth_routes import router as auth_router
from .exception_handlers import register_exception_handlers
from .sees_routes import router as sees_router
from .user_routes import router as user_router

APP_TITLE = "SEES Console API"
APP_VERSION = "0.1.0"


def _make_lifespan(prebuilt: Optional[AppContainer]):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup/shutdown lifecycle: build the container, seed, close."""
        settings: Settings = app.state.settings
        container = prebuilt or await build_container(settings)
        app.state.container = container

        try:
            await ensure_dev_admin(
                settings,
                user_repo=container.users,
                password_hasher=container.credentials.hash_password,
            )

            logger.info(
                "SEES Console API starting up",
                extra={
                    "app_env": settings.app_env,
                    "cloud_provisioning": container.provisioner.is_configured(),
                    "session_ttl_seconds": settings.session_ttl_seconds,
                    "db_pool_min": settings.db_pool_min_size,
                    "db_pool_max": settings.db_pool_max_size,
                },
            )

            yield

        finally:
            await container.close()
            logger.info("SEES Console API shutting down")

    return lifespan


def create_app(
    settings: Optional[Settings] = None,
    *,
    container: Optional[AppContainer] = None,
) -> FastAPI:
    """
    Build the ASGI application.

    `container` skips build_container() in the lifespan; tests use it to
    inject fakes (e.g. a recording cloud provisioner).
    """
    settings = settings or (container.settings if container else get_settings())

    app = FastAPI(
        title=APP_TITLE,
        version=APP_VERSION,
        lifespan=_make_lifespan(container),
        openapi_tags=[
            {"name": "auth", "description": "Session authentication (cookie)"},
            {"name": "sees", "description": "SEES records, drafts and previews"},
            {"name": "users", "description": "User management (Admin only)"},
        ],
    )
    app.state.settings = settings

    # R: Middleware order (bottom = first to execute)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_allowed_origins_list(),
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-Id"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestContextMiddleware)

    app.include_router(auth_router)
    app.include_router(sees_router)
    app.include_router(user_router)

    register_exception_handlers(app)

    @app.get("/healthz", include_in_schema=False)
    async def healthz(request: Request):
        """Liveness: the process answers."""
        return {"ok": True, "request_id": getattr(request.state, "request_id", None)}

    @app.get("/readyz", include_in_schema=False)
    async def readyz(request: Request, response: Response):
        """
        Readiness for the backing services.

        Returns:
            ok: True if the key-value store and the database answer
            store / db: "connected" or "disconnected"
        """
        container: AppContainer = request.app.state.container
        store_ok = await container.store.ping()
        db_ok = await container.sees.ping()
        if not (store_ok and db_ok):
            logger.warning(
                "Ready check failed", extra={"store": store_ok, "db": db_ok}
            )
            response.status_code = 503
        return {
            "ok": store_ok and db_ok,
            "store": "connected" if store_ok else "disconnected",
            "db": "connected" if db_ok else "disconnected",
            "request_id": getattr(request.state, "request_id", None),
        }

    @app.get("/metrics", include_in_schema=False)
    async def metrics():
        """Prometheus text format metrics."""
        body, content_type = get_metrics_response()
        return Response(content=body, media_type=content_type)

    return app


__all__ = ["create_app", "APP_TITLE", "APP_VERSION"]
