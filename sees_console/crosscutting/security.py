"""
===============================================================================
MODULE: Security headers (OWASP hardening)
===============================================================================

Goal
----
Add security headers to every response:
- CSP (relaxed for the HTML notice preview, which loads template assets)
- HSTS (production over HTTPS only)
- Anti-clickjacking, anti-sniffing

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Component:
  SecurityHeadersMiddleware

Responsibilities:
  - Add hardening headers without breaking dev tooling
  - Pick the CSP per environment and per path

Collaborators:
  - crosscutting.config.get_settings
===============================================================================
"""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

# R: notice pages reference stylesheets and images on the template host.
_PREVIEW_PREFIXES = ("/api/sees/preview/",)
_RENDER_SUFFIX = "/render"


def _build_csp(is_production: bool) -> str:
    if is_production:
        return (
            "default-src 'self'; "
            "script-src 'self'; "
            "style-src 'self'; "
            "img-src 'self' data:; "
            "font-src 'self'; "
            "connect-src 'self'"
        )

    # Swagger UI needs inline scripts/styles in dev.
    return (
        "default-src 'self'; "
        "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
        "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
        "img-src 'self' data: https://fastapi.tiangolo.com; "
        "font-src 'self'; "
        "connect-src 'self'"
    )


def _build_preview_csp() -> str:
    return (
        "default-src 'self'; "
        "script-src 'none'; "
        "style-src 'self' 'unsafe-inline' http: https:; "
        "img-src 'self' data: http: https:; "
        "font-src 'self' http: https:; "
        "frame-ancestors 'self'"
    )


def _is_preview_path(path: str) -> bool:
    if path.startswith(_PREVIEW_PREFIXES):
        return True
    return path.startswith("/api/sees/") and path.endswith(_RENDER_SUFFIX)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Class:
      SecurityHeadersMiddleware

    Responsibilities:
      - Add OWASP security headers
      - HSTS only in production and over HTTPS

    Collaborators:
      - crosscutting.config
    ----------------------------------------------------------------------------
    """

    def __init__(self, app):
        super().__init__(app)
        from .config import get_settings

        self._is_production = get_settings().is_production()
        self._csp = _build_csp(self._is_production)
        self._preview_csp = _build_preview_csp()

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        preview = _is_preview_path(request.url.path)

        response.headers["X-Content-Type-Options"] = "nosniff"
        # R: the console embeds previews in an iframe of its own origin.
        response.headers["X-Frame-Options"] = "SAMEORIGIN" if preview else "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = (
            "accelerometer=(), camera=(), geolocation=(), gyroscope=(), "
            "magnetometer=(), microphone=(), payment=(), usb=()"
        )
        response.headers["Content-Security-Policy"] = (
            self._preview_csp if preview else self._csp
        )

        if self._is_production:
            proto = (
                request.headers.get("x-forwarded-proto") or request.url.scheme or ""
            ).lower()
            if proto == "https":
                response.headers["Strict-Transport-Security"] = (
                    "max-age=31536000; includeSubDomains"
                )

        return response
