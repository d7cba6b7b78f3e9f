"""
===============================================================================
MODULE: Standard error responses (RFC 7807 / Problem Details)
===============================================================================

Goal
----
Every HTTP error has the same shape so that:
- the console UI can branch on "code"
- operators can correlate by request_id / error_id
- no internal detail (stacktrace, SQL, SDK message) reaches the client

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Component:
  AppHTTPException + problem_response()

Responsibilities:
  - Error code catalogue (ErrorCode) and its HTTP status / title
  - RFC7807 payload (ErrorDetail)
  - Factories for the errors raised directly by routes and guards
  - FastAPI handlers returning application/problem+json

Collaborators:
  - crosscutting/middleware.py (request_id on request.state)
  - api/exception_handlers.py (maps SeesConsoleError subclasses)
===============================================================================
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

PROBLEM_JSON_MEDIA_TYPE = "application/problem+json"


class ErrorCode(str, Enum):
    # 4xx
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"

    # 5xx
    INTERNAL_ERROR = "INTERNAL_ERROR"
    INFRASTRUCTURE_ERROR = "INFRASTRUCTURE_ERROR"

    @property
    def title(self) -> str:
        """UNAUTHORIZED -> "Unauthorized"."""
        return self.value.replace("_", " ").title()


class ErrorDetail(BaseModel):
    """
    RFC 7807 model (Problem Details).

    Extra fields:
    - code: stable error code for clients
    - errors: optional list of details ({"msg": ...}, {"error_id": ...},
      {"request_id": ...})
    """

    type: str = "about:blank"
    title: str
    status: int
    detail: str
    code: ErrorCode
    instance: str | None = None
    errors: list[dict[str, Any]] | None = None


def _openapi_entry(description: str) -> dict[str, Any]:
    return {
        "description": f"{description} (RFC7807)",
        "model": ErrorDetail,
        "content": {
            PROBLEM_JSON_MEDIA_TYPE: {
                "schema": {"$ref": "#/components/schemas/ErrorDetail"}
            }
        },
    }


# Shared by every router: documents the problem+json body per status.
OPENAPI_ERROR_RESPONSES = {
    "400": _openapi_entry("Bad Request"),
    "401": _openapi_entry("Not signed in"),
    "403": _openapi_entry("Role lacks the permission"),
    "404": _openapi_entry("Unknown SEES record, draft, user or task"),
    "409": _openapi_entry("Duplicate domain or email"),
    "default": _openapi_entry("Error"),
}


class AppHTTPException(HTTPException):
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Class:
      AppHTTPException

    Responsibilities:
      - Attach a stable ErrorCode
      - Carry validation details (errors[])

    Collaborators:
      - app_exception_handler()
    ----------------------------------------------------------------------------
    """

    def __init__(
        self,
        status_code: int,
        code: ErrorCode,
        detail: str,
        errors: list[dict[str, Any]] | None = None,
    ):
        super().__init__(status_code=status_code, detail=detail)
        self.code = code
        self.errors = errors


# ---------------------------------------------------------------------------
# Error factories (raised by routes and auth guards)
# ---------------------------------------------------------------------------


def not_found(resource: str, identifier: str) -> AppHTTPException:
    return AppHTTPException(
        404, ErrorCode.NOT_FOUND, f"{resource} '{identifier}' not found"
    )


def unauthorized(detail: str = "Authentication required") -> AppHTTPException:
    return AppHTTPException(401, ErrorCode.UNAUTHORIZED, detail)


def forbidden(detail: str = "Access denied") -> AppHTTPException:
    return AppHTTPException(403, ErrorCode.FORBIDDEN, detail)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def problem_response(
    request: Request,
    *,
    status_code: int,
    code: ErrorCode,
    detail: str,
    errors: list[dict[str, Any]] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """
    Build the problem+json response.

    The request_id (set by RequestContextMiddleware) is appended to errors[]
    so a client report can be matched with the server logs.
    """
    request_id = getattr(getattr(request, "state", None), "request_id", None)
    details = list(errors or [])
    if request_id:
        details.append({"request_id": request_id})

    body = ErrorDetail(
        type=f"about:blank/{code.value.lower()}",
        title=code.title,
        status=status_code,
        detail=detail,
        code=code,
        instance=str(request.url),
        errors=details or None,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", exclude_none=True),
        headers=headers,
        media_type=PROBLEM_JSON_MEDIA_TYPE,
    )


async def app_exception_handler(
    request: Request, exc: AppHTTPException
) -> JSONResponse:
    return problem_response(
        request,
        status_code=exc.status_code,
        code=exc.code,
        detail=str(exc.detail),
        errors=exc.errors,
        headers=getattr(exc, "headers", None),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback for unhandled exceptions; never exposes internal details."""
    return problem_response(
        request,
        status_code=500,
        code=ErrorCode.INTERNAL_ERROR,
        detail="An unexpected error occurred",
    )
