"""
===============================================================================
CRC CARD — api/exception_handlers.py (Centralized exception handling)
===============================================================================

Responsibilities:
  - Translate the internal error taxonomy to RFC 7807 responses:
      ValidationError 400, AuthenticationError 401, AuthorizationError 403,
      NotFoundError 404, ConflictError 409, InfrastructureError 500.
  - Map FastAPI request validation errors to 400.
  - Log with request_id + error_id; infrastructure failures with stacktrace.
  - Never leak internal details on unhandled errors.

Collaborators:
  - crosscutting.error_responses: problem_response, ErrorCode, handlers
  - crosscutting.exceptions: SeesConsoleError and subclasses
===============================================================================
"""

from __future__ import annotations

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..crosscutting.error_responses import (
    AppHTTPException,
    ErrorCode,
    app_exception_handler,
    generic_exception_handler,
    problem_response,
)
from ..crosscutting.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    InfrastructureError,
    NotFoundError,
    SeesConsoleError,
    ValidationError,
)
from ..crosscutting.logger import logger

# R: order matters, the first matching class wins (subclasses first).
_ERROR_MAP: tuple[tuple[type[SeesConsoleError], ErrorCode, int], ...] = (
    (ValidationError, ErrorCode.VALIDATION_ERROR, 400),
    (AuthenticationError, ErrorCode.UNAUTHORIZED, 401),
    (AuthorizationError, ErrorCode.FORBIDDEN, 403),
    (NotFoundError, ErrorCode.NOT_FOUND, 404),
    (ConflictError, ErrorCode.CONFLICT, 409),
    (InfrastructureError, ErrorCode.INFRASTRUCTURE_ERROR, 500),
)


def _request_id_from(request: Request) -> str | None:
    return getattr(getattr(request, "state", None), "request_id", None)


def _classify(exc: SeesConsoleError) -> tuple[ErrorCode, int]:
    for exc_type, code, status_code in _ERROR_MAP:
        if isinstance(exc, exc_type):
            return code, status_code
    return ErrorCode.INTERNAL_ERROR, 500


async def _handle_service_error(
    request: Request,
    *,
    exc: SeesConsoleError,
    code: ErrorCode,
    status_code: int,
) -> JSONResponse:
    """Common path for typed service errors."""
    request_id = _request_id_from(request)
    log_extra = {
        "code": code.value,
        "error_code": exc.error_code,
        "error_id": exc.error_id,
        "request_id": request_id,
    }

    if status_code >= 500:
        logger.error(
            "Service error",
            exc_info=exc.original_error or exc,
            extra={**log_extra, "error": exc.message},
        )
        # R: infrastructure messages are generic; the cause stays in the logs.
        detail = "A backing service is unavailable. Please try again later."
    else:
        logger.warning("Request rejected", extra={**log_extra, "error": exc.message})
        detail = exc.message

    errors: list[dict] = [{"error_id": exc.error_id}]
    if isinstance(exc, ValidationError):
        errors = [{"msg": m} for m in exc.errors] + errors

    return problem_response(
        request, status_code=status_code, code=code, detail=detail, errors=errors
    )


async def sees_console_error_handler(
    request: Request, exc: SeesConsoleError
) -> JSONResponse:
    code, status_code = _classify(exc)
    return await _handle_service_error(
        request, exc=exc, code=code, status_code=status_code
    )


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        {
            "loc": ".".join(str(part) for part in err.get("loc", ())),
            "msg": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    logger.warning(
        "Request validation failed",
        extra={"request_id": _request_id_from(request), "errors": errors},
    )
    return problem_response(
        request,
        status_code=400,
        code=ErrorCode.VALIDATION_ERROR,
        detail="Invalid request",
        errors=errors,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Full stacktrace in the logs, generic body for the client."""
    logger.error(
        "Unhandled exception",
        exc_info=exc,
        extra={"request_id": _request_id_from(request)},
    )
    return await generic_exception_handler(request, exc)


def register_exception_handlers(app) -> None:
    """
    Register handlers on the FastAPI app.

    AppHTTPException keeps the RFC 7807 shape; Exception is the fallback.
    """
    app.add_exception_handler(SeesConsoleError, sees_console_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(AppHTTPException, app_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = ["register_exception_handlers"]
