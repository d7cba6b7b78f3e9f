"""
===============================================================================
MODULE: Typed internal exceptions
===============================================================================

Goal
----
Internal exceptions that are coherent across layers, each with:
- a stable error_code
- an error_id to correlate the client response with server logs
- a human message (never a stacktrace or a secret)

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Component:
  SeesConsoleError + subclasses

Responsibilities:
  - Standardize the error taxonomy that api/exception_handlers.py maps to HTTP:
      ValidationError 400, AuthenticationError 401, AuthorizationError 403,
      NotFoundError 404, ConflictError 409, InfrastructureError 500
  - Generate error_id for tracing

Collaborators:
  - api/exception_handlers.py
  - crosscutting/logger.py
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4


@dataclass(frozen=True)
class ErrorResponse:
    """Minimal error shape for non-HTTP consumers (scripts, background tasks)."""

    error_code: str
    message: str
    error_id: str

    def to_dict(self) -> dict:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "error_id": self.error_id,
        }


class SeesConsoleError(Exception):
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Class:
      SeesConsoleError

    Responsibilities:
      - Base for every internal error of the console
      - Carry error_code + error_id + message

    Collaborators:
      - api/exception_handlers.py
    ----------------------------------------------------------------------------
    """

    error_code: str = "SEES_CONSOLE_ERROR"

    def __init__(
        self,
        message: str,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.error_id = error_id or str(uuid4())
        self.original_error = original_error
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error_code=self.error_code, message=self.message, error_id=self.error_id
        )


# =============================================================================
# Client errors (4xx)
# =============================================================================


class ValidationError(SeesConsoleError):
    """Missing or malformed input. Detected before any mutation."""

    error_code: str = "VALIDATION_ERROR"

    def __init__(self, message: str, errors: list[str] | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = list(errors or [])


class AuthenticationError(SeesConsoleError):
    """Missing/invalid/expired session or wrong credentials."""

    error_code: str = "UNAUTHORIZED"


class InvalidCredentialError(AuthenticationError):
    """Current password does not match the stored hash."""

    error_code: str = "INVALID_CREDENTIAL"


class AuthorizationError(SeesConsoleError):
    """Authenticated but the role is insufficient."""

    error_code: str = "FORBIDDEN"


class NotFoundError(SeesConsoleError):
    """Missing entity, draft or token."""

    error_code: str = "NOT_FOUND"


class UserNotFoundError(NotFoundError):
    error_code: str = "USER_NOT_FOUND"


class ConflictError(SeesConsoleError):
    """Unique constraint violation (target domain, email)."""

    error_code: str = "CONFLICT"


# =============================================================================
# Infrastructure errors (5xx)
# =============================================================================


class InfrastructureError(SeesConsoleError):
    """A backing service (store, database, cloud) is unreachable or failed."""

    error_code: str = "INFRASTRUCTURE_ERROR"
    retryable: bool = True


class KeyValueStoreError(InfrastructureError):
    """Redis errors (connection, timeout, protocol)."""

    error_code: str = "KEY_VALUE_STORE_ERROR"


class DatabaseError(InfrastructureError):
    """DB errors (connection, query, timeout, pool)."""

    error_code: str = "DATABASE_ERROR"


class CloudProvisioningError(InfrastructureError):
    """Cloud provider errors while provisioning, registering or tearing down."""

    error_code: str = "CLOUD_PROVISIONING_ERROR"
