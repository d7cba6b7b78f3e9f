"""
===============================================================================
CRC CARD — sees_console/context.py (Request-scoped context)
===============================================================================

Responsibilities:
  - Hold the request id, method, path and signed-in user id in ContextVars.
  - Expose them as one dict for log enrichment.

Collaborators:
  - crosscutting.middleware: sets request_id/method/path per request.
  - crosscutting.logger: enriches log records via get_context_dict().
  - identity.auth_users: sets user_id once the session is resolved.

Constraints:
  - str values only; "" means unset and is left out of the dict.
===============================================================================
"""

from __future__ import annotations

from contextvars import ContextVar

request_id_var: ContextVar[str] = ContextVar("request_id", default="")
http_method_var: ContextVar[str] = ContextVar("http_method", default="")
http_path_var: ContextVar[str] = ContextVar("http_path", default="")
user_id_var: ContextVar[str] = ContextVar("user_id", default="")

# Log field name -> variable.
_FIELDS: dict[str, ContextVar[str]] = {
    "request_id": request_id_var,
    "method": http_method_var,
    "path": http_path_var,
    "user_id": user_id_var,
}


def set_request_context(
    *, request_id: str = "", method: str = "", path: str = ""
) -> None:
    request_id_var.set(request_id or "")
    http_method_var.set(method or "")
    http_path_var.set(path or "")


def set_user_context(user_id: str) -> None:
    user_id_var.set(user_id or "")


def get_context_dict() -> dict[str, str]:
    return {name: value for name, var in _FIELDS.items() if (value := var.get())}


def clear_context() -> None:
    """Reset every field so the next request on this worker starts clean."""
    for var in _FIELDS.values():
        var.set("")
