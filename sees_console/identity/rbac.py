"""
===============================================================================
CRC CARD — identity/rbac.py
===============================================================================
Module:
    RBAC (Role-Based Access Control) for console users

Responsibilities:
    - Define the permission catalogue (Permission).
    - Define roles with permissions and inheritance
      (Viewer -> Editor -> Admin).
    - Answer "may this role do X?" for use cases and route dependencies.

Collaborators:
    - identity.users.UserRole
    - identity.auth_users.require_permission
    - application/usecases: check before any mutation

Notes:
    - Role ordering lives in UserRole; this module maps roles to capabilities
      so call sites read as intent (SEES_WRITE) rather than as numbers.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Set

from ..crosscutting.exceptions import AuthenticationError, AuthorizationError
from ..crosscutting.logger import logger
from .users import SessionUser, UserRole


class Permission(str, Enum):
    """Permissions available in the console."""

    SEES_READ = "sees:read"
    SEES_WRITE = "sees:write"

    USERS_READ = "users:read"
    USERS_MANAGE = "users:manage"


@dataclass(frozen=True, slots=True)
class Role:
    """Role definition: permissions + optional parent."""

    name: UserRole
    permissions: Set[Permission] = field(default_factory=set)
    inherits_from: Optional[UserRole] = None
    description: str = ""

    def has_permission(
        self, permission: Permission, roles_registry: dict[UserRole, "Role"]
    ) -> bool:
        """Direct or inherited permission."""
        if permission in self.permissions:
            return True

        parent = self.inherits_from
        if parent is not None and parent in roles_registry:
            return roles_registry[parent].has_permission(permission, roles_registry)

        return False


ROLES: dict[UserRole, Role] = {
    UserRole.VIEWER: Role(
        name=UserRole.VIEWER,
        permissions={Permission.SEES_READ},
        description="Read-only access to SEES records",
    ),
    UserRole.EDITOR: Role(
        name=UserRole.EDITOR,
        permissions={Permission.SEES_WRITE},
        inherits_from=UserRole.VIEWER,
        description="Create, edit and delete SEES records",
    ),
    UserRole.ADMIN: Role(
        name=UserRole.ADMIN,
        permissions={Permission.USERS_READ, Permission.USERS_MANAGE},
        inherits_from=UserRole.EDITOR,
        description="Full access including user management",
    ),
}


def has_permission(role: UserRole, permission: Permission) -> bool:
    definition = ROLES.get(role)
    return bool(definition and definition.has_permission(permission, ROLES))


def permissions_for(role: UserRole) -> Set[Permission]:
    """Effective permissions (direct + inherited)."""
    return {p for p in Permission if has_permission(role, p)}


def ensure_permission(
    actor: Optional[SessionUser], permission: Permission
) -> SessionUser:
    """
    Guard used by use cases before any mutation.

    Raises:
        AuthenticationError: no actor
        AuthorizationError: role lacks the permission
    """
    if actor is None:
        raise AuthenticationError("Authentication required")
    if not has_permission(actor.role, permission):
        logger.warning(
            "Permission denied",
            extra={
                "user_id": actor.user_id,
                "role": actor.role.label,
                "permission": permission.value,
            },
        )
        raise AuthorizationError("You do not have permission to perform this action")
    return actor
