"""
Name: Roles and Permissions Tests

Responsibilities:
  - Role ordering Viewer < Editor < Admin and its permission inheritance
  - Role parsing from ints, numeric strings and names
  - ensure_permission guard used by the use cases
"""

import pytest

from sees_console.crosscutting.exceptions import (
    AuthenticationError,
    AuthorizationError,
)
from sees_console.identity.rbac import (
    Permission,
    ensure_permission,
    has_permission,
    permissions_for,
)
from sees_console.identity.users import SessionUser, UserRole

pytestmark = pytest.mark.unit


def _actor(role: UserRole) -> SessionUser:
    return SessionUser(user_id="u-1", name="N", email="n@example.com", role=role)


def test_roles_are_ordered():
    assert UserRole.VIEWER < UserRole.EDITOR < UserRole.ADMIN
    assert [int(r) for r in UserRole] == [0, 1, 2]


@pytest.mark.parametrize(
    "role,expected",
    [
        (UserRole.VIEWER, {Permission.SEES_READ}),
        (UserRole.EDITOR, {Permission.SEES_READ, Permission.SEES_WRITE}),
        (UserRole.ADMIN, set(Permission)),
    ],
)
def test_permissions_inherit_upwards(role, expected):
    assert permissions_for(role) == expected


def test_viewer_cannot_write():
    assert has_permission(UserRole.VIEWER, Permission.SEES_READ)
    assert not has_permission(UserRole.VIEWER, Permission.SEES_WRITE)
    assert not has_permission(UserRole.EDITOR, Permission.USERS_MANAGE)


@pytest.mark.parametrize(
    "raw,expected",
    [
        (0, UserRole.VIEWER),
        ("1", UserRole.EDITOR),
        (" 2 ", UserRole.ADMIN),
        ("editor", UserRole.EDITOR),
        (UserRole.ADMIN, UserRole.ADMIN),
    ],
)
def test_role_parse_accepts_known_forms(raw, expected):
    assert UserRole.parse(raw) is expected


@pytest.mark.parametrize("raw", [3, -1, "owner", "", True, "1.5"])
def test_role_parse_rejects_unknown(raw):
    with pytest.raises(ValueError):
        UserRole.parse(raw)


def test_ensure_permission_requires_actor():
    with pytest.raises(AuthenticationError):
        ensure_permission(None, Permission.SEES_READ)


def test_ensure_permission_rejects_low_role():
    with pytest.raises(AuthorizationError):
        ensure_permission(_actor(UserRole.VIEWER), Permission.SEES_WRITE)


def test_ensure_permission_returns_actor():
    actor = _actor(UserRole.ADMIN)
    assert ensure_permission(actor, Permission.USERS_MANAGE) is actor
