"""
Name: User Management Use Case Tests

Responsibilities:
  - Admin-only guards (USERS_READ / USERS_MANAGE)
  - create_user: required fields, role parsing, duplicate email
  - update_user_role / delete_user: missing user, self deletion
  - Results never expose password hashes
"""

from uuid import uuid4

import pytest

from sees_console.application.usecases.users import (
    CreateUserUseCase,
    DeleteUserUseCase,
    ListUsersUseCase,
    UpdateUserRoleUseCase,
)
from sees_console.application.usecases.users.create_user import (
    MSG_DUPLICATE_EMAIL,
    parse_role,
)
from sees_console.crosscutting.exceptions import (
    AuthorizationError,
    ConflictError,
    UserNotFoundError,
    ValidationError,
)
from sees_console.identity.credentials import CredentialManager, verify_password
from sees_console.identity.users import SessionUser, UserRole
from sees_console.infrastructure.kv.in_memory import InMemoryKeyValueStore
from sees_console.infrastructure.repositories.in_memory import InMemoryUserRepository

pytestmark = pytest.mark.unit


@pytest.fixture
def users() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def create_user(users) -> CreateUserUseCase:
    return CreateUserUseCase(users, CredentialManager(users, InMemoryKeyValueStore()))


def _actor(role: UserRole = UserRole.ADMIN, user_id: str = None) -> SessionUser:
    return SessionUser(
        user_id=user_id or str(uuid4()),
        name="Admin",
        email="admin@example.com",
        role=role,
    )


# ============================================================================
# parse_role
# ============================================================================


def test_parse_role_default_applies_only_to_missing_values():
    assert parse_role(None, default=UserRole.VIEWER) is UserRole.VIEWER
    assert parse_role("2") is UserRole.ADMIN
    with pytest.raises(ValidationError):
        parse_role(5)
    with pytest.raises(ValidationError):
        parse_role(True)


# ============================================================================
# create
# ============================================================================


async def test_create_defaults_to_viewer_and_hashes(create_user, users):
    result = await create_user.execute(
        actor=_actor(),
        name=" Bob ",
        email="Bob@Example.com",
        password="secret-pass",
    )

    assert result.user.role is UserRole.VIEWER
    assert result.user.email == "bob@example.com"
    assert result.user.name == "Bob"
    assert not hasattr(result.user, "password_hash")
    stored = await users.get_user_by_email("bob@example.com")
    assert verify_password("secret-pass", stored.password_hash)


async def test_create_requires_fields(create_user):
    with pytest.raises(ValidationError) as exc_info:
        await create_user.execute(actor=_actor(), name="", email=None, password="x")

    assert exc_info.value.errors == ["name is required", "email is required"]


async def test_create_rejects_invalid_role(create_user, users):
    with pytest.raises(ValidationError):
        await create_user.execute(
            actor=_actor(),
            name="Bob",
            email="bob@example.com",
            password="secret-pass",
            role=7,
        )

    assert await users.list_users() == []


async def test_create_enforces_password_policy(create_user):
    with pytest.raises(ValidationError):
        await create_user.execute(
            actor=_actor(), name="Bob", email="bob@example.com", password="123"
        )


async def test_create_rejects_duplicate_email(create_user):
    await create_user.execute(
        actor=_actor(), name="Bob", email="bob@example.com", password="secret-pass"
    )

    with pytest.raises(ConflictError) as exc_info:
        await create_user.execute(
            actor=_actor(),
            name="Bobby",
            email="BOB@example.com",
            password="secret-pass",
        )

    assert exc_info.value.message == MSG_DUPLICATE_EMAIL


@pytest.mark.parametrize("role", [UserRole.VIEWER, UserRole.EDITOR])
async def test_non_admin_cannot_create(create_user, users, role):
    with pytest.raises(AuthorizationError):
        await create_user.execute(
            actor=_actor(role),
            name="Bob",
            email="bob@example.com",
            password="secret-pass",
        )

    assert await users.list_users() == []


# ============================================================================
# list / update role / delete
# ============================================================================


async def test_list_requires_admin(create_user, users):
    await create_user.execute(
        actor=_actor(), name="Bob", email="bob@example.com", password="secret-pass"
    )

    with pytest.raises(AuthorizationError):
        await ListUsersUseCase(users).execute(actor=_actor(UserRole.EDITOR))

    listed = (await ListUsersUseCase(users).execute(actor=_actor())).users
    assert [u.email for u in listed] == ["bob@example.com"]


async def test_update_role(create_user, users):
    created = (
        await create_user.execute(
            actor=_actor(), name="Bob", email="bob@example.com", password="secret-pass"
        )
    ).user

    result = await UpdateUserRoleUseCase(users).execute(
        actor=_actor(), user_id=created.id, role="editor"
    )

    assert result.user.role is UserRole.EDITOR
    assert (await users.get_user_by_id(created.id)).role is UserRole.EDITOR


async def test_update_role_validates_and_finds_user(users):
    use_case = UpdateUserRoleUseCase(users)

    with pytest.raises(ValidationError):
        await use_case.execute(actor=_actor(), user_id=uuid4(), role=None)
    with pytest.raises(ValidationError):
        await use_case.execute(actor=_actor(), user_id=uuid4(), role=3)
    with pytest.raises(UserNotFoundError):
        await use_case.execute(actor=_actor(), user_id=uuid4(), role=1)


async def test_delete_user(create_user, users):
    created = (
        await create_user.execute(
            actor=_actor(), name="Bob", email="bob@example.com", password="secret-pass"
        )
    ).user

    result = await DeleteUserUseCase(users).execute(actor=_actor(), user_id=created.id)

    assert result.deleted is True
    assert await users.get_user_by_id(created.id) is None
    with pytest.raises(UserNotFoundError):
        await DeleteUserUseCase(users).execute(actor=_actor(), user_id=created.id)


async def test_cannot_delete_own_account(users):
    own_id = uuid4()

    with pytest.raises(ValidationError):
        await DeleteUserUseCase(users).execute(
            actor=_actor(user_id=str(own_id)), user_id=own_id
        )
