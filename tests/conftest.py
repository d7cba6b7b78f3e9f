"""
Name: Pytest Configuration and Shared Fixtures

Responsibilities:
  - Configure the test environment (APP_ENV=test, no .env loading)
  - Provide an in-memory container and a FastAPI TestClient over it
  - Provide a fake cloud provisioner that records calls
  - Seed users with known passwords

Notes:
  - Fixtures are function scoped: every test gets a fresh store and repos
  - Users are seeded with asyncio.run before the TestClient starts its loop
"""

import asyncio
import os
import sys
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from sees_console.crosscutting import config as app_config  # noqa: E402

app_config.Settings.model_config["env_file"] = None

os.environ.setdefault("APP_ENV", "test")

from fastapi.testclient import TestClient  # noqa: E402

from sees_console.api.main import create_app  # noqa: E402
from sees_console.container import AppContainer, assemble  # noqa: E402
from sees_console.crosscutting.config import Settings  # noqa: E402
from sees_console.crosscutting.exceptions import CloudProvisioningError  # noqa: E402
from sees_console.domain.entities import ProvisionedResources  # noqa: E402
from sees_console.identity.credentials import hash_password  # noqa: E402
from sees_console.identity.users import User, UserRole  # noqa: E402
from sees_console.infrastructure.cloud.null import NullProvisioner  # noqa: E402
from sees_console.infrastructure.kv.in_memory import InMemoryKeyValueStore  # noqa: E402
from sees_console.infrastructure.repositories.in_memory import (  # noqa: E402
    InMemorySeesRepository,
    InMemoryUserRepository,
)

DEFAULT_PASSWORD = "secret-pass"


def pytest_configure(config) -> None:
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Iterator[None]:
    app_config.get_settings.cache_clear()
    yield
    app_config.get_settings.cache_clear()


# ============================================================================
# Fakes
# ============================================================================


class FakeProvisioner:
    """CloudProvisioner double: records calls, can be told to fail."""

    def __init__(
        self,
        *,
        configured: bool = True,
        fail_provision: bool = False,
        fail_teardown: bool = False,
        register_failures: int = 0,
        provision_error: Optional[Exception] = None,
        teardown_error: Optional[Exception] = None,
    ) -> None:
        self.configured = configured
        self.fail_provision = fail_provision
        self.fail_teardown = fail_teardown
        self.register_failures = register_failures
        # Raised instead of CloudProvisioningError when set.
        self.provision_error = provision_error
        self.teardown_error = teardown_error
        self.provisioned: List[Tuple[str, str]] = []
        self.registered: List[Tuple[str, str]] = []
        self.torn_down: List[Tuple[str, str]] = []

    def is_configured(self) -> bool:
        return self.configured

    def provision(
        self, dns_zone_name: str, project_name: str
    ) -> Optional[ProvisionedResources]:
        self.provisioned.append((dns_zone_name, project_name))
        if self.provision_error is not None:
            raise self.provision_error
        if self.fail_provision:
            raise CloudProvisioningError("Cloud provisioning failed")
        return ProvisionedResources(
            static_app_name=f"stapp-{project_name}-dev-je-001-abcde",
            static_app_url=f"{project_name}.azurestaticapps.net",
            dns_zone_name=dns_zone_name,
            name_servers=["ns1-01.azure-dns.com.", "ns2-01.azure-dns.net."],
        )

    def register_custom_domain(self, static_app_name: str, domain: str) -> None:
        self.registered.append((static_app_name, domain))
        if self.register_failures > 0:
            self.register_failures -= 1
            raise CloudProvisioningError("Custom domain registration failed")

    def teardown(self, dns_zone_name: str, static_app_name: str) -> None:
        self.torn_down.append((dns_zone_name, static_app_name))
        if self.teardown_error is not None:
            raise self.teardown_error
        if self.fail_teardown:
            raise CloudProvisioningError("Cloud teardown failed")


# ============================================================================
# Settings / container
# ============================================================================


@pytest.fixture
def settings() -> Settings:
    return Settings(app_env="test", custom_domain_delay_seconds=0)


@pytest.fixture
def provisioner() -> NullProvisioner:
    """Cloud disabled by default; tests override with FakeProvisioner."""
    return NullProvisioner()


@pytest.fixture
def fake_provisioner() -> FakeProvisioner:
    """Configured provisioner double; override `provisioner` to use it."""
    return FakeProvisioner()


@pytest.fixture
def container(settings: Settings, provisioner) -> AppContainer:
    return assemble(
        settings,
        store=InMemoryKeyValueStore(),
        users=InMemoryUserRepository(),
        sees=InMemorySeesRepository(),
        provisioner=provisioner,
    )


@pytest.fixture
def client(container: AppContainer) -> Iterator[TestClient]:
    app = create_app(container=container)
    with TestClient(app) as test_client:
        yield test_client


# ============================================================================
# Users
# ============================================================================


def _seed_user(
    container: AppContainer,
    *,
    role: UserRole,
    email: str,
    name: str = "Test User",
    password: str = DEFAULT_PASSWORD,
) -> User:
    return asyncio.run(
        container.users.create_user(
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=role,
        )
    )


@pytest.fixture
def admin_user(container: AppContainer) -> User:
    return _seed_user(
        container, role=UserRole.ADMIN, email="admin@example.com", name="Admin"
    )


@pytest.fixture
def editor_user(container: AppContainer) -> User:
    return _seed_user(
        container, role=UserRole.EDITOR, email="editor@example.com", name="Editor"
    )


@pytest.fixture
def viewer_user(container: AppContainer) -> User:
    return _seed_user(
        container, role=UserRole.VIEWER, email="viewer@example.com", name="Viewer"
    )


@pytest.fixture
def make_user(container: AppContainer):
    """Factory: seed a user with DEFAULT_PASSWORD (or a given one)."""

    def _make(*, role: UserRole, email: str, **kwargs) -> User:
        return _seed_user(container, role=role, email=email, **kwargs)

    return _make


@pytest.fixture
def login(client: TestClient):
    """Sign in through the API; the TestClient keeps the session cookie."""

    def _login(email: str, password: str = DEFAULT_PASSWORD):
        response = client.post(
            "/api/auth/login", json={"email": email, "password": password}
        )
        assert response.status_code == 200, response.text
        return response

    return _login
