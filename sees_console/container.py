"""
===============================================================================
CRC CARD — sees_console/container.py (Composition Root / manual DI)
===============================================================================
Responsibilities:
  - Build every runtime dependency once, at startup, from Settings:
      key-value store, DB pool, repositories, session store, credential
      manager, draft store, cloud provisioner, domain registration scheduler.
  - Expose use case factories for the HTTP layer.
  - Close what it opened (scheduler tasks, store client, DB pool) on shutdown.

Collaborators:
  - crosscutting.config.Settings
  - infrastructure.* (implementations)
  - application.* / identity.* (services and use cases)
  - api.main lifespan (owner of the container)

Runtime decisions:
  - app_env=test: in-memory store and repositories, no network.
  - otherwise: Redis + PostgreSQL.
  - Azure credentials complete: AzureProvisioner, else NullProvisioner.

Notes:
  - No module-level singletons: the lifespan stores the container on
    app.state and tests may build their own.
  - This module does not depend on FastAPI.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from psycopg_pool import AsyncConnectionPool

from .application.drafts import DraftStore
from .application.provisioning import DomainRegistrationScheduler, ProvisioningService
from .application.usecases.sees import (
    CreateSeesUseCase,
    DeleteSeesUseCase,
    GetSeesUseCase,
    ListSeesUseCase,
    PreviewDraftUseCase,
    RenderSeesUseCase,
    UpdateSeesUseCase,
)
from .application.usecases.users import (
    CreateUserUseCase,
    DeleteUserUseCase,
    ListUsersUseCase,
    UpdateUserRoleUseCase,
)
from .crosscutting.config import Settings
from .crosscutting.logger import logger
from .domain.repositories import KeyValueStore, SeesRepository, UserRepository
from .domain.services import CloudProvisioner
from .identity.credentials import CredentialManager
from .identity.sessions import SessionStore
from .infrastructure.cloud.azure import AzureConfig, AzureProvisioner
from .infrastructure.cloud.null import NullProvisioner
from .infrastructure.db.pool import close_pool, open_pool
from .infrastructure.kv.in_memory import InMemoryKeyValueStore
from .infrastructure.kv.redis_store import RedisKeyValueStore
from .infrastructure.repositories.in_memory.sees import InMemorySeesRepository
from .infrastructure.repositories.in_memory.user import InMemoryUserRepository
from .infrastructure.repositories.postgres.sees import PostgresSeesRepository
from .infrastructure.repositories.postgres.user import PostgresUserRepository


@dataclass
class AppContainer:
    settings: Settings
    store: KeyValueStore
    users: UserRepository
    sees: SeesRepository
    sessions: SessionStore
    credentials: CredentialManager
    drafts: DraftStore
    provisioner: CloudProvisioner
    scheduler: DomainRegistrationScheduler
    provisioning: ProvisioningService
    pool: Optional[AsyncConnectionPool] = None

    # -------------------------------------------------------------------------
    # Use cases (cheap, built per call)
    # -------------------------------------------------------------------------

    def list_sees_use_case(self) -> ListSeesUseCase:
        return ListSeesUseCase(self.sees)

    def get_sees_use_case(self) -> GetSeesUseCase:
        return GetSeesUseCase(self.sees)

    def create_sees_use_case(self) -> CreateSeesUseCase:
        return CreateSeesUseCase(
            self.sees,
            self.drafts,
            self.provisioning,
            url_pattern=self.settings.template_url_pattern,
        )

    def update_sees_use_case(self) -> UpdateSeesUseCase:
        return UpdateSeesUseCase(
            self.sees, url_pattern=self.settings.template_url_pattern
        )

    def delete_sees_use_case(self) -> DeleteSeesUseCase:
        return DeleteSeesUseCase(self.sees, self.provisioning)

    def render_sees_use_case(self) -> RenderSeesUseCase:
        return RenderSeesUseCase(self.sees, template_path=self.settings.template_path)

    def preview_draft_use_case(self) -> PreviewDraftUseCase:
        return PreviewDraftUseCase(
            template_path=self.settings.template_path,
            base_url=self.settings.template_base_url,
        )

    def list_users_use_case(self) -> ListUsersUseCase:
        return ListUsersUseCase(self.users)

    def create_user_use_case(self) -> CreateUserUseCase:
        return CreateUserUseCase(self.users, self.credentials)

    def update_user_role_use_case(self) -> UpdateUserRoleUseCase:
        return UpdateUserRoleUseCase(self.users)

    def delete_user_use_case(self) -> DeleteUserUseCase:
        return DeleteUserUseCase(self.users)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def close(self) -> None:
        await self.scheduler.shutdown()
        await self.store.close()
        await close_pool(self.pool)


def build_provisioner(settings: Settings) -> CloudProvisioner:
    if not settings.cloud_configured():
        logger.info("Cloud provisioning disabled (Azure credentials not set)")
        return NullProvisioner()
    return AzureProvisioner(
        AzureConfig(
            subscription_id=settings.azure_subscription_id,
            tenant_id=settings.azure_tenant_id,
            client_id=settings.azure_client_id,
            client_secret=settings.azure_client_secret,
            resource_group=settings.azure_resource_group,
            location=settings.azure_location,
            environment=settings.azure_environment,
        )
    )


def assemble(
    settings: Settings,
    *,
    store: KeyValueStore,
    users: UserRepository,
    sees: SeesRepository,
    provisioner: CloudProvisioner,
    pool: Optional[AsyncConnectionPool] = None,
) -> AppContainer:
    """Wire services on top of already-built adapters."""
    scheduler = DomainRegistrationScheduler(
        provisioner,
        delay_seconds=settings.custom_domain_delay_seconds,
        max_attempts=settings.custom_domain_max_attempts,
        retention_seconds=settings.domain_task_retention_seconds,
    )
    return AppContainer(
        settings=settings,
        store=store,
        users=users,
        sees=sees,
        sessions=SessionStore(store, ttl_seconds=settings.session_ttl_seconds),
        credentials=CredentialManager(
            users,
            store,
            reset_ttl_seconds=settings.reset_token_ttl_seconds,
            min_password_length=settings.password_min_length,
        ),
        drafts=DraftStore(store, ttl_seconds=settings.draft_ttl_seconds),
        provisioner=provisioner,
        scheduler=scheduler,
        provisioning=ProvisioningService(provisioner, sees, scheduler),
        pool=pool,
    )


async def build_container(settings: Settings) -> AppContainer:
    """Open the backing services for the configured environment."""
    provisioner = build_provisioner(settings)

    if settings.is_test():
        logger.info("Using in-memory store and repositories (test environment)")
        return assemble(
            settings,
            store=InMemoryKeyValueStore(),
            users=InMemoryUserRepository(),
            sees=InMemorySeesRepository(),
            provisioner=provisioner,
        )

    pool = await open_pool(
        settings.database_url,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
        statement_timeout_ms=settings.db_statement_timeout_ms,
    )
    store = RedisKeyValueStore.from_url(
        settings.redis_url,
        max_retries=settings.redis_max_retries,
        socket_timeout=settings.redis_socket_timeout_seconds,
    )
    return assemble(
        settings,
        store=store,
        users=PostgresUserRepository(pool),
        sees=PostgresSeesRepository(pool),
        provisioner=provisioner,
        pool=pool,
    )
