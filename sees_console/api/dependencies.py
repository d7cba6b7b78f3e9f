"""
CRC — api/dependencies.py

Name
- FastAPI dependency providers

Responsibilities
- Resolve the AppContainer built by the lifespan (app.state.container).
- Hand out services and use cases to route handlers via Depends.

Constraints
- No business logic; every provider is a one-line lookup.
"""

from __future__ import annotations

from fastapi import Depends, Request

from ..application.drafts import DraftStore
from ..application.provisioning import DomainRegistrationScheduler
from ..application.usecases.sees import (
    CreateSeesUseCase,
    DeleteSeesUseCase,
    GetSeesUseCase,
    ListSeesUseCase,
    PreviewDraftUseCase,
    RenderSeesUseCase,
    UpdateSeesUseCase,
)
from ..application.usecases.users import (
    CreateUserUseCase,
    DeleteUserUseCase,
    ListUsersUseCase,
    UpdateUserRoleUseCase,
)
from ..container import AppContainer
from ..crosscutting.config import Settings
from ..identity.credentials import CredentialManager
from ..identity.sessions import SessionStore


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


def get_app_settings(container: AppContainer = Depends(get_container)) -> Settings:
    return container.settings


def get_session_store(container: AppContainer = Depends(get_container)) -> SessionStore:
    return container.sessions


def get_credentials(
    container: AppContainer = Depends(get_container),
) -> CredentialManager:
    return container.credentials


def get_draft_store(container: AppContainer = Depends(get_container)) -> DraftStore:
    return container.drafts


def get_scheduler(
    container: AppContainer = Depends(get_container),
) -> DomainRegistrationScheduler:
    return container.scheduler


# -----------------------------------------------------------------------------
# SEES use cases
# -----------------------------------------------------------------------------


def get_list_sees_use_case(
    container: AppContainer = Depends(get_container),
) -> ListSeesUseCase:
    return container.list_sees_use_case()


def get_get_sees_use_case(
    container: AppContainer = Depends(get_container),
) -> GetSeesUseCase:
    return container.get_sees_use_case()


def get_create_sees_use_case(
    container: AppContainer = Depends(get_container),
) -> CreateSeesUseCase:
    return container.create_sees_use_case()


def get_update_sees_use_case(
    container: AppContainer = Depends(get_container),
) -> UpdateSeesUseCase:
    return container.update_sees_use_case()


def get_delete_sees_use_case(
    container: AppContainer = Depends(get_container),
) -> DeleteSeesUseCase:
    return container.delete_sees_use_case()


def get_render_sees_use_case(
    container: AppContainer = Depends(get_container),
) -> RenderSeesUseCase:
    return container.render_sees_use_case()


def get_preview_draft_use_case(
    container: AppContainer = Depends(get_container),
) -> PreviewDraftUseCase:
    return container.preview_draft_use_case()


# -----------------------------------------------------------------------------
# User management use cases
# -----------------------------------------------------------------------------


def get_list_users_use_case(
    container: AppContainer = Depends(get_container),
) -> ListUsersUseCase:
    return container.list_users_use_case()


def get_create_user_use_case(
    container: AppContainer = Depends(get_container),
) -> CreateUserUseCase:
    return container.create_user_use_case()


def get_update_user_role_use_case(
    container: AppContainer = Depends(get_container),
) -> UpdateUserRoleUseCase:
    return container.update_user_role_use_case()


def get_delete_user_use_case(
    container: AppContainer = Depends(get_container),
) -> DeleteUserUseCase:
    return container.delete_user_use_case()
