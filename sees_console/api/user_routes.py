"""
===============================================================================
CRC CARD — api/user_routes.py (User management, admin)
===============================================================================

Responsibilities:
  - List, create, change role of and delete console users.
  - Admin only: enforced by the route dependency and again by each use case.

Collaborators:
  - application.usecases.users.*
  - identity.auth_users.require_permission
===============================================================================
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..application.usecases.users import (
    CreateUserUseCase,
    DeleteUserUseCase,
    ListUsersUseCase,
    UpdateUserRoleUseCase,
    UserView,
)
from ..crosscutting.error_responses import OPENAPI_ERROR_RESPONSES
from ..identity.auth_users import require_permission
from ..identity.rbac import Permission
from ..identity.users import SessionUser
from .dependencies import (
    get_create_user_use_case,
    get_delete_user_use_case,
    get_list_users_use_case,
    get_update_user_role_use_case,
)

router = APIRouter(
    prefix="/api/users", tags=["users"], responses=OPENAPI_ERROR_RESPONSES
)


# -----------------------------------------------------------------------------
# DTOs
# -----------------------------------------------------------------------------


class CreateUserRequest(BaseModel):
    name: str | None = None
    email: str | None = None
    password: str | None = None
    role: Any = None


class UpdateUserRequest(BaseModel):
    role: Any = None


class UserResponse(BaseModel):
    id: UUID
    name: str
    email: str
    role: int
    createdAt: datetime | None
    updatedAt: datetime | None


class DeleteResponse(BaseModel):
    success: bool = True


def _to_user_response(user: UserView) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        role=int(user.role),
        createdAt=user.created_at,
        updatedAt=user.updated_at,
    )


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------


@router.get("", response_model=list[UserResponse])
async def list_users(
    actor: SessionUser = Depends(require_permission(Permission.USERS_READ)),
    use_case: ListUsersUseCase = Depends(get_list_users_use_case),
):
    result = await use_case.execute(actor=actor)
    return [_to_user_response(u) for u in result.users]


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(
    req: CreateUserRequest,
    actor: SessionUser = Depends(require_permission(Permission.USERS_MANAGE)),
    use_case: CreateUserUseCase = Depends(get_create_user_use_case),
):
    result = await use_case.execute(
        actor=actor,
        name=req.name,
        email=req.email,
        password=req.password,
        role=req.role,
    )
    return _to_user_response(result.user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    req: UpdateUserRequest,
    actor: SessionUser = Depends(require_permission(Permission.USERS_MANAGE)),
    use_case: UpdateUserRoleUseCase = Depends(get_update_user_role_use_case),
):
    result = await use_case.execute(actor=actor, user_id=user_id, role=req.role)
    return _to_user_response(result.user)


@router.delete("/{user_id}", response_model=DeleteResponse)
async def delete_user(
    user_id: UUID,
    actor: SessionUser = Depends(require_permission(Permission.USERS_MANAGE)),
    use_case: DeleteUserUseCase = Depends(get_delete_user_use_case),
):
    await use_case.execute(actor=actor, user_id=user_id)
    return DeleteResponse()


__all__ = ["router"]
