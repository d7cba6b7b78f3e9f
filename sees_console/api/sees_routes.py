"""
===============================================================================
CRC CARD — api/sees_routes.py (SEES records, drafts, placeholders, preview)
===============================================================================

Responsibilities:
  - CRUD over SEES records (read: any session; write: Editor or above).
  - Draft step of the creation flow (sees:draft:{id}, 1h TTL).
  - Placeholder schema, validation and extraction for the form.
  - HTML preview of the template with query-string values.
  - Rendered page of a stored record.
  - Status of deferred custom domain registrations.

Patterns:
  - Thin controller: use cases and stores hold the rules.
  - Static paths are declared before /{sees_id} so they never shadow.

Collaborators:
  - application.usecases.sees.*
  - application.drafts.DraftStore
  - application.template_engine
  - application.provisioning.DomainRegistrationScheduler
===============================================================================
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from ..application import template_engine
from ..application.drafts import DraftStore
from ..application.provisioning import DomainRegistrationScheduler
from ..application.usecases.sees import (
    CreateSeesInput,
    CreateSeesUseCase,
    DeleteSeesUseCase,
    GetSeesUseCase,
    ListSeesUseCase,
    PreviewDraftUseCase,
    RenderSeesUseCase,
    UpdateSeesInput,
    UpdateSeesUseCase,
)
from ..crosscutting.config import Settings
from ..crosscutting.error_responses import OPENAPI_ERROR_RESPONSES, not_found
from ..crosscutting.logger import logger
from ..domain.entities import Sees, parse_display_id
from ..identity.auth_users import require_permission
from ..identity.rbac import Permission
from ..identity.users import SessionUser
from .dependencies import (
    get_app_settings,
    get_create_sees_use_case,
    get_delete_sees_use_case,
    get_draft_store,
    get_get_sees_use_case,
    get_list_sees_use_case,
    get_preview_draft_use_case,
    get_render_sees_use_case,
    get_scheduler,
    get_update_sees_use_case,
)

router = APIRouter(prefix="/api/sees", tags=["sees"], responses=OPENAPI_ERROR_RESPONSES)

_read = require_permission(Permission.SEES_READ)
_write = require_permission(Permission.SEES_WRITE)

PREVIEW_ERROR_HTML = (
    "<html><body><h1>Failed to generate the preview</h1></body></html>"
)


# -----------------------------------------------------------------------------
# DTOs
# -----------------------------------------------------------------------------


class NsRecordResponse(BaseModel):
    id: int
    seesId: int
    nameServer: str


class SeesResponse(BaseModel):
    id: int
    displayId: str
    title: str
    targetDomain: str
    redirectUrl: str
    note: Optional[str]
    previewUrl: Optional[str]
    templateVariables: Dict[str, Any]
    staticAppName: Optional[str]
    staticAppUrl: Optional[str]
    dnsZoneName: Optional[str]
    nsRecords: List[NsRecordResponse]
    createdAt: datetime
    updatedAt: datetime


class CreateSeesResponse(SeesResponse):
    domainTaskId: Optional[str] = None


class CreateSeesRequest(BaseModel):
    draftId: Optional[str] = None
    title: Optional[str] = None
    targetDomain: Optional[str] = None
    redirectUrl: Optional[str] = None
    note: Optional[str] = None
    previewUrl: Optional[str] = None
    templateVariables: Optional[Dict[str, Any]] = None
    nsRecords: Optional[List[str]] = None


class UpdateSeesRequest(BaseModel):
    redirectUrl: Optional[str] = None
    note: Optional[str] = None
    previewUrl: Optional[str] = None
    templateVariables: Optional[Dict[str, Any]] = None


class DraftRequest(BaseModel):
    title: Optional[str] = None
    targetDomain: Optional[str] = None
    redirectUrl: Optional[str] = None
    note: Optional[str] = None


class DraftSavedResponse(BaseModel):
    draftId: str
    message: str


class DraftResponse(BaseModel):
    title: str
    targetDomain: str
    redirectUrl: str
    note: Optional[str]
    createdAt: str


class PlaceholdersResponse(BaseModel):
    placeholders: List[Dict[str, Any]]
    defaults: Dict[str, str]


class ValidateRequest(BaseModel):
    values: Dict[str, Any] = {}
    extended: bool = True


class ValidateResponse(BaseModel):
    valid: bool
    errors: List[str]


class ExtractRequest(BaseModel):
    html: str = ""


class ExtractResponse(BaseModel):
    values: Dict[str, Any]


class DeleteResponse(BaseModel):
    success: bool = True
    cloudResourcesRemoved: bool = False


def _to_sees_response(sees: Sees) -> Dict[str, Any]:
    return {
        "id": sees.id,
        "displayId": sees.display_id,
        "title": sees.title,
        "targetDomain": sees.target_domain,
        "redirectUrl": sees.redirect_url,
        "note": sees.note,
        "previewUrl": sees.preview_url,
        "templateVariables": sees.template_variables,
        "staticAppName": sees.static_app_name,
        "staticAppUrl": sees.static_app_url,
        "dnsZoneName": sees.dns_zone_name,
        "nsRecords": [
            {"id": r.id, "seesId": r.sees_id, "nameServer": r.name_server}
            for r in sees.ns_records
        ],
        "createdAt": sees.created_at,
        "updatedAt": sees.updated_at,
    }


def _sees_id(raw: str) -> int:
    """Accept "7" and "0007"; anything else is a missing record."""
    try:
        return parse_display_id(raw)
    except ValueError:
        raise not_found("SEES", raw)


# -----------------------------------------------------------------------------
# Collection
# -----------------------------------------------------------------------------


@router.get("", response_model=List[SeesResponse])
async def list_sees(
    _user: SessionUser = Depends(_read),
    use_case: ListSeesUseCase = Depends(get_list_sees_use_case),
):
    result = await use_case.execute()
    return [_to_sees_response(s) for s in result.items]


@router.post("", response_model=CreateSeesResponse, status_code=201)
async def create_sees(
    req: CreateSeesRequest,
    actor: SessionUser = Depends(_write),
    use_case: CreateSeesUseCase = Depends(get_create_sees_use_case),
):
    result = await use_case.execute(
        actor=actor,
        data=CreateSeesInput(
            title=req.title,
            target_domain=req.targetDomain,
            redirect_url=req.redirectUrl,
            template_variables=req.templateVariables,
            note=req.note,
            preview_url=req.previewUrl,
            name_servers=list(req.nsRecords or []),
            draft_id=req.draftId,
        ),
    )
    body = _to_sees_response(result.sees)
    body["domainTaskId"] = result.domain_task.id if result.domain_task else None
    return body


# -----------------------------------------------------------------------------
# Drafts
# -----------------------------------------------------------------------------


@router.post("/draft", response_model=DraftSavedResponse)
async def save_draft(
    req: DraftRequest,
    _user: SessionUser = Depends(_write),
    drafts: DraftStore = Depends(get_draft_store),
):
    draft = await drafts.save(
        title=req.title,
        target_domain=req.targetDomain,
        redirect_url=req.redirectUrl,
        note=req.note,
    )
    return DraftSavedResponse(draftId=draft.id, message="Draft saved")


@router.get("/draft/{draft_id}", response_model=DraftResponse)
async def get_draft(
    draft_id: str,
    _user: SessionUser = Depends(_read),
    drafts: DraftStore = Depends(get_draft_store),
):
    draft = await drafts.get(draft_id)
    if draft is None:
        raise not_found("Draft", draft_id)
    return DraftResponse(**draft.to_payload())


# -----------------------------------------------------------------------------
# Placeholders
# -----------------------------------------------------------------------------


@router.get("/placeholders", response_model=PlaceholdersResponse)
async def list_placeholders(_user: SessionUser = Depends(_read)):
    return PlaceholdersResponse(
        placeholders=[p.to_dict() for p in template_engine.list_placeholders()],
        defaults=template_engine.default_values(),
    )


@router.post("/placeholders/validate", response_model=ValidateResponse)
async def validate_placeholders(
    req: ValidateRequest,
    _user: SessionUser = Depends(_read),
    settings: Settings = Depends(get_app_settings),
):
    if req.extended:
        result = template_engine.validate_extended(
            req.values, url_pattern=settings.template_url_pattern
        )
    else:
        result = template_engine.validate(req.values)
    return ValidateResponse(valid=result.valid, errors=result.errors)


@router.post("/placeholders/extract", response_model=ExtractResponse)
async def extract_placeholders(
    req: ExtractRequest, _user: SessionUser = Depends(_read)
):
    return ExtractResponse(values=template_engine.extract_placeholders(req.html))


# -----------------------------------------------------------------------------
# Preview / deferred tasks
# -----------------------------------------------------------------------------


@router.get("/preview/{draft_id}", response_class=HTMLResponse)
async def preview(
    draft_id: str,
    request: Request,
    _user: SessionUser = Depends(_read),
    use_case: PreviewDraftUseCase = Depends(get_preview_draft_use_case),
):
    """Template rendered with the query-string values (no redirect script)."""
    values = dict(request.query_params)
    try:
        result = use_case.execute(values)
    except (OSError, UnicodeDecodeError):
        logger.exception("Preview generation failed", extra={"draft_id": draft_id})
        return HTMLResponse(PREVIEW_ERROR_HTML, status_code=500)
    return HTMLResponse(result.html)


@router.get("/domain-tasks/{task_id}")
async def domain_task_status(
    task_id: str,
    _user: SessionUser = Depends(_read),
    scheduler: DomainRegistrationScheduler = Depends(get_scheduler),
):
    task = scheduler.status(task_id)
    if task is None:
        raise not_found("Domain task", task_id)
    return task.to_dict()


# -----------------------------------------------------------------------------
# Single record
# -----------------------------------------------------------------------------


@router.get("/{sees_id}", response_model=SeesResponse)
async def get_sees(
    sees_id: str,
    _user: SessionUser = Depends(_read),
    use_case: GetSeesUseCase = Depends(get_get_sees_use_case),
):
    result = await use_case.execute(_sees_id(sees_id))
    return _to_sees_response(result.sees)


@router.get("/{sees_id}/render", response_class=HTMLResponse)
async def render_sees(
    sees_id: str,
    _user: SessionUser = Depends(_read),
    use_case: RenderSeesUseCase = Depends(get_render_sees_use_case),
):
    result = await use_case.execute(_sees_id(sees_id))
    return HTMLResponse(result.html)


@router.put("/{sees_id}", response_model=SeesResponse)
async def update_sees(
    sees_id: str,
    req: UpdateSeesRequest,
    actor: SessionUser = Depends(_write),
    use_case: UpdateSeesUseCase = Depends(get_update_sees_use_case),
):
    result = await use_case.execute(
        actor=actor,
        sees_id=_sees_id(sees_id),
        data=UpdateSeesInput(
            redirect_url=req.redirectUrl,
            template_variables=req.templateVariables,
            note=req.note,
            preview_url=req.previewUrl,
        ),
    )
    return _to_sees_response(result.sees)


@router.delete("/{sees_id}", response_model=DeleteResponse)
async def delete_sees(
    sees_id: str,
    actor: SessionUser = Depends(_write),
    use_case: DeleteSeesUseCase = Depends(get_delete_sees_use_case),
):
    result = await use_case.execute(actor=actor, sees_id=_sees_id(sees_id))
    return DeleteResponse(cloudResourcesRemoved=result.cloud_resources_removed)


__all__ = ["router"]
