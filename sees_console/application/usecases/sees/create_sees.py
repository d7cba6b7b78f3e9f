"""
===============================================================================
USE CASE: Create SEES record
===============================================================================

Business Goal:
    Register a decommission/redirect notice for a target domain, the second
    step of the two-step creation flow (draft -> final record).

Rules:
    - Editor or above; checked before anything else.
    - title, targetDomain, redirectUrl and templateVariables are required.
    - Template values pass the extended placeholder validation.
    - One record per target domain (ConflictError otherwise).
    - The draft, when given, is deleted once the record exists.
    - Cloud provisioning and the custom domain registration are secondary:
      their failure never rolls back the record.

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Class:
    CreateSeesUseCase

Collaborators:
    - identity.rbac.ensure_permission
    - application.template_engine.validate_extended
    - SeesRepository.create_sees
    - DraftStore.delete
    - ProvisioningService.provision_for
===============================================================================
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from ....crosscutting.exceptions import KeyValueStoreError, ValidationError
from ....crosscutting.logger import logger
from ....domain.entities import SeesCreate
from ....domain.repositories import SeesRepository
from ....identity.rbac import Permission, ensure_permission
from ....identity.users import SessionUser
from ...drafts import DraftStore
from ...provisioning import ProvisioningService
from ...template_engine import DEFAULT_URL_PATTERN, validate_extended
from .sees_results import CreateSeesInput, CreateSeesResult

MSG_REQUIRED_FIELDS = "Required fields are missing"
MSG_INVALID_TEMPLATE_VALUES = "Template values are invalid"


def _text(value: Optional[str]) -> str:
    return (value or "").strip()


def check_template_variables(
    template_variables: Optional[Dict[str, Any]], url_pattern: str
) -> Dict[str, Any]:
    """Shared by create/update: the placeholder values must validate."""
    if not isinstance(template_variables, dict):
        raise ValidationError(
            MSG_REQUIRED_FIELDS, errors=["templateVariables is required"]
        )
    result = validate_extended(template_variables, url_pattern=url_pattern)
    if not result.valid:
        raise ValidationError(MSG_INVALID_TEMPLATE_VALUES, errors=result.errors)
    return dict(template_variables)


class CreateSeesUseCase:
    def __init__(
        self,
        sees_repository: SeesRepository,
        drafts: DraftStore,
        provisioning: ProvisioningService,
        *,
        url_pattern: str = DEFAULT_URL_PATTERN,
    ) -> None:
        self._sees = sees_repository
        self._drafts = drafts
        self._provisioning = provisioning
        self._url_pattern = url_pattern

    async def execute(
        self, *, actor: Optional[SessionUser], data: CreateSeesInput
    ) -> CreateSeesResult:
        # ---------------------------------------------------------------------
        # 1) Authorization (before any mutation).
        # ---------------------------------------------------------------------
        actor = ensure_permission(actor, Permission.SEES_WRITE)

        # ---------------------------------------------------------------------
        # 2) Input validation.
        # ---------------------------------------------------------------------
        missing = [
            name
            for name, value in (
                ("title", data.title),
                ("targetDomain", data.target_domain),
                ("redirectUrl", data.redirect_url),
            )
            if not _text(value)
        ]
        if data.template_variables is None:
            missing.append("templateVariables")
        if missing:
            raise ValidationError(
                MSG_REQUIRED_FIELDS, errors=[f"{name} is required" for name in missing]
            )
        template_variables = check_template_variables(
            data.template_variables, self._url_pattern
        )

        # ---------------------------------------------------------------------
        # 3) Primary mutation: the record (and its NS records).
        # ---------------------------------------------------------------------
        sees = await self._sees.create_sees(
            SeesCreate(
                title=_text(data.title),
                target_domain=_text(data.target_domain).lower(),
                redirect_url=_text(data.redirect_url),
                template_variables=template_variables,
                note=_text(data.note) or None,
                preview_url=_text(data.preview_url) or None,
                name_servers=[ns.strip() for ns in data.name_servers if ns.strip()],
            )
        )
        logger.info(
            "SEES record created",
            extra={
                "sees_id": sees.id,
                "display_id": sees.display_id,
                "user_id": actor.user_id,
            },
        )

        # ---------------------------------------------------------------------
        # 4) The draft has served its purpose.
        # ---------------------------------------------------------------------
        if data.draft_id:
            try:
                await self._drafts.delete(data.draft_id)
            except KeyValueStoreError as exc:
                # R: The draft expires on its own; the record already exists.
                logger.warning(
                    "Draft cleanup failed",
                    extra={"draft_id": data.draft_id, "error_id": exc.error_id},
                )

        # ---------------------------------------------------------------------
        # 5) Secondary, best-effort: cloud resources + deferred domain task.
        # ---------------------------------------------------------------------
        outcome = await self._provisioning.provision_for(sees)
        return CreateSeesResult(sees=outcome.sees, domain_task=outcome.domain_task)
