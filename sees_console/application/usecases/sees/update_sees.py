"""
USE CASE: Update SEES record

Rules:
  - Editor or above (checked first).
  - redirectUrl and templateVariables are required; template values pass
    the extended placeholder validation.
  - Only redirectUrl, note, previewUrl and templateVariables change; the
    target domain and the cloud resources are fixed at creation.
"""

from __future__ import annotations

from typing import Optional

from ....crosscutting.exceptions import NotFoundError, ValidationError
from ....crosscutting.logger import logger
from ....domain.entities import format_display_id
from ....domain.repositories import SeesRepository
from ....identity.rbac import Permission, ensure_permission
from ....identity.users import SessionUser
from ...template_engine import DEFAULT_URL_PATTERN
from .create_sees import MSG_REQUIRED_FIELDS, check_template_variables
from .get_sees import MSG_SEES_NOT_FOUND
from .sees_results import UpdateSeesInput, UpdateSeesResult


class UpdateSeesUseCase:
    def __init__(
        self,
        sees_repository: SeesRepository,
        *,
        url_pattern: str = DEFAULT_URL_PATTERN,
    ) -> None:
        self._sees = sees_repository
        self._url_pattern = url_pattern

    async def execute(
        self,
        *,
        actor: Optional[SessionUser],
        sees_id: int,
        data: UpdateSeesInput,
    ) -> UpdateSeesResult:
        actor = ensure_permission(actor, Permission.SEES_WRITE)

        missing = []
        if not (data.redirect_url or "").strip():
            missing.append("redirectUrl")
        if data.template_variables is None:
            missing.append("templateVariables")
        if missing:
            raise ValidationError(
                MSG_REQUIRED_FIELDS, errors=[f"{name} is required" for name in missing]
            )
        template_variables = check_template_variables(
            data.template_variables, self._url_pattern
        )

        updated = await self._sees.update_sees(
            sees_id,
            redirect_url=data.redirect_url.strip(),
            note=(data.note or "").strip() or None,
            preview_url=(data.preview_url or "").strip() or None,
            template_variables=template_variables,
        )
        if updated is None:
            raise NotFoundError(f"{MSG_SEES_NOT_FOUND}: {format_display_id(sees_id)}")

        logger.info(
            "SEES record updated",
            extra={"sees_id": sees_id, "user_id": actor.user_id},
        )
        return UpdateSeesResult(sees=updated)
