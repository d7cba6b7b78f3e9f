"""
===============================================================================
USE CASE: Delete SEES record
===============================================================================

Rules:
    - Editor or above (checked first).
    - Missing record -> NotFoundError.
    - Cloud teardown is best-effort and never blocks the deletion.
    - NS records go with the parent (cascade).

CRC:
    Collaborators:
      - SeesRepository.get_sees / delete_sees
      - ProvisioningService.teardown_for
===============================================================================
"""

from __future__ import annotations

from typing import Optional

from ....crosscutting.exceptions import NotFoundError
from ....crosscutting.logger import logger
from ....domain.entities import format_display_id
from ....domain.repositories import SeesRepository
from ....identity.rbac import Permission, ensure_permission
from ....identity.users import SessionUser
from ...provisioning import ProvisioningService
from .get_sees import MSG_SEES_NOT_FOUND
from .sees_results import DeleteSeesResult


class DeleteSeesUseCase:
    def __init__(
        self, sees_repository: SeesRepository, provisioning: ProvisioningService
    ) -> None:
        self._sees = sees_repository
        self._provisioning = provisioning

    async def execute(
        self, *, actor: Optional[SessionUser], sees_id: int
    ) -> DeleteSeesResult:
        actor = ensure_permission(actor, Permission.SEES_WRITE)

        sees = await self._sees.get_sees(sees_id)
        if sees is None:
            raise NotFoundError(f"{MSG_SEES_NOT_FOUND}: {format_display_id(sees_id)}")

        removed = await self._provisioning.teardown_for(sees)

        if not await self._sees.delete_sees(sees_id):
            # R: Deleted concurrently between the read and the delete.
            raise NotFoundError(f"{MSG_SEES_NOT_FOUND}: {format_display_id(sees_id)}")

        logger.info(
            "SEES record deleted",
            extra={
                "sees_id": sees_id,
                "user_id": actor.user_id,
                "cloud_resources_removed": removed,
            },
        )
        return DeleteSeesResult(deleted=True, cloud_resources_removed=removed)
