"""
USE CASE: Get one SEES record

Raises NotFoundError when the id does not exist.
"""

from __future__ import annotations

from ....crosscutting.exceptions import NotFoundError
from ....domain.entities import format_display_id
from ....domain.repositories import SeesRepository
from .sees_results import GetSeesResult

MSG_SEES_NOT_FOUND = "SEES record not found"


class GetSeesUseCase:
    def __init__(self, sees_repository: SeesRepository) -> None:
        self._sees = sees_repository

    async def execute(self, sees_id: int) -> GetSeesResult:
        sees = await self._sees.get_sees(sees_id)
        if sees is None:
            raise NotFoundError(f"{MSG_SEES_NOT_FOUND}: {format_display_id(sees_id)}")
        return GetSeesResult(sees=sees)
