"""
USE CASE: List SEES records

Responsibilities:
  - Return every record, newest first, with its NS records attached.

Collaborators:
  - SeesRepository.list_sees
"""

from __future__ import annotations

from ....domain.repositories import SeesRepository
from .sees_results import ListSeesResult


class ListSeesUseCase:
    def __init__(self, sees_repository: SeesRepository) -> None:
        self._sees = sees_repository

    async def execute(self) -> ListSeesResult:
        return ListSeesResult(items=await self._sees.list_sees())
