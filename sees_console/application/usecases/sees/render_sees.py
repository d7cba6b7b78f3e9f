"""
===============================================================================
USE CASES: Render SEES pages
===============================================================================

RenderSeesUseCase
    Render a stored record's template variables into the notice template.
    The output is the page to publish on the record's static site.

PreviewDraftUseCase
    Render the template for the creation form preview: values come from the
    request (query string), asset paths are made absolute and the automatic
    redirect script is removed so the preview stays on screen.

Notes:
    - The template file is read per call so template edits need no restart.
===============================================================================
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from ....domain.repositories import SeesRepository
from ...template_engine import load_template, prepare_preview, render
from .get_sees import GetSeesUseCase
from .sees_results import RenderSeesResult


class RenderSeesUseCase:
    def __init__(
        self, sees_repository: SeesRepository, *, template_path: str | Path
    ) -> None:
        self._get = GetSeesUseCase(sees_repository)
        self._template_path = template_path

    async def execute(self, sees_id: int) -> RenderSeesResult:
        sees = (await self._get.execute(sees_id)).sees
        template = load_template(self._template_path)
        return RenderSeesResult(html=render(template, sees.template_variables))


class PreviewDraftUseCase:
    def __init__(self, *, template_path: str | Path, base_url: str) -> None:
        self._template_path = template_path
        self._base_url = base_url

    def execute(self, values: Mapping[str, Any]) -> RenderSeesResult:
        template = prepare_preview(load_template(self._template_path), self._base_url)
        return RenderSeesResult(html=render(template, values))
