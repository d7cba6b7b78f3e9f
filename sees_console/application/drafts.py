"""
===============================================================================
CRC CARD — application/drafts.py
===============================================================================

Module:
    Draft Store (first step of the two-step SEES creation flow)

Responsibilities:
    - Validate and persist first-step form input under `sees:draft:{id}`
      with a 1 hour TTL.
    - Load and delete drafts by generated id.

Collaborators:
    - domain.repositories.KeyValueStore
    - application.usecases.sees.create_sees (deletes the draft on success)
    - api.sees_routes (draft + preview endpoints)
===============================================================================
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Final, Optional
from uuid import uuid4

from ..crosscutting.exceptions import ValidationError
from ..crosscutting.logger import logger
from ..domain.entities import SeesDraft
from ..domain.repositories import KeyValueStore

DRAFT_KEY_PREFIX: Final[str] = "sees:draft:"
DEFAULT_DRAFT_TTL_SECONDS: Final[int] = 60 * 60


def draft_key(draft_id: str) -> str:
    return f"{DRAFT_KEY_PREFIX}{draft_id}"


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


class DraftStore:
    def __init__(
        self, store: KeyValueStore, *, ttl_seconds: int = DEFAULT_DRAFT_TTL_SECONDS
    ) -> None:
        self._store = store
        self._ttl_seconds = ttl_seconds

    async def save(
        self,
        *,
        title: Optional[str],
        target_domain: Optional[str],
        redirect_url: Optional[str],
        note: Optional[str] = None,
    ) -> SeesDraft:
        missing = [
            name
            for name, value in (
                ("title", title),
                ("targetDomain", target_domain),
                ("redirectUrl", redirect_url),
            )
            if not _clean(value)
        ]
        if missing:
            raise ValidationError(
                "Title, target domain and redirect URL are required",
                errors=[f"{name} is required" for name in missing],
            )

        draft = SeesDraft(
            id=str(uuid4()),
            title=_clean(title),
            target_domain=_clean(target_domain).lower(),
            redirect_url=_clean(redirect_url),
            note=_clean(note) or None,
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        await self._store.set_json(
            draft_key(draft.id), draft.to_payload(), self._ttl_seconds
        )
        logger.info("Draft saved", extra={"draft_id": draft.id})
        return draft

    async def get(self, draft_id: str) -> Optional[SeesDraft]:
        if not draft_id:
            return None
        payload = await self._store.get_json(draft_key(draft_id))
        if not isinstance(payload, dict):
            return None
        return SeesDraft.from_payload(draft_id, payload)

    async def delete(self, draft_id: str) -> None:
        if draft_id:
            await self._store.delete(draft_key(draft_id))
