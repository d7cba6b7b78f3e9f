"""
Name: Draft Store Tests

Responsibilities:
  - save(): required fields, normalization, sees:draft:{id} with TTL
  - get(): missing or expired drafts are None
  - delete(): idempotent
"""

import pytest

from sees_console.application.drafts import DraftStore, draft_key
from sees_console.crosscutting.exceptions import ValidationError
from sees_console.infrastructure.kv.in_memory import InMemoryKeyValueStore

pytestmark = pytest.mark.unit


async def test_save_and_get_round_trip():
    store = InMemoryKeyValueStore()
    drafts = DraftStore(store, ttl_seconds=3600)

    draft = await drafts.save(
        title=" Closing notice ",
        target_domain="Example.COM",
        redirect_url="https://example.org",
        note="",
    )

    assert store.keys() == [draft_key(draft.id)]
    loaded = await drafts.get(draft.id)
    assert loaded == draft
    assert loaded.title == "Closing notice"
    assert loaded.target_domain == "example.com"
    assert loaded.note is None
    assert loaded.created_at


async def test_save_lists_every_missing_field():
    drafts = DraftStore(InMemoryKeyValueStore(), ttl_seconds=3600)

    with pytest.raises(ValidationError) as exc_info:
        await drafts.save(title="", target_domain=None, redirect_url="  ")

    assert exc_info.value.errors == [
        "title is required",
        "targetDomain is required",
        "redirectUrl is required",
    ]


async def test_draft_expires_after_ttl():
    now = [0.0]
    drafts = DraftStore(InMemoryKeyValueStore(clock=lambda: now[0]), ttl_seconds=3600)
    draft = await drafts.save(
        title="t", target_domain="example.com", redirect_url="https://x.example"
    )

    now[0] = 3600.0

    assert await drafts.get(draft.id) is None


async def test_get_unknown_and_blank_ids():
    drafts = DraftStore(InMemoryKeyValueStore(), ttl_seconds=3600)

    assert await drafts.get("missing") is None
    assert await drafts.get("") is None


async def test_delete_is_idempotent():
    drafts = DraftStore(InMemoryKeyValueStore(), ttl_seconds=3600)
    draft = await drafts.save(
        title="t", target_domain="example.com", redirect_url="https://x.example"
    )

    await drafts.delete(draft.id)
    await drafts.delete(draft.id)

    assert await drafts.get(draft.id) is None
