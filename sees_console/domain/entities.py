"""
===============================================================================
CRC CARD — domain/entities.py
===============================================================================

Module:
    Domain entities (Sees, NsRecord, SeesDraft, ProvisionedResources)

Responsibilities:
    - Define the core business structures (no infrastructure).
    - Minimal helpers that keep simple invariants (display id, draft payload).

Collaborators:
    - domain.repositories: persist/load these entities.
    - application/usecases: build and consume them.
    - api/*: serialize them into response DTOs.

Principles:
    - No dependency on DB/Redis/FastAPI.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

DISPLAY_ID_WIDTH = 4


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_display_id(sees_id: int) -> str:
    """7 -> "0007". Ids wider than four digits are kept as-is."""
    return str(sees_id).zfill(DISPLAY_ID_WIDTH)


def parse_display_id(display_id: str) -> int:
    """ "0007" -> 7. Raises ValueError for non-numeric input."""
    text = (display_id or "").strip()
    if not text.isdigit():
        raise ValueError(f"invalid SEES id: {display_id!r}")
    return int(text)


# ---------------------------------------------------------------------------
# SEES record
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class NsRecord:
    """Name server delegated to the record's DNS zone."""

    id: int
    sees_id: int
    name_server: str


@dataclass
class Sees:
    """
    Decommission/redirect notice for a target domain.

    Cloud fields stay None when provisioning is disabled or failed: the
    record is the primary artifact, the cloud resources are secondary.
    """

    id: int
    title: str
    target_domain: str
    redirect_url: str
    note: Optional[str] = None
    preview_url: Optional[str] = None
    template_variables: Dict[str, Any] = field(default_factory=dict)
    static_app_name: Optional[str] = None
    static_app_url: Optional[str] = None
    dns_zone_name: Optional[str] = None
    ns_records: List[NsRecord] = field(default_factory=list)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @property
    def display_id(self) -> str:
        return format_display_id(self.id)

    @property
    def name_servers(self) -> List[str]:
        return [r.name_server for r in self.ns_records]


@dataclass(frozen=True, slots=True)
class SeesCreate:
    """Input of a record insert (ids and timestamps are assigned by storage)."""

    title: str
    target_domain: str
    redirect_url: str
    template_variables: Dict[str, Any]
    note: Optional[str] = None
    preview_url: Optional[str] = None
    name_servers: List[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Draft (first step of the two-step creation flow)
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SeesDraft:
    id: str
    title: str
    target_domain: str
    redirect_url: str
    note: Optional[str]
    created_at: str

    def to_payload(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "targetDomain": self.target_domain,
            "redirectUrl": self.redirect_url,
            "note": self.note,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_payload(cls, draft_id: str, payload: Dict[str, Any]) -> "SeesDraft":
        return cls(
            id=draft_id,
            title=str(payload.get("title") or ""),
            target_domain=str(payload.get("targetDomain") or ""),
            redirect_url=str(payload.get("redirectUrl") or ""),
            note=payload.get("note"),
            created_at=str(payload.get("createdAt") or ""),
        )


# ---------------------------------------------------------------------------
# Cloud resources
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ProvisionedResources:
    """Result of provisioning a DNS zone + static site for a record."""

    static_app_name: str
    static_app_url: str
    dns_zone_name: str
    name_servers: List[str] = field(default_factory=list)
