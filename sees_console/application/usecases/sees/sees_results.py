"""
===============================================================================
SEES USE CASE INPUTS / RESULTS
===============================================================================

Name:
    SEES use case contracts

Responsibilities:
    - Define the inputs accepted by the SEES commands (create, update).
    - Define typed results returned by every SEES use case.

Notes:
    - Failures are raised as crosscutting.exceptions (ValidationError,
      AuthorizationError, NotFoundError, ConflictError); results only model
      the success path.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ....domain.entities import Sees
from ...provisioning import DomainRegistrationTask


@dataclass(frozen=True)
class CreateSeesInput:
    title: Optional[str]
    target_domain: Optional[str]
    redirect_url: Optional[str]
    template_variables: Optional[Dict[str, Any]]
    note: Optional[str] = None
    preview_url: Optional[str] = None
    name_servers: List[str] = field(default_factory=list)
    draft_id: Optional[str] = None


@dataclass(frozen=True)
class UpdateSeesInput:
    redirect_url: Optional[str]
    template_variables: Optional[Dict[str, Any]]
    note: Optional[str] = None
    preview_url: Optional[str] = None


@dataclass
class ListSeesResult:
    items: List[Sees]


@dataclass
class GetSeesResult:
    sees: Sees


@dataclass
class CreateSeesResult:
    sees: Sees
    domain_task: Optional[DomainRegistrationTask] = None


@dataclass
class UpdateSeesResult:
    sees: Sees


@dataclass
class DeleteSeesResult:
    deleted: bool
    cloud_resources_removed: bool = False


@dataclass
class RenderSeesResult:
    html: str
