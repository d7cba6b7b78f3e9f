"""
===============================================================================
CRC CARD — domain/__init__.py
===============================================================================

Module:
    Domain layer exports

Responsibilities:
    - Central exports for clean imports in application/api.
    - No infrastructure imports here.

Collaborators:
    - domain.entities: Sees, NsRecord, SeesDraft, ProvisionedResources
    - domain.repositories: persistence ports
    - domain.services: cloud provisioning port
===============================================================================
"""

from .entities import (
    NsRecord,
    ProvisionedResources,
    Sees,
    SeesCreate,
    SeesDraft,
    format_display_id,
    parse_display_id,
)
from .repositories import KeyValueStore, SeesRepository, UserRepository
from .services import CloudProvisioner, project_name_for

__all__ = [
    # Entities
    "NsRecord",
    "ProvisionedResources",
    "Sees",
    "SeesCreate",
    "SeesDraft",
    "format_display_id",
    "parse_display_id",
    # Ports
    "KeyValueStore",
    "SeesRepository",
    "UserRepository",
    "CloudProvisioner",
    "project_name_for",
]
