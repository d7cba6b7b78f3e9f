"""
===============================================================================
APPLICATION LAYER (Public API / Exports)
===============================================================================

Stable entry points of the application layer:
  - template_engine: placeholder schema, validation, rendering, extraction
  - DraftStore: first step of the two-step SEES creation flow
  - ProvisioningService / DomainRegistrationScheduler: best-effort cloud work

Note:
  - Use cases are imported from the `usecases/` subpackages.
===============================================================================
"""

from . import template_engine
from .drafts import DraftStore
from .provisioning import (
    DomainRegistrationScheduler,
    DomainRegistrationTask,
    ProvisioningOutcome,
    ProvisioningService,
    TaskStatus,
)

__all__ = [
    "template_engine",
    # Drafts
    "DraftStore",
    # Provisioning
    "DomainRegistrationScheduler",
    "DomainRegistrationTask",
    "ProvisioningOutcome",
    "ProvisioningService",
    "TaskStatus",
]
