"""
===============================================================================
SEES USE CASES PACKAGE (Public API / Exports)
===============================================================================

Responsibilities:
    - Re-export the SEES use cases and their inputs/results.
    - Define __all__ as the public contract of the package.
===============================================================================
"""

from __future__ import annotations

# -----------------------------------------------------------------------------
# Use Cases
# -----------------------------------------------------------------------------
from .create_sees import CreateSeesUseCase
from .delete_sees import DeleteSeesUseCase
from .get_sees import GetSeesUseCase
from .list_sees import ListSeesUseCase
from .render_sees import PreviewDraftUseCase, RenderSeesUseCase

# -----------------------------------------------------------------------------
# Inputs / Results
# -----------------------------------------------------------------------------
from .sees_results import (
    CreateSeesInput,
    CreateSeesResult,
    DeleteSeesResult,
    GetSeesResult,
    ListSeesResult,
    RenderSeesResult,
    UpdateSeesInput,
    UpdateSeesResult,
)
from .update_sees import UpdateSeesUseCase

__all__ = [
    # Use Cases
    "ListSeesUseCase",
    "GetSeesUseCase",
    "CreateSeesUseCase",
    "UpdateSeesUseCase",
    "DeleteSeesUseCase",
    "RenderSeesUseCase",
    "PreviewDraftUseCase",
    # Inputs / Results
    "CreateSeesInput",
    "UpdateSeesInput",
    "ListSeesResult",
    "GetSeesResult",
    "CreateSeesResult",
    "UpdateSeesResult",
    "DeleteSeesResult",
    "RenderSeesResult",
]
