"""Data models for svntag."""

from svntag.models.build import (
    BuildContext,
    FieldValue,
    TagRunResponse,
    ValidationResult,
)
from svntag.models.tag import (
    ModuleDescriptor,
    ModuleState,
    ResolvedComments,
    ResolvedTagTarget,
    TaggingOutcome,
    TagOperationResult,
    TagRequest,
    VcsCall,
)

__all__ = [
    # Tagging models
    "TagRequest",
    "ModuleDescriptor",
    "ResolvedComments",
    "ResolvedTagTarget",
    "ModuleState",
    "VcsCall",
    "TagOperationResult",
    "TaggingOutcome",
    # Build system models
    "BuildContext",
    "TagRunResponse",
    "FieldValue",
    "ValidationResult",
]
