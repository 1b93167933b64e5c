"""Request/response models exchanged with the build system."""

from pydantic import BaseModel, Field

from svntag.models.tag import ModuleDescriptor, TagRequest, TaggingOutcome


class BuildContext(BaseModel):
    """A finished build as reported by the build system."""

    job_name: str = Field(..., min_length=1, max_length=200)
    build_number: int = Field(..., ge=0)
    build_tag: str | None = None
    variables: dict[str, str] = Field(default_factory=dict)
    modules: list[ModuleDescriptor] = Field(default_factory=list)

    # Per-build override of the stored job configuration
    overrides: TagRequest | None = None


class TagRunResponse(BaseModel):
    """Response returned to the build system after tagging."""

    job_name: str
    build_number: int
    outcome: TaggingOutcome


class FieldValue(BaseModel):
    """Candidate value from the configuration form."""

    value: str = ""


class ValidationResult(BaseModel):
    """Result of a form field check."""

    ok: bool
    message: str = ""
