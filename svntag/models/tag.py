"""Tagging data models."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class TagRequest(BaseModel):
    """Templates for one build's tagging run.

    Blank fields on a job-level request fall back to the global defaults
    (see ``with_defaults``).
    """

    model_config = ConfigDict(frozen=True)

    base_url_template: str = ""
    tag_comment: str = ""
    mkdir_comment: str = ""
    delete_comment: str = ""

    def with_defaults(self, defaults: "TagRequest") -> "TagRequest":
        """Return a request where every blank field is taken from ``defaults``."""
        return TagRequest(
            base_url_template=self.base_url_template or defaults.base_url_template,
            tag_comment=self.tag_comment or defaults.tag_comment,
            mkdir_comment=self.mkdir_comment or defaults.mkdir_comment,
            delete_comment=self.delete_comment or defaults.delete_comment,
        )


class ModuleDescriptor(BaseModel):
    """One version-controlled source unit that took part in the build."""

    model_config = ConfigDict(frozen=True)

    repository_url: str
    local_path: str = "."
    revision: int | None = Field(default=None, ge=0)


class ResolvedComments(BaseModel):
    """Commit messages after template expansion."""

    model_config = ConfigDict(frozen=True)

    tag_comment: str
    mkdir_comment: str
    delete_comment: str


class ResolvedTagTarget(BaseModel):
    """Computed destination for one module."""

    model_config = ConfigDict(frozen=True)

    module: ModuleDescriptor
    source_url: str
    destination_url: str = Field(..., min_length=1)
    revision: int | None = None

    tag_comment: str
    mkdir_comment: str
    delete_comment: str


class ModuleState(str, Enum):
    """Per-module tagging state."""

    PENDING = "pending"
    CHECKED = "checked"
    DELETED = "deleted"
    TAGGED = "tagged"
    FAILED = "failed"


class VcsCall(BaseModel):
    """Record of one VCS invocation made for a module."""

    operation: Literal["info", "delete", "mkdir", "copy"]
    url: str
    ok: bool
    output: str = ""


class TagOperationResult(BaseModel):
    """Outcome of one module's tag attempt."""

    module: ModuleDescriptor
    target: ResolvedTagTarget | None = None
    state: ModuleState = ModuleState.PENDING
    succeeded: bool = False
    diagnostic_output: str = ""
    calls: list[VcsCall] = Field(default_factory=list)


class TaggingOutcome(BaseModel):
    """Overall result of a tagging run."""

    overall_success: bool
    results: list[TagOperationResult] = Field(default_factory=list)
    report: str = ""
    error: str | None = None
    aborted: bool = False
