"""Live validation of configuration form fields."""

from typing import Literal

from fastapi import APIRouter

from svntag.core.validation import check_template
from svntag.models.build import FieldValue, ValidationResult

router = APIRouter()

TemplateField = Literal[
    "tag-base-url",
    "tag-comment",
    "tag-mkdir-comment",
    "tag-delete-comment",
]


@router.post(
    "/{field}",
    response_model=ValidationResult,
    summary="Check a template field",
)
async def validate_field(field: TemplateField, data: FieldValue) -> ValidationResult:
    """Parse-only check of a template; the base URL must also be non-empty."""
    return check_template(data.value, required=field == "tag-base-url")
