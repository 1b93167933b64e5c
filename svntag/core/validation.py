"""Form field checks for tag templates."""

from svntag.core.exceptions import TemplateError
from svntag.core.template import check
from svntag.models.build import ValidationResult

BALANCE_HINT = "Check if quotes, braces, or brackets are balanced."


def check_template(value: str, required: bool = False) -> ValidationResult:
    """Parse-only check of a template with no environment bound."""
    if required and not value.strip():
        return ValidationResult(ok=False, message="Please specify URL.")

    try:
        check(value)
    except TemplateError as e:
        return ValidationResult(ok=False, message=f"{BALANCE_HINT} {e.message}")

    return ValidationResult(ok=True)
