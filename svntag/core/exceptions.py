"""Custom exceptions for svntag."""

from typing import Any


class SvnTagError(Exception):
    """Base exception for svntag."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigurationError(SvnTagError):
    """Stored configuration could not be read or written."""

    pass


class TemplateError(SvnTagError):
    """Template is malformed or references an undefined variable."""

    def __init__(self, message: str, template: str | None = None, position: int | None = None):
        details: dict[str, Any] = {}
        if template is not None:
            details["template"] = template
        if position is not None:
            details["position"] = position
        super().__init__(message, details)
        self.template = template
        self.position = position


class PathResolutionError(SvnTagError):
    """A module URL or checkout path cannot be mapped to a tag destination."""

    def __init__(self, message: str, module: str | None = None):
        details = {}
        if module is not None:
            details["module"] = module
        super().__init__(message, details)
        self.module = module


class VcsCommunicationError(SvnTagError):
    """The VCS could not be reached or did not answer in time."""

    def __init__(self, message: str, output: str = ""):
        details = {}
        if output:
            details["output"] = output
        super().__init__(message, details)
        self.output = output


class VcsOperationError(SvnTagError):
    """The VCS was reached but rejected a copy, delete or mkdir."""

    def __init__(self, operation: str, url: str, output: str, returncode: int | None = None):
        super().__init__(
            f"svn {operation} failed for {url}",
            {"operation": operation, "url": url, "returncode": returncode, "output": output},
        )
        self.operation = operation
        self.url = url
        self.output = output
        self.returncode = returncode
