"""Core functionality for svntag."""

from svntag.core.exceptions import (
    ConfigurationError,
    PathResolutionError,
    SvnTagError,
    TemplateError,
    VcsCommunicationError,
    VcsOperationError,
)
from svntag.core.config_store import ConfigStore, get_config_store

__all__ = [
    "SvnTagError",
    "ConfigurationError",
    "PathResolutionError",
    "TemplateError",
    "VcsCommunicationError",
    "VcsOperationError",
    "ConfigStore",
    "get_config_store",
]
