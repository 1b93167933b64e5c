"""Version control clients."""

from svntag.vcs.client import SvnClient, VcsClient

__all__ = [
    "SvnClient",
    "VcsClient",
]
