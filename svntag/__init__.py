"""svntag - post-build Subversion tagging."""

__version__ = "0.1.0"
