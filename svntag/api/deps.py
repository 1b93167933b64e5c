"""Dependency injection for API endpoints."""

from typing import Annotated

from fastapi import Depends

from svntag.core.config_store import ConfigStore, get_config_store
from svntag.core.publisher import TagPublisher
from svntag.vcs.client import SvnClient, VcsClient


async def get_store() -> ConfigStore:
    """Get the configuration store."""
    return get_config_store()


async def get_vcs_client() -> VcsClient:
    """Get a Subversion client configured from settings."""
    return SvnClient()


async def get_publisher(
    store: Annotated[ConfigStore, Depends(get_store)],
    client: Annotated[VcsClient, Depends(get_vcs_client)],
) -> TagPublisher:
    """Get a publisher bound to the store and client."""
    return TagPublisher(client=client, store=store)


# Type aliases for cleaner signatures
StoreDep = Annotated[ConfigStore, Depends(get_store)]
PublisherDep = Annotated[TagPublisher, Depends(get_publisher)]
