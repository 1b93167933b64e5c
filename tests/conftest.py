"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from svntag.api.deps import get_store, get_vcs_client
from svntag.core.config_store import ConfigStore
from svntag.core.exceptions import VcsCommunicationError, VcsOperationError
from svntag.main import app
from svntag.models.tag import ModuleDescriptor, TagRequest


class FakeVcsClient:
    """In-memory VCS that records every call in order."""

    def __init__(
        self,
        existing: set[str] | None = None,
        failures: dict[tuple[str, str], str] | None = None,
        unreachable: set[str] | None = None,
    ):
        self.existing = {url.rstrip("/") for url in existing or set()}
        # (operation, url) -> diagnostic output of a rejected command
        self.failures = failures or {}
        # URLs for which any call raises VcsCommunicationError
        self.unreachable = unreachable or set()
        self.calls: list[tuple] = []

    @property
    def mutations(self) -> list[tuple]:
        return [c for c in self.calls if c[0] in ("copy", "delete", "mkdir")]

    def _check(self, operation: str, url: str) -> None:
        if url in self.unreachable:
            raise VcsCommunicationError(
                f"svn {operation} could not reach the server for {url}",
                "svn: E170013: Unable to connect to a repository",
            )
        if (operation, url) in self.failures:
            raise VcsOperationError(operation, url, self.failures[(operation, url)], 1)

    async def exists(self, url: str) -> bool:
        self.calls.append(("exists", url))
        self._check("info", url)
        return url.rstrip("/") in self.existing

    async def copy(self, source, destination, comment, revision=None) -> str:
        self.calls.append(("copy", source, destination, comment, revision))
        self._check("copy", destination)
        self.existing.add(destination.rstrip("/"))
        return "Committed revision 101."

    async def delete(self, url, comment) -> str:
        self.calls.append(("delete", url, comment))
        self._check("delete", url)
        self.existing.discard(url.rstrip("/"))
        return "Committed revision 100."

    async def mkdir(self, url, comment) -> str:
        self.calls.append(("mkdir", url, comment))
        self._check("mkdir", url)
        self.existing.add(url.rstrip("/"))
        return "Committed revision 99."


@pytest.fixture
def fake_vcs() -> FakeVcsClient:
    """A VCS where the tags directory already exists."""
    return FakeVcsClient(existing={"http://host/proj/tags"})


@pytest.fixture
def store(tmp_path: Path) -> ConfigStore:
    """Create a configuration store in a temporary directory."""
    return ConfigStore(tmp_path / "svntag.db")


@pytest.fixture
def tag_request() -> TagRequest:
    """Templates used by most tests."""
    return TagRequest(
        base_url_template="http://host/proj/tags/${env['JOB_NAME']}",
        tag_comment="Tagged build ${BUILD_NUMBER}",
        mkdir_comment="Created tags directory",
        delete_comment="Removed old tag",
    )


@pytest.fixture
def three_modules() -> list[ModuleDescriptor]:
    """Three modules checked out side by side."""
    return [
        ModuleDescriptor(repository_url="http://host/proj/app/trunk", local_path="ws/app"),
        ModuleDescriptor(repository_url="http://host/proj/lib/trunk", local_path="ws/lib"),
        ModuleDescriptor(repository_url="http://host/proj/docs/trunk", local_path="ws/docs"),
    ]


@pytest.fixture
async def client(store: ConfigStore, fake_vcs: FakeVcsClient) -> AsyncClient:
    """Create an async test client bound to a temporary store and fake VCS."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_vcs_client] = lambda: fake_vcs

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def vcs_factory() -> type[FakeVcsClient]:
    """Build fake VCS clients with custom state."""
    return FakeVcsClient
