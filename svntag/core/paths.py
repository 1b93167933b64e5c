"""Per-module tag destination computation."""

import posixpath
import re
from typing import Sequence
from urllib.parse import urlsplit

from svntag.core.exceptions import PathResolutionError
from svntag.models.tag import ModuleDescriptor, ResolvedComments, ResolvedTagTarget
from svntag.utils.logging import get_logger

logger = get_logger(__name__)

SUPPORTED_SCHEMES = {"http", "https", "svn", "svn+ssh", "file"}

_PEG_REVISION = re.compile(r"^(?P<path>.*)@(?P<rev>\d+)$")


def validate_url(url: str, what: str = "URL", module: str | None = None) -> str:
    """Check that ``url`` is an absolute repository URL and return it stripped."""
    candidate = (url or "").strip()
    if not candidate:
        raise PathResolutionError(f"Empty {what}", module)

    try:
        parts = urlsplit(candidate)
    except ValueError as e:
        raise PathResolutionError(f"Unparsable {what} '{candidate}': {e}", module) from e

    if parts.scheme not in SUPPORTED_SCHEMES:
        raise PathResolutionError(
            f"Unsupported scheme in {what} '{candidate}' "
            f"(expected one of {', '.join(sorted(SUPPORTED_SCHEMES))})",
            module,
        )
    if parts.scheme == "file":
        if not parts.path.startswith("/"):
            raise PathResolutionError(f"Invalid {what} '{candidate}': missing path", module)
    elif not parts.netloc:
        raise PathResolutionError(f"Invalid {what} '{candidate}': missing host", module)
    if parts.query or parts.fragment:
        raise PathResolutionError(
            f"Invalid {what} '{candidate}': query strings and fragments are not allowed",
            module,
        )

    return candidate


def split_peg_revision(url: str) -> tuple[str, int | None]:
    """Split ``URL@REV`` into the URL and the revision number."""
    parts = urlsplit(url)
    match = _PEG_REVISION.match(parts.path)
    if not match:
        return url, None
    stripped = parts._replace(path=match.group("path")).geturl()
    return stripped, int(match.group("rev"))


def join_url(base: str, relative: str) -> str:
    """Append a relative path to a URL with exactly one separator at the join.

    Neither part is percent-encoded here; svn canonicalizes URLs itself.
    """
    relative = relative.strip("/")
    if not relative:
        return base
    return f"{base.rstrip('/')}/{relative}"


def parent_url(url: str) -> str | None:
    """Return the parent directory URL, or None at the repository host root."""
    parts = urlsplit(url.rstrip("/"))
    path = parts.path.rstrip("/")
    if not path or path == "/":
        return None
    parent = posixpath.dirname(path)
    if parent in ("", "/"):
        return None
    return parts._replace(path=parent).geturl()


def _normalize_local_path(module: ModuleDescriptor) -> str:
    raw = (module.local_path or "").strip()
    if not raw:
        raise PathResolutionError("Empty local path", module.repository_url)
    if "\x00" in raw:
        raise PathResolutionError(f"Invalid local path '{raw}'", module.repository_url)

    normalized = posixpath.normpath(raw.replace("\\", "/"))
    if normalized == ".." or normalized.startswith("../"):
        raise PathResolutionError(
            f"Local path '{raw}' escapes the workspace", module.repository_url
        )
    return normalized


def relative_paths(modules: Sequence[ModuleDescriptor]) -> list[str]:
    """Each module's checkout path relative to the common checkout root.

    A single module always maps to the empty path.
    """
    paths = [_normalize_local_path(m) for m in modules]
    if len(paths) <= 1:
        return [""] * len(paths)

    if len({p.startswith("/") for p in paths}) > 1:
        raise PathResolutionError(
            "Cannot mix absolute and relative module checkout paths"
        )

    root = posixpath.commonpath(paths) or "."
    relatives = []
    for path in paths:
        rel = posixpath.relpath(path, root)
        relatives.append("" if rel == "." else rel)

    # Nested or identical checkouts would produce overlapping tags
    for i, (rel, module) in enumerate(zip(relatives, modules)):
        for other_rel, other in zip(relatives[:i], modules[:i]):
            if _overlaps(rel, other_rel):
                raise PathResolutionError(
                    f"Ambiguous checkout layout: '{module.local_path}' overlaps "
                    f"'{other.local_path}'",
                    module.repository_url,
                )

    return relatives


def _overlaps(a: str, b: str) -> bool:
    if not a or not b or a == b:
        return True
    return a.startswith(b + "/") or b.startswith(a + "/")


def build_targets(
    base_url: str,
    modules: Sequence[ModuleDescriptor],
    comments: ResolvedComments,
) -> list[ResolvedTagTarget]:
    """Compute the tag destination of every module.

    All modules are resolved before anything is returned, so a failure on
    any module leaves nothing to tag.

    Raises:
        PathResolutionError: if the base URL or any module is malformed, or
            the checkout layout does not give each module its own destination
    """
    base = validate_url(base_url, "tag base URL")

    sources: list[tuple[str, int | None]] = []
    for module in modules:
        url = validate_url(module.repository_url, "repository URL", module.repository_url)
        url, peg = split_peg_revision(url)
        revision = module.revision if module.revision is not None else peg
        sources.append((url.rstrip("/"), revision))

    relatives = relative_paths(modules)

    targets = []
    for module, (source_url, revision), relative in zip(modules, sources, relatives):
        destination = join_url(base, relative)
        if destination.rstrip("/") == source_url:
            raise PathResolutionError(
                f"Tag destination '{destination}' is the module's own URL",
                module.repository_url,
            )
        targets.append(
            ResolvedTagTarget(
                module=module,
                source_url=source_url,
                destination_url=destination,
                revision=revision,
                tag_comment=comments.tag_comment,
                mkdir_comment=comments.mkdir_comment,
                delete_comment=comments.delete_comment,
            )
        )

    logger.debug(
        "paths.targets_built",
        base_url=base,
        count=len(targets),
        destinations=[t.destination_url for t in targets],
    )
    return targets
