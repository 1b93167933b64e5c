"""Combine per-module results into one outcome and a build log report."""

from typing import Sequence

from svntag.models.tag import TagOperationResult

REPORT_PREFIX = "[svntag]"
MAX_EXCERPT_LINES = 20
MAX_EXCERPT_CHARS = 2000


def aggregate(results: Sequence[TagOperationResult]) -> bool:
    """True iff there was at least one module and every module was tagged."""
    return bool(results) and all(r.succeeded for r in results)


def excerpt(output: str) -> list[str]:
    """Trim diagnostic output for the report."""
    text = output.strip()
    if len(text) > MAX_EXCERPT_CHARS:
        text = text[:MAX_EXCERPT_CHARS] + " ..."
    lines = text.splitlines()
    if len(lines) > MAX_EXCERPT_LINES:
        hidden = len(lines) - MAX_EXCERPT_LINES
        lines = lines[:MAX_EXCERPT_LINES] + [f"... ({hidden} more lines)"]
    return lines


def format_report(results: Sequence[TagOperationResult], error: str | None = None) -> str:
    """Human readable report, one line per module plus a summary."""
    lines: list[str] = []

    if error:
        lines.append(f"{REPORT_PREFIX} Tagging aborted before any change was made: {error}")
        return "\n".join(lines)

    if not results:
        lines.append(f"{REPORT_PREFIX} No Subversion modules in this build; nothing was tagged.")
        return "\n".join(lines)

    lines.append(f"{REPORT_PREFIX} Tagging {len(results)} module(s)")
    for result in results:
        source = result.target.source_url if result.target else result.module.repository_url
        destination = result.target.destination_url if result.target else "?"
        if result.target and result.target.revision is not None:
            source = f"{source}@{result.target.revision}"
        status = "OK" if result.succeeded else "FAILED"
        lines.append(f"  {status:<7} {source} -> {destination}")
        if not result.succeeded:
            lines.extend(f"          {line}" for line in excerpt(result.diagnostic_output))

    tagged = sum(1 for r in results if r.succeeded)
    verdict = "succeeded" if aggregate(results) else "failed"
    lines.append(
        f"{REPORT_PREFIX} Tagging {verdict}: {tagged}/{len(results)} module(s) tagged. "
        "The build result is not changed."
    )
    return "\n".join(lines)
