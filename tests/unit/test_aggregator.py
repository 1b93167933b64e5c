"""Unit tests for outcome aggregation."""

from svntag.core.aggregator import MAX_EXCERPT_LINES, aggregate, excerpt, format_report
from svntag.models.tag import (
    ModuleDescriptor,
    ModuleState,
    ResolvedTagTarget,
    TagOperationResult,
)


def make_result(name: str, succeeded: bool, output: str = "", revision: int | None = None) -> TagOperationResult:
    module = ModuleDescriptor(repository_url=f"http://host/{name}/trunk", local_path=name)
    target = ResolvedTagTarget(
        module=module,
        source_url=f"http://host/{name}/trunk",
        destination_url=f"http://host/tags/{name}",
        revision=revision,
        tag_comment="t",
        mkdir_comment="m",
        delete_comment="d",
    )
    return TagOperationResult(
        module=module,
        target=target,
        state=ModuleState.TAGGED if succeeded else ModuleState.FAILED,
        succeeded=succeeded,
        diagnostic_output=output,
    )


class TestAggregate:
    """Tests for aggregate()."""

    def test_all_succeeded(self):
        assert aggregate([make_result("a", True), make_result("b", True)]) is True

    def test_any_failed(self):
        assert aggregate([make_result("a", True), make_result("b", False)]) is False

    def test_empty_is_failure(self):
        assert aggregate([]) is False


class TestFormatReport:
    """Tests for format_report()."""

    def test_one_line_per_module(self):
        report = format_report([make_result("a", True), make_result("b", True, revision=7)])
        lines = report.splitlines()

        assert "OK      http://host/a/trunk -> http://host/tags/a" in report
        assert "http://host/b/trunk@7 -> http://host/tags/b" in report
        assert lines[-1].startswith("[svntag] Tagging succeeded: 2/2")

    def test_failure_includes_diagnostic(self):
        report = format_report(
            [make_result("a", True), make_result("b", False, "svn: E175013: Access forbidden")]
        )

        assert "FAILED  http://host/b/trunk -> http://host/tags/b" in report
        assert "svn: E175013: Access forbidden" in report
        assert "Tagging failed: 1/2" in report
        assert "build result is not changed" in report

    def test_abort_error(self):
        report = format_report([], error="Undefined variable 'X' at position 0")
        assert "aborted before any change" in report
        assert "Undefined variable" in report

    def test_no_modules(self):
        assert "nothing was tagged" in format_report([])


class TestExcerpt:
    """Tests for excerpt()."""

    def test_long_output_truncated(self):
        output = "\n".join(f"line {i}" for i in range(100))
        lines = excerpt(output)

        assert len(lines) == MAX_EXCERPT_LINES + 1
        assert lines[-1] == "... (80 more lines)"

    def test_short_output_kept(self):
        assert excerpt("one\ntwo\n") == ["one", "two"]
