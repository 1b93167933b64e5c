"""Unit tests for template resolution."""

import pytest

from svntag.core.exceptions import TemplateError
from svntag.core.template import check, parse, references, resolve


class TestResolve:
    """Tests for resolve()."""

    def test_plain_text_unchanged(self):
        assert resolve("http://host/proj/tags/release", {}) == "http://host/proj/tags/release"

    def test_simple_variable(self):
        assert resolve("tags/${JOB_NAME}", {"JOB_NAME": "build1"}) == "tags/build1"

    def test_env_lookup_single_quotes(self):
        template = "http://host/proj/tags/${env['JOB_NAME']}"
        assert resolve(template, {"JOB_NAME": "build1"}) == "http://host/proj/tags/build1"

    def test_env_lookup_double_quotes(self):
        assert resolve('${env["BUILD_TAG"]}', {"BUILD_TAG": "svntag-x-3"}) == "svntag-x-3"

    def test_multiple_references(self):
        env = {"JOB_NAME": "app", "BUILD_NUMBER": "42"}
        assert resolve("${JOB_NAME}-${BUILD_NUMBER}", env) == "app-42"

    def test_default_used_when_missing(self):
        assert resolve("${BRANCH:-trunk}", {}) == "trunk"

    def test_default_used_when_empty(self):
        assert resolve("${BRANCH:-trunk}", {"BRANCH": ""}) == "trunk"

    def test_default_ignored_when_set(self):
        assert resolve("${BRANCH:-trunk}", {"BRANCH": "release"}) == "release"

    def test_quoted_default(self):
        assert resolve("${env['BRANCH']:-'a b'}", {}) == "a b"

    def test_empty_default(self):
        assert resolve("x${SUFFIX:-}", {}) == "x"

    def test_dollar_escape(self):
        assert resolve("cost $$5", {}) == "cost $5"

    def test_lone_dollar_is_literal(self):
        assert resolve("a$b", {}) == "a$b"

    def test_undefined_variable(self):
        with pytest.raises(TemplateError) as exc_info:
            resolve("tags/${JOB_NAME}", {})
        assert "JOB_NAME" in exc_info.value.message

    def test_deterministic_and_idempotent(self):
        template = "http://host/${env['JOB_NAME']}/${BUILD_NUMBER:-0}"
        env = {"JOB_NAME": "job"}
        first = resolve(template, env)
        assert resolve(template, env) == first
        assert resolve(template, dict(env)) == first
        assert first == "http://host/job/0"


class TestCheck:
    """Tests for parse-only validation."""

    @pytest.mark.parametrize(
        "template",
        [
            "http://host/tags/${env['JOB_NAME'}",
            "http://host/tags/${env['JOB_NAME']",
            "http://host/tags/${env['JOB_NAME]}",
            "${JOB_NAME",
        ],
    )
    def test_unbalanced_templates_rejected(self, template: str):
        with pytest.raises(TemplateError) as exc_info:
            check(template)
        assert "Unbalanced" in exc_info.value.message

    def test_unbalanced_bracket_names_brackets(self):
        with pytest.raises(TemplateError) as exc_info:
            check("${env['JOB_NAME'}")
        assert "brackets" in exc_info.value.message

    def test_unterminated_quote_names_quotes(self):
        with pytest.raises(TemplateError) as exc_info:
            check("${env['JOB_NAME]}")
        assert "quotes" in exc_info.value.message

    def test_empty_reference_rejected(self):
        with pytest.raises(TemplateError):
            check("${}")

    def test_expression_rejected(self):
        with pytest.raises(TemplateError) as exc_info:
            check("${JOB_NAME.toUpperCase()}")
        assert "Unsupported expression" in exc_info.value.message

    def test_valid_template_passes_without_environment(self):
        check("Tagged by svntag. Build:${env['BUILD_TAG']}.")

    def test_error_records_position(self):
        with pytest.raises(TemplateError) as exc_info:
            check("abc${X")
        assert exc_info.value.position == 3


class TestParse:
    """Tests for the parsed structure."""

    def test_references_in_order(self):
        assert references("${B}/${env['A']}/${B}") == ["B", "A"]

    def test_parse_splits_literals(self):
        parts = parse("a${X}b")
        assert len(parts) == 3
