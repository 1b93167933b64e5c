"""Unit tests for module path building."""

import pytest

from svntag.core.exceptions import PathResolutionError
from svntag.core.paths import (
    build_targets,
    join_url,
    parent_url,
    relative_paths,
    split_peg_revision,
    validate_url,
)
from svntag.models.tag import ModuleDescriptor, ResolvedComments

COMMENTS = ResolvedComments(tag_comment="tag", mkdir_comment="mkdir", delete_comment="delete")


class TestJoinUrl:
    """Tests for join_url()."""

    @pytest.mark.parametrize(
        "base,relative",
        [
            ("http://host/tags/b1", "lib"),
            ("http://host/tags/b1/", "lib"),
            ("http://host/tags/b1", "/lib"),
            ("http://host/tags/b1/", "/lib/"),
        ],
    )
    def test_single_separator(self, base: str, relative: str):
        assert join_url(base, relative) == "http://host/tags/b1/lib"

    def test_empty_relative_returns_base(self):
        assert join_url("http://host/tags/b1/", "") == "http://host/tags/b1/"

    def test_relative_is_not_encoded(self):
        assert join_url("http://host/tags", "my lib") == "http://host/tags/my lib"

    def test_percent_in_relative_kept(self):
        base = "http://host/tags/release%201"
        assert join_url(base, "lib%20a") == "http://host/tags/release%201/lib%20a"


class TestParentUrl:
    """Tests for parent_url()."""

    def test_parent(self):
        assert parent_url("http://host/proj/tags/b1") == "http://host/proj/tags"

    def test_trailing_slash(self):
        assert parent_url("http://host/proj/tags/b1/") == "http://host/proj/tags"

    def test_host_root_has_no_parent(self):
        assert parent_url("http://host/b1") is None

    def test_file_url(self):
        assert parent_url("file:///srv/repo/tags/b1") == "file:///srv/repo/tags"


class TestValidateUrl:
    """Tests for validate_url()."""

    @pytest.mark.parametrize(
        "url",
        [
            "http://host/proj",
            "https://host/proj",
            "svn://host/proj",
            "svn+ssh://user@host/proj",
            "file:///srv/repo",
        ],
    )
    def test_accepts_supported_urls(self, url: str):
        assert validate_url(url) == url

    @pytest.mark.parametrize(
        "url",
        ["", "   ", "proj/trunk", "ftp://host/proj", "http:///proj", "http://host/p?x=1"],
    )
    def test_rejects_malformed_urls(self, url: str):
        with pytest.raises(PathResolutionError):
            validate_url(url)


class TestPegRevision:
    """Tests for split_peg_revision()."""

    def test_split(self):
        assert split_peg_revision("http://host/proj/trunk@42") == ("http://host/proj/trunk", 42)

    def test_no_peg(self):
        assert split_peg_revision("http://host/proj/trunk") == ("http://host/proj/trunk", None)

    def test_user_in_netloc_is_not_a_peg(self):
        url = "svn+ssh://bob@host/proj/trunk"
        assert split_peg_revision(url) == (url, None)


class TestRelativePaths:
    """Tests for relative_paths()."""

    def test_single_module_is_empty(self):
        modules = [ModuleDescriptor(repository_url="http://host/p/trunk", local_path="ws/app")]
        assert relative_paths(modules) == [""]

    def test_common_root_removed(self):
        modules = [
            ModuleDescriptor(repository_url="http://host/a", local_path="ws/app"),
            ModuleDescriptor(repository_url="http://host/b", local_path="ws/lib/core"),
        ]
        assert relative_paths(modules) == ["app", "lib/core"]

    def test_backslashes_normalized(self):
        modules = [
            ModuleDescriptor(repository_url="http://host/a", local_path="ws\\app"),
            ModuleDescriptor(repository_url="http://host/b", local_path="ws\\lib"),
        ]
        assert relative_paths(modules) == ["app", "lib"]

    def test_nested_checkouts_rejected(self):
        modules = [
            ModuleDescriptor(repository_url="http://host/a", local_path="a"),
            ModuleDescriptor(repository_url="http://host/c", local_path="a-c"),
            ModuleDescriptor(repository_url="http://host/b", local_path="a/b"),
        ]
        with pytest.raises(PathResolutionError) as exc_info:
            relative_paths(modules)
        assert "Ambiguous" in exc_info.value.message

    def test_duplicate_checkouts_rejected(self):
        modules = [
            ModuleDescriptor(repository_url="http://host/a", local_path="ws/app"),
            ModuleDescriptor(repository_url="http://host/b", local_path="ws/app/"),
        ]
        with pytest.raises(PathResolutionError):
            relative_paths(modules)

    def test_mixed_absolute_and_relative_rejected(self):
        modules = [
            ModuleDescriptor(repository_url="http://host/a", local_path="/ws/app"),
            ModuleDescriptor(repository_url="http://host/b", local_path="lib"),
        ]
        with pytest.raises(PathResolutionError):
            relative_paths(modules)

    def test_escaping_path_rejected(self):
        modules = [ModuleDescriptor(repository_url="http://host/a", local_path="../outside")]
        with pytest.raises(PathResolutionError):
            relative_paths(modules)

    def test_empty_path_rejected(self):
        modules = [ModuleDescriptor(repository_url="http://host/a", local_path="")]
        with pytest.raises(PathResolutionError):
            relative_paths(modules)


class TestBuildTargets:
    """Tests for build_targets()."""

    def test_single_module_uses_base_url(self):
        modules = [ModuleDescriptor(repository_url="http://host/proj/trunk", local_path="trunk")]
        targets = build_targets("http://host/proj/tags/build1", modules, COMMENTS)

        assert len(targets) == 1
        assert targets[0].destination_url == "http://host/proj/tags/build1"
        assert targets[0].source_url == "http://host/proj/trunk"
        assert targets[0].tag_comment == "tag"

    def test_multi_module_appends_relative_path(self):
        modules = [
            ModuleDescriptor(repository_url="http://host/proj/app/trunk", local_path="/ws/app"),
            ModuleDescriptor(repository_url="http://host/proj/lib/trunk/", local_path="/ws/lib"),
        ]
        targets = build_targets("http://host/proj/tags/b1/", modules, COMMENTS)

        assert [t.destination_url for t in targets] == [
            "http://host/proj/tags/b1/app",
            "http://host/proj/tags/b1/lib",
        ]
        assert targets[1].source_url == "http://host/proj/lib/trunk"

    def test_peg_revision_becomes_target_revision(self):
        modules = [ModuleDescriptor(repository_url="http://host/proj/trunk@17")]
        targets = build_targets("http://host/proj/tags/b1", modules, COMMENTS)

        assert targets[0].source_url == "http://host/proj/trunk"
        assert targets[0].revision == 17

    def test_explicit_revision_wins_over_peg(self):
        modules = [ModuleDescriptor(repository_url="http://host/proj/trunk@17", revision=20)]
        targets = build_targets("http://host/proj/tags/b1", modules, COMMENTS)

        assert targets[0].revision == 20

    def test_no_modules(self):
        assert build_targets("http://host/proj/tags/b1", [], COMMENTS) == []

    def test_invalid_base_url(self):
        modules = [ModuleDescriptor(repository_url="http://host/proj/trunk")]
        with pytest.raises(PathResolutionError):
            build_targets("tags/b1", modules, COMMENTS)

    def test_failure_on_any_module_returns_nothing(self, three_modules):
        broken = list(three_modules)
        broken[1] = ModuleDescriptor(repository_url="not a url", local_path="ws/lib")

        with pytest.raises(PathResolutionError) as exc_info:
            build_targets("http://host/proj/tags/b1", broken, COMMENTS)
        assert exc_info.value.module == "not a url"

    def test_destination_equal_to_source_rejected(self):
        modules = [ModuleDescriptor(repository_url="http://host/proj/trunk")]
        with pytest.raises(PathResolutionError):
            build_targets("http://host/proj/trunk/", modules, COMMENTS)
