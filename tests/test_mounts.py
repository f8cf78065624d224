"""Tests for the mount data model and configuration validation."""

from __future__ import annotations

import pytest

from vanityurls.server.config import ConfigError, PathEntry, VanityConfig
from vanityurls.server.mounts import (
    ContentTarget,
    MountPoint,
    RedirectTarget,
    canonical_path,
    find_placeholder,
    infer_display,
)
from vanityurls.server.table import build_mount, build_mount_table, build_rule

GITHUB_REPO = "https://github.com/rakyll/portmidi"
BITBUCKET_REPO = "https://bitbucket.org/zombiezen/gopdf"


class TestCanonicalPath:
    def test_trailing_slash(self) -> None:
        assert canonical_path("/portmidi/") == "/portmidi"

    def test_no_trailing_slash(self) -> None:
        assert canonical_path("/portmidi") == "/portmidi"

    def test_root(self) -> None:
        assert canonical_path("/") == ""


class TestInferDisplay:
    def test_github(self) -> None:
        assert infer_display(GITHUB_REPO) == (
            f"{GITHUB_REPO} {GITHUB_REPO}/tree/master{{/dir}} "
            f"{GITHUB_REPO}/blob/master{{/dir}}/{{file}}#L{{line}}"
        )

    def test_bitbucket(self) -> None:
        repo = "https://bitbucket.org/zombiezen/gopdf"
        assert infer_display(repo) == (
            f"{repo} {repo}/src/default{{/dir}} "
            f"{repo}/src/default{{/dir}}/{{file}}#{{file}}-{{line}}"
        )

    def test_unknown_host(self) -> None:
        assert infer_display("https://git.example.com/tool") == ""


class TestFindPlaceholder:
    def test_rule_key(self) -> None:
        assert find_placeholder("/gh/{user}") == ("/gh/", "{user}", "")

    def test_repo_template(self) -> None:
        assert find_placeholder("https://github.com/{user}/tool") == (
            "https://github.com/",
            "{user}",
            "/tool",
        )

    def test_missing(self) -> None:
        with pytest.raises(ConfigError, match="no placeholder"):
            find_placeholder("/gh/user")

    def test_unterminated(self) -> None:
        with pytest.raises(ConfigError, match="not terminated"):
            find_placeholder("/gh/{user")

    def test_empty(self) -> None:
        with pytest.raises(ConfigError, match="empty"):
            find_placeholder("/gh/{}")

    def test_multiple(self) -> None:
        with pytest.raises(ConfigError, match="multiple placeholders"):
            find_placeholder("/gh/{user}/{repo}")


class TestMountPoint:
    """Test the content / redirect-only / both variants."""

    def test_neither_rejected(self) -> None:
        with pytest.raises(ValueError, match="neither"):
            MountPoint(path="/x")

    def test_kinds(self) -> None:
        content = ContentTarget(repo=GITHUB_REPO, vcs="git", display="")
        redirect = RedirectTarget(url="https://dl.example.com/")
        assert MountPoint("/a", content=content).kind == "content"
        assert MountPoint("/a", redirect=redirect).kind == "redirect"
        assert MountPoint("/a", content=content, redirect=redirect).kind == "both"

    def test_redirect_only_always_redirects(self) -> None:
        mount = MountPoint("/a", redirect=RedirectTarget(url="https://dl.example.com/"))
        assert mount.should_redirect("")
        assert mount.should_redirect("anything")

    def test_both_redirects_on_marker(self) -> None:
        mount = MountPoint(
            "/a",
            content=ContentTarget(repo=GITHUB_REPO, vcs="git", display=""),
            redirect=RedirectTarget(url="https://dl.example.com/", markers=("releases",)),
        )
        assert mount.should_redirect("releases/v1.tgz")
        assert not mount.should_redirect("cmd/tool")

    def test_marker_is_a_substring_match(self) -> None:
        """A marker also matches inside unrelated segments; this over-match is kept."""
        target = RedirectTarget(url="https://dl.example.com/", markers=("releases",))
        assert target.matches("old-releases/notes")

    def test_cache_control(self) -> None:
        mount = MountPoint("/a", cache_max_age=0, redirect=RedirectTarget(url="u"))
        assert mount.cache_control == "public, max-age=0"


class TestBuildMount:
    """Test validation and inference for static entries."""

    def test_github_inference(self) -> None:
        mount = build_mount("/portmidi/", PathEntry(repo=GITHUB_REPO))
        assert mount.path == "/portmidi"
        assert mount.content is not None
        assert mount.content.vcs == "git"
        assert mount.content.display == infer_display(GITHUB_REPO)
        assert mount.cache_max_age == 86400

    def test_explicit_display_kept(self) -> None:
        mount = build_mount("/portmidi", PathEntry(repo=GITHUB_REPO, display="a _ _"))
        assert mount.content is not None
        assert mount.content.display == "a _ _"

    def test_missing_vcs(self) -> None:
        with pytest.raises(ConfigError, match="cannot infer VCS"):
            build_mount("/gopdf", PathEntry(repo=BITBUCKET_REPO))

    def test_unknown_vcs(self) -> None:
        with pytest.raises(ConfigError, match="unknown VCS xyzzy"):
            build_mount("/gopdf", PathEntry(repo=BITBUCKET_REPO, vcs="xyzzy"))

    def test_redirect_only_needs_no_vcs(self) -> None:
        mount = build_mount("/dl", PathEntry(redir="https://dl.example.com/"))
        assert mount.content is None
        assert mount.redirect is not None
        assert mount.kind == "redirect"

    def test_neither_repo_nor_redir(self) -> None:
        with pytest.raises(ConfigError, match="either repo or redir"):
            build_mount("/empty", PathEntry())

    def test_empty_marker_rejected(self) -> None:
        with pytest.raises(ConfigError, match="empty marker"):
            build_mount("/dl", PathEntry(redir="https://dl.example.com/", redir_paths=[""]))

    def test_own_cache_age_beats_default(self) -> None:
        entry = PathEntry(repo=GITHUB_REPO, cache_max_age=5)
        mount = build_mount("/a", entry, default_cache_age=60)
        assert mount.cache_max_age == 5

    def test_default_cache_age(self) -> None:
        mount = build_mount("/a", PathEntry(repo=GITHUB_REPO), default_cache_age=60)
        assert mount.cache_max_age == 60

    def test_negative_entry_cache_age(self) -> None:
        with pytest.raises(ConfigError, match="negative"):
            build_mount("/a", PathEntry(repo=GITHUB_REPO, cache_max_age=-1))


class TestBuildRule:
    """Test validation of wildcard entries."""

    def test_basic(self) -> None:
        rule = build_rule("/gh/{user}/", PathEntry(repo="https://github.com/{user}/tool"))
        assert rule.key == "/gh/{user}"
        assert rule.prefix == "/gh/"
        assert rule.placeholder == "{user}"
        assert rule.vcs == "git"
        assert "{user}" in rule.display_template

    def test_trailing_garbage(self) -> None:
        with pytest.raises(ConfigError, match="trailing garbage"):
            build_rule("/gh/{user}/x", PathEntry(repo="https://github.com/{user}/x"))

    def test_repo_without_placeholder(self) -> None:
        with pytest.raises(ConfigError, match="repo: no placeholder"):
            build_rule("/gh/{user}", PathEntry(repo="https://github.com/acme/tool"))

    def test_placeholder_mismatch(self) -> None:
        with pytest.raises(ConfigError, match="placeholder in rule"):
            build_rule("/gh/{user}", PathEntry(repo="https://github.com/{name}/tool"))

    def test_missing_repo(self) -> None:
        with pytest.raises(ConfigError, match="repo is required"):
            build_rule("/gh/{user}", PathEntry(vcs="git"))

    def test_vcs_required_off_github(self) -> None:
        with pytest.raises(ConfigError, match="cannot infer VCS"):
            build_rule("/hg/{name}", PathEntry(repo="https://hg.example.com/{name}"))


class TestBuildMountTable:
    """Test whole-config validation."""

    def test_sorted_static_mounts(self) -> None:
        config = VanityConfig(
            paths={
                "/y": PathEntry(repo="https://github.com/a/y"),
                "/": PathEntry(repo="https://github.com/a/root"),
                "/example/helloworld": PathEntry(repo="https://github.com/a/hello"),
            }
        )
        table = build_mount_table(config)
        assert [m.path for m in table.index] == ["", "/example/helloworld", "/y"]

    def test_negative_global_cache_age(self) -> None:
        config = VanityConfig(cache_max_age=-1, paths={"/a": PathEntry(repo=GITHUB_REPO)})
        with pytest.raises(ConfigError, match="cache_max_age is negative"):
            build_mount_table(config)

    def test_duplicate_static_path(self) -> None:
        config = VanityConfig(
            paths={"/a": PathEntry(repo=GITHUB_REPO), "/a/": PathEntry(repo=GITHUB_REPO)}
        )
        with pytest.raises(ConfigError, match="duplicate path /a"):
            build_mount_table(config)

    def test_overlapping_rules(self) -> None:
        config = VanityConfig(
            path_rules={
                "/gh/{user}": PathEntry(repo="https://github.com/{user}/tool"),
                "/gh/x/{user}": PathEntry(repo="https://github.com/{user}/other"),
            }
        )
        with pytest.raises(ConfigError, match="already covered"):
            build_mount_table(config)

    def test_duplicate_rule_prefix(self) -> None:
        config = VanityConfig(
            path_rules={
                "/gh/{user}": PathEntry(repo="https://github.com/{user}/tool"),
                "/gh/{name}/": PathEntry(repo="https://github.com/{name}/other"),
            }
        )
        with pytest.raises(ConfigError, match="duplicate prefix"):
            build_mount_table(config)

    def test_disjoint_rules(self) -> None:
        config = VanityConfig(
            path_rules={
                "/gh/{user}": PathEntry(repo="https://github.com/{user}/tool"),
                "/gl/{user}": PathEntry(repo="https://gitlab.com/{user}/tool", vcs="git"),
            }
        )
        assert len(build_mount_table(config).rules) == 2
