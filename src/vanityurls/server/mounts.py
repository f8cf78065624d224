"""Mount point data model.

A static mount maps a path such as ``/portmidi`` to a repository, a redirect
target, or both. A wildcard rule such as ``/gh/{user}`` expands into a
mount for every value of its placeholder. All of these are immutable once
built; a :class:`ResolvedMount` pairs one of them with the subpath of a
single request.
"""

from __future__ import annotations

from dataclasses import dataclass

from vanityurls.server.config import ConfigError

VALID_VCS = frozenset({"bzr", "git", "hg", "svn"})
DEFAULT_CACHE_MAX_AGE = 86400  # 24 hours

GITHUB_PREFIX = "https://github.com/"
BITBUCKET_PREFIX = "https://bitbucket.org"


def canonical_path(path: str) -> str:
    """Strip one trailing separator (``/portmidi/`` -> ``/portmidi``, ``/`` -> ``''``)."""
    return path[:-1] if path.endswith("/") else path


def infer_display(repo: str) -> str:
    """Infer a source browsing template from well-known hosting URLs.

    Returns an empty string when the host is not recognized.
    """
    if repo.startswith(GITHUB_PREFIX):
        return f"{repo} {repo}/tree/master{{/dir}} {repo}/blob/master{{/dir}}/{{file}}#L{{line}}"
    if repo.startswith(BITBUCKET_PREFIX):
        return (
            f"{repo} {repo}/src/default{{/dir}} "
            f"{repo}/src/default{{/dir}}/{{file}}#{{file}}-{{line}}"
        )
    return ""


def infer_vcs(repo: str) -> str:
    """Infer the VCS from the repository URL, or return an empty string."""
    if repo.startswith(GITHUB_PREFIX):
        return "git"
    return ""


def find_placeholder(text: str) -> tuple[str, str, str]:
    """Split ``text`` around its single ``{placeholder}``.

    Examples::

        "/gh/{user}"                  -> ("/gh/", "{user}", "")
        "https://github.com/{user}/x" -> ("https://github.com/", "{user}", "/x")

    Raises:
        ConfigError: if there is no placeholder, it is unterminated or empty,
            or more than one placeholder is present.
    """
    start = text.find("{")
    if start < 0:
        msg = f"no placeholder found in {text!r}"
        raise ConfigError(msg)
    prefix, rest = text[:start], text[start + 1 :]
    end = rest.find("}")
    if end < 0:
        msg = f"placeholder not terminated in {text!r}"
        raise ConfigError(msg)
    if end == 0:
        msg = f"placeholder is empty in {text!r}"
        raise ConfigError(msg)
    name, suffix = rest[:end], rest[end + 1 :]
    if "{" in suffix or "}" in suffix:
        msg = f"multiple placeholders in {text!r} and only one allowed"
        raise ConfigError(msg)
    return prefix, "{" + name + "}", suffix


@dataclass(frozen=True, slots=True)
class ContentTarget:
    """Where the source of a mount lives."""

    repo: str
    vcs: str
    display: str


@dataclass(frozen=True, slots=True)
class RedirectTarget:
    """Where to send requests for a mount's downloadable sub-paths."""

    url: str
    markers: tuple[str, ...] = ()

    def matches(self, subpath: str) -> bool:
        """Substring test: ``"releases"`` also matches ``"old-releases/x"``."""
        return any(marker in subpath for marker in self.markers)

    def location(self, subpath: str) -> str:
        return self.url + subpath


@dataclass(frozen=True, slots=True)
class MountPoint:
    """A configured path prefix.

    At least one of ``content`` and ``redirect`` is always set.
    """

    path: str
    cache_max_age: int = DEFAULT_CACHE_MAX_AGE
    content: ContentTarget | None = None
    redirect: RedirectTarget | None = None

    def __post_init__(self) -> None:
        if self.content is None and self.redirect is None:
            msg = f"mount {self.path!r} has neither a repository nor a redirect"
            raise ValueError(msg)

    @property
    def kind(self) -> str:
        if self.content is not None and self.redirect is not None:
            return "both"
        return "content" if self.content is not None else "redirect"

    @property
    def cache_control(self) -> str:
        return f"public, max-age={self.cache_max_age}"

    def should_redirect(self, subpath: str) -> bool:
        if self.redirect is None:
            return False
        return self.content is None or self.redirect.matches(subpath)


@dataclass(frozen=True, slots=True)
class WildcardRule:
    """A mount template with exactly one placeholder after a literal prefix."""

    key: str
    """Canonical rule path, e.g. ``/gh/{user}``."""

    prefix: str
    """Literal text before the placeholder, e.g. ``/gh/``."""

    placeholder: str
    """Placeholder token including braces, e.g. ``{user}``."""

    repo_template: str
    display_template: str
    vcs: str
    cache_max_age: int = DEFAULT_CACHE_MAX_AGE

    def expand(self, value: str) -> MountPoint:
        """Synthesize the mount for one placeholder value."""
        return MountPoint(
            path=self.prefix + value,
            cache_max_age=self.cache_max_age,
            content=ContentTarget(
                repo=self.repo_template.replace(self.placeholder, value),
                vcs=self.vcs,
                display=self.display_template.replace(self.placeholder, value),
            ),
        )


@dataclass(frozen=True, slots=True)
class ResolvedMount:
    """The mount owning a request path, and what is left of the path after it."""

    mount: MountPoint
    subpath: str
    rule: WildcardRule | None = None
