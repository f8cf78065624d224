"""Validation of raw configuration into the immutable mount table."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from vanityurls.server.config import DEFAULT_DOCS_URL, ConfigError, PathEntry, VanityConfig
from vanityurls.server.index import PathIndex
from vanityurls.server.mounts import (
    DEFAULT_CACHE_MAX_AGE,
    VALID_VCS,
    ContentTarget,
    MountPoint,
    RedirectTarget,
    ResolvedMount,
    WildcardRule,
    canonical_path,
    find_placeholder,
    infer_display,
    infer_vcs,
)
from vanityurls.server.rules import RuleMatcher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MountTable:
    """Everything needed to answer requests, built once at startup."""

    index: PathIndex
    rules: RuleMatcher
    host: str = ""
    docs_url: str = DEFAULT_DOCS_URL

    def resolve(self, path: str) -> ResolvedMount | None:
        """Find the owner of ``path``; static mounts take precedence over rules."""
        resolved = self.index.find(path)
        if resolved is None:
            resolved = self.rules.find(path)
        return resolved


def _cache_max_age(where: str, own: int | None, default: int | None) -> int:
    if own is not None:
        if own < 0:
            msg = f"configuration for {where}: cache_max_age is negative"
            raise ConfigError(msg)
        return own
    if default is not None:
        return default
    return DEFAULT_CACHE_MAX_AGE


def _resolve_vcs(where: str, entry: PathEntry) -> str:
    if entry.vcs:
        if entry.vcs not in VALID_VCS:
            msg = f"configuration for {where}: unknown VCS {entry.vcs}"
            raise ConfigError(msg)
        return entry.vcs
    vcs = infer_vcs(entry.repo)
    if not vcs:
        msg = f"configuration for {where}: cannot infer VCS from {entry.repo}"
        raise ConfigError(msg)
    logger.debug("Inferred VCS %s for %s", vcs, where)
    return vcs


def _resolve_display(where: str, entry: PathEntry) -> str:
    if entry.display:
        return entry.display
    display = infer_display(entry.repo)
    if display:
        logger.debug("Inferred display template for %s", where)
    return display


def build_mount(path: str, entry: PathEntry, default_cache_age: int | None = None) -> MountPoint:
    """Validate one ``paths`` entry.

    Raises:
        ConfigError: if the entry has neither ``repo`` nor ``redir``, names an
            unknown VCS, needs a VCS that cannot be inferred, or has a
            negative cache age.
    """
    if not entry.repo and not entry.redir:
        msg = f"configuration for {path}: either repo or redir is required"
        raise ConfigError(msg)

    content = None
    if entry.repo:
        content = ContentTarget(
            repo=entry.repo,
            vcs=_resolve_vcs(path, entry),
            display=_resolve_display(path, entry),
        )
    elif entry.vcs and entry.vcs not in VALID_VCS:
        msg = f"configuration for {path}: unknown VCS {entry.vcs}"
        raise ConfigError(msg)

    redirect = None
    if entry.redir:
        if any(marker == "" for marker in entry.redir_paths):
            msg = f"configuration for {path}: redir_paths contains an empty marker"
            raise ConfigError(msg)
        redirect = RedirectTarget(url=entry.redir, markers=tuple(entry.redir_paths))

    return MountPoint(
        path=canonical_path(path),
        cache_max_age=_cache_max_age(path, entry.cache_max_age, default_cache_age),
        content=content,
        redirect=redirect,
    )


def build_rule(key: str, entry: PathEntry, default_cache_age: int | None = None) -> WildcardRule:
    """Validate one ``pathrules`` entry.

    Raises:
        ConfigError: if the placeholder is missing, malformed, followed by
            trailing text, or differs between the rule key and ``repo``.
    """
    prefix, placeholder, suffix = find_placeholder(canonical_path(key))
    if suffix:
        msg = (
            f"configuration for {key}: trailing garbage {suffix!r} "
            f"after placeholder {placeholder!r}"
        )
        raise ConfigError(msg)
    if not entry.repo:
        msg = f"configuration for {key}: repo is required"
        raise ConfigError(msg)
    try:
        _, repo_placeholder, _ = find_placeholder(canonical_path(entry.repo))
    except ConfigError as e:
        msg = f"configuration for {key}: repo: {e}"
        raise ConfigError(msg) from e
    if placeholder != repo_placeholder:
        msg = (
            f"configuration for {key}: placeholder in rule is {placeholder!r} "
            f"but {repo_placeholder!r} in repo"
        )
        raise ConfigError(msg)

    return WildcardRule(
        key=canonical_path(key),
        prefix=prefix,
        placeholder=placeholder,
        repo_template=entry.repo,
        display_template=_resolve_display(key, entry),
        vcs=_resolve_vcs(key, entry),
        cache_max_age=_cache_max_age(key, entry.cache_max_age, default_cache_age),
    )


def check_ambiguous_rules(rules: list[WildcardRule]) -> None:
    """Reject rule sets where one literal prefix is a prefix of another."""
    for i, rule in enumerate(rules):
        for other in rules[i + 1 :]:
            if rule.prefix == other.prefix:
                msg = f"configuration for {other.key}: duplicate prefix {other.prefix}"
                raise ConfigError(msg)
            if other.prefix.startswith(rule.prefix):
                msg = f"configuration for {other.key} is already covered by {rule.key}"
                raise ConfigError(msg)
            if rule.prefix.startswith(other.prefix):
                msg = f"configuration for {rule.key} is already covered by {other.key}"
                raise ConfigError(msg)


def build_mount_table(config: VanityConfig) -> MountTable:
    """Validate a VanityConfig and build the lookup structures.

    Args:
        config: Raw configuration

    Returns:
        MountTable ready to resolve request paths

    Raises:
        ConfigError: on the first invalid setting
    """
    if config.cache_max_age is not None and config.cache_max_age < 0:
        msg = "cache_max_age is negative"
        raise ConfigError(msg)

    mounts: dict[str, MountPoint] = {}
    for path, entry in config.paths.items():
        mount = build_mount(path, entry, config.cache_max_age)
        if mount.path in mounts:
            msg = f"configuration for {path}: duplicate path {mount.path or '/'}"
            raise ConfigError(msg)
        mounts[mount.path] = mount

    rules = [
        build_rule(key, entry, config.cache_max_age) for key, entry in config.path_rules.items()
    ]
    check_ambiguous_rules(rules)

    logger.info("Loaded %d static mounts and %d wildcard rules", len(mounts), len(rules))
    return MountTable(
        index=PathIndex(mounts.values()),
        rules=RuleMatcher(rules),
        host=config.host,
        docs_url=config.docs_url.rstrip("/"),
    )
