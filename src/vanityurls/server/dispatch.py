"""Per-request decision: index page, metadata page, redirect or not found."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vanityurls.server.table import MountTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class IndexPage:
    host: str
    docs_url: str
    handlers: tuple[str, ...]
    """``host + path`` for every static mount."""

    rules: tuple[tuple[str, str], ...] = ()
    """``(host + rule key, repository template)`` for every wildcard rule."""


@dataclass(frozen=True, slots=True)
class MetadataPage:
    import_path: str
    vcs: str
    repo: str
    display: str
    subpath: str
    docs_url: str
    cache_control: str

    @property
    def go_import(self) -> str:
        return f"{self.import_path} {self.vcs} {self.repo}"

    @property
    def go_source(self) -> str:
        return f"{self.import_path} {self.display}"

    @property
    def docs_link(self) -> str:
        return f"{self.docs_url}/{self.import_path}/{self.subpath}"


@dataclass(frozen=True, slots=True)
class Redirect:
    location: str
    status_code: int = 302


@dataclass(frozen=True, slots=True)
class NotFound:
    path: str


Decision = IndexPage | MetadataPage | Redirect | NotFound


def resolve_host(configured: str, request_host: str) -> str:
    """The configured host wins; otherwise use the request's Host header."""
    return configured or request_host


def normalize_request_path(path: str) -> str:
    """Prefix a leading ``/`` when middleware has stripped it."""
    if not path.startswith("/"):
        path = "/" + path
    return path


def build_index(table: MountTable, host: str) -> IndexPage:
    return IndexPage(
        host=host,
        docs_url=table.docs_url,
        handlers=tuple(host + mount.path for mount in table.index),
        rules=tuple((host + rule.key, rule.repo_template) for rule in table.rules),
    )


def dispatch(table: MountTable, path: str, request_host: str) -> Decision:
    """Decide how to answer a request for ``path``.

    Args:
        table: The mount table built at startup
        path: Request path
        request_host: Value of the request's Host header

    Returns:
        One of IndexPage, MetadataPage, Redirect or NotFound
    """
    path = normalize_request_path(path)
    resolved = table.resolve(path)

    if resolved is None:
        if path == "/":
            logger.debug("%s: index", path)
            return build_index(table, resolve_host(table.host, request_host))
        logger.debug("%s: no mount", path)
        return NotFound(path)

    mount, subpath = resolved.mount, resolved.subpath
    if mount.redirect is not None and mount.should_redirect(subpath):
        location = mount.redirect.location(subpath)
        logger.debug("%s: redirect to %s", path, location)
        return Redirect(location)

    if mount.content is None:
        logger.debug("%s: mount %s has nothing to serve", path, mount.path)
        return NotFound(path)

    logger.debug("%s: metadata for %s (subpath %r)", path, mount.path, subpath)
    return MetadataPage(
        import_path=resolve_host(table.host, request_host) + mount.path,
        vcs=mount.content.vcs,
        repo=mount.content.repo,
        display=mount.content.display,
        subpath=subpath,
        docs_url=table.docs_url,
        cache_control=mount.cache_control,
    )
