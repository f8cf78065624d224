"""Configuration loading for the vanity URL server."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import Any

import yaml

DEFAULT_DOCS_URL = "https://pkg.go.dev"


class ConfigError(ValueError):
    """Raised when the configuration cannot be loaded or is invalid."""


@dataclass
class PathEntry:
    """Raw settings for one entry under ``paths`` or ``pathrules``."""

    repo: str = ""
    """Repository URL (e.g., 'https://github.com/rakyll/portmidi')."""

    display: str = ""
    """Source browsing template with {dir}, {file} and {line} placeholders."""

    vcs: str = ""
    """One of 'git', 'hg', 'svn' or 'bzr'. Inferred for GitHub when empty."""

    redir: str = ""
    """Base URL to redirect to."""

    redir_paths: list[str] = field(default_factory=list)
    """Subpath markers that trigger the redirect."""

    cache_max_age: int | None = None
    """Per-entry override of the Cache-Control max-age, in seconds."""


@dataclass
class VanityConfig:
    """Configuration for the vanity URL server."""

    host: str = ""
    """Host name used in import paths. Empty means use the request's Host header."""

    cache_max_age: int | None = None
    """Default Cache-Control max-age, in seconds."""

    docs_url: str = DEFAULT_DOCS_URL
    """Documentation site linked from the generated pages."""

    paths: dict[str, PathEntry] = field(default_factory=dict)
    """Static mounts keyed by path."""

    path_rules: dict[str, PathEntry] = field(default_factory=dict)
    """Wildcard mounts keyed by a path containing one {placeholder}."""

    bind: str = "127.0.0.1"
    """Address to listen on."""

    port: int = 8080
    """Port to listen on."""


def _optional_int(value: Any, where: str, key: str = "cache_max_age") -> int | None:
    if value is None:
        return None
    # bool is an int subclass; "true" is never a valid number here
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"configuration for {where}: {key} must be an integer, got {value!r}"
        raise ConfigError(msg)
    return value


def _string(value: Any, key: str, where: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        msg = f"configuration for {where}: {key} must be a string, got {value!r}"
        raise ConfigError(msg)
    return value


def parse_path_entry(where: str, raw: Any) -> PathEntry:
    """Convert one raw mapping from the config document into a PathEntry."""
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        msg = f"configuration for {where}: expected a mapping, got {type(raw).__name__}"
        raise ConfigError(msg)

    redir_paths = raw.get("redir_paths") or []
    if isinstance(redir_paths, str):
        redir_paths = [redir_paths]
    if not isinstance(redir_paths, list) or not all(isinstance(p, str) for p in redir_paths):
        msg = f"configuration for {where}: redir_paths must be a list of strings"
        raise ConfigError(msg)

    return PathEntry(
        repo=_string(raw.get("repo"), "repo", where),
        display=_string(raw.get("display"), "display", where),
        vcs=_string(raw.get("vcs"), "vcs", where),
        redir=_string(raw.get("redir"), "redir", where),
        redir_paths=list(redir_paths),
        cache_max_age=_optional_int(raw.get("cache_max_age"), where),
    )


def _parse_entries(section: str, raw: Any) -> dict[str, PathEntry]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        msg = f"{section} must be a mapping of path to settings"
        raise ConfigError(msg)
    return {str(path): parse_path_entry(str(path), entry) for path, entry in raw.items()}


def _read_document(config_path: Path) -> dict[str, Any]:
    """Read a YAML or TOML document, chosen by file suffix."""
    suffix = config_path.suffix.lower()
    try:
        if suffix in (".yaml", ".yml"):
            with config_path.open("rb") as f:
                data = yaml.safe_load(f)
        elif suffix == ".toml":
            with config_path.open("rb") as f:
                data = tomllib.load(f)
        else:
            msg = f"Unsupported config format: {config_path.name!r}. Expected .yaml, .yml or .toml"
            raise ConfigError(msg)
    except (yaml.YAMLError, tomllib.TOMLDecodeError) as e:
        msg = f"Cannot parse {config_path}: {e}"
        raise ConfigError(msg) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"Cannot parse {config_path}: top level must be a mapping"
        raise ConfigError(msg)
    return data


def parse_config(data: dict[str, Any]) -> VanityConfig:
    """Build a VanityConfig from an already parsed document."""
    config = VanityConfig()
    config.host = _string(data.get("host"), "host", "host")
    config.cache_max_age = _optional_int(data.get("cache_max_age"), "cache_max_age")
    config.docs_url = _string(data.get("docs_url"), "docs_url", "docs_url") or DEFAULT_DOCS_URL
    config.paths = _parse_entries("paths", data.get("paths"))
    config.path_rules = _parse_entries("pathrules", data.get("pathrules"))

    server_section = data.get("server") or {}
    if not isinstance(server_section, dict):
        msg = "server must be a mapping"
        raise ConfigError(msg)
    config.bind = _string(server_section.get("bind"), "bind", "server") or config.bind
    port = _optional_int(server_section.get("port"), "server", key="port")
    if port is not None:
        if not 0 <= port <= 65535:
            msg = f"configuration for server: port {port} is out of range"
            raise ConfigError(msg)
        config.port = port
    return config


def load_config(
    config_path: Path | None = None,
    host: str | None = None,
    bind: str | None = None,
    port: int | None = None,
) -> VanityConfig:
    """Load configuration from file and CLI overrides.

    Args:
        config_path: Optional path to a YAML or TOML config file
        host: CLI override for the host used in import paths
        bind: CLI bind address override
        port: CLI port override

    Returns:
        VanityConfig with merged settings
    """
    if config_path is not None:
        config = parse_config(_read_document(config_path))
    else:
        config = VanityConfig()

    # Apply CLI overrides
    if host is not None:
        config.host = host

    if bind is not None:
        config.bind = bind

    if port is not None:
        config.port = port

    return config
