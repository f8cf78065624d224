"""Vanity import path server."""

from vanityurls.server.app import create_app
from vanityurls.server.config import ConfigError, PathEntry, VanityConfig, load_config
from vanityurls.server.dispatch import IndexPage, MetadataPage, NotFound, Redirect, dispatch
from vanityurls.server.table import MountTable, build_mount_table

__all__ = [
    "ConfigError",
    "IndexPage",
    "MetadataPage",
    "MountTable",
    "NotFound",
    "PathEntry",
    "Redirect",
    "VanityConfig",
    "build_mount_table",
    "create_app",
    "dispatch",
    "load_config",
]
