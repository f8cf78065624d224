"""Command-line interface for vanityurls."""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

import click

from vanityurls.server.config import ConfigError, load_config
from vanityurls.server.dispatch import IndexPage, MetadataPage, NotFound, Redirect, dispatch
from vanityurls.server.table import build_mount_table

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

config_argument = click.argument(
    "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


@click.group()
@click.version_option()
def main() -> None:
    """Serve vanity import paths for go get and friends."""
    pass


@main.command()
@config_argument
@click.option(
    "--host",
    default=None,
    help="Host used in import paths (default: from config or Host header)",
)
@click.option("--bind", default=None, help="Address to listen on (default: 127.0.0.1)")
@click.option("--port", type=int, default=None, help="Port to listen on (default: 8080)")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default="info",
    show_default=True,
)
def serve(
    config_path: Path,
    host: str | None,
    bind: str | None,
    port: int | None,
    log_level: str,
) -> None:
    """Start the vanity URL server.

    CONFIG_PATH: YAML or TOML file describing paths and pathrules
    """
    import uvicorn

    from vanityurls.server.app import create_app

    _configure_logging(log_level)
    try:
        config = load_config(config_path, host=host, bind=bind, port=port)
        app = create_app(config)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Serving vanity URLs on http://{config.bind}:{config.port}")
    uvicorn.run(app, host=config.bind, port=config.port, log_level=log_level.lower())


@main.command()
@config_argument
def check(config_path: Path) -> None:
    """Validate a configuration file and list its mounts.

    CONFIG_PATH: YAML or TOML file describing paths and pathrules
    """
    try:
        table = build_mount_table(load_config(config_path))
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Static mounts ({len(table.index)}):")
    for mount in table.index:
        targets = []
        if mount.content is not None:
            targets.append(f"{mount.content.vcs} {mount.content.repo}")
        if mount.redirect is not None:
            targets.append(f"redirect {mount.redirect.url}")
        click.echo(f"  {mount.path or '/'} -> {', '.join(targets)}")

    if len(table.rules):
        click.echo(f"Wildcard rules ({len(table.rules)}):")
        for rule in table.rules:
            click.echo(f"  {rule.key} -> {rule.vcs} {rule.repo_template}")


@main.command()
@config_argument
@click.argument("path")
@click.option(
    "--request-host", default="localhost", show_default=True, help="Host header to simulate"
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def resolve(config_path: Path, path: str, request_host: str, as_json: bool) -> None:
    """Show how a request path would be answered.

    CONFIG_PATH: YAML or TOML file describing paths and pathrules
    PATH: Request path (e.g., "/portmidi/sub")
    """
    try:
        table = build_mount_table(load_config(config_path))
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    decision = dispatch(table, path, request_host)

    if as_json:
        info = {"outcome": type(decision).__name__, **asdict(decision)}
        click.echo(json.dumps(info, indent=2))
        return

    if isinstance(decision, MetadataPage):
        click.echo(f"go-import: {decision.go_import}")
        click.echo(f"go-source: {decision.go_source}")
        click.echo(f"subpath: {decision.subpath}")
        click.echo(f"Cache-Control: {decision.cache_control}")
    elif isinstance(decision, Redirect):
        click.echo(f"{decision.status_code} -> {decision.location}")
    elif isinstance(decision, IndexPage):
        click.echo(f"Index of {decision.host}:")
        for handler in decision.handlers:
            click.echo(f"  {handler}")
    else:
        click.echo(f"404 Not Found: {decision.path}")
        sys.exit(1)


if __name__ == "__main__":
    main()
