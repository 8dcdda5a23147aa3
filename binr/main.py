"""
binr — CLI entrypoint.

Usage:
    binr --help
    binr get myapp testbin v1.0.0 --url 'https://example.com/{version}/{os}/{arch}/testbin'
    binr path myapp testbin
    binr versions myapp testbin
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from binr import __version__
from binr.core.config.settings import BinrConfig
from binr.core.errors import BinrError
from binr.core.observability.logging_config import setup_logging


def _config(ctx: click.Context) -> BinrConfig:
    return BinrConfig.from_env(base_dir=ctx.obj.get("base_dir"))


def _fail(message: str) -> None:
    click.secho(f"❌ {message}", fg="red", err=True)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="binr")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to binr.yml (default: auto-detect).",
)
@click.option(
    "--base-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory holding the binr tree (default: $XDG_CONFIG_HOME or ~/.config).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    base_dir: str | None,
) -> None:
    """binr — download command-line binaries on demand."""
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj["base_dir"] = Path(base_dir) if base_dir else None

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("BINR_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("BINR_LOG_FILE"),
        log_file_level=os.environ.get("BINR_LOG_FILE_LEVEL"),
    )


@cli.command()
@click.argument("namespace")
@click.argument("command")
@click.argument("version")
@click.option("--url", "url_template", default=None,
              help="Binary URL template ({version}, {bare_version}, {os}, {arch}).")
@click.option("--checksum-url", "checksum_template", default="",
              help="Checksum URL template (optional).")
@click.option("--timeout", type=float, default=None, help="Network timeout in seconds.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def get(
    ctx: click.Context,
    namespace: str,
    command: str,
    version: str,
    url_template: str | None,
    checksum_template: str,
    timeout: float | None,
    as_json: bool,
) -> None:
    """Install COMMAND at VERSION if missing, and print its path."""
    from binr.core.config.loader import load_sources
    from binr.core.orchestration.orchestrator import Orchestrator
    from binr.core.sources import template_source

    try:
        if url_template:
            source = template_source(url_template, checksum_template)
        else:
            source = load_sources(ctx.obj.get("config_path")).source_for(command)

        config = BinrConfig.from_env(base_dir=ctx.obj.get("base_dir"), timeout=timeout)
        path = Orchestrator(config).get(namespace, command, version, source)
    except BinrError as e:
        _fail(str(e))
        return

    if as_json:
        click.echo(json.dumps({
            "namespace": namespace,
            "command": command,
            "version": version,
            "path": str(path),
        }, indent=2))
        return

    click.echo(str(path))


@cli.command("path")
@click.argument("namespace")
@click.argument("command")
@click.argument("version", required=False, default="")
@click.pass_context
def path_cmd(ctx: click.Context, namespace: str, command: str, version: str) -> None:
    """Print where COMMAND is (or would be) installed.

    Without VERSION, prints the link that tracks the newest version.
    """
    try:
        path = _config(ctx).paths().path(namespace, command, version)
    except BinrError as e:
        _fail(str(e))
        return
    click.echo(str(path))


@cli.command()
@click.argument("namespace")
@click.argument("command")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def versions(ctx: click.Context, namespace: str, command: str, as_json: bool) -> None:
    """List installed versions of COMMAND."""
    from binr.core.execution.links import LinkManager

    try:
        links = LinkManager(_config(ctx).paths())
        installed = links.versions(namespace, command)
        latest = links.latest(namespace, command)
    except BinrError as e:
        _fail(str(e))
        return

    if as_json:
        click.echo(json.dumps({
            "namespace": namespace,
            "command": command,
            "versions": [v.original for v in installed],
            "latest": latest.original if latest else None,
        }, indent=2))
        return

    if not installed:
        if not ctx.obj.get("quiet"):
            click.secho(f"⚠️  No versions of {command} installed in {namespace}", fg="yellow")
        return

    click.secho(f"📦 {namespace}/{command}", fg="cyan", bold=True)
    for v in installed:
        marker = " ← latest" if latest is not None and v == latest else ""
        click.echo(f"   • {v.original}{marker}")


if __name__ == "__main__":
    cli()
