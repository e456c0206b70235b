"""CLI entry point — Click group with global options."""

from __future__ import annotations

import logging

import click

from sentinel import __version__
from sentinel.config import SentinelConfig


@click.group()
@click.version_option(version=__version__, prog_name="sentinel")
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a YAML config file.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.pass_context
def main(ctx: click.Context, config_file: str | None, verbose: bool) -> None:
    """Sentinel — AI-assisted security review of code, APIs, and contracts."""
    ctx.ensure_object(dict)
    config = SentinelConfig.load(config_file)
    config.verbose = verbose
    ctx.obj["config"] = config

    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _register_commands() -> None:
    from sentinel.cli.jobs import list_scans, show  # noqa: F811
    from sentinel.cli.samples import samples  # noqa: F811
    from sentinel.cli.scan import scan  # noqa: F811
    from sentinel.cli.server import server  # noqa: F811

    main.add_command(scan)
    main.add_command(list_scans)
    main.add_command(show)
    main.add_command(samples)
    main.add_command(server)


_register_commands()
