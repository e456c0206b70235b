"""CLI command: sentinel scan <file> — submit an artifact and wait for the report."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import click
from rich.console import Console

from sentinel.cli.render import job_panel
from sentinel.cli.runtime import open_service
from sentinel.errors import ConfigurationError
from sentinel.jobs.models import Job, JobStatus
from sentinel.report.models import REQUEST_MODES, ScanType

console = Console(stderr=True)


@click.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False, allow_dash=True))
@click.option(
    "--type",
    "-t",
    "scan_type",
    type=click.Choice([t.value for t in ScanType], case_sensitive=False),
    required=True,
    help="Kind of artifact being scanned.",
)
@click.option(
    "--mode",
    "-m",
    type=click.Choice([m.value for m in REQUEST_MODES], case_sensitive=False),
    default="AUDIT",
    show_default=True,
    help="AUDIT reports findings; FORGE also synthesizes test artifacts.",
)
@click.option("--name", "-n", default=None, help="Target name (default: file name).")
@click.option("--json", "as_json", is_flag=True, help="Print the job as JSON.")
@click.pass_context
def scan(
    ctx: click.Context,
    source: str,
    scan_type: str,
    mode: str,
    name: str | None,
    as_json: bool,
) -> None:
    """Analyze SOURCE (a file, or - for stdin) and print the report."""
    config = ctx.obj["config"]
    if source == "-":
        content = sys.stdin.read()
        target = name or "stdin"
    else:
        content = Path(source).read_text(encoding="utf-8", errors="replace")
        target = name or Path(source).name

    console.print(
        f"[bold]Sentinel[/bold] analyzing [cyan]{target}[/cyan] "
        f"as {scan_type.upper()} ({mode.upper()})\n"
    )

    async def _run() -> Job:
        async with open_service(config) as service:
            job_id = await service.start_scan(target, content, scan_type, mode)
            return await service.wait(job_id)

    try:
        job = asyncio.run(_run())
    except ConfigurationError as e:
        raise click.UsageError(str(e)) from e

    if as_json:
        click.echo(json.dumps(job.to_dict(), indent=2))
    else:
        Console().print(job_panel(job))

    if job.status == JobStatus.FAILED:
        sys.exit(1)
