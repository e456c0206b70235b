"""CLI commands: sentinel list / sentinel show — browse stored scan jobs."""

from __future__ import annotations

import asyncio
import json
import sys

import click
from rich.console import Console

from sentinel.cli.render import job_panel, jobs_table
from sentinel.cli.runtime import open_service
from sentinel.errors import JobNotFound
from sentinel.jobs.models import JobStatus
from sentinel.report.models import ScanType

console = Console()


@click.command("list")
@click.option(
    "--type",
    "-t",
    "scan_type",
    type=click.Choice([t.value for t in ScanType], case_sensitive=False),
    default=None,
    help="Only show scans of this type.",
)
@click.option(
    "--status",
    "-s",
    type=click.Choice([s.value for s in JobStatus], case_sensitive=False),
    default=None,
    help="Only show scans in this state.",
)
@click.option("--json", "as_json", is_flag=True, help="Print the jobs as JSON.")
@click.pass_context
def list_scans(
    ctx: click.Context,
    scan_type: str | None,
    status: str | None,
    as_json: bool,
) -> None:
    """List stored scans, newest first."""
    config = ctx.obj["config"]

    async def _run():
        async with open_service(config) as service:
            return await service.list_scans(scan_type, status)

    jobs = asyncio.run(_run())
    if as_json:
        click.echo(json.dumps([job.to_dict() for job in jobs], indent=2))
        return
    if not jobs:
        console.print("[dim]No scans found.[/dim]")
        return
    console.print(jobs_table(jobs))


@click.command()
@click.argument("job_id")
@click.option("--json", "as_json", is_flag=True, help="Print the job as JSON.")
@click.pass_context
def show(ctx: click.Context, job_id: str, as_json: bool) -> None:
    """Show one scan and its report."""
    config = ctx.obj["config"]

    async def _run():
        async with open_service(config) as service:
            return await service.get_scan(job_id)

    try:
        job = asyncio.run(_run())
    except JobNotFound as e:
        Console(stderr=True).print(f"[red]{e}[/red]")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(job.to_dict(), indent=2))
    else:
        console.print(job_panel(job))
