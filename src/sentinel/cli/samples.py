"""CLI command: sentinel samples [TYPE] — print built-in sample inputs."""

from __future__ import annotations

import click

from sentinel.report.models import ScanType
from sentinel.samples import SAMPLES


@click.command()
@click.argument(
    "scan_type",
    required=False,
    type=click.Choice([t.value for t in ScanType], case_sensitive=False),
)
def samples(scan_type: str | None) -> None:
    """Print the sample input for SCAN_TYPE, or all samples."""
    if scan_type:
        click.echo(SAMPLES[ScanType(scan_type.upper())])
        return
    for kind, text in SAMPLES.items():
        click.echo(f"# {kind.value}\n{text}\n")
