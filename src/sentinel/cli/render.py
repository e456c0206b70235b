"""Rich renderables for jobs and reports shown by the CLI."""

from __future__ import annotations

from datetime import datetime

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from sentinel.jobs.models import Job, JobStatus
from sentinel.report.models import ForgeReport, Report, RiskBand, Severity, Web3Report
from sentinel.report.normalizer import (
    findings_of,
    risk_band,
    severity_histogram,
    unified_checklist,
)

SEVERITY_COLORS = {
    Severity.CRITICAL: "red",
    Severity.HIGH: "dark_orange",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "blue",
}

STATUS_COLORS = {
    JobStatus.PENDING: "dim",
    JobStatus.RUNNING: "cyan",
    JobStatus.COMPLETED: "green",
    JobStatus.FAILED: "red",
}

_BAND_COLORS = {
    RiskBand.CRITICAL: "red",
    RiskBand.HIGH: "dark_orange",
    RiskBand.LOW: "green",
}


def format_time(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")


def jobs_table(jobs: list[Job]) -> Table:
    """Registry view: one row per job, newest first."""
    table = Table(title="Scans", show_lines=False)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Target", style="cyan")
    table.add_column("Type")
    table.add_column("Mode")
    table.add_column("Status", style="bold")
    table.add_column("Risk", justify="right")
    table.add_column("Created")

    for job in jobs:
        color = STATUS_COLORS.get(job.status, "white")
        risk = str(job.report.risk_score) if job.report is not None else "-"
        table.add_row(
            job.id[:12],
            job.target_name,
            job.type.value,
            job.mode.value,
            f"[{color}]{job.status.value}[/{color}]",
            risk,
            format_time(job.created_at),
        )
    return table


def job_panel(job: Job) -> Group:
    """Detail view for a single job, including its report if completed."""
    color = STATUS_COLORS.get(job.status, "white")
    header = Text.from_markup(
        f"[bold]{job.target_name}[/bold]  {job.type.value} / {job.mode.value}  "
        f"[{color}]{job.status.value}[/{color}]\n"
        f"[dim]{job.id}  created {format_time(job.created_at)}[/dim]"
    )
    parts: list = [Panel(header, style="bold")]

    if job.error:
        parts.append(Panel(job.error, title="Error", border_style="red"))
    if job.report is not None:
        parts.extend(report_renderables(job.report))
    return Group(*parts)


def report_renderables(report: Report) -> list:
    band = risk_band(report.risk_score)
    band_color = _BAND_COLORS[band]
    histogram = severity_histogram(report)
    counts = "  ".join(
        f"[{SEVERITY_COLORS[s]}]{s.value}: {histogram[s]}[/{SEVERITY_COLORS[s]}]"
        for s in sorted(Severity, reverse=True)
    )
    overview = Text.from_markup(
        f"Risk score: [{band_color}]{report.risk_score}[/{band_color}] "
        f"({band.value})\n{histogram.total} finding(s)  {counts}\n\n{report.summary}"
    )
    parts: list = [Panel(overview, title="Summary")]

    findings = findings_of(report)
    if findings:
        parts.append(_findings_table(findings, web3=isinstance(report, Web3Report)))

    checklist = unified_checklist(report)
    if checklist:
        title = "Safety checklist" if isinstance(report, Web3Report) else "Quick fixes"
        body = "\n".join(f"[ ] {item}" for item in checklist)
        parts.append(Panel(body, title=title, border_style="green"))

    if isinstance(report, ForgeReport):
        for feature in report.gherkin_features:
            parts.append(
                Panel(feature.content, title=f"Feature: {feature.name}", border_style="magenta")
            )
        for case in report.api_test_cases:
            steps = "\n".join(f"{i}. {step}" for i, step in enumerate(case.steps, start=1))
            parts.append(
                Panel(
                    f"{steps}\n\nExpected: {case.expected}",
                    title=f"Test: {case.title}",
                    border_style="magenta",
                )
            )
    return parts


def _findings_table(findings, web3: bool) -> Table:
    table = Table(title="Web3 findings" if web3 else "Findings", show_lines=True)
    table.add_column("Severity", style="bold", width=10)
    table.add_column("Category")
    table.add_column("Title")
    table.add_column("Recommendation")
    if not web3:
        table.add_column("Endpoint", style="cyan")

    # Highest severity first
    for finding in sorted(findings, key=lambda f: f.severity, reverse=True):
        color = SEVERITY_COLORS[finding.severity]
        row = [
            f"[{color}]{finding.severity.value}[/{color}]",
            finding.category.value,
            finding.title,
            finding.recommendation,
        ]
        if not web3:
            row.append(finding.evidence.endpoint)
        table.add_row(*row)
    return table
