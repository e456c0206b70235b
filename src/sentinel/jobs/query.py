"""Query/filter engine for the job list view."""

from __future__ import annotations

from collections.abc import Iterable

from sentinel.errors import ConfigurationError
from sentinel.jobs.models import Job, JobStatus
from sentinel.report.models import ScanType

# Filter value the dashboard uses for "no filter"
ALL = "ALL"


def query(
    jobs: Iterable[Job],
    type_filter: ScanType | str | None = None,
    status_filter: JobStatus | str | None = None,
) -> list[Job]:
    """Keep jobs matching every supplied filter, preserving input order."""
    scan_type, status = coerce_filters(type_filter, status_filter)
    return [
        job
        for job in jobs
        if (scan_type is None or job.type == scan_type)
        and (status is None or job.status == status)
    ]


def coerce_filters(
    type_filter: ScanType | str | None = None,
    status_filter: JobStatus | str | None = None,
) -> tuple[ScanType | None, JobStatus | None]:
    """Parse filter values; ``None`` or ``ALL`` means unfiltered."""
    return _coerce(ScanType, type_filter), _coerce(JobStatus, status_filter)


def _coerce(enum_cls, value):
    if value is None or value == ALL:
        return None
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().upper())
    except ValueError:
        raise ConfigurationError(
            f"Unknown {enum_cls.__name__} filter: {value!r}"
        ) from None
