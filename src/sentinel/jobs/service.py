"""Scan service — orchestrates store, dispatcher, and normalizer per job."""

from __future__ import annotations

import asyncio
import logging

from sentinel.analysis.dispatcher import AnalysisDispatcher
from sentinel.errors import (
    AnalysisUnavailable,
    ConfigurationError,
    InvalidTransition,
    SchemaViolation,
)
from sentinel.jobs.models import Job, JobStatus
from sentinel.jobs.query import coerce_filters
from sentinel.jobs.store import JobStore
from sentinel.report.models import Mode, ScanType
from sentinel.report.normalizer import normalize
from sentinel.report.schema import is_mode_overridden, parse_mode, parse_scan_type

logger = logging.getLogger(__name__)


class ScanService:
    """Accepts scan submissions and runs each job lifecycle in the background.

    ``start_scan`` returns as soon as the job is stored; callers poll
    ``get_scan`` (or ``wait``) for the outcome. Jobs run independently and
    in no particular order.
    """

    def __init__(self, store: JobStore, dispatcher: AnalysisDispatcher) -> None:
        self._store = store
        self._dispatcher = dispatcher
        self._tasks: dict[str, asyncio.Task[None]] = {}

    async def start_scan(
        self,
        name: str,
        content: str,
        scan_type: ScanType | str,
        mode: Mode | str = Mode.AUDIT,
    ) -> str:
        """Store a new PENDING job, schedule its analysis, and return its id."""
        if not name or not name.strip():
            raise ConfigurationError("A target name is required")
        if not content or not content.strip():
            raise ConfigurationError("Content to analyze is required")
        scan_type = parse_scan_type(scan_type)
        mode = parse_mode(mode)

        if is_mode_overridden(scan_type, mode):
            logger.warning(
                "Mode %s ignored for %s scan '%s'; running Web3 review instead",
                mode.value,
                scan_type.value,
                name,
            )

        job = await self._store.create(name.strip(), scan_type, mode)
        task = asyncio.create_task(self._run(job, content), name=f"scan-{job.id}")
        self._tasks[job.id] = task
        task.add_done_callback(lambda _t, job_id=job.id: self._tasks.pop(job_id, None))
        return job.id

    async def get_scan(self, job_id: str) -> Job:
        return await self._store.get(job_id)

    async def list_scans(
        self,
        scan_type: ScanType | str | None = None,
        status: JobStatus | str | None = None,
    ) -> list[Job]:
        """Jobs matching the filters, most recently created first."""
        type_filter, status_filter = coerce_filters(scan_type, status)
        return await self._store.list(type_filter, status_filter)

    async def wait(self, job_id: str, timeout: float | None = None) -> Job:
        """Block until the job's background work is done, then return it."""
        task = self._tasks.get(job_id)
        if task is not None:
            await asyncio.wait_for(asyncio.shield(task), timeout=timeout)
        return await self._store.get(job_id)

    async def shutdown(self) -> None:
        """Wait for in-flight jobs, then release the dispatcher."""
        if self._tasks:
            await asyncio.gather(*self._tasks.values(), return_exceptions=True)
        await self._dispatcher.close()

    async def _run(self, job: Job, content: str) -> None:
        try:
            await self._store.transition(job.id, JobStatus.RUNNING)
            raw = await self._dispatcher.dispatch(content, job.type, job.mode)
            report = normalize(raw, job.type, job.mode)
        except InvalidTransition as e:
            current = await self._store.get(job.id)
            logger.warning("%s; job already %s", e, current.status.value)
            return
        except (AnalysisUnavailable, SchemaViolation) as e:
            logger.warning("Scan %s failed: %s", job.id, e)
            await self._fail(job.id, str(e))
            return
        except Exception as e:
            logger.exception("Unexpected error while running scan %s", job.id)
            await self._fail(job.id, f"Internal error: {e}")
            return

        try:
            await self._store.transition(job.id, JobStatus.COMPLETED, report=report)
        except InvalidTransition as e:
            current = await self._store.get(job.id)
            logger.warning("%s; job already %s", e, current.status.value)

    async def _fail(self, job_id: str, reason: str) -> None:
        try:
            await self._store.transition(job_id, JobStatus.FAILED, error=reason)
        except InvalidTransition as e:
            current = await self._store.get(job_id)
            logger.warning("%s; job already %s", e, current.status.value)
