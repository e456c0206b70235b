"""Job store — async CRUD and atomic status transitions on SQLite.

Each job is one row keyed by id; the full job is kept as a JSON record,
with type/status/created_at copied into columns for filtering.
"""

from __future__ import annotations

import asyncio
import json
import logging

import aiosqlite

from sentinel.errors import InvalidTransition, JobNotFound
from sentinel.jobs.models import Job, JobStatus
from sentinel.report.models import Mode, Report, ScanType

logger = logging.getLogger(__name__)

# Statuses a job may be in for each requested transition
_ALLOWED_FROM = {
    JobStatus.RUNNING: (JobStatus.PENDING,),
    JobStatus.COMPLETED: (JobStatus.PENDING, JobStatus.RUNNING),
    JobStatus.FAILED: (JobStatus.PENDING, JobStatus.RUNNING),
}


class JobStore:
    """Keeps scan jobs; all mutation goes through ``transition``."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, job_id: str) -> asyncio.Lock:
        lock = self._locks.get(job_id)
        if lock is None:
            lock = self._locks[job_id] = asyncio.Lock()
        return lock

    async def create(self, target_name: str, scan_type: ScanType, mode: Mode) -> Job:
        job = Job(target_name=target_name, type=scan_type, mode=mode)
        await self._db.execute(
            "INSERT INTO jobs (id, type, status, created_at, record) "
            "VALUES (?, ?, ?, ?, ?)",
            (
                job.id,
                job.type.value,
                job.status.value,
                job.created_at,
                json.dumps(job.to_dict()),
            ),
        )
        await self._db.commit()
        logger.debug("Created job %s (%s/%s)", job.id, scan_type.value, mode.value)
        return job

    async def get(self, job_id: str) -> Job:
        cursor = await self._db.execute(
            "SELECT record FROM jobs WHERE id = ?", (job_id,)
        )
        row = await cursor.fetchone()
        if row is None:
            raise JobNotFound(job_id)
        return Job.from_dict(json.loads(row["record"]))

    async def list(
        self,
        scan_type: ScanType | None = None,
        status: JobStatus | None = None,
    ) -> list[Job]:
        """Jobs matching every given filter, most recently created first."""
        clauses = []
        params: list[str] = []
        if scan_type is not None:
            clauses.append("type = ?")
            params.append(scan_type.value)
        if status is not None:
            clauses.append("status = ?")
            params.append(status.value)
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        cursor = await self._db.execute(
            f"SELECT record FROM jobs{where} ORDER BY created_at DESC, seq DESC",
            params,
        )
        return [Job.from_dict(json.loads(row["record"])) async for row in cursor]

    async def transition(
        self,
        job_id: str,
        new_status: JobStatus,
        report: Report | None = None,
        error: str | None = None,
    ) -> Job:
        """Move a job to ``new_status``.

        COMPLETED needs a report, FAILED needs an error string, RUNNING
        takes neither. A job already in a terminal state raises
        InvalidTransition; of two racing transitions exactly one wins.
        """
        _check_payload(new_status, report, error)
        allowed = _ALLOWED_FROM.get(new_status)
        if allowed is None:
            raise ValueError(f"Cannot transition a job to {new_status.value}")

        async with self._lock_for(job_id):
            job = await self.get(job_id)
            if job.status not in allowed:
                raise InvalidTransition(job_id, job.status.value, new_status.value)

            updated = job.with_status(new_status, report=report, error=error)
            placeholders = ", ".join("?" for _ in allowed)
            cursor = await self._db.execute(
                "UPDATE jobs SET status = ?, record = ? "
                f"WHERE id = ? AND status IN ({placeholders})",
                (
                    updated.status.value,
                    json.dumps(updated.to_dict()),
                    job_id,
                    *(s.value for s in allowed),
                ),
            )
            await self._db.commit()
            if cursor.rowcount != 1:
                # Row changed underneath us (another store on the same file)
                current = await self.get(job_id)
                raise InvalidTransition(job_id, current.status.value, new_status.value)

        if new_status.is_terminal:
            self._locks.pop(job_id, None)
        logger.info("Job %s -> %s", job_id, new_status.value)
        return updated

    async def purge(self, job_id: str) -> None:
        """Delete a job record. Jobs never expire on their own."""
        cursor = await self._db.execute("DELETE FROM jobs WHERE id = ?", (job_id,))
        await self._db.commit()
        if cursor.rowcount == 0:
            raise JobNotFound(job_id)
        self._locks.pop(job_id, None)


def _check_payload(
    new_status: JobStatus, report: Report | None, error: str | None
) -> None:
    if new_status == JobStatus.COMPLETED:
        if report is None or error is not None:
            raise ValueError("COMPLETED requires a report and no error")
    elif new_status == JobStatus.FAILED:
        if not error or report is not None:
            raise ValueError("FAILED requires an error string and no report")
    elif report is not None or error is not None:
        raise ValueError(f"{new_status.value} takes no report or error")
