"""Tests for the SQLite-backed job store."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from sentinel.errors import InvalidTransition, JobNotFound
from sentinel.jobs.models import JobStatus
from sentinel.jobs.store import JobStore
from sentinel.report.models import Mode, ScanType
from sentinel.report.normalizer import normalize
from sentinel.storage.db import get_db


def run_with_store(db_path: Path, scenario):
    """Open a store on ``db_path``, run the async scenario, close the db."""

    async def _run():
        db = await get_db(db_path)
        try:
            return await scenario(JobStore(db))
        finally:
            await db.close()

    return asyncio.run(_run())


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "test.db"


@pytest.fixture
def report(audit_raw: dict):
    return normalize(audit_raw, ScanType.JAVA_CODE, Mode.AUDIT)


class TestCreateAndGet:
    def test_create_is_pending(self, db_path):
        async def scenario(store: JobStore):
            job = await store.create("payroll-api", ScanType.OPENAPI, Mode.FORGE)
            return job, await store.get(job.id)

        created, fetched = run_with_store(db_path, scenario)
        assert created.status == JobStatus.PENDING
        assert fetched == created
        assert fetched.report is None
        assert fetched.error is None

    def test_get_missing(self, db_path):
        async def scenario(store: JobStore):
            await store.get("nope")

        with pytest.raises(JobNotFound):
            run_with_store(db_path, scenario)

    def test_records_survive_reopen(self, db_path, report):
        async def first(store: JobStore):
            job = await store.create("svc", ScanType.JAVA_CODE, Mode.AUDIT)
            await store.transition(job.id, JobStatus.RUNNING)
            await store.transition(job.id, JobStatus.COMPLETED, report=report)
            return job.id

        job_id = run_with_store(db_path, first)

        async def second(store: JobStore):
            return await store.get(job_id)

        job = run_with_store(db_path, second)
        assert job.status == JobStatus.COMPLETED
        assert job.report == report


class TestList:
    def test_filter_by_status_newest_first(self, db_path):
        async def scenario(store: JobStore):
            ids = {}
            for i in range(3):
                job = await store.create(f"pending-{i}", ScanType.JAVA_CODE, Mode.AUDIT)
                ids[job.id] = job
            running = await store.create("running", ScanType.OPENAPI, Mode.AUDIT)
            await store.transition(running.id, JobStatus.RUNNING)
            failed = []
            for i in range(2):
                job = await store.create(f"failed-{i}", ScanType.BUG_ANALYSIS, Mode.AUDIT)
                await store.transition(job.id, JobStatus.FAILED, error="boom")
                failed.append(job.id)
            return failed, await store.list(status=JobStatus.FAILED)

        failed_ids, jobs = run_with_store(db_path, scenario)
        assert [j.id for j in jobs] == list(reversed(failed_ids))
        assert all(j.status == JobStatus.FAILED for j in jobs)

    def test_and_semantics(self, db_path):
        async def scenario(store: JobStore):
            a = await store.create("a", ScanType.JAVA_CODE, Mode.AUDIT)
            await store.create("b", ScanType.OPENAPI, Mode.AUDIT)
            c = await store.create("c", ScanType.JAVA_CODE, Mode.AUDIT)
            await store.transition(c.id, JobStatus.RUNNING)
            return (
                await store.list(scan_type=ScanType.JAVA_CODE, status=JobStatus.PENDING),
                await store.list(),
                a.id,
            )

        filtered, everything, a_id = run_with_store(db_path, scenario)
        assert [j.id for j in filtered] == [a_id]
        assert [j.target_name for j in everything] == ["c", "b", "a"]


class TestTransition:
    def test_lifecycle(self, db_path, report):
        async def scenario(store: JobStore):
            job = await store.create("svc", ScanType.JAVA_CODE, Mode.AUDIT)
            running = await store.transition(job.id, JobStatus.RUNNING)
            done = await store.transition(job.id, JobStatus.COMPLETED, report=report)
            return running, done

        running, done = run_with_store(db_path, scenario)
        assert running.status == JobStatus.RUNNING
        assert done.status == JobStatus.COMPLETED
        assert done.report == report
        assert done.error is None

    def test_terminal_is_immutable(self, db_path, report):
        async def scenario(store: JobStore):
            job = await store.create("svc", ScanType.JAVA_CODE, Mode.AUDIT)
            await store.transition(job.id, JobStatus.FAILED, error="timeout")
            await store.transition(job.id, JobStatus.COMPLETED, report=report)

        with pytest.raises(InvalidTransition):
            run_with_store(db_path, scenario)

    def test_payload_rules(self, db_path, report):
        async def scenario(store: JobStore):
            job = await store.create("svc", ScanType.JAVA_CODE, Mode.AUDIT)
            errors = []
            for kwargs in (
                {"new_status": JobStatus.COMPLETED},
                {"new_status": JobStatus.FAILED},
                {"new_status": JobStatus.RUNNING, "error": "x"},
                {"new_status": JobStatus.FAILED, "error": "x", "report": report},
                {"new_status": JobStatus.PENDING},
            ):
                try:
                    await store.transition(job.id, **kwargs)
                except ValueError as e:
                    errors.append(e)
            return errors, await store.get(job.id)

        errors, job = run_with_store(db_path, scenario)
        assert len(errors) == 5
        assert job.status == JobStatus.PENDING

    def test_concurrent_completions_one_wins(self, db_path, report):
        async def scenario(store: JobStore):
            job = await store.create("svc", ScanType.JAVA_CODE, Mode.AUDIT)
            await store.transition(job.id, JobStatus.RUNNING)
            results = await asyncio.gather(
                store.transition(job.id, JobStatus.COMPLETED, report=report),
                store.transition(job.id, JobStatus.COMPLETED, report=report),
                return_exceptions=True,
            )
            return results, await store.get(job.id)

        results, job = run_with_store(db_path, scenario)
        losers = [r for r in results if isinstance(r, InvalidTransition)]
        winners = [r for r in results if not isinstance(r, Exception)]
        assert len(winners) == 1
        assert len(losers) == 1
        assert job.status == JobStatus.COMPLETED

    def test_running_twice_rejected(self, db_path):
        async def scenario(store: JobStore):
            job = await store.create("svc", ScanType.JAVA_CODE, Mode.AUDIT)
            await store.transition(job.id, JobStatus.RUNNING)
            await store.transition(job.id, JobStatus.RUNNING)

        with pytest.raises(InvalidTransition):
            run_with_store(db_path, scenario)

    def test_unknown_job(self, db_path):
        async def scenario(store: JobStore):
            await store.transition("missing", JobStatus.RUNNING)

        with pytest.raises(JobNotFound):
            run_with_store(db_path, scenario)


def test_purge(db_path):
    async def scenario(store: JobStore):
        job = await store.create("svc", ScanType.JAVA_CODE, Mode.AUDIT)
        await store.purge(job.id)
        return await store.list()

    assert run_with_store(db_path, scenario) == []
