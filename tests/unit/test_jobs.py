"""Tests for job models and the query/filter engine."""

from __future__ import annotations

import pytest

from sentinel.errors import ConfigurationError
from sentinel.jobs.models import Job, JobStatus
from sentinel.jobs.query import ALL, query
from sentinel.report.models import Mode, ScanType
from sentinel.report.normalizer import normalize


def _job(name: str, scan_type: ScanType, status: JobStatus, created_at: float) -> Job:
    return Job(
        target_name=name,
        type=scan_type,
        mode=Mode.AUDIT,
        status=status,
        created_at=created_at,
        error="boom" if status == JobStatus.FAILED else None,
    )


@pytest.fixture
def jobs() -> list[Job]:
    # Newest first, as the store returns them
    return [
        _job("f2", ScanType.OPENAPI, JobStatus.FAILED, 7.0),
        _job("p3", ScanType.JAVA_CODE, JobStatus.PENDING, 6.0),
        _job("r1", ScanType.SMART_CONTRACT, JobStatus.RUNNING, 5.0),
        _job("f1", ScanType.JAVA_CODE, JobStatus.FAILED, 4.0),
        _job("p2", ScanType.BUG_ANALYSIS, JobStatus.PENDING, 3.0),
        _job("p1", ScanType.JAVA_CODE, JobStatus.PENDING, 2.0),
    ]


def test_status_filter_keeps_order(jobs):
    result = query(jobs, status_filter=JobStatus.FAILED)
    assert [j.target_name for j in result] == ["f2", "f1"]


def test_type_and_status_filter(jobs):
    result = query(jobs, type_filter="JAVA_CODE", status_filter="PENDING")
    assert [j.target_name for j in result] == ["p3", "p1"]


def test_no_filter_returns_everything(jobs):
    assert query(jobs) == jobs
    assert query(jobs, type_filter=ALL, status_filter=ALL) == jobs


def test_unknown_filter_value(jobs):
    with pytest.raises(ConfigurationError):
        query(jobs, status_filter="DONE")


def test_terminal_statuses():
    assert JobStatus.COMPLETED.is_terminal
    assert JobStatus.FAILED.is_terminal
    assert not JobStatus.PENDING.is_terminal
    assert not JobStatus.RUNNING.is_terminal


def test_job_dict_round_trip(web3_raw: dict):
    report = normalize(web3_raw, ScanType.SMART_CONTRACT, Mode.FORGE)
    job = Job(
        target_name="vault",
        type=ScanType.SMART_CONTRACT,
        mode=Mode.FORGE,
        status=JobStatus.COMPLETED,
        report=report,
    )
    data = job.to_dict()
    assert data["targetName"] == "vault"
    assert data["mode"] == "FORGE"
    assert data["report"]["web3Findings"][0]["severity"] == "CRITICAL"
    assert Job.from_dict(data) == job
