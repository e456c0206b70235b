"""Job data models — one analysis request and its lifecycle state."""

from __future__ import annotations

import enum
import time
import uuid
from dataclasses import dataclass, field, replace

from sentinel.report.models import Mode, Report, ScanType
from sentinel.report.normalizer import report_from_dict


class JobStatus(enum.Enum):
    """Lifecycle state of a scan job."""

    PENDING = "PENDING"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


@dataclass(frozen=True)
class Job:
    """A scan job. Terminal jobs carry either a report or an error, never both."""

    target_name: str
    type: ScanType
    mode: Mode
    status: JobStatus = JobStatus.PENDING
    created_at: float = field(default_factory=time.time)
    report: Report | None = None
    error: str | None = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def with_status(
        self,
        status: JobStatus,
        report: Report | None = None,
        error: str | None = None,
    ) -> Job:
        return replace(self, status=status, report=report, error=error)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "targetName": self.target_name,
            "type": self.type.value,
            "mode": self.mode.value,
            "status": self.status.value,
            "createdAt": self.created_at,
            "report": self.report.to_dict() if self.report is not None else None,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Job:
        report = data.get("report")
        return cls(
            id=data["id"],
            target_name=data["targetName"],
            type=ScanType(data["type"]),
            mode=Mode(data["mode"]),
            status=JobStatus(data["status"]),
            created_at=float(data["createdAt"]),
            report=report_from_dict(report) if report is not None else None,
            error=data.get("error"),
        )
