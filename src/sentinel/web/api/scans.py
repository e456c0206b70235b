"""REST API for scan jobs — startScan, listScans, getScan."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from sentinel.errors import ConfigurationError, JobNotFound
from sentinel.jobs.models import Job
from sentinel.report.normalizer import risk_band, severity_histogram, unified_checklist
from sentinel.samples import SAMPLES

router = APIRouter(tags=["scans"])


class ScanCreate(BaseModel):
    name: str
    content: str
    type: str
    mode: str = "AUDIT"


@router.post("/scans", status_code=202)
async def start_scan(body: ScanCreate, request: Request):
    service = request.app.state.scans
    try:
        job_id = await service.start_scan(body.name, body.content, body.type, body.mode)
    except ConfigurationError as e:
        return JSONResponse(status_code=422, content={"detail": str(e)})
    return {"id": job_id}


@router.get("/scans")
async def list_scans(
    request: Request,
    type: str | None = None,
    status: str | None = None,
):
    service = request.app.state.scans
    try:
        jobs = await service.list_scans(type, status)
    except ConfigurationError as e:
        return JSONResponse(status_code=422, content={"detail": str(e)})
    return [_summary(job) for job in jobs]


@router.get("/scans/{scan_id}")
async def get_scan(scan_id: str, request: Request):
    service = request.app.state.scans
    try:
        job = await service.get_scan(scan_id)
    except JobNotFound:
        return JSONResponse(
            status_code=404,
            content={"detail": "Scan not found"},
        )

    data = job.to_dict()
    if job.report is not None:
        data["severityHistogram"] = severity_histogram(job.report).to_dict()
        data["riskBand"] = risk_band(job.report.risk_score).value
        data["checklist"] = list(unified_checklist(job.report))
    return data


@router.get("/samples")
async def list_samples():
    return {scan_type.value: text for scan_type, text in SAMPLES.items()}


@router.get("/health")
async def health():
    return {"status": "ok"}


def _summary(job: Job) -> dict:
    """List-view row: the full job with its risk score lifted to the top."""
    data = job.to_dict()
    data["riskScore"] = job.report.risk_score if job.report is not None else None
    return data
