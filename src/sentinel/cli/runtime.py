"""Shared setup for CLI commands that need the job store."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sentinel.analysis.dispatcher import AnalysisDispatcher
from sentinel.config import SentinelConfig
from sentinel.jobs.service import ScanService
from sentinel.jobs.store import JobStore
from sentinel.storage.db import get_db


@asynccontextmanager
async def open_service(config: SentinelConfig) -> AsyncIterator[ScanService]:
    """Open the database and yield a ScanService; always closes both."""
    db = await get_db(config.db_path)
    service = ScanService(JobStore(db), AnalysisDispatcher(config))
    try:
        yield service
    finally:
        await service.shutdown()
        await db.close()
