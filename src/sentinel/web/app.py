"""FastAPI application factory for the Sentinel web API."""

from __future__ import annotations

from fastapi import FastAPI

from sentinel import __version__
from sentinel.analysis.dispatcher import AnalysisDispatcher
from sentinel.config import SentinelConfig
from sentinel.jobs.service import ScanService
from sentinel.jobs.store import JobStore
from sentinel.storage.db import get_db


async def create_app(
    config: SentinelConfig | None = None,
    dispatcher: AnalysisDispatcher | None = None,
) -> FastAPI:
    """Build and return the FastAPI application."""
    config = config or SentinelConfig.load()

    app = FastAPI(
        title="Sentinel",
        version=__version__,
        docs_url="/api/docs",
    )

    # Store config, db and the scan service in app state
    app.state.config = config
    app.state.db = await get_db(config.db_path)
    app.state.scans = ScanService(
        JobStore(app.state.db),
        dispatcher or AnalysisDispatcher(config),
    )

    from sentinel.web.api.scans import router as scans_router

    app.include_router(scans_router, prefix="/api")

    @app.on_event("shutdown")
    async def shutdown() -> None:
        await app.state.scans.shutdown()
        await app.state.db.close()

    return app
