"""FastAPI application factory for the Panel Monitor API."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from panel_monitor import __version__
from panel_monitor.config.schema import AppConfig
from panel_monitor.db.repository import Repository
from panel_monitor.logging.context import bind_context, clear_context
from panel_monitor.series.errors import DataSourceUnavailable, InvalidRequest
from panel_monitor.series.service import SeriesService

logger = logging.getLogger(__name__)


def create_app(
    config: AppConfig,
    repo: Repository,
    now: Callable[[], datetime] | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``now`` overrides the clock used to decide what "today" is.
    """
    app = FastAPI(
        title="Panel Monitor",
        description="Electrical panel telemetry and charting API",
        version=__version__,
    )

    @app.middleware("http")
    async def disable_browser_cache(request: Request, call_next):
        clear_context()
        bind_context(path=request.url.path)
        response = await call_next(request)
        if request.method in {"GET", "HEAD"}:
            # Live charts poll these endpoints; never serve a cached day.
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"
            response.headers["Pragma"] = "no-cache"
            response.headers["Expires"] = "0"
        return response

    @app.exception_handler(InvalidRequest)
    async def invalid_request(request: Request, exc: InvalidRequest) -> JSONResponse:
        return JSONResponse({"status": "error", "message": str(exc)}, status_code=400)

    @app.exception_handler(DataSourceUnavailable)
    async def source_unavailable(request: Request, exc: DataSourceUnavailable) -> JSONResponse:
        logger.error("Request %s failed: %s", request.url.path, exc)
        return JSONResponse({"status": "error", "message": str(exc)}, status_code=503)

    # Store shared objects in app state for access in routes
    app.state.config = config
    app.state.repo = repo
    app.state.series_service = SeriesService(repo, config, now=now)

    from panel_monitor.dashboard.routes.api import router as api_router
    from panel_monitor.dashboard.routes.series import router as series_router

    app.include_router(series_router, prefix="/api")
    app.include_router(api_router, prefix="/api")

    return app
