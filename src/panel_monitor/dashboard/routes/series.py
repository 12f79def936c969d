"""Chart series endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/metric-series/{metric}/{phase}")
@router.get("/chart-data/{metric}/{phase}")
async def metric_series(
    request: Request,
    metric: str,
    phase: str,
    panel: str | None = None,
    date: str | None = None,
    granularity: str | None = None,
) -> dict:
    """One metric of one panel phase over a day, one point per bucket."""
    service = request.app.state.series_service
    return await service.metric_series(
        metric, phase, panel=panel, date=date, granularity=granularity,
    )


@router.get("/total-power")
async def total_power(
    request: Request,
    date: str | None = None,
    granularity: str | None = None,
) -> dict:
    """Net power of every panel and their sum, one point per bucket."""
    service = request.app.state.series_service
    return await service.total_power(date=date, granularity=granularity)
