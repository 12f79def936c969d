"""REST endpoints for latest readings, ingestion and system status."""

from __future__ import annotations

import logging
from datetime import datetime

import aiosqlite
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import AliasChoices, BaseModel, Field, TypeAdapter, ValidationError

from panel_monitor import __version__
from panel_monitor.series.errors import UnknownPanel
from panel_monitor.series.models import Reading
from panel_monitor.series.params import parse_date, parse_phase
from panel_monitor.series.snapshot import peak_power, phase_snapshots

router = APIRouter()
logger = logging.getLogger(__name__)


# ── Request models ───────────────────────────────────

def _field(name: str, legacy: str) -> float:
    return Field(0.0, validation_alias=AliasChoices(name, legacy))


class PanelReadingIn(BaseModel):
    """Meter payload; legacy collector field names are accepted too."""

    panel: str
    timestamp: datetime | None = None
    voltage_r: float = _field("voltage_r", "volt_r")
    voltage_s: float = _field("voltage_s", "volt_s")
    voltage_t: float = _field("voltage_t", "volt_t")
    current_r: float = _field("current_r", "arus_r")
    current_s: float = _field("current_s", "arus_s")
    current_t: float = _field("current_t", "arus_t")
    apparent_power_r: float = _field("apparent_power_r", "kva_r")
    apparent_power_s: float = _field("apparent_power_s", "kva_s")
    apparent_power_t: float = _field("apparent_power_t", "kva_t")
    energy_kvah: float = _field("energy_kvah", "kvah")
    net_kw: float = _field("net_kw", "netkw")
    net_kva: float = _field("net_kva", "netkva")
    frequency_hz: float | None = None
    power_factor: float | None = Field(None, ge=0.0, le=1.0)


_BULK_ADAPTER = TypeAdapter(list[PanelReadingIn])


def _resolve_panel(request: Request, panel: str | None) -> str:
    config = request.app.state.config
    panel_id = panel or config.default_panel
    if config.get_panel(panel_id) is None:
        raise UnknownPanel(f"Unknown panel: {panel_id!r}")
    return panel_id


# ── Latest readings ──────────────────────────────────

@router.get("/phase-data")
async def phase_data(request: Request, panel: str | None = None):
    """Latest reading of a panel, split per phase."""
    panel_id = _resolve_panel(request, panel)
    reading = await request.app.state.repo.latest_reading(panel_id)
    if reading is None:
        return JSONResponse({"status": "error", "message": "No data found"}, status_code=404)
    snapshots = phase_snapshots(reading, request.app.state.config.series)
    return [s.to_dict() for s in snapshots]


@router.get("/phase-data/{phase}")
async def phase_data_single(request: Request, phase: str, panel: str | None = None):
    """Latest reading of a panel for one phase."""
    parsed = parse_phase(phase)
    panel_id = _resolve_panel(request, panel)
    reading = await request.app.state.repo.latest_reading(panel_id)
    if reading is None:
        return JSONResponse({"status": "error", "message": "Phase data not found"}, status_code=404)
    for snapshot in phase_snapshots(reading, request.app.state.config.series):
        if snapshot.phase == parsed.value:
            return snapshot.to_dict()
    return JSONResponse({"status": "error", "message": "Phase data not found"}, status_code=404)


@router.get("/peak-power")
async def peak_power_route(request: Request, date: str | None = None) -> dict:
    """Peak net power per panel over a day."""
    service = request.app.state.series_service
    config = request.app.state.config
    target_date = parse_date(date, service.now(), service.tz)
    return await peak_power(
        request.app.state.repo,
        [p.id for p in config.panels],
        target_date,
        service.tz,
        timeout_seconds=config.series.subquery_timeout_seconds,
    )


# ── Ingestion ────────────────────────────────────────

@router.post("/panel-data")
async def create_panel_data(request: Request) -> JSONResponse:
    """Store one reading sent by a panel collector."""
    try:
        body = await request.json()
    except ValueError:
        return JSONResponse({"status": "error", "message": "Body must be JSON"}, status_code=400)
    if not isinstance(body, dict) or not body.get("panel"):
        return JSONResponse(
            {"status": "error", "message": "Panel identifier is required"}, status_code=400,
        )
    if request.app.state.config.get_panel(str(body["panel"])) is None:
        return JSONResponse(
            {"status": "error", "message": "Invalid panel identifier"}, status_code=400,
        )
    try:
        reading = PanelReadingIn.model_validate(body)
    except ValidationError as e:
        return JSONResponse(
            {"status": "error", "message": "Invalid panel data",
             "details": e.errors(include_url=False, include_context=False)},
            status_code=400,
        )

    values = reading.model_dump(exclude={"panel", "timestamp"})
    row_id = await request.app.state.repo.store_reading(
        reading.panel,
        recorded_at=reading.timestamp or request.app.state.series_service.now(),
        **values,
    )
    logger.debug("Stored reading %d for panel %s", row_id, reading.panel)
    return JSONResponse({"status": "ok", "id": row_id}, status_code=201)


@router.post("/panel-data/bulk")
async def create_panel_data_bulk(request: Request) -> JSONResponse:
    """Store a batch of readings; nothing is written unless every entry is valid."""
    try:
        body = await request.json()
    except ValueError:
        return JSONResponse({"status": "error", "message": "Body must be JSON"}, status_code=400)
    if not isinstance(body, list) or not body:
        return JSONResponse(
            {"status": "error", "message": "Body must be a non-empty array of readings"},
            status_code=400,
        )
    try:
        entries = _BULK_ADAPTER.validate_python(body)
    except ValidationError as e:
        return JSONResponse(
            {"status": "error", "message": "Invalid panel data array",
             "details": e.errors(include_url=False, include_context=False)},
            status_code=400,
        )
    config = request.app.state.config
    unknown = sorted({e.panel for e in entries if config.get_panel(e.panel) is None})
    if unknown:
        return JSONResponse(
            {"status": "error", "message": f"Invalid panel identifier: {', '.join(unknown)}"},
            status_code=400,
        )

    received_at = request.app.state.series_service.now()
    readings = [
        Reading(
            panel_id=e.panel,
            timestamp=e.timestamp or received_at,
            **e.model_dump(exclude={"panel", "timestamp"}),
        )
        for e in entries
    ]
    count = await request.app.state.repo.store_readings(readings)
    logger.info("Stored %d readings in bulk", count)
    return JSONResponse({"status": "ok", "count": count}, status_code=201)


# ── System ───────────────────────────────────────────

@router.get("/system-info")
async def system_info(request: Request):
    """Version, timezone, configured panels and database status."""
    config = request.app.state.config
    repo = request.app.state.repo
    info = {
        "version": __version__,
        "timezone": config.series.timezone,
        "fetchMode": config.series.fetch_mode,
        "timestamp": request.app.state.series_service.now().isoformat(),
    }
    try:
        panels = [
            {"id": p.id, "name": p.name, "readings": await repo.count_readings(p.id)}
            for p in config.panels
        ]
        schema_version = await repo.get_schema_version()
    except aiosqlite.Error as e:
        logger.error("Database status check failed: %s", e)
        return JSONResponse(
            {**info, "database": {"status": "error", "message": str(e)}}, status_code=503,
        )
    return {
        **info,
        "panels": panels,
        "database": {"status": "connected", "schemaVersion": schema_version},
    }
