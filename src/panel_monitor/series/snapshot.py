"""Latest-reading views: per-phase snapshots and daily peak power."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict, dataclass
from datetime import date, tzinfo
from typing import Any

from panel_monitor.config.schema import SeriesConfig
from panel_monitor.series.bucketing import day_window
from panel_monitor.series.errors import DataSourceUnavailable
from panel_monitor.series.models import Metric, Phase, Reading
from panel_monitor.series.source import ReadingSource
from panel_monitor.timezone_utils import ensure_aware

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PhaseSnapshot:
    phase: str
    voltage: float
    current: float
    power: float  # VA
    energy: float  # kVAh
    frequency: float
    pf: float
    time: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def phase_snapshots(reading: Reading, cfg: SeriesConfig) -> list[PhaseSnapshot]:
    """Split one reading into R/S/T snapshots."""
    snapshots = []
    for phase in Phase:
        def value(metric: Metric) -> float:
            return reading.value_of(
                metric, phase,
                nominal_frequency_hz=cfg.nominal_frequency_hz,
                default_power_factor=cfg.default_power_factor,
            )

        snapshots.append(PhaseSnapshot(
            phase=phase.value,
            voltage=value(Metric.VOLTAGE),
            current=value(Metric.CURRENT),
            power=value(Metric.POWER),
            energy=value(Metric.ENERGY),
            frequency=value(Metric.FREQUENCY),
            pf=value(Metric.POWER_FACTOR),
            time=ensure_aware(reading.timestamp).isoformat(),
        ))
    return snapshots


async def peak_power(
    source: ReadingSource,
    panel_ids: list[str],
    target_date: date,
    tz: tzinfo,
    timeout_seconds: float = 5.0,
) -> dict[str, Any]:
    """Highest net power per panel on the local day, with totals.

    ``totalPeak`` sums the individual panel peaks, which may occur at
    different times of day. ``totalUsage`` is the last energy counter value
    recorded within the day.
    """
    start, end = day_window(target_date, tz)
    try:
        day_readings = await asyncio.wait_for(
            asyncio.gather(
                *(source.readings_in_range(panel_id, start, end) for panel_id in panel_ids)
            ),
            timeout=timeout_seconds,
        )
    except Exception as e:
        raise DataSourceUnavailable("Could not load readings for peak power") from e

    panels: dict[str, Any] = {}
    total_peak = 0.0
    total_usage = 0.0
    for panel_id, readings in zip(panel_ids, day_readings):
        peak_reading = max(readings, key=lambda r: r.net_kw, default=None)
        peak_w = peak_reading.value_of(Metric.NET_POWER) if peak_reading else 0.0
        last = max(readings, key=lambda r: ensure_aware(r.timestamp), default=None)
        usage = last.energy_kvah if last else 0.0
        panels[panel_id] = {
            "peak": peak_w,
            "peakTime": (
                ensure_aware(peak_reading.timestamp).astimezone(tz).isoformat()
                if peak_reading else None
            ),
            "totalUsage": usage,
        }
        total_peak += peak_w
        total_usage += usage

    return {
        "date": target_date.isoformat(),
        "panels": panels,
        "totalPeak": total_peak,
        "totalUsage": total_usage,
    }
