"""Insert a synthetic day of panel readings for local development."""

from __future__ import annotations

import argparse
import asyncio
import math
import os
import random
from dataclasses import replace
from datetime import date, datetime, time, timedelta, tzinfo
from pathlib import Path

from panel_monitor.config.manager import ConfigManager
from panel_monitor.db.engine import close_db, init_db
from panel_monitor.db.repository import Repository
from panel_monitor.series.models import Reading
from panel_monitor.series.truncation import local_today
from panel_monitor.timezone_utils import resolve_timezone


def _load_factor(hour: float) -> float:
    # Low overnight, ramps through the morning, peaks in the afternoon.
    if hour < 6:
        return 0.25
    if hour < 12:
        return 0.25 + (hour - 6) * 0.1
    if hour < 18:
        return 0.9
    return 0.9 - (hour - 18) * 0.1


def _synthetic_reading(panel_id: str, ts: datetime, local_hour: float, scale: float) -> Reading:
    load = _load_factor(local_hour) * scale
    wave = math.sin(local_hour / 24 * 2 * math.pi) * 5
    phases = {}
    for phase, base_v in (("r", 215.0), ("s", 225.0), ("t", 220.0)):
        kva = load / 3 * random.uniform(0.9, 1.1)
        volts = base_v + wave + random.uniform(0, 5)
        phases[f"voltage_{phase}"] = round(volts, 1)
        phases[f"apparent_power_{phase}"] = round(kva, 3)
        phases[f"current_{phase}"] = round(kva * 1000 / volts, 2)
    net_kva = sum(phases[f"apparent_power_{p}"] for p in "rst")
    pf = round(random.uniform(0.85, 0.98), 2)
    return Reading(
        panel_id=panel_id,
        timestamp=ts,
        energy_kvah=0.0,
        net_kva=round(net_kva, 3),
        net_kw=round(net_kva * pf, 3),
        frequency_hz=round(50 + random.uniform(-0.25, 0.25), 2),
        power_factor=pf,
        **phases,
    )


def resolve_day(day: date | None, tz: tzinfo, now: datetime | None = None) -> date:
    """The requested day, or today in the configured timezone."""
    if day is not None:
        return day
    return local_today(now or datetime.now(tz), tz)


async def seed(
    defaults_path: Path,
    config_path: Path,
    day: date | None,
    interval_minutes: int,
    until_now: bool,
) -> tuple[date, int]:
    config = ConfigManager(defaults_path, config_path).load()
    tz = resolve_timezone(config.series.timezone)
    day = resolve_day(day, tz)
    db = await init_db(config.db.path)
    repo = Repository(db)

    start = datetime.combine(day, time.min, tzinfo=tz)
    end = start + timedelta(days=1)
    if until_now:
        end = min(end, datetime.now(tz))

    readings: list[Reading] = []
    for index, panel in enumerate(config.panels):
        scale = 33.0 * (index + 1)
        energy = 0.0
        ts = start
        while ts < end:
            local_hour = ts.hour + ts.minute / 60
            reading = _synthetic_reading(panel.id, ts, local_hour, scale)
            energy += reading.net_kva * interval_minutes / 60
            readings.append(replace(reading, energy_kvah=round(energy, 2)))
            ts += timedelta(minutes=interval_minutes)

    count = await repo.store_readings(readings)
    await close_db()
    return day, count


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--defaults", type=Path,
        default=Path(os.environ.get("PANEL_MONITOR_DEFAULTS", "config.defaults.yaml")),
    )
    parser.add_argument(
        "--config", type=Path,
        default=Path(os.environ.get("PANEL_MONITOR_CONFIG", "config.yaml")),
    )
    parser.add_argument(
        "--date", type=date.fromisoformat, default=None,
        help="local day to seed (default: today in the configured timezone)",
    )
    parser.add_argument("--interval", type=int, default=5, help="minutes between readings")
    parser.add_argument("--until-now", action="store_true", help="stop at the current time")
    args = parser.parse_args()

    day, count = asyncio.run(
        seed(args.defaults, args.config, args.date, args.interval, args.until_now)
    )
    print(f"Inserted {count} readings for {day.isoformat()}")


if __name__ == "__main__":
    main()
