"""Tests for per-phase snapshots and daily peak power."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from panel_monitor.config.schema import SeriesConfig
from panel_monitor.series.errors import DataSourceUnavailable
from panel_monitor.series.models import Reading
from panel_monitor.series.snapshot import peak_power, phase_snapshots
from panel_monitor.timezone_utils import resolve_timezone

TZ = resolve_timezone("Asia/Jakarta")
APR16_START = datetime(2025, 4, 15, 17, 0, tzinfo=timezone.utc)  # 2025-04-16 00:00 local


def test_phase_snapshots_apply_defaults() -> None:
    reading = Reading(
        panel_id="33kva",
        timestamp=APR16_START,
        voltage_s=224.0,
        apparent_power_t=0.75,
        frequency_hz=49.9,
    )
    snaps = phase_snapshots(reading, SeriesConfig(default_power_factor=0.85))
    assert [s.phase for s in snaps] == ["R", "S", "T"]
    assert snaps[1].voltage == 224.0
    assert snaps[2].power == 750.0
    assert snaps[0].frequency == 49.9
    assert snaps[0].pf == 0.85


@pytest.mark.asyncio
class TestPeakPower:
    async def test_usage_comes_from_requested_day(self, fake_source) -> None:
        fake_source.add("33kva", APR16_START + timedelta(hours=8), net_kw=3.0, energy_kvah=60.0)
        fake_source.add("33kva", APR16_START + timedelta(hours=20), net_kw=1.0, energy_kvah=100.0)
        fake_source.add("33kva", APR16_START + timedelta(days=1, hours=9), net_kw=7.0, energy_kvah=900.0)

        result = await peak_power(fake_source, ["33kva"], date(2025, 4, 16), TZ)

        panel = result["panels"]["33kva"]
        assert panel["totalUsage"] == 100.0
        assert panel["peak"] == 3000.0
        assert panel["peakTime"].startswith("2025-04-16T08:00:00")
        assert result["totalUsage"] == 100.0
        assert fake_source.latest_calls == 0

    async def test_totals_sum_panels(self, fake_source) -> None:
        fake_source.add("33kva", APR16_START + timedelta(hours=1), net_kw=2.0, energy_kvah=10.0)
        fake_source.add("66kva", APR16_START + timedelta(hours=5), net_kw=4.5, energy_kvah=30.0)

        result = await peak_power(fake_source, ["33kva", "66kva"], date(2025, 4, 16), TZ)

        assert result["date"] == "2025-04-16"
        assert result["totalPeak"] == 6500.0
        assert result["totalUsage"] == 40.0

    async def test_stalled_source(self, fake_source) -> None:
        fake_source.delay = 3.0
        with pytest.raises(DataSourceUnavailable):
            await peak_power(fake_source, ["33kva"], date(2025, 4, 16), TZ, timeout_seconds=0.05)
