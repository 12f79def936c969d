"""Tests for the chart series endpoints."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient

from panel_monitor.dashboard.app import create_app

DAY_START = datetime(2025, 4, 16, 17, 0, tzinfo=timezone.utc)  # 2025-04-17 00:00 local


@pytest.fixture
async def client(repo, config, fixed_now):
    app = create_app(config, repo, now=fixed_now)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def client_without_db(fake_source, config, fixed_now):
    fake_source.unavailable = True
    app = create_app(config, fake_source, now=fixed_now)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class TestMetricSeries:
    @pytest.mark.asyncio
    async def test_past_day(self, client, repo) -> None:
        for minute, volts in ((7, 218.0), (22, 220.0), (51, 222.0)):
            await repo.store_reading(
                "33kva", recorded_at=DAY_START - timedelta(days=1) + timedelta(hours=9, minutes=minute),
                voltage_r=volts,
            )
        resp = await client.get("/api/metric-series/voltage/R", params={"date": "2025-04-16"})
        assert resp.status_code == 200
        body = resp.json()
        assert len(body["data"]) == 24
        assert body["data"][9] == {"time": "09:00", "value": 220.0}
        assert body["debugQueries"][0]["sql"].startswith("SELECT")

    @pytest.mark.asyncio
    async def test_today_truncated(self, client, repo) -> None:
        await repo.store_reading("33kva", recorded_at=DAY_START + timedelta(hours=14, minutes=37))
        resp = await client.get("/api/metric-series/voltage/R")
        data = resp.json()["data"]
        assert data[0]["time"] == "00:00"
        assert data[-1]["time"] == "14:00"

    @pytest.mark.asyncio
    async def test_chart_data_alias(self, client) -> None:
        resp = await client.get("/api/chart-data/pf/S", params={"date": "2025-04-16"})
        assert resp.status_code == 200
        assert len(resp.json()["data"]) == 24

    @pytest.mark.asyncio
    async def test_minute_granularity(self, client) -> None:
        resp = await client.get(
            "/api/metric-series/current/T",
            params={"date": "2025-04-16", "granularity": "minute", "panel": "66kva"},
        )
        assert resp.status_code == 200
        assert len(resp.json()["data"]) == 1440

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path,params", [
        ("/api/metric-series/watts/R", {}),
        ("/api/metric-series/voltage/X", {}),
        ("/api/metric-series/voltage/R", {"date": "17-04-2025"}),
        ("/api/metric-series/voltage/R", {"granularity": "week"}),
        ("/api/metric-series/voltage/R", {"panel": "99kva"}),
    ])
    async def test_invalid_params_400(self, client, path, params) -> None:
        resp = await client.get(path, params=params)
        assert resp.status_code == 400
        body = resp.json()
        assert body["status"] == "error"
        assert body["message"]

    @pytest.mark.asyncio
    async def test_source_unavailable_503(self, client_without_db) -> None:
        resp = await client_without_db.get("/api/metric-series/voltage/R")
        assert resp.status_code == 503
        assert resp.json()["status"] == "error"

    @pytest.mark.asyncio
    async def test_no_cache_headers(self, client) -> None:
        resp = await client.get("/api/metric-series/voltage/R", params={"date": "2025-04-16"})
        assert "no-store" in resp.headers["cache-control"]


class TestTotalPower:
    @pytest.mark.asyncio
    async def test_keys_and_sum(self, client, repo) -> None:
        yesterday = DAY_START - timedelta(days=1)
        await repo.store_reading("33kva", recorded_at=yesterday + timedelta(hours=8), net_kw=10.0)
        await repo.store_reading("66kva", recorded_at=yesterday + timedelta(hours=8), net_kw=22.5)

        resp = await client.get("/api/total-power", params={"date": "2025-04-16"})
        assert resp.status_code == 200
        rows = resp.json()["data"]
        assert len(rows) == 24
        assert rows[8] == {
            "time": "08:00", "panel33Power": 10000.0, "panel66Power": 22500.0, "totalPower": 32500.0,
        }
        assert len(resp.json()["debugQueries"]) == 2

    @pytest.mark.asyncio
    async def test_today_without_readings(self, client) -> None:
        resp = await client.get("/api/total-power")
        assert resp.status_code == 200
        assert resp.json()["data"] == [
            {"time": "00:00", "panel33Power": 0.0, "panel66Power": 0.0, "totalPower": 0.0},
        ]

    @pytest.mark.asyncio
    async def test_invalid_granularity(self, client) -> None:
        resp = await client.get("/api/total-power", params={"granularity": "day"})
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_source_unavailable_503(self, client_without_db) -> None:
        resp = await client_without_db.get("/api/total-power")
        assert resp.status_code == 503
