"""Shared test fixtures for Panel Monitor."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncGenerator

import aiosqlite
import pytest
import pytest_asyncio

from panel_monitor.config.manager import ConfigManager
from panel_monitor.config.schema import AppConfig
from panel_monitor.db.engine import init_db
from panel_monitor.db.repository import Repository
from panel_monitor.series.models import Reading

# 2025-04-17 14:37 in Asia/Jakarta (UTC+7)
FIXED_NOW = datetime(2025, 4, 17, 7, 37, tzinfo=timezone.utc)


class FakeReadingSource:
    """In-memory reading source with switchable failures."""

    def __init__(self) -> None:
        self.readings: list[Reading] = []
        self.unavailable = False
        self.delay = 0.0  # seconds every call stalls before answering
        self.fail_when: Callable[[str, datetime, datetime], bool] | None = None
        self.range_calls = 0
        self.latest_calls = 0

    async def _stall(self) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)

    def add(self, panel_id: str, ts: datetime, **values: float) -> Reading:
        reading = Reading(panel_id=panel_id, timestamp=ts, **values)
        self.readings.append(reading)
        return reading

    async def latest_reading(self, panel_id: str) -> Reading | None:
        self.latest_calls += 1
        await self._stall()
        if self.unavailable:
            raise ConnectionError("reading source offline")
        own = [r for r in self.readings if r.panel_id == panel_id]
        return max(own, key=lambda r: r.timestamp, default=None)

    async def readings_in_range(
        self, panel_id: str, start: datetime, end: datetime,
    ) -> list[Reading]:
        self.range_calls += 1
        await self._stall()
        if self.unavailable:
            raise ConnectionError("reading source offline")
        if self.fail_when is not None and self.fail_when(panel_id, start, end):
            raise TimeoutError("sub-query timed out")
        return sorted(
            (r for r in self.readings if r.panel_id == panel_id and start <= r.timestamp < end),
            key=lambda r: r.timestamp,
        )

    def describe_range_query(self, panel_id: str, start: datetime, end: datetime) -> str:
        return f"readings {panel_id} [{start.isoformat()}, {end.isoformat()})"


@pytest.fixture
def config() -> AppConfig:
    """Provide a default test configuration."""
    return AppConfig()


@pytest.fixture
def config_manager(tmp_path: Path) -> ConfigManager:
    """Provide a config manager with test paths."""
    defaults = tmp_path / "config.defaults.yaml"
    defaults.write_text("db:\n  path: ':memory:'\n")
    user = tmp_path / "config.yaml"
    return ConfigManager(defaults_path=defaults, user_path=user)


@pytest.fixture
def fake_source() -> FakeReadingSource:
    return FakeReadingSource()


@pytest.fixture
def fixed_now() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


@pytest_asyncio.fixture
async def db(tmp_path: Path) -> AsyncGenerator[aiosqlite.Connection, None]:
    """Provide a fresh database for each test."""
    conn = await init_db(tmp_path / "test.db")
    yield conn
    await conn.close()


@pytest_asyncio.fixture
async def repo(db: aiosqlite.Connection) -> Repository:
    """Provide a repository with a fresh database."""
    return Repository(db)
