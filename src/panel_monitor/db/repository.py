"""Data access layer for panel readings."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import aiosqlite

from panel_monitor.db.models import READING_COLUMNS
from panel_monitor.series.models import Reading
from panel_monitor.timezone_utils import ensure_aware

logger = logging.getLogger(__name__)

_LATEST_SQL = """SELECT * FROM panel_readings
                 WHERE panel_id = ?
                 ORDER BY recorded_at DESC, id DESC LIMIT 1"""

_RANGE_SQL = """SELECT * FROM panel_readings
                WHERE panel_id = ? AND recorded_at >= ? AND recorded_at < ?
                ORDER BY recorded_at"""


def _to_iso(dt: datetime) -> str:
    # Fixed-width UTC form so string comparison in SQL matches time order.
    return ensure_aware(dt).astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f+00:00")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _row_to_reading(row: aiosqlite.Row) -> Reading:
    data = dict(row)
    values = {col: data[col] for col in READING_COLUMNS if data.get(col) is not None}
    return Reading(
        panel_id=data["panel_id"],
        timestamp=datetime.fromisoformat(data["recorded_at"]),
        **values,
    )


class Repository:
    """SQLite-backed reading source for the series engine."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self.db = db

    # ── Writes ──────────────────────────────────────────

    async def store_reading(
        self,
        panel_id: str,
        recorded_at: datetime | None = None,
        **values: float | None,
    ) -> int:
        unknown = set(values) - set(READING_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown reading fields: {', '.join(sorted(unknown))}")
        columns = ["panel_id", "recorded_at", *values]
        placeholders = ", ".join("?" * len(columns))
        async with self.db.execute(
            f"INSERT INTO panel_readings ({', '.join(columns)}) VALUES ({placeholders})",
            (panel_id, _to_iso(recorded_at or _now()), *values.values()),
        ) as cursor:
            row_id = cursor.lastrowid
        await self.db.commit()
        return row_id  # type: ignore[return-value]

    async def store_readings(self, readings: list[Reading]) -> int:
        """Bulk insert; returns the number of rows written."""
        columns = ["panel_id", "recorded_at", *READING_COLUMNS]
        placeholders = ", ".join("?" * len(columns))
        await self.db.executemany(
            f"INSERT INTO panel_readings ({', '.join(columns)}) VALUES ({placeholders})",
            [
                (r.panel_id, _to_iso(r.timestamp), *(getattr(r, c) for c in READING_COLUMNS))
                for r in readings
            ],
        )
        await self.db.commit()
        return len(readings)

    # ── Reading source ──────────────────────────────────

    async def latest_reading(self, panel_id: str) -> Reading | None:
        async with self.db.execute(_LATEST_SQL, (panel_id,)) as cursor:
            row = await cursor.fetchone()
            return _row_to_reading(row) if row else None

    async def readings_in_range(
        self, panel_id: str, start: datetime, end: datetime,
    ) -> list[Reading]:
        async with self.db.execute(
            _RANGE_SQL, (panel_id, _to_iso(start), _to_iso(end)),
        ) as cursor:
            rows = await cursor.fetchall()
            return [_row_to_reading(r) for r in rows]

    def describe_range_query(self, panel_id: str, start: datetime, end: datetime) -> str:
        sql = " ".join(_RANGE_SQL.split())
        for value in (panel_id, _to_iso(start), _to_iso(end)):
            sql = sql.replace("?", f"'{value}'", 1)
        return sql

    # ── Status ──────────────────────────────────────────

    async def count_readings(self, panel_id: str | None = None) -> int:
        query = "SELECT COUNT(*) FROM panel_readings"
        params: list[Any] = []
        if panel_id is not None:
            query += " WHERE panel_id = ?"
            params.append(panel_id)
        async with self.db.execute(query, params) as cursor:
            row = await cursor.fetchone()
            return int(row[0]) if row else 0

    async def get_schema_version(self) -> int | None:
        async with self.db.execute("SELECT version FROM schema_version WHERE id = 1") as cursor:
            row = await cursor.fetchone()
            return int(row[0]) if row else None
