"""Reading source contract consumed by the series engine."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from panel_monitor.series.models import Reading


@runtime_checkable
class ReadingSource(Protocol):
    """Read-only access to persisted panel readings.

    ``readings_in_range`` is start-inclusive, end-exclusive. It may return
    fewer rows than exist (partial outage); callers treat that as fewer
    observed buckets, not as an error.
    """

    async def latest_reading(self, panel_id: str) -> Reading | None: ...

    async def readings_in_range(
        self, panel_id: str, start: datetime, end: datetime,
    ) -> list[Reading]: ...

    def describe_range_query(self, panel_id: str, start: datetime, end: datetime) -> str: ...
