"""Hide not-yet-elapsed buckets of the current day."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from datetime import date, datetime, tzinfo
from typing import Protocol, TypeVar

from panel_monitor.series.bucketing import bucket_key, bucket_sort_key
from panel_monitor.series.errors import DataSourceUnavailable
from panel_monitor.series.models import Granularity
from panel_monitor.series.source import ReadingSource
from panel_monitor.timezone_utils import ensure_aware

logger = logging.getLogger(__name__)

START_OF_DAY = "00:00"


class _Timed(Protocol):
    time: str


P = TypeVar("P", bound=_Timed)


def local_today(now: datetime, tz: tzinfo) -> date:
    return ensure_aware(now).astimezone(tz).date()


def truncate_after(points: Sequence[P], max_bucket: str) -> list[P]:
    """Drop points whose bucket is strictly later than ``max_bucket``."""
    limit = bucket_sort_key(max_bucket)
    return [p for p in points if bucket_sort_key(p.time) <= limit]


class CurrentDayTruncator:
    """Trims today's series at the bucket of the newest observed reading.

    Past dates pass through untouched.
    """

    def __init__(self, source: ReadingSource, tz: tzinfo, timeout_seconds: float = 5.0) -> None:
        self._source = source
        self._tz = tz
        self._timeout = timeout_seconds

    async def latest_bucket(
        self, panel_ids: Sequence[str], target_date: date, granularity: Granularity,
    ) -> str:
        try:
            latest = await asyncio.wait_for(
                asyncio.gather(*(self._source.latest_reading(panel_id) for panel_id in panel_ids)),
                timeout=self._timeout,
            )
        except Exception as e:
            raise DataSourceUnavailable("Could not load latest readings") from e

        stamps = [ensure_aware(r.timestamp) for r in latest if r is not None]
        if not stamps:
            return START_OF_DAY
        key = bucket_key(max(stamps), target_date, self._tz, granularity)
        return key if key is not None else START_OF_DAY

    async def apply(
        self,
        points: Sequence[P],
        target_date: date,
        now: datetime,
        panel_ids: Sequence[str],
        granularity: Granularity,
    ) -> list[P]:
        if target_date != local_today(now, self._tz):
            return list(points)
        max_bucket = await self.latest_bucket(panel_ids, target_date, granularity)
        trimmed = truncate_after(points, max_bucket)
        logger.debug(
            "Truncated today's series at %s (%d of %d points kept)",
            max_bucket, len(trimmed), len(points),
        )
        return trimmed
