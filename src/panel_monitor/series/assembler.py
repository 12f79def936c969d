"""Build gap-filled, ordered series for one metric of one panel/phase.

Two fetch strategies are supported:

- ``range``: a single range query for the whole local day, bucketed in
  memory. Any source failure or timeout fails the series.
- ``hourly``: one range query per local hour, issued concurrently. A failed
  or timed-out hour is zero-filled and logged; only when every hour fails is
  the source treated as unavailable.

Either way every bucket of the day is present in the result, in ascending
order, with 0.0 where nothing was observed.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, tzinfo

from panel_monitor.series.bucketing import (
    bucket_key,
    bucket_keys,
    day_window,
    hour_window,
)
from panel_monitor.series.errors import DataSourceUnavailable, PartialBucketFailure
from panel_monitor.series.models import (
    Granularity,
    Metric,
    Phase,
    QueryDescriptor,
    Reading,
    SeriesPoint,
)
from panel_monitor.series.reducer import reduce_buckets
from panel_monitor.series.source import ReadingSource

logger = logging.getLogger(__name__)

FETCH_MODES = ("range", "hourly")


def _label(metric: Metric, phase: Phase) -> str:
    if metric is Metric.NET_POWER:
        return metric.value
    return f"{metric.value} {phase.value}"


@dataclass
class AssembledSeries:
    points: list[SeriesPoint]
    queries: list[QueryDescriptor] = field(default_factory=list)
    failed_buckets: list[str] = field(default_factory=list)


class SeriesAssembler:
    """Turns raw readings from a ReadingSource into complete day series."""

    def __init__(
        self,
        source: ReadingSource,
        tz: tzinfo,
        fetch_mode: str = "range",
        subquery_timeout_seconds: float = 5.0,
        nominal_frequency_hz: float = 50.0,
        default_power_factor: float = 0.9,
    ) -> None:
        if fetch_mode not in FETCH_MODES:
            raise ValueError(f"Unknown fetch mode: {fetch_mode}")
        self._source = source
        self._tz = tz
        self._fetch_mode = fetch_mode
        self._timeout = subquery_timeout_seconds
        self._nominal_frequency_hz = nominal_frequency_hz
        self._default_power_factor = default_power_factor

    async def assemble(
        self,
        target_date: date,
        granularity: Granularity,
        metric: Metric,
        phase: Phase,
        panel_id: str,
    ) -> AssembledSeries:
        if self._fetch_mode == "hourly":
            readings, queries, failed = await self._fetch_hourly(target_date, panel_id, metric, phase)
        else:
            readings, queries = await self._fetch_day(target_date, panel_id, metric, phase)
            failed = []

        samples = []
        for reading in readings:
            key = bucket_key(reading.timestamp, target_date, self._tz, granularity)
            if key is None:
                continue
            samples.append((key, reading.value_of(
                metric, phase,
                nominal_frequency_hz=self._nominal_frequency_hz,
                default_power_factor=self._default_power_factor,
            )))
        reduced = reduce_buckets(samples)

        points = [SeriesPoint(key, reduced.get(key, 0.0)) for key in bucket_keys(granularity)]
        logger.debug(
            "Assembled %s/%s series for %s on %s: %d readings, %d/%d buckets observed",
            metric.value, phase.value, panel_id, target_date,
            len(readings), len(reduced), len(points),
        )
        return AssembledSeries(points=points, queries=queries, failed_buckets=failed)

    # ── Fetch strategies ────────────────────────────────

    async def _fetch_day(
        self, target_date: date, panel_id: str, metric: Metric, phase: Phase,
    ) -> tuple[list[Reading], list[QueryDescriptor]]:
        start, end = day_window(target_date, self._tz)
        query = QueryDescriptor(
            name=f"{panel_id} {_label(metric, phase)} {target_date.isoformat()}",
            sql=self._source.describe_range_query(panel_id, start, end),
        )
        try:
            readings = await asyncio.wait_for(
                self._source.readings_in_range(panel_id, start, end),
                timeout=self._timeout,
            )
        except Exception as e:
            logger.error("Reading source failed for %s on %s: %r", panel_id, target_date, e)
            raise DataSourceUnavailable(
                f"Could not load readings for {panel_id} on {target_date.isoformat()}"
            ) from e
        return readings, [query]

    async def _fetch_hourly(
        self, target_date: date, panel_id: str, metric: Metric, phase: Phase,
    ) -> tuple[list[Reading], list[QueryDescriptor], list[str]]:
        windows = [hour_window(target_date, hour, self._tz) for hour in range(24)]
        queries = [
            QueryDescriptor(
                name=f"{panel_id} {_label(metric, phase)} {hour:02d}:00",
                sql=self._source.describe_range_query(panel_id, start, end),
            )
            for hour, (start, end) in enumerate(windows)
        ]

        async def fetch(hour: int) -> list[Reading] | PartialBucketFailure:
            start, end = windows[hour]
            try:
                return await asyncio.wait_for(
                    self._source.readings_in_range(panel_id, start, end),
                    timeout=self._timeout,
                )
            except Exception as e:
                failure = PartialBucketFailure(panel_id, f"{hour:02d}:00", e)
                logger.warning("%s; zero-filling bucket", failure)
                return failure

        results = await asyncio.gather(*(fetch(hour) for hour in range(24)))

        failed = [r.bucket for r in results if isinstance(r, PartialBucketFailure)]
        if len(failed) == len(results):
            raise DataSourceUnavailable(
                f"Every hourly query failed for {panel_id} on {target_date.isoformat()}"
            )

        readings: list[Reading] = []
        for result in results:
            if not isinstance(result, PartialBucketFailure):
                readings.extend(result)
        return readings, queries, failed
