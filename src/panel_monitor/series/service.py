"""Request-level orchestration of the series engine.

A request goes: validate parameters → assemble per-panel series from the
reading source → (totals) combine panels → trim today's future buckets.
The current instant comes from an injected clock so "today" is testable.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from panel_monitor.config.schema import AppConfig
from panel_monitor.logging.context import series_context
from panel_monitor.series.assembler import SeriesAssembler
from panel_monitor.series.combiner import combine_power_series
from panel_monitor.series.errors import UnknownPanel
from panel_monitor.series.models import Metric, Phase
from panel_monitor.series.params import (
    parse_date,
    parse_granularity,
    parse_metric,
    parse_phase,
)
from panel_monitor.series.source import ReadingSource
from panel_monitor.series.truncation import CurrentDayTruncator
from panel_monitor.timezone_utils import resolve_timezone

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SeriesService:
    """Builds chart payloads (``{"data": ..., "debugQueries": ...}``)."""

    def __init__(
        self,
        source: ReadingSource,
        config: AppConfig,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self._source = source
        self._config = config
        self._now = now or _utcnow
        self.tz = resolve_timezone(config.series.timezone)
        series_cfg = config.series
        self._assembler = SeriesAssembler(
            source,
            self.tz,
            fetch_mode=series_cfg.fetch_mode,
            subquery_timeout_seconds=series_cfg.subquery_timeout_seconds,
            nominal_frequency_hz=series_cfg.nominal_frequency_hz,
            default_power_factor=series_cfg.default_power_factor,
        )
        self._truncator = CurrentDayTruncator(
            source, self.tz, timeout_seconds=series_cfg.subquery_timeout_seconds,
        )

    def now(self) -> datetime:
        return self._now()

    def _resolve_panel(self, panel: str | None) -> str:
        panel_id = panel or self._config.default_panel
        if self._config.get_panel(panel_id) is None:
            known = ", ".join(p.id for p in self._config.panels)
            raise UnknownPanel(f"Unknown panel: {panel_id!r} (expected one of {known})")
        return panel_id

    async def metric_series(
        self,
        metric: str,
        phase: str,
        panel: str | None = None,
        date: str | None = None,
        granularity: str | None = None,
    ) -> dict[str, Any]:
        """One metric of one panel phase, gap-filled over the selected day."""
        now = self.now()
        parsed_metric = parse_metric(metric)
        parsed_phase = parse_phase(phase)
        gran = parse_granularity(granularity, self._config.series.default_granularity)
        target_date = parse_date(date, now, self.tz)
        panel_id = self._resolve_panel(panel)

        with series_context(panel=panel_id, metric=parsed_metric.value,
                            phase=parsed_phase.value, date=target_date.isoformat()):
            assembled = await self._assembler.assemble(
                target_date, gran, parsed_metric, parsed_phase, panel_id,
            )
            points = await self._truncator.apply(
                assembled.points, target_date, now, [panel_id], gran,
            )
            if assembled.failed_buckets:
                logger.warning(
                    "Zero-filled %d failed buckets: %s",
                    len(assembled.failed_buckets), ", ".join(assembled.failed_buckets),
                )

        return {
            "data": [p.to_dict() for p in points],
            "debugQueries": [q.to_dict() for q in assembled.queries],
        }

    async def total_power(
        self,
        date: str | None = None,
        granularity: str | None = None,
    ) -> dict[str, Any]:
        """Net power of every configured panel plus their per-bucket sum."""
        now = self.now()
        gran = parse_granularity(granularity, self._config.series.default_granularity)
        target_date = parse_date(date, now, self.tz)
        panel_ids = [p.id for p in self._config.panels]
        series_keys = {p.id: p.series_key for p in self._config.panels}

        with series_context(panels=",".join(panel_ids), date=target_date.isoformat()):
            assembled = await asyncio.gather(*(
                self._assembler.assemble(target_date, gran, Metric.NET_POWER, Phase.R, panel_id)
                for panel_id in panel_ids
            ))
            combined = combine_power_series(
                {panel_id: result.points for panel_id, result in zip(panel_ids, assembled)}
            )
            combined = await self._truncator.apply(combined, target_date, now, panel_ids, gran)

        queries = [q.to_dict() for result in assembled for q in result.queries]
        return {
            "data": [p.to_dict(series_keys) for p in combined],
            "debugQueries": queries,
        }
