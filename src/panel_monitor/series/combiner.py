"""Merge per-panel power series into time-aligned totals."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from panel_monitor.series.bucketing import bucket_sort_key
from panel_monitor.series.models import CombinedPowerPoint, SeriesPoint


def normalize_key(key: str) -> str:
    hour, minute = bucket_sort_key(key)
    return f"{hour:02d}:{minute:02d}"


def combine_power_series(
    series_by_panel: Mapping[str, Sequence[SeriesPoint]],
) -> list[CombinedPowerPoint]:
    """Join panel series on the union of their bucket keys.

    Output is ordered by parsed (hour, minute), so "9:00" precedes "10:00".
    A panel with no point at a key contributes 0.0 there. Panel order in
    each point follows the mapping order.
    """
    if not series_by_panel:
        raise ValueError("combine_power_series() needs at least one panel series")

    values: dict[str, dict[str, float]] = {
        panel_id: {normalize_key(p.time): p.value for p in points}
        for panel_id, points in series_by_panel.items()
    }
    keys: set[str] = set()
    for by_key in values.values():
        keys.update(by_key)

    combined = []
    for key in sorted(keys, key=bucket_sort_key):
        combined.append(CombinedPowerPoint(
            time=key,
            panel_powers={panel_id: by_key.get(key, 0.0) for panel_id, by_key in values.items()},
        ))
    return combined
