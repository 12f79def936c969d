"""Tests for merging per-panel power series."""

from __future__ import annotations

import pytest

from panel_monitor.series.combiner import combine_power_series, normalize_key
from panel_monitor.series.models import SeriesPoint


class TestCombine:
    def test_sums_aligned_buckets(self) -> None:
        combined = combine_power_series({
            "33kva": [SeriesPoint("00:00", 1200.0), SeriesPoint("01:00", 1500.0)],
            "66kva": [SeriesPoint("00:00", 3000.0), SeriesPoint("01:00", 2500.5)],
        })
        assert [p.time for p in combined] == ["00:00", "01:00"]
        assert combined[0].total_power == 4200.0
        assert combined[1].panel_powers == {"33kva": 1500.0, "66kva": 2500.5}
        assert combined[1].total_power == 4000.5

    def test_orders_numerically_not_lexically(self) -> None:
        combined = combine_power_series({
            "33kva": [SeriesPoint("10:00", 2.0), SeriesPoint("9:00", 1.0)],
        })
        assert [p.time for p in combined] == ["09:00", "10:00"]

    def test_input_order_does_not_matter(self) -> None:
        points = [SeriesPoint(f"{h:02d}:00", float(h)) for h in range(24)]
        shuffled = points[7:] + points[:7]
        combined = combine_power_series({"33kva": shuffled, "66kva": list(reversed(points))})
        assert [p.time for p in combined] == [p.time for p in points]
        assert [p.total_power for p in combined] == [2.0 * h for h in range(24)]

    def test_missing_key_counts_as_zero(self) -> None:
        combined = combine_power_series({
            "33kva": [SeriesPoint("00:00", 10.0), SeriesPoint("01:00", 20.0)],
            "66kva": [SeriesPoint("01:00", 5.0), SeriesPoint("02:00", 7.0)],
        })
        assert [p.time for p in combined] == ["00:00", "01:00", "02:00"]
        assert combined[0].panel_powers["66kva"] == 0.0
        assert combined[2].panel_powers["33kva"] == 0.0
        assert [p.total_power for p in combined] == [10.0, 25.0, 7.0]

    def test_total_is_exact_sum_of_components(self) -> None:
        combined = combine_power_series({
            "a": [SeriesPoint("00:00", 0.1)],
            "b": [SeriesPoint("00:00", 0.2)],
            "c": [SeriesPoint("00:00", 0.3)],
        })
        point = combined[0]
        assert point.total_power == 0.0 + 0.1 + 0.2 + 0.3

    def test_to_dict_uses_series_keys(self) -> None:
        combined = combine_power_series({
            "33kva": [SeriesPoint("05:00", 100.0)],
            "66kva": [SeriesPoint("05:00", 250.0)],
        })
        row = combined[0].to_dict({"33kva": "panel33Power", "66kva": "panel66Power"})
        assert row == {
            "time": "05:00",
            "panel33Power": 100.0,
            "panel66Power": 250.0,
            "totalPower": 350.0,
        }

    def test_empty_mapping_rejected(self) -> None:
        with pytest.raises(ValueError):
            combine_power_series({})


def test_normalize_key() -> None:
    assert normalize_key("9:00") == "09:00"
    assert normalize_key("09:05") == "09:05"
