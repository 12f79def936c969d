"""Tests for per-bucket averaging."""

from __future__ import annotations

import pytest

from panel_monitor.series.reducer import mean, reduce_buckets


class TestMean:
    def test_mean(self) -> None:
        assert mean([218.0, 220.0, 222.0]) == 220.0

    def test_single_value(self) -> None:
        assert mean([4.5]) == 4.5

    def test_empty_rejected(self) -> None:
        with pytest.raises(ValueError):
            mean([])


class TestReduceBuckets:
    def test_groups_by_key(self) -> None:
        reduced = reduce_buckets([
            ("09:00", 218.0), ("10:00", 5.0), ("09:00", 222.0),
        ])
        assert reduced == {"09:00": 220.0, "10:00": 5.0}

    def test_empty_buckets_absent(self) -> None:
        assert reduce_buckets([]) == {}

    def test_order_of_samples_irrelevant(self) -> None:
        samples = [("01:00", 1.0), ("01:00", 2.0), ("01:00", 6.0)]
        assert reduce_buckets(samples) == reduce_buckets(reversed(samples))
