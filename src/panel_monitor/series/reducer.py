"""Collapse readings that share a bucket into one representative value."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable


def mean(values: list[float]) -> float:
    """Arithmetic mean of a non-empty list."""
    if not values:
        raise ValueError("mean() of an empty bucket")
    total = 0.0
    for value in values:
        total += float(value)
    return total / len(values)


def reduce_buckets(samples: Iterable[tuple[str, float]]) -> dict[str, float]:
    """Average (bucket, value) samples per bucket.

    Only buckets that received at least one sample appear in the result.
    """
    grouped: dict[str, list[float]] = defaultdict(list)
    for key, value in samples:
        grouped[key].append(value)
    return {key: mean(values) for key, values in grouped.items()}
