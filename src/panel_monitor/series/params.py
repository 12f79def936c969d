"""Parse and validate raw request parameters."""

from __future__ import annotations

from datetime import date, datetime, tzinfo

from panel_monitor.series.errors import (
    InvalidDate,
    InvalidGranularity,
    InvalidMetric,
    InvalidPhase,
)
from panel_monitor.series.models import Granularity, Metric, Phase
from panel_monitor.series.truncation import local_today
from panel_monitor.timezone_utils import ensure_aware

# Metrics a client may chart per phase; net power is only exposed through totals.
CHARTABLE_METRICS = tuple(m for m in Metric if m is not Metric.NET_POWER)


def parse_date(value: str | None, now: datetime, tz: tzinfo) -> date:
    """Accept YYYY-MM-DD or a full ISO-8601 instant; None means today."""
    if value is None or value.strip() == "":
        return local_today(now, tz)
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        instant = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError as e:
        raise InvalidDate(f"Invalid date: {value!r} (expected YYYY-MM-DD)") from e
    return ensure_aware(instant).astimezone(tz).date()


def parse_granularity(value: str | None, default: str = "hour") -> Granularity:
    try:
        return Granularity((value or default).lower())
    except ValueError as e:
        raise InvalidGranularity(
            f"Invalid granularity: {value!r} (expected 'hour' or 'minute')"
        ) from e


def parse_metric(value: str) -> Metric:
    for metric in CHARTABLE_METRICS:
        if value == metric.value:
            return metric
    # The dashboard historically sent "pf"
    if value.lower() in ("pf", "powerfactor"):
        return Metric.POWER_FACTOR
    names = ", ".join(m.value for m in CHARTABLE_METRICS)
    raise InvalidMetric(f"Invalid metric: {value!r} (expected one of {names})")


def parse_phase(value: str) -> Phase:
    try:
        return Phase(value.upper())
    except ValueError as e:
        raise InvalidPhase(f"Invalid phase: {value!r} (expected R, S or T)") from e
