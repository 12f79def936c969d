"""Map reading timestamps onto time-of-day buckets in the target timezone."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone, tzinfo

from panel_monitor.series.models import Granularity
from panel_monitor.timezone_utils import ensure_aware


def bucket_key(
    ts: datetime,
    target_date: date,
    tz: tzinfo,
    granularity: Granularity = Granularity.HOUR,
) -> str | None:
    """Return the bucket key for ``ts`` on ``target_date``.

    Returns None when the timestamp falls on another local date. Next-day
    midnight is 00:00 of the next day, never 23:xx of this one.
    """
    local = ensure_aware(ts).astimezone(tz)
    if local.date() != target_date:
        return None
    if granularity is Granularity.MINUTE:
        return f"{local.hour:02d}:{local.minute:02d}"
    return f"{local.hour:02d}:00"


def bucket_keys(granularity: Granularity) -> list[str]:
    """All bucket keys of one day, ascending."""
    if granularity is Granularity.MINUTE:
        return [f"{h:02d}:{m:02d}" for h in range(24) for m in range(60)]
    return [f"{h:02d}:00" for h in range(24)]


def bucket_sort_key(key: str) -> tuple[int, int]:
    """Parse "H:MM" / "HH:MM" into (hour, minute) for numeric ordering."""
    hour, _, minute = key.partition(":")
    return int(hour), int(minute or 0)


def day_window(target_date: date, tz: tzinfo) -> tuple[datetime, datetime]:
    """UTC [start, end) instants covering the local calendar day."""
    start_local = datetime.combine(target_date, time.min, tzinfo=tz)
    end_local = datetime.combine(target_date + timedelta(days=1), time.min, tzinfo=tz)
    return start_local.astimezone(timezone.utc), end_local.astimezone(timezone.utc)


def hour_window(target_date: date, hour: int, tz: tzinfo) -> tuple[datetime, datetime]:
    """UTC [start, end) instants covering one local hour of the day."""
    start_local = datetime.combine(target_date, time(hour=hour), tzinfo=tz)
    start = start_local.astimezone(timezone.utc)
    return start, start + timedelta(hours=1)
