"""Time-series bucketing and aggregation of panel readings."""

from panel_monitor.series.errors import (
    DataSourceError,
    DataSourceUnavailable,
    InvalidRequest,
    PartialBucketFailure,
    SeriesError,
)
from panel_monitor.series.models import (
    CombinedPowerPoint,
    Granularity,
    Metric,
    Phase,
    Reading,
    SeriesPoint,
)
from panel_monitor.series.service import SeriesService

__all__ = [
    "CombinedPowerPoint",
    "DataSourceError",
    "DataSourceUnavailable",
    "Granularity",
    "InvalidRequest",
    "Metric",
    "PartialBucketFailure",
    "Phase",
    "Reading",
    "SeriesError",
    "SeriesPoint",
    "SeriesService",
]
