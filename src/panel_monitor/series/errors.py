"""Exceptions raised by the series engine."""

from __future__ import annotations


class SeriesError(Exception):
    """Base class for series engine errors."""


class DataSourceUnavailable(SeriesError):
    """The reading source could not be queried for this request."""


# Name used by callers that think of it as a plain data-source failure.
DataSourceError = DataSourceUnavailable


class PartialBucketFailure(SeriesError):
    """A single bucket's sub-query failed; recovered by zero-filling it."""

    def __init__(self, panel_id: str, bucket: str, cause: BaseException | None = None) -> None:
        self.panel_id = panel_id
        self.bucket = bucket
        self.cause = cause
        detail = f": {cause!r}" if cause is not None else ""
        super().__init__(f"sub-query for {panel_id} {bucket} failed{detail}")


class InvalidRequest(SeriesError, ValueError):
    """Malformed request parameters; rejected before any data access."""


class InvalidDate(InvalidRequest):
    pass


class InvalidGranularity(InvalidRequest):
    pass


class InvalidMetric(InvalidRequest):
    pass


class InvalidPhase(InvalidRequest):
    pass


class UnknownPanel(InvalidRequest):
    pass
