"""Request-scoped log context for series queries."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import structlog


def bind_context(**kwargs: object) -> None:
    """Bind key-value pairs to the current logging context (task-local)."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


@contextmanager
def series_context(**kwargs: object) -> Iterator[None]:
    """Tag every log line emitted while building one response.

    None values are dropped so optional request parameters do not show up
    as ``"date": null`` noise.
    """
    values = {k: v for k, v in kwargs.items() if v is not None}
    with structlog.contextvars.bound_contextvars(**values):
        yield
