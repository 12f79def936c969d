"""Panel Monitor: electrical panel telemetry and charting backend."""

try:
    from importlib.metadata import version as _pkg_version
    __version__ = _pkg_version("panel-monitor")
except Exception:
    __version__ = "dev"
