"""Pydantic configuration models for all system settings."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, model_validator

RESERVED_SERIES_KEYS = frozenset({"time", "totalPower"})


class PanelConfig(BaseModel):
    """A monitored distribution panel."""

    id: str
    name: str = ""
    series_key: str = ""  # JSON key for this panel in combined power points

    @model_validator(mode="after")
    def _fill_defaults(self) -> PanelConfig:
        if not self.name:
            self.name = f"Panel {self.id.upper()}"
        if not self.series_key:
            digits = "".join(ch for ch in self.id if ch.isdigit()) or self.id
            self.series_key = f"panel{digits}Power"
        return self


def _default_panels() -> list[PanelConfig]:
    return [
        PanelConfig(id="33kva", name="Panel 33 kVA", series_key="panel33Power"),
        PanelConfig(id="66kva", name="Panel 66 kVA", series_key="panel66Power"),
    ]


class SeriesConfig(BaseModel):
    timezone: str = "Asia/Jakarta"  # IANA tz that bucket keys are rendered in
    default_granularity: Literal["hour", "minute"] = "hour"
    fetch_mode: Literal["range", "hourly"] = "range"
    subquery_timeout_seconds: float = Field(5.0, gt=0)
    nominal_frequency_hz: float = 50.0  # used when a reading carries no frequency
    default_power_factor: float = Field(0.9, ge=0.0, le=1.0)


class DashboardConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 5000


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "json"
    file: str = ""


class DBConfig(BaseModel):
    path: str = "panel_monitor.db"


class AppConfig(BaseModel):
    """Root configuration model containing all system settings."""

    series: SeriesConfig = SeriesConfig()
    panels: list[PanelConfig] = Field(default_factory=_default_panels)
    default_panel: str = "33kva"
    dashboard: DashboardConfig = DashboardConfig()
    logging: LoggingConfig = LoggingConfig()
    db: DBConfig = DBConfig()

    @model_validator(mode="after")
    def _check_panels(self) -> AppConfig:
        ids = [p.id for p in self.panels]
        if not ids:
            raise ValueError("at least one panel must be configured")
        if len(set(ids)) != len(ids):
            raise ValueError("panel ids must be unique")
        if self.default_panel not in ids:
            raise ValueError(f"default_panel {self.default_panel!r} is not a configured panel")
        # Combined power rows are flat {time, <series_key>..., totalPower} objects.
        seen: dict[str, str] = {}
        for panel in self.panels:
            if panel.series_key in RESERVED_SERIES_KEYS:
                raise ValueError(f"panel {panel.id!r}: series_key {panel.series_key!r} is reserved")
            if panel.series_key in seen:
                raise ValueError(
                    f"panels {seen[panel.series_key]!r} and {panel.id!r} share series_key "
                    f"{panel.series_key!r}; set series_key explicitly"
                )
            seen[panel.series_key] = panel.id
        return self

    def get_panel(self, panel_id: str) -> PanelConfig | None:
        for panel in self.panels:
            if panel.id == panel_id:
                return panel
        return None
