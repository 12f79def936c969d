"""Value types shared by the series engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Granularity(str, Enum):
    HOUR = "hour"
    MINUTE = "minute"


class Phase(str, Enum):
    R = "R"
    S = "S"
    T = "T"


class Metric(str, Enum):
    VOLTAGE = "voltage"
    CURRENT = "current"
    POWER = "power"
    ENERGY = "energy"
    FREQUENCY = "frequency"
    POWER_FACTOR = "powerFactor"
    NET_POWER = "netPower"  # panel-level, used for totals


@dataclass(frozen=True)
class Reading:
    """One persisted observation from a panel meter.

    Per-phase apparent power is stored in kVA and net power in kW, as the
    meters report them; ``value_of`` converts to VA / W.
    """

    panel_id: str
    timestamp: datetime
    voltage_r: float = 0.0
    voltage_s: float = 0.0
    voltage_t: float = 0.0
    current_r: float = 0.0
    current_s: float = 0.0
    current_t: float = 0.0
    apparent_power_r: float = 0.0
    apparent_power_s: float = 0.0
    apparent_power_t: float = 0.0
    energy_kvah: float = 0.0
    net_kw: float = 0.0
    net_kva: float = 0.0
    frequency_hz: float | None = None
    power_factor: float | None = None

    def value_of(
        self,
        metric: Metric,
        phase: Phase = Phase.R,
        nominal_frequency_hz: float = 50.0,
        default_power_factor: float = 0.9,
    ) -> float:
        suffix = phase.value.lower()
        if metric is Metric.VOLTAGE:
            return float(getattr(self, f"voltage_{suffix}"))
        if metric is Metric.CURRENT:
            return float(getattr(self, f"current_{suffix}"))
        if metric is Metric.POWER:
            return float(getattr(self, f"apparent_power_{suffix}")) * 1000.0
        if metric is Metric.ENERGY:
            return float(self.energy_kvah)
        if metric is Metric.FREQUENCY:
            return float(self.frequency_hz) if self.frequency_hz is not None else nominal_frequency_hz
        if metric is Metric.POWER_FACTOR:
            return float(self.power_factor) if self.power_factor is not None else default_power_factor
        return float(self.net_kw) * 1000.0


@dataclass(frozen=True)
class SeriesPoint:
    time: str
    value: float

    def to_dict(self) -> dict:
        return {"time": self.time, "value": self.value}


@dataclass(frozen=True)
class CombinedPowerPoint:
    """Per-bucket merge of several panels' power series."""

    time: str
    panel_powers: dict[str, float] = field(default_factory=dict)

    @property
    def total_power(self) -> float:
        total = 0.0
        for value in self.panel_powers.values():
            total += value
        return total

    def to_dict(self, series_keys: dict[str, str] | None = None) -> dict:
        series_keys = series_keys or {}
        out: dict = {"time": self.time}
        for panel_id, value in self.panel_powers.items():
            out[series_keys.get(panel_id, panel_id)] = value
        out["totalPower"] = self.total_power
        return out


@dataclass(frozen=True)
class QueryDescriptor:
    name: str
    sql: str

    def to_dict(self) -> dict:
        return {"name": self.name, "sql": self.sql}
