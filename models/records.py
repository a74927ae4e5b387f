"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple


DEFAULT_UNIT = "°C"


class Provenance(str, Enum):
    """Where the values of a snapshot came from."""

    log = "AIDA64 CSV Log"
    upload = "Uploaded CSV"
    mock = "Mock Data"


class SensorStatus(str, Enum):
    cool = "Cool"
    normal = "Normal"
    warning = "Warning"
    critical = "Critical"


@dataclass(frozen=True, slots=True)
class SensorReading:
    """A single temperature value for one sensor column."""

    name: str
    value: float
    unit: str = DEFAULT_UNIT


@dataclass(frozen=True, slots=True)
class SensorAggregate:
    """Per-sensor figures derived from every sample seen in one parse pass.

    ``usage_synthetic`` is set whenever ``usage_percent`` was fabricated
    rather than read from the log.
    """

    name: str
    current_temperature: float
    average_temperature: float
    max_temperature: float
    sample_count: int
    core_count: int
    usage_percent: int
    usage_synthetic: bool
    status_class: SensorStatus


@dataclass(frozen=True, slots=True)
class SummaryStatistics:
    max_temp: float
    min_temp: float
    avg_temp: float
    critical_count: int
    warning_count: int


@dataclass(frozen=True, slots=True)
class Snapshot:
    """One complete, timestamped view of every sensor."""

    timestamp: str
    source: Provenance
    readings: Tuple[SensorReading, ...]
    sensors: Tuple[SensorAggregate, ...]
    summary: SummaryStatistics
    raw_data: Dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def connected(self) -> bool:
        return self.source is not Provenance.mock


@dataclass(frozen=True, slots=True)
class TableRow:
    position: int
    device_name: str
    current_temp: float
    status: SensorStatus
    ac_action: str
