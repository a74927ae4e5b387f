"""Pydantic schemas for the HTTP API layer.

Payload keys are camelCase on the wire, matching what the dashboard script
reads; attribute names stay snake_case like the domain dataclasses
they are built from.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models.records import SensorReading, SensorStatus, Snapshot, TableRow


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class SensorReadingOut(ApiModel):
    name: str
    value: float
    unit: str


class SensorAggregateOut(ApiModel):
    name: str
    current_temperature: float
    average_temperature: float
    max_temperature: float
    sample_count: int = Field(..., ge=1)
    core_count: int = Field(..., ge=0)
    usage_percent: int = Field(..., ge=0, le=100)
    usage_synthetic: bool = Field(
        ..., description="True when usage_percent is a placeholder, not a measurement."
    )
    status_class: SensorStatus


class SummaryOut(ApiModel):
    max_temp: float
    min_temp: float
    avg_temp: float
    critical_count: int = Field(..., ge=0)
    warning_count: int = Field(..., ge=0)


class LogResponse(ApiModel):
    """Latest row of the AIDA64 log."""

    success: bool = True
    timestamp: str
    temperatures: List[SensorReadingOut]
    raw_data: Dict[str, str] = Field(default_factory=dict)
    source: str


class MockPayload(ApiModel):
    temperatures: List[SensorReadingOut]
    timestamp: str
    source: str


class LogFailureResponse(ApiModel):
    """Returned with a 404 or 500 status when the log cannot be used."""

    success: bool = False
    error: str
    message: str
    using_mock_data: bool = True
    mock_data: MockPayload


class TemperatureData(ApiModel):
    temperatures: List[SensorReadingOut]
    summary: SummaryOut
    sensors: List[SensorAggregateOut] = Field(default_factory=list)


class TemperatureResponse(ApiModel):
    """Dashboard snapshot with its provenance."""

    success: bool = True
    connected: bool
    timestamp: str
    data_source: str
    data: TemperatureData
    error: Optional[str] = None
    message: Optional[str] = None


class TableRowOut(ApiModel):
    position: int = Field(..., ge=1)
    device_name: str
    current_temp: float
    status: SensorStatus
    ac_action: str


class TableResponse(ApiModel):
    timestamp: str
    data_source: str
    rows: List[TableRowOut]


class ConfigResponse(ApiModel):
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None


def reading_out(reading: SensorReading) -> SensorReadingOut:
    return SensorReadingOut(name=reading.name, value=reading.value, unit=reading.unit)


def temperature_response(snapshot: Snapshot) -> TemperatureResponse:
    """Serialize a snapshot; a fallback reason travels in ``message``."""
    return TemperatureResponse(
        connected=snapshot.connected,
        timestamp=snapshot.timestamp,
        data_source=snapshot.source.value,
        data=TemperatureData(
            temperatures=[reading_out(reading) for reading in snapshot.readings],
            summary=SummaryOut(**asdict(snapshot.summary)),
            sensors=[SensorAggregateOut(**asdict(sensor)) for sensor in snapshot.sensors],
        ),
        message=snapshot.error,
    )


def table_response(snapshot: Snapshot, rows: List[TableRow]) -> TableResponse:
    return TableResponse(
        timestamp=snapshot.timestamp,
        data_source=snapshot.source.value,
        rows=[TableRowOut(**asdict(row)) for row in rows],
    )
