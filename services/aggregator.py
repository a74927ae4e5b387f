"""Aggregation logic for sensor readings."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from models.records import (
    DEFAULT_UNIT,
    SensorAggregate,
    SensorReading,
    SensorStatus,
    SummaryStatistics,
)
from services.errors import NoTemperatureColumnsError
from services.mock_data import synthetic_usage
from services.parser import SampleHistory
from services.sensor_profiles import profile_for

TEMPERATURE_COLUMN_MARKERS = ("temp", "cpu", "hdd")


@dataclass(frozen=True)
class ThresholdPolicy:
    """Temperature bands shared by every view of a snapshot.

    A value above ``critical`` is critical, above ``warning`` is a warning,
    below ``cool`` (when set) is cool, anything else is normal.
    """

    warning: float = 70.0
    critical: float = 80.0
    cool: Optional[float] = None

    def __post_init__(self) -> None:
        if self.warning >= self.critical:
            raise ValueError("Warning threshold must be below the critical threshold.")
        if self.cool is not None and self.cool >= self.warning:
            raise ValueError("Cool threshold must be below the warning threshold.")

    def classify(self, value: float) -> SensorStatus:
        if value > self.critical:
            return SensorStatus.critical
        if value > self.warning:
            return SensorStatus.warning
        if self.cool is not None and value < self.cool:
            return SensorStatus.cool
        return SensorStatus.normal

    def needs_cooling(self, value: float) -> bool:
        return value > self.warning


def _round(value: float) -> float:
    return round(value, 1)


def _parse_temperature(raw: Optional[str]) -> Optional[float]:
    if raw is None:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def is_temperature_column(name: str) -> bool:
    lowered = name.lower()
    return any(marker in lowered for marker in TEMPERATURE_COLUMN_MARKERS)


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def __init__(
        self,
        policy: Optional[ThresholdPolicy] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.policy = policy or ThresholdPolicy()
        self.rng = rng or random.Random()

    def readings_from_row(
        self, row: Mapping[str, Optional[str]], unit: str = DEFAULT_UNIT
    ) -> List[SensorReading]:
        """Keep the temperature-like columns of ``row`` that hold a finite number."""
        readings: List[SensorReading] = []
        for name, raw in row.items():
            if not is_temperature_column(name):
                continue
            value = _parse_temperature(raw)
            if value is None:
                continue
            readings.append(SensorReading(name=name, value=value, unit=unit))

        if not readings:
            raise NoTemperatureColumnsError("No temperature columns with numeric values.")
        return readings

    def summarize(self, readings: Sequence[SensorReading]) -> SummaryStatistics:
        values = [reading.value for reading in readings]
        statuses = [self.policy.classify(value) for value in values]
        return self._summary(values, statuses)

    def aggregate_readings(self, readings: Iterable[SensorReading]) -> List[SensorAggregate]:
        """One aggregate per reading; each reading is its sensor's only sample."""
        return [self._build(reading.name, [reading.value]) for reading in readings]

    def aggregate_history(
        self, history: SampleHistory
    ) -> Tuple[List[SensorAggregate], SummaryStatistics]:
        """Per-sensor figures plus a summary over every sample of every sensor.

        Sensors are classified on their average temperature.
        """
        sensors = [
            self._build(name, samples, classify_average=True)
            for name, samples in history.samples_by_sensor.items()
        ]
        summary = self._summary(history.samples, [sensor.status_class for sensor in sensors])
        return sensors, summary

    def _build(
        self, name: str, samples: Sequence[float], classify_average: bool = False
    ) -> SensorAggregate:
        average = _round(sum(samples) / len(samples))
        current = _round(samples[-1])
        profile = profile_for(name)
        usage, usage_synthetic = synthetic_usage(profile, self.rng)
        return SensorAggregate(
            name=name,
            current_temperature=current,
            average_temperature=average,
            max_temperature=_round(max(samples)),
            sample_count=len(samples),
            core_count=profile.core_count,
            usage_percent=usage,
            usage_synthetic=usage_synthetic,
            status_class=self.policy.classify(average if classify_average else current),
        )

    def _summary(
        self, values: Sequence[float], statuses: Sequence[SensorStatus]
    ) -> SummaryStatistics:
        if not values:
            raise NoTemperatureColumnsError("Cannot summarize an empty reading set.")
        return SummaryStatistics(
            max_temp=_round(max(values)),
            min_temp=_round(min(values)),
            avg_temp=_round(sum(values) / len(values)),
            critical_count=sum(1 for status in statuses if status is SensorStatus.critical),
            warning_count=sum(1 for status in statuses if status is SensorStatus.warning),
        )
