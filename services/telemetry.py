"""Builds dashboard snapshots from the sensor log, uploads or mock data."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from typing import Dict, List, Optional, Sequence, Tuple

from models.records import Provenance, SensorReading, Snapshot, TableRow
from services.aggregator import Aggregator, ThresholdPolicy
from services.errors import TelemetryError
from services.mock_data import MockGenerator
from services.parser import parse_history, parse_latest_row
from services.samples import SAMPLE_AIDA64_LOG, SAMPLE_FILENAME
from settings import get_settings
from storage.log_file import LogFile, build_default_log_file

logger = logging.getLogger(__name__)

FAN_SPEED_UP = "Fan Speed Up"
FAN_AUTO = "Auto"


@dataclass(frozen=True)
class LatestLog:
    """The most recent row of the sensor log reduced to temperature readings."""

    timestamp: str
    readings: Tuple[SensorReading, ...]
    raw_data: Dict[str, str]


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class TelemetryService:
    """Coordinates the log file, parsers, aggregation and the mock fallback."""

    def __init__(
        self,
        log_file: LogFile,
        aggregator: Aggregator,
        mock_generator: MockGenerator,
    ) -> None:
        self.log_file = log_file
        self.aggregator = aggregator
        self.mock_generator = mock_generator

    @property
    def policy(self) -> ThresholdPolicy:
        return self.aggregator.policy

    def read_latest(self) -> LatestLog:
        """Read the log and keep its latest row. Raises :class:`TelemetryError`."""
        text = self.log_file.read_text()
        latest = parse_latest_row(text)
        readings = self.aggregator.readings_from_row(latest.values)
        raw_data = {name: value for name, value in latest.values.items() if value is not None}
        return LatestLog(timestamp=latest.timestamp, readings=tuple(readings), raw_data=raw_data)

    def mock_readings(self) -> List[SensorReading]:
        return self.mock_generator.readings()

    def current_snapshot(self) -> Snapshot:
        try:
            latest = self.read_latest()
        except TelemetryError as exc:
            logger.warning(
                "Falling back to mock data",
                extra={
                    "source": Provenance.log.value,
                    "error_code": exc.code,
                    "reason": str(exc),
                },
            )
            return self.mock_snapshot(error=str(exc))

        snapshot = self._from_readings(
            latest.readings,
            source=Provenance.log,
            timestamp=latest.timestamp,
            raw_data=latest.raw_data,
        )
        logger.debug(
            "Built snapshot from log",
            extra={"source": snapshot.source.value, "sensor_count": len(snapshot.sensors)},
        )
        return snapshot

    def snapshot_from_upload(self, text: str, filename: Optional[str] = None) -> Snapshot:
        """Aggregate every row of an uploaded AIDA64 export."""
        try:
            history = parse_history(text)
            sensors, summary = self.aggregator.aggregate_history(history)
        except TelemetryError as exc:
            logger.warning(
                "Upload could not be parsed, falling back to mock data",
                extra={"filename": filename, "error_code": exc.code, "reason": str(exc)},
            )
            return self.mock_snapshot(error=str(exc))

        logger.info(
            "Parsed uploaded log",
            extra={
                "filename": filename,
                "sensor_count": len(sensors),
                "sample_count": len(history.samples),
            },
        )
        readings = tuple(
            SensorReading(name=sensor.name, value=sensor.current_temperature)
            for sensor in sensors
        )
        return Snapshot(
            timestamp=history.timestamp,
            source=Provenance.upload,
            readings=readings,
            sensors=tuple(sensors),
            summary=summary,
        )

    def sample_snapshot(self) -> Snapshot:
        return self.snapshot_from_upload(SAMPLE_AIDA64_LOG, filename=SAMPLE_FILENAME)

    def mock_snapshot(self, error: Optional[str] = None) -> Snapshot:
        return self._from_readings(
            self.mock_readings(),
            source=Provenance.mock,
            timestamp=_utc_now(),
            error=error,
        )

    def table_rows(self, snapshot: Snapshot) -> List[TableRow]:
        rows: List[TableRow] = []
        for position, sensor in enumerate(snapshot.sensors, start=1):
            temperature = sensor.current_temperature
            rows.append(
                TableRow(
                    position=position,
                    device_name=sensor.name,
                    current_temp=temperature,
                    status=self.policy.classify(temperature),
                    ac_action=FAN_SPEED_UP if self.policy.needs_cooling(temperature) else FAN_AUTO,
                )
            )
        return rows

    def _from_readings(
        self,
        readings: Sequence[SensorReading],
        source: Provenance,
        timestamp: str,
        raw_data: Optional[Dict[str, str]] = None,
        error: Optional[str] = None,
    ) -> Snapshot:
        return Snapshot(
            timestamp=timestamp,
            source=source,
            readings=tuple(readings),
            sensors=tuple(self.aggregator.aggregate_readings(readings)),
            summary=self.aggregator.summarize(readings),
            raw_data=dict(raw_data or {}),
            error=error,
        )


@lru_cache
def build_default_service() -> TelemetryService:
    """Factory that wires the service from environment settings."""
    settings = get_settings()
    rng = random.Random(settings.mock_seed)
    policy = ThresholdPolicy(
        warning=settings.warning_threshold,
        critical=settings.critical_threshold,
        cool=settings.cool_threshold,
    )
    return TelemetryService(
        log_file=build_default_log_file(),
        aggregator=Aggregator(policy=policy, rng=rng),
        mock_generator=MockGenerator(rng=rng),
    )
