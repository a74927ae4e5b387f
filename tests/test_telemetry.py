from __future__ import annotations

import logging
import random
from pathlib import Path

import pytest

from models.records import Provenance, SensorStatus
from services.aggregator import Aggregator, ThresholdPolicy
from services.errors import InsufficientDataError, LogNotFoundError, NoTemperatureColumnsError
from services.mock_data import MockGenerator
from services.telemetry import FAN_AUTO, FAN_SPEED_UP, TelemetryService, build_default_service
from settings import get_settings
from storage.log_file import LogFile, build_default_log_file


def _service(path: Path, policy: ThresholdPolicy | None = None) -> TelemetryService:
    rng = random.Random(5)
    return TelemetryService(
        log_file=LogFile(path),
        aggregator=Aggregator(policy=policy, rng=rng),
        mock_generator=MockGenerator(rng=rng),
    )


@pytest.fixture()
def log_path(tmp_path: Path) -> Path:
    return tmp_path / "aida64_log_log.csv"


def test_read_latest_returns_readings_and_raw_data(log_path: Path) -> None:
    log_path.write_text("CPU,HDD1,Fan,Extra,Time\n40,30,900,1,11:00\n72.5,36,1100\n")
    service = _service(log_path)

    latest = service.read_latest()

    assert latest.timestamp != "11:00"
    assert [(r.name, r.value) for r in latest.readings] == [("CPU", 72.5), ("HDD1", 36.0)]
    assert latest.raw_data == {"CPU": "72.5", "HDD1": "36", "Fan": "1100"}


def test_read_latest_propagates_typed_errors(log_path: Path) -> None:
    service = _service(log_path)
    with pytest.raises(LogNotFoundError):
        service.read_latest()

    log_path.write_text("CPU,Time\n")
    with pytest.raises(InsufficientDataError):
        service.read_latest()

    log_path.write_text("Fan,Time\n1200,12:00\n")
    with pytest.raises(NoTemperatureColumnsError):
        service.read_latest()


def test_current_snapshot_from_log(log_path: Path) -> None:
    log_path.write_text("CPU,CPU Package,HDD1,Time\n85,75,36,12:00\n")
    service = _service(log_path)

    snapshot = service.current_snapshot()

    assert snapshot.source is Provenance.log
    assert snapshot.connected is True
    assert snapshot.timestamp == "12:00"
    assert snapshot.error is None
    assert [sensor.status_class for sensor in snapshot.sensors] == [
        SensorStatus.critical,
        SensorStatus.warning,
        SensorStatus.normal,
    ]
    assert snapshot.summary.critical_count == 1
    assert snapshot.summary.warning_count == 1
    assert snapshot.summary.max_temp == 85
    assert snapshot.summary.min_temp == 36


def test_current_snapshot_falls_back_to_mock(log_path: Path, caplog) -> None:
    service = _service(log_path)

    with caplog.at_level(logging.WARNING):
        snapshot = service.current_snapshot()

    assert snapshot.source is Provenance.mock
    assert snapshot.connected is False
    assert len(snapshot.readings) == 5
    assert len(snapshot.sensors) == 5
    assert "not found" in (snapshot.error or "")
    records = [record for record in caplog.records if record.name == "services.telemetry"]
    assert any(getattr(record, "error_code", None) == "NotFound" for record in records)


def test_snapshot_from_upload_aggregates_all_rows(log_path: Path) -> None:
    service = _service(log_path)

    snapshot = service.sample_snapshot()

    assert snapshot.source is Provenance.upload
    assert snapshot.connected is True
    assert len(snapshot.sensors) == 5
    assert all(sensor.sample_count == 7 for sensor in snapshot.sensors)
    assert snapshot.timestamp == "6/5/2025 4:36:43 PM"
    assert [reading.name for reading in snapshot.readings][0] == "CPU"


def test_snapshot_from_upload_falls_back_on_bad_file(log_path: Path) -> None:
    service = _service(log_path)

    snapshot = service.snapshot_from_upload("just,some\ntext,here\n", filename="bad.csv")

    assert snapshot.source is Provenance.mock
    assert snapshot.error == "Header row not found in file."


def test_table_rows_use_policy(log_path: Path) -> None:
    log_path.write_text("CPU,CPU Package,HDD1,Time\n90,76,40,12:00\n")
    service = _service(log_path, policy=ThresholdPolicy(warning=75, critical=85, cool=50))

    rows = service.table_rows(service.current_snapshot())

    assert [(row.position, row.device_name) for row in rows] == [
        (1, "CPU"),
        (2, "CPU Package"),
        (3, "HDD1"),
    ]
    assert [row.status for row in rows] == [
        SensorStatus.critical,
        SensorStatus.warning,
        SensorStatus.cool,
    ]
    assert [row.ac_action for row in rows] == [FAN_SPEED_UP, FAN_SPEED_UP, FAN_AUTO]


def test_default_service_reads_settings(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("AIDA64_LOG_PATH", str(tmp_path / "env.csv"))
    monkeypatch.setenv("TEMP_WARNING_THRESHOLD", "60")
    monkeypatch.setenv("TEMP_CRITICAL_THRESHOLD", "90")
    monkeypatch.setenv("MOCK_SEED", "11")
    caches = (get_settings, build_default_log_file, build_default_service)
    for cache in caches:
        cache.cache_clear()

    try:
        service = build_default_service()
        assert service.log_file.path == tmp_path / "env.csv"
        assert service.policy == ThresholdPolicy(warning=60, critical=90)
        first = [reading.value for reading in service.mock_readings()]
        build_default_service.cache_clear()
        second = [reading.value for reading in build_default_service().mock_readings()]
        assert first == second
    finally:
        for cache in caches:
            cache.cache_clear()
