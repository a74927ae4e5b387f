import random
from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from services.aggregator import Aggregator
from services.mock_data import MockGenerator
from services.samples import SAMPLE_AIDA64_LOG
from services.telemetry import TelemetryService, build_default_service
from storage.log_file import LogFile


@pytest.fixture
def log_path(tmp_path: Path) -> Path:
    return tmp_path / "aida64_log_log.csv"


@pytest.fixture
def service(log_path: Path) -> TelemetryService:
    rng = random.Random(21)
    return TelemetryService(
        log_file=LogFile(log_path),
        aggregator=Aggregator(rng=rng),
        mock_generator=MockGenerator(rng=rng),
    )


@pytest.fixture
def api_client(service: TelemetryService, monkeypatch) -> Iterator[TestClient]:
    def build_test_service() -> TelemetryService:
        return service

    build_test_service.cache_clear = lambda: None  # type: ignore[attr-defined]

    monkeypatch.setattr("app.main.build_default_service", build_test_service)
    monkeypatch.setattr("app.api.build_default_service", build_test_service)
    monkeypatch.setattr("app.web.build_default_service", build_test_service)

    app = create_app()
    with TestClient(app) as client:
        yield client


def test_lifespan_clears_service_cache() -> None:
    app = create_app()

    with TestClient(app):
        during = build_default_service()

    after = build_default_service()
    try:
        assert after is not during
    finally:
        build_default_service.cache_clear()


def test_aida64_endpoint_returns_latest_row(api_client: TestClient, log_path: Path) -> None:
    log_path.write_text("CPU,HDD1,Time\n50,35,11:59\n61,36,12:00\n")

    response = api_client.get("/api/aida64")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["timestamp"] == "12:00"
    assert body["source"] == "AIDA64 CSV Log"
    assert body["temperatures"] == [
        {"name": "CPU", "value": 61.0, "unit": "°C"},
        {"name": "HDD1", "value": 36.0, "unit": "°C"},
    ]
    assert body["rawData"] == {"CPU": "61", "HDD1": "36", "Time": "12:00"}


def test_aida64_endpoint_missing_log_returns_mock(api_client: TestClient) -> None:
    response = api_client.get("/api/aida64")

    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["usingMockData"] is True
    assert body["error"] == "AIDA64 log file not found"
    assert "aida64_log_log.csv" in body["message"]
    assert len(body["mockData"]["temperatures"]) == 5
    assert body["mockData"]["source"] == "Mock Data"


def test_aida64_endpoint_parse_failure_returns_500(api_client: TestClient, log_path: Path) -> None:
    log_path.write_text("CPU,Time\n")

    response = api_client.get("/api/aida64")

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Failed to read AIDA64 log file"
    assert body["usingMockData"] is True
    assert len(body["mockData"]["temperatures"]) == 5


@pytest.mark.parametrize(
    ("value", "critical", "warning"),
    [("50", 0, 0), ("85", 1, 0), ("75", 0, 1)],
)
def test_temperature_endpoint_summary(
    api_client: TestClient, log_path: Path, value: str, critical: int, warning: int
) -> None:
    log_path.write_text(f"CPU,Time\n{value},12:00")

    response = api_client.get("/api/temperature")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["connected"] is True
    assert body["dataSource"] == "AIDA64 CSV Log"
    assert body["data"]["temperatures"] == [{"name": "CPU", "value": float(value), "unit": "°C"}]
    summary = body["data"]["summary"]
    assert summary["maxTemp"] == summary["minTemp"] == summary["avgTemp"] == float(value)
    assert summary["criticalCount"] == critical
    assert summary["warningCount"] == warning
    assert body["data"]["sensors"][0]["usageSynthetic"] is True


def test_temperature_endpoint_degrades_to_mock(api_client: TestClient) -> None:
    response = api_client.get("/api/temperature")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["connected"] is False
    assert body["dataSource"] == "Mock Data"
    assert len(body["data"]["temperatures"]) == 5
    assert "error" not in body


def test_temperature_endpoint_internal_failure(
    api_client: TestClient, service: TelemetryService, monkeypatch
) -> None:
    def explode() -> None:
        raise RuntimeError("boom")

    monkeypatch.setattr(service, "current_snapshot", explode)

    response = api_client.get("/api/temperature")

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Failed to fetch temperature data"
    assert body["message"] == "boom"
    assert body["dataSource"] == "Mock Data"
    assert len(body["data"]["temperatures"]) == 5


def test_toggle_mode_is_acknowledged(api_client: TestClient) -> None:
    response = api_client.post("/api/temperature", json={"action": "toggle_mode"})

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Mode toggled successfully"}


def test_unknown_action_is_rejected(api_client: TestClient) -> None:
    response = api_client.post("/api/temperature", json={"action": "reboot"})

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Invalid action"}


def test_unparseable_body_is_rejected(api_client: TestClient) -> None:
    response = api_client.post(
        "/api/temperature",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Invalid request body"}


def test_upload_aggregates_every_row(api_client: TestClient) -> None:
    response = api_client.post(
        "/api/uploads",
        files={"file": ("aida64.csv", SAMPLE_AIDA64_LOG, "text/csv")},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["dataSource"] == "Uploaded CSV"
    sensors = {sensor["name"]: sensor for sensor in body["data"]["sensors"]}
    assert len(sensors) == 5
    assert all(sensor["sampleCount"] == 7 for sensor in sensors.values())
    assert 35 <= sensors["HDD1"]["averageTemperature"] <= 38
    assert 48 <= sensors["CPU"]["averageTemperature"] <= 62
    assert "error" not in body


def test_upload_without_header_falls_back(api_client: TestClient) -> None:
    response = api_client.post(
        "/api/uploads",
        files={"file": ("notes.txt", "nothing useful here\n", "text/plain")},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["dataSource"] == "Mock Data"
    assert body["error"] == "Header row not found in file."
    assert len(body["data"]["temperatures"]) == 5


def test_upload_empty_file_returns_bad_request(api_client: TestClient) -> None:
    response = api_client.post(
        "/api/uploads",
        files={"file": ("empty.csv", b"", "text/csv")},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Uploaded file is empty."


def test_upload_rejects_other_extensions(api_client: TestClient) -> None:
    response = api_client.post(
        "/api/uploads",
        files={"file": ("log.xlsx", b"Date,Time", "application/octet-stream")},
    )

    assert response.status_code == 400


def test_sample_endpoint(api_client: TestClient) -> None:
    response = api_client.get("/api/uploads/sample")

    assert response.status_code == 200
    body = response.json()
    assert body["timestamp"] == "6/5/2025 4:36:43 PM"
    assert body["data"]["summary"]["maxTemp"] == 61


def test_table_endpoint(api_client: TestClient, log_path: Path) -> None:
    log_path.write_text("CPU,HDD1,Time\n82,36,12:00\n")

    response = api_client.get("/api/temperature/table")

    assert response.status_code == 200
    body = response.json()
    assert body["dataSource"] == "AIDA64 CSV Log"
    assert body["rows"] == [
        {"position": 1, "deviceName": "CPU", "currentTemp": 82.0, "status": "Critical", "acAction": "Fan Speed Up"},
        {"position": 2, "deviceName": "HDD1", "currentTemp": 36.0, "status": "Normal", "acAction": "Auto"},
    ]


def test_dashboard_page_renders_snapshot(api_client: TestClient, log_path: Path) -> None:
    log_path.write_text("CPU,CPU Package,HDD1,Time\n55,52,36,12:00\n")

    response = api_client.get("/ui")

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "CPU Package" in response.text
    assert "AIDA64 CSV Log" in response.text
    assert 'data-page-refresh="5000"' in response.text
    assert 'data-table-refresh="3000"' in response.text


def test_static_assets_are_served(api_client: TestClient) -> None:
    response = api_client.get("/static/dashboard.js")

    assert response.status_code == 200


def test_health_reports_log_presence(api_client: TestClient, log_path: Path) -> None:
    assert api_client.get("/health").json() == {"status": "ok", "log": "missing"}

    log_path.write_text("CPU,Time\n50,12:00\n")

    assert api_client.get("/health").json() == {"status": "ok", "log": "present"}
