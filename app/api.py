"""HTTP route definitions for the service."""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status
from fastapi.responses import JSONResponse

from app.schemas import (
    ConfigResponse,
    LogFailureResponse,
    LogResponse,
    MockPayload,
    TableResponse,
    TemperatureResponse,
    reading_out,
    table_response,
    temperature_response,
)
from models.records import Provenance
from services.errors import LogNotFoundError, TelemetryError
from services.telemetry import TelemetryService, build_default_service

logger = logging.getLogger(__name__)

router = APIRouter()

TOGGLE_MODE = "toggle_mode"
ACCEPTED_UPLOAD_SUFFIXES = {".csv", ".txt"}


def get_service() -> TelemetryService:
    return build_default_service()


def _json(
    status_code: int, payload: LogFailureResponse | TemperatureResponse | ConfigResponse
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=payload.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


def _log_failure(
    service: TelemetryService, status_code: int, error: str, exc: TelemetryError
) -> JSONResponse:
    snapshot = service.mock_snapshot()
    payload = LogFailureResponse(
        error=error,
        message=str(exc),
        mock_data=MockPayload(
            temperatures=[reading_out(reading) for reading in snapshot.readings],
            timestamp=snapshot.timestamp,
            source=Provenance.mock.value,
        ),
    )
    return _json(status_code, payload)


@router.get(
    "/api/aida64",
    response_model=LogResponse,
    responses={
        status.HTTP_404_NOT_FOUND: {"model": LogFailureResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": LogFailureResponse},
    },
    summary="Latest readings from the AIDA64 CSV log.",
)
async def read_aida64_log(
    service: TelemetryService = Depends(get_service),
) -> LogResponse | JSONResponse:
    try:
        latest = service.read_latest()
    except LogNotFoundError as exc:
        return _log_failure(service, status.HTTP_404_NOT_FOUND, "AIDA64 log file not found", exc)
    except TelemetryError as exc:
        return _log_failure(
            service, status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to read AIDA64 log file", exc
        )
    return LogResponse(
        timestamp=latest.timestamp,
        temperatures=[reading_out(reading) for reading in latest.readings],
        raw_data=latest.raw_data,
        source=Provenance.log.value,
    )


@router.get(
    "/api/temperature",
    response_model=TemperatureResponse,
    response_model_exclude_none=True,
    summary="Current snapshot with summary statistics, mock data when the log is unusable.",
)
async def read_temperature(
    service: TelemetryService = Depends(get_service),
) -> TemperatureResponse | JSONResponse:
    try:
        return temperature_response(service.current_snapshot())
    except Exception as exc:  # noqa: BLE001 - the dashboard must always get data
        logger.exception("Temperature snapshot failed", extra={"reason": exc})
        payload = temperature_response(service.mock_snapshot()).model_copy(
            update={
                "success": False,
                "error": "Failed to fetch temperature data",
                "message": str(exc),
            }
        )
        return _json(status.HTTP_500_INTERNAL_SERVER_ERROR, payload)


@router.post(
    "/api/temperature",
    response_model=ConfigResponse,
    response_model_exclude_none=True,
    summary="Dashboard configuration actions.",
)
async def configure(request: Request) -> ConfigResponse | JSONResponse:
    try:
        body = await request.json()
    except ValueError:
        return _json(
            status.HTTP_400_BAD_REQUEST,
            ConfigResponse(success=False, error="Invalid request body"),
        )

    action = body.get("action") if isinstance(body, dict) else None
    if action == TOGGLE_MODE:
        # No mode state is kept; the acknowledgement is all callers get.
        logger.info("Mode toggle requested", extra={"action": action})
        return ConfigResponse(success=True, message="Mode toggled successfully")

    return _json(
        status.HTTP_400_BAD_REQUEST,
        ConfigResponse(success=False, error="Invalid action"),
    )


@router.get(
    "/api/temperature/table",
    response_model=TableResponse,
    summary="Per-device rows for the detailed temperature table.",
)
async def read_temperature_table(
    service: TelemetryService = Depends(get_service),
) -> TableResponse:
    snapshot = service.current_snapshot()
    return table_response(snapshot, service.table_rows(snapshot))


@router.post(
    "/api/uploads",
    response_model=TemperatureResponse,
    response_model_exclude_none=True,
    summary="Aggregate every row of an uploaded AIDA64 CSV export.",
)
async def upload_log(
    file: UploadFile = File(..., description="AIDA64 CSV export (.csv or .txt)."),
    service: TelemetryService = Depends(get_service),
) -> TemperatureResponse:
    filename = Path(file.filename or "upload.csv").name
    if Path(filename).suffix.lower() not in ACCEPTED_UPLOAD_SUFFIXES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only .csv and .txt files are accepted.",
        )

    try:
        contents = await file.read()
    finally:
        await file.close()
    if not contents:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file is empty.",
        )

    text = contents.decode("utf-8-sig", errors="replace")
    snapshot = service.snapshot_from_upload(text, filename=filename)
    return temperature_response(snapshot).model_copy(update={"error": snapshot.error})


@router.get(
    "/api/uploads/sample",
    response_model=TemperatureResponse,
    response_model_exclude_none=True,
    summary="Aggregate the bundled AIDA64 sample export.",
)
async def read_sample(
    service: TelemetryService = Depends(get_service),
) -> TemperatureResponse:
    return temperature_response(service.sample_snapshot())


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck(
    service: TelemetryService = Depends(get_service),
) -> dict[str, str]:
    log_state = "present" if service.log_file.exists() else "missing"
    return {"status": "ok", "log": log_state}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /ui for the dashboard and /health for status."}
