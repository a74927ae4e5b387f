from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from services.telemetry import TelemetryService, build_default_service
from settings import get_settings


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


def get_service() -> TelemetryService:
    return build_default_service()


router = APIRouter(include_in_schema=False)


@router.get("/ui", name="ui_index", response_class=HTMLResponse)
async def ui_index(
    request: Request,
    service: TelemetryService = Depends(get_service),
) -> HTMLResponse:
    snapshot = service.current_snapshot()
    settings = get_settings()
    # The page and the table refresh on separate timers and may briefly disagree.
    return templates.TemplateResponse(
        request,
        "ui/index.html",
        {
            "snapshot": snapshot,
            "rows": service.table_rows(snapshot),
            "policy": service.policy,
            "page_refresh_ms": int(settings.page_refresh_seconds * 1000),
            "table_refresh_ms": int(settings.table_refresh_seconds * 1000),
        },
    )
