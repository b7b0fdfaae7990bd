"""Render the dashboard page and its polling client script."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from fastapi import Request
from fastapi.responses import HTMLResponse, Response
from fastapi.templating import Jinja2Templates

from dstats.config import Settings

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
SCRIPT_MEDIA_TYPE = "application/javascript"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def dashboard_context(settings: Settings) -> dict[str, Any]:
    return {
        "title": f"{settings.app_name} - Request Statistics",
        "chart_library_url": settings.chart_library_url,
        "script_path": settings.script_path,
        "client_config": {
            "statsUrl": settings.stats_api_path,
            "refreshIntervalMs": settings.refresh_interval_seconds * 1000,
            "seriesLength": settings.series_length,
        },
    }


def render_dashboard(request: Request, settings: Settings) -> HTMLResponse:
    return templates.TemplateResponse(request, "dashboard.html", dashboard_context(settings))


def render_client_script(request: Request, settings: Settings) -> Response:
    return templates.TemplateResponse(
        request,
        "stats.js",
        dashboard_context(settings),
        media_type=SCRIPT_MEDIA_TYPE,
    )
