"""FastAPI entrypoint for DStats."""

import logging
from time import monotonic
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse

from dstats import counter, stats
from dstats.buckets import bucket_zone
from dstats.config import get_settings
from dstats.dashboard import render_client_script, render_dashboard
from dstats.store import create_store

ACKNOWLEDGMENT = "Request recorded"

settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)
store_logger = logging.getLogger("dstats.store")
request_logger = logging.getLogger("dstats.request")
store, store_is_shared = create_store(
    backend=settings.store_backend,
    redis_url=settings.redis_url,
    prefix=settings.store_prefix,
    logger=store_logger,
)
if settings.environment.lower() not in {"development", "test"} and not store_is_shared:
    raise RuntimeError(
        "A shared key-value store is required outside development/test. "
        "Configure REDIS_URL or STORE_BACKEND=redis."
    )
zone = bucket_zone(use_utc=settings.use_utc)


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next: Any) -> Response:
    started = monotonic()
    path = request.url.path
    method = request.method.upper()
    try:
        response = await call_next(request)
    except Exception:
        latency_ms = int((monotonic() - started) * 1000)
        request_logger.exception(
            "request method=%s path=%s status=%s latency_ms=%s",
            method,
            path,
            500,
            latency_ms,
        )
        raise

    latency_ms = int((monotonic() - started) * 1000)
    request_logger.info(
        "request method=%s path=%s status=%s latency_ms=%s",
        method,
        path,
        response.status_code,
        latency_ms,
    )
    return response


@app.on_event("shutdown")
async def shutdown_event() -> None:
    await store.close()


async def dashboard_page(request: Request) -> HTMLResponse:
    return render_dashboard(request, settings)


async def dashboard_script(request: Request) -> Response:
    return render_client_script(request, settings)


async def stats_api(request: Request) -> JSONResponse:
    series = await stats.query(store, tz=zone, length=settings.series_length)
    return JSONResponse(
        content=[point.model_dump() for point in series],
        headers={"Access-Control-Allow-Origin": "*"},
    )


async def record_request(request: Request) -> PlainTextResponse:
    await counter.record(store, tz=zone, ttl_seconds=settings.bucket_ttl_seconds)
    return PlainTextResponse(ACKNOWLEDGMENT)


# Routes registered without a method list match every HTTP method.
app.add_route(settings.dashboard_path, dashboard_page, include_in_schema=False)
app.add_route(settings.script_path, dashboard_script, include_in_schema=False)
app.add_route(settings.stats_api_path, stats_api, include_in_schema=False)
app.add_route("/{path:path}", record_request, include_in_schema=False)
