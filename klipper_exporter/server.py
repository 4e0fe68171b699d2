"""HTTP surface: /probe for Moonraker targets, /metrics for the exporter itself."""

import asyncio
import logging
from typing import Awaitable, Optional, TypeVar

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

from .config.models import ExporterConfig, ProbeRequest
from .config.settings import resolve_api_key
from .utils.logger import setup_logger
from .utils.metrics import SinkCollector
from .workflow import CollectionCycle

TARGET_ERROR = "'target' parameter must be specified once"
DISCONNECT_POLL_SECONDS = 0.5
CLIENT_CLOSED_REQUEST = 499

PROBES_TOTAL = Counter(
    "klipper_exporter_probes_total",
    "Probe requests handled, by outcome",
    ["status"],
)
PROBE_DURATION = Histogram(
    "klipper_exporter_probe_duration_seconds",
    "Time spent collecting metrics for a probe",
)

LANDING_PAGE = """<html>
<head><title>Klipper Exporter</title></head>
<body>
<h1>Klipper Exporter</h1>
<p><a href="/metrics">Exporter metrics</a></p>
<p><a href="/probe?target=localhost:7125">Probe localhost:7125</a></p>
</body>
</html>
"""

T = TypeVar('T')

router = APIRouter()


async def run_until_disconnected(
    request: Request,
    work: Awaitable[T],
    poll_interval: float = DISCONNECT_POLL_SECONDS
) -> Optional[T]:
    """
    Await work, cancelling it if the HTTP client goes away.

    Args:
        request: Incoming request to watch for disconnection
        work: Awaitable producing the response data
        poll_interval: Seconds between disconnection checks

    Returns:
        The result of work, or None if the client disconnected first
    """
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval)
            if done:
                return task.result()
            if await request.is_disconnected():
                task.cancel()
                await asyncio.wait({task})
                return None
    finally:
        if not task.done():
            task.cancel()


@router.get("/probe")
async def probe(request: Request) -> Response:
    config: ExporterConfig = request.app.state.config
    logger: logging.Logger = request.app.state.logger

    targets = request.query_params.getlist("target")
    if len(targets) != 1 or not targets[0]:
        PROBES_TOTAL.labels(status="invalid").inc()
        return PlainTextResponse(TARGET_ERROR, status_code=400)

    modules = request.query_params.getlist("modules") or list(config.default_modules)
    api_key = resolve_api_key(request.headers.get("Authorization"), config.api_key, logger)
    probe_request = ProbeRequest(target=targets[0], modules=modules, api_key=api_key)

    cycle = CollectionCycle(probe_request, config, logger)
    with PROBE_DURATION.time():
        sink = await run_until_disconnected(request, cycle.run())

    if sink is None:
        logger.info(f"Client disconnected, abandoned collection for {probe_request.target}")
        PROBES_TOTAL.labels(status="cancelled").inc()
        return Response(status_code=CLIENT_CLOSED_REQUEST)

    registry = CollectorRegistry()
    registry.register(SinkCollector(sink))
    PROBES_TOTAL.labels(status="success").inc()
    return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)


@router.get("/metrics")
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@router.get("/", response_class=HTMLResponse)
def index() -> str:
    return LANDING_PAGE


def create_app(config: Optional[ExporterConfig] = None, logger: logging.Logger = None) -> FastAPI:
    """
    Build the exporter application.

    Args:
        config: Exporter configuration, defaults when omitted
        logger: Optional logger instance

    Returns:
        FastAPI: Application serving /probe, /metrics and /
    """
    cfg = config or ExporterConfig()

    app = FastAPI(title="Klipper Exporter", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.config = cfg
    app.state.logger = logger or setup_logger("klipper_exporter", cfg.logging_level)
    app.include_router(router)
    return app
