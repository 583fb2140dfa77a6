#!/usr/bin/env python3
"""
regionstats.api — Read-only HTTP API over an imported AreaCollection.

Data is imported once (at app construction, or at startup from
REGIONSTATS_DATA_DIR) and then served from memory.

Endpoints:
    GET /health                              → Liveness probe
    GET /ready                               → Import diagnostics
    GET /areas                               → Full export document
    GET /areas/{code}                        → Export entry for one area
    GET /areas/{code}/measures/{codename}    → Values + derived statistics
    GET /report                              → Text table (text/plain)

Environment variables:
    ENV                   — "dev" or "prod" (default: "prod")
    REGIONSTATS_DATA_DIR  — Directory or base URL of source files
                            (default: "datasets")

Requires: fastapi, uvicorn
"""

from __future__ import annotations

import json
import logging
import os
import sys
import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.gzip import GZipMiddleware
from starlette.responses import Response

from regionstats.areas import AreaCollection
from regionstats.datasets import DATASETS
from regionstats.errors import NotFoundError, RegionStatsError
from regionstats.loader import LoadResult, load_areas, load_datasets
from regionstats.render import (
    export,
    export_area,
    export_measure,
    measure_statistics,
    render_table,
)

logger = logging.getLogger("regionstats.api")

ENV = os.getenv("ENV", "prod").lower().strip()
DATA_DIR = os.getenv("REGIONSTATS_DATA_DIR", "datasets").strip()


# ---------------------------------------------------------------------------
# Request-ID + structured request logging
# ---------------------------------------------------------------------------

class RequestIdMiddleware(BaseHTTPMiddleware):
    """Attach a request ID to every request and log one JSON line per request."""

    async def dispatch(self, request: Request, call_next: Any) -> Response:
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:16]
        request.state.request_id = request_id
        t0 = time.monotonic()
        response = await call_next(request)
        latency_ms = round((time.monotonic() - t0) * 1000, 1)
        response.headers["X-Request-ID"] = request_id

        log_data = {
            "event": "http_request",
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "latency_ms": latency_ms,
            "request_id": request_id,
        }
        if response.status_code >= 500:
            logger.error(json.dumps(log_data))
        elif response.status_code >= 400:
            logger.warning(json.dumps(log_data))
        else:
            logger.info(json.dumps(log_data))
        return response


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------

def load_all(directory: str) -> tuple[AreaCollection, LoadResult]:
    """Import the lookup file and every registered dataset from ``directory``."""
    areas = AreaCollection()
    result = LoadResult()
    try:
        result.reports.append(load_areas(areas, directory))
    except RegionStatsError as exc:
        logger.error(json.dumps({
            "event": "areas_import_failed",
            "error_type": type(exc).__name__,
            "error": str(exc),
        }))
        result.failures["areas"] = str(exc)

    datasets_result = load_datasets(areas, directory, DATASETS)
    result.reports.extend(datasets_result.reports)
    result.failures.update(datasets_result.failures)
    return areas, result


# ---------------------------------------------------------------------------
# App construction
# ---------------------------------------------------------------------------

@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Import data at startup unless the app was built with a collection."""
    if app.state.areas is None:
        areas, result = await run_in_threadpool(load_all, app.state.data_dir)
        app.state.areas = areas
        app.state.load_result = result
    logger.info(json.dumps({
        "event": "startup",
        "env": ENV,
        "areas": len(app.state.areas),
        "failures": sorted(app.state.load_result.failures),
    }))

    yield

    logger.info(json.dumps({"event": "shutdown"}))


def create_app(
    areas: AreaCollection | None = None,
    data_dir: str | None = None,
    load_result: LoadResult | None = None,
) -> FastAPI:
    """Build the API.

    Args:
        areas: Pre-imported collection to serve. None → import from
            ``data_dir`` at startup.
        data_dir: Source directory/URL (default: REGIONSTATS_DATA_DIR).
        load_result: Import diagnostics reported by /ready.
    """
    app = FastAPI(
        title="regionstats API",
        description="Regional statistics — read-only API",
        version="0.1.0",
        lifespan=_lifespan,
        docs_url="/docs" if ENV == "dev" else None,
        redoc_url=None,
    )
    app.state.areas = areas
    app.state.data_dir = data_dir or DATA_DIR
    app.state.load_result = load_result or LoadResult()

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(GZipMiddleware, minimum_size=500)

    @app.exception_handler(NotFoundError)
    async def _not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    def _areas(request: Request) -> AreaCollection:
        areas = request.app.state.areas
        if areas is None:
            raise HTTPException(status_code=503, detail="Data not imported yet.")
        return areas

    @app.get("/health", include_in_schema=False)
    async def health() -> JSONResponse:
        """Liveness probe. No state reads."""
        return JSONResponse(status_code=200, content={"status": "ok"})

    @app.get("/ready")
    async def ready(request: Request) -> dict[str, Any]:
        """Import diagnostics. Always 200; readiness is in the body."""
        areas = request.app.state.areas
        result: LoadResult = request.app.state.load_result
        return {
            "ready": areas is not None and result.ok,
            "areas": len(areas) if areas is not None else 0,
            "import": result.to_dict(),
        }

    @app.get("/areas")
    async def list_areas(request: Request) -> dict[str, Any]:
        """Export document for every imported area."""
        return export(_areas(request))

    @app.get("/areas/{code}")
    async def get_area(code: str, request: Request) -> dict[str, Any]:
        area = _areas(request).get(code.strip())
        return {area.authority_code: export_area(area)}

    @app.get("/areas/{code}/measures/{codename}")
    async def get_measure(code: str, codename: str, request: Request) -> dict[str, Any]:
        """One measure's values plus average, difference and % difference."""
        area = _areas(request).get(code.strip())
        measure = area.get_measure(codename)
        return {
            "authority_code": area.authority_code,
            "codename": measure.codename,
            **export_measure(measure),
            "statistics": measure_statistics(measure),
        }

    @app.get("/report", response_class=PlainTextResponse)
    async def report(request: Request) -> str:
        """Text table report for every imported area."""
        return render_table(_areas(request))

    return app


app = create_app()


# ---------------------------------------------------------------------------
# Entry point (development only)
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    try:
        import uvicorn
    except ImportError:
        print("Install uvicorn: pip install uvicorn", file=sys.stderr)
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if ENV == "dev" else logging.INFO,
        format="%(message)s",
        stream=sys.stdout,
    )
    print(f"regionstats API — serving from {DATA_DIR}")
    uvicorn.run(app, host="127.0.0.1", port=8000)
