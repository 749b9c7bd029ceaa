"""
Global middleware.
"""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request

logger = logging.getLogger(__name__)

PROCESS_TIME_HEADER = "X-Process-Time"


def register_middleware(app: FastAPI) -> None:
    """Attach the request timer; every response carries ``X-Process-Time``."""

    @app.middleware("http")
    async def request_timer(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        response.headers[PROCESS_TIME_HEADER] = f"{elapsed:.4f}"

        connector = getattr(request.app.state, "connector", None)
        tag = connector.provider_name if connector is not None else "-"
        # Backend failures are already logged by the error handlers.
        log = logger.info if response.status_code < 400 else logger.debug
        if request.url.path.startswith("/images/"):
            log = logger.debug
        log(
            "[%s] %s %s → %d (%.3fs)",
            tag, request.method, request.url.path, response.status_code, elapsed,
        )
        return response
