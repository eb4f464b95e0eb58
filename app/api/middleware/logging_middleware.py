"""
Access log with correlation ids.

Each request is tagged with ``X-Correlation-ID`` (reused from the caller when
supplied) so the lines of one request can be found in the log. The id and the
handling time are returned as response headers.
"""

import logging
import time
import uuid
from collections.abc import Callable
from typing import Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
RESPONSE_TIME_HEADER = "X-Response-Time-Ms"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    # Probes and browser noise
    QUIET_PATHS: tuple[str, ...] = ("/health", "/favicon.ico")

    async def dispatch(self, request: Request, call_next: Callable[[Request], Any]) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or uuid.uuid4().hex[:8]
        request.state.correlation_id = correlation_id
        route = f"{request.method} {request.url.path}"

        if request.url.path.startswith(self.QUIET_PATHS):
            response = await call_next(request)
            response.headers[CORRELATION_HEADER] = correlation_id
            return response

        logger.info(f"[{correlation_id}] --> {route}")
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.error(f"[{correlation_id}] <-- {route} failed after {elapsed_ms:.2f}ms: {e}")
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        caller = (getattr(request.state, "user", None) or {}).get("sub", "-")
        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(
            level, f"[{correlation_id}] <-- {route} {response.status_code} in {elapsed_ms:.2f}ms (user={caller})"
        )

        response.headers[CORRELATION_HEADER] = correlation_id
        response.headers[RESPONSE_TIME_HEADER] = f"{elapsed_ms:.2f}"
        return response
