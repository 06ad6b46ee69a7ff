"""
Request logging middleware.
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


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs method, path, caller role, status and timing of every request.

    Adds an ``X-Correlation-ID`` header, reusing the caller's when present.
    """

    EXCLUDE_PATHS: tuple[str, ...] = ("/api/v1/health", "/favicon.ico")

    async def dispatch(self, request: Request, call_next: Callable[[Request], Any]) -> Response:
        correlation_id = request.headers.get("X-Correlation-ID") or uuid.uuid4().hex[:8]
        request.state.correlation_id = correlation_id

        if request.url.path.startswith(self.EXCLUDE_PATHS):
            response = await call_next(request)
            response.headers["X-Correlation-ID"] = correlation_id
            return response

        role = request.headers.get("X-User-Role", "anonymous")
        start_time = time.perf_counter()
        logger.info(f"[{correlation_id}] --> {request.method} {request.url.path} (role={role})")

        response = await call_next(request)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.info(f"[{correlation_id}] <-- {request.method} {request.url.path} {response.status_code} ({elapsed_ms:.1f}ms)")
        response.headers["X-Correlation-ID"] = correlation_id
        return response
