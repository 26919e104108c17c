"""Correlation id stamping and per-request access logging."""

from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

log = logging.getLogger("notspot.access")

CORRELATION_HEADER = "X-Correlation-Id"


def correlation_id(request: Request) -> str:
    return getattr(request.state, "correlation_id", "")


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Gives every request a fresh correlation id and echoes it in the response headers."""

    async def dispatch(self, request: Request, call_next):
        request.state.correlation_id = str(uuid.uuid4())
        started = time.perf_counter()
        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = request.state.correlation_id
        log.info(
            "%s %s -> %d (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response
