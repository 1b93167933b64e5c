"""Request correlation for the API."""

import time
import uuid
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from svntag.utils.logging import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind a request ID to every log event emitted while serving a request.

    A tagging run triggered through ``POST /v1/tag`` logs ``publisher.*``,
    ``executor.*`` and ``svn.*`` events; the bound ``request_id`` ties them
    to the build that asked for the run. Build systems may pass their own
    ID in ``X-Request-ID``.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.clear_contextvars()

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "request.completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2),
            request_id=request_id,
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
