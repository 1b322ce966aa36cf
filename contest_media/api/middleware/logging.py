"""Request logging middleware."""

import logging
import time
import uuid
from collections.abc import Callable
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from contest_media.commons.telemetry.logger import get_logger, set_correlation_id

logger = get_logger(__name__)

# Hit once per media segment or poll tick
QUIET_PATH_SUFFIXES = (
    "/video/segment-proxy",
    "/video/upload-progress",
    "/convert-hls/status",
    "/health/live",
)


def request_log_level(path: str) -> int:
    """Level used for the request/response lines of a path."""
    return logging.DEBUG if path.endswith(QUIET_PATH_SUFFIXES) else logging.INFO


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request and response under an `X-Request-ID`.

    The request ID doubles as the correlation ID of every log line emitted
    while the request is handled. Segment fetches and progress polls are
    logged at DEBUG.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Any],
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        set_correlation_id(request_id)

        path = request.url.path
        level = request_log_level(path)
        started = time.perf_counter()
        logger.log(
            level,
            f"{request.method} {path}",
            extra={
                "request_id": request_id,
                "query": str(request.query_params),
                "content_length": request.headers.get("content-length"),
                "client_ip": request.client.host if request.client else "unknown",
            },
        )

        response: Response = await call_next(request)

        logger.log(
            level,
            f"{request.method} {path} -> {response.status_code}",
            extra={
                "request_id": request_id,
                "status_code": response.status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            },
        )
        response.headers["X-Request-ID"] = request_id
        return response
