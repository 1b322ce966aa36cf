"""API middleware components."""

from contest_media.api.middleware.error_handler import (
    APIError,
    error_handler_middleware,
    request_validation_handler,
)
from contest_media.api.middleware.logging import LoggingMiddleware

__all__ = [
    "APIError",
    "LoggingMiddleware",
    "error_handler_middleware",
    "request_validation_handler",
]
