"""Telemetry module - structured logging and timing."""

from contest_media.commons.telemetry.decorators import LogContext, timed
from contest_media.commons.telemetry.logger import (
    build_formatter,
    configure_logging,
    get_logger,
)

__all__ = [
    "timed",
    "LogContext",
    "get_logger",
    "configure_logging",
    "build_formatter",
]
