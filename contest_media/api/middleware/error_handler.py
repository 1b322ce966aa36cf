"""Error handling middleware and exception handlers."""

from typing import Any

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import RequestResponseEndpoint
from starlette.responses import Response

from contest_media.commons.telemetry.logger import get_logger
from contest_media.domain.exceptions import (
    ConversionFailedError,
    ConversionInProgressException,
    DomainException,
    InvalidSegmentKeyException,
    PlaylistNotAvailableException,
    RawAssetMissingException,
    StorageObjectNotFoundException,
    StorageOperationError,
    SubmissionAlreadyConvertedException,
    SubmissionNotFoundException,
    TranscodeFailedError,
    UploadValidationError,
)

logger = get_logger(__name__)


class APIError(Exception):
    """Base API error with code and details."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize API error.

        Args:
            code: Error code for clients.
            message: Human-readable error message.
            status_code: HTTP status code.
            details: Additional error details.
        """
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


# Checked in order; subclasses must precede their bases
_DOMAIN_ERRORS: list[tuple[type[DomainException], str, int]] = [
    (UploadValidationError, "UPLOAD_VALIDATION_ERROR", status.HTTP_400_BAD_REQUEST),
    (InvalidSegmentKeyException, "INVALID_SEGMENT_KEY", status.HTTP_400_BAD_REQUEST),
    (SubmissionNotFoundException, "SUBMISSION_NOT_FOUND", status.HTTP_404_NOT_FOUND),
    (RawAssetMissingException, "RAW_ASSET_MISSING", status.HTTP_404_NOT_FOUND),
    (
        PlaylistNotAvailableException,
        "PLAYLIST_NOT_AVAILABLE",
        status.HTTP_404_NOT_FOUND,
    ),
    (
        StorageObjectNotFoundException,
        "STORAGE_OBJECT_NOT_FOUND",
        status.HTTP_404_NOT_FOUND,
    ),
    (
        SubmissionAlreadyConvertedException,
        "SUBMISSION_ALREADY_CONVERTED",
        status.HTTP_409_CONFLICT,
    ),
    (
        ConversionInProgressException,
        "CONVERSION_IN_PROGRESS",
        status.HTTP_409_CONFLICT,
    ),
    (StorageOperationError, "STORAGE_ERROR", status.HTTP_500_INTERNAL_SERVER_ERROR),
    (TranscodeFailedError, "TRANSCODE_FAILED", status.HTTP_500_INTERNAL_SERVER_ERROR),
    (
        ConversionFailedError,
        "CONVERSION_FAILED",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    ),
]


def _build_error_response(
    request: Request,
    code: str,
    message: str,
    status_code: int,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    """Build standardized error response.

    Args:
        request: HTTP request.
        code: Error code.
        message: Error message.
        status_code: HTTP status code.
        details: Additional details.

    Returns:
        JSON error response.
    """
    request_id = getattr(request.state, "request_id", "unknown")

    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": details or {},
                "request_id": request_id,
            }
        },
    )


def _domain_details(exc: DomainException) -> dict[str, Any]:
    details: dict[str, Any] = {}
    for attr in ("submission_id", "key", "field", "phase", "operation"):
        value = getattr(exc, attr, None)
        if value is not None:
            details[attr] = value
    return details


def _handle_exception(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle exception and return appropriate error response.

    Args:
        request: HTTP request.
        exc: Exception to handle.

    Returns:
        JSON error response.
    """
    if isinstance(exc, APIError):
        logger.warning(
            f"API error: {exc.code}",
            extra={
                "error_code": exc.code,
                "error_message": exc.message,
                "details": exc.details,
            },
        )
        return _build_error_response(
            request=request,
            code=exc.code,
            message=exc.message,
            status_code=exc.status_code,
            details=exc.details,
        )

    if isinstance(exc, DomainException):
        code, status_code = "DOMAIN_ERROR", status.HTTP_400_BAD_REQUEST
        for exc_type, mapped_code, mapped_status in _DOMAIN_ERRORS:
            if isinstance(exc, exc_type):
                code, status_code = mapped_code, mapped_status
                break

        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(f"{code}: {exc}", extra={"error_code": code})
        else:
            logger.warning(f"{code}: {exc}", extra={"error_code": code})

        return _build_error_response(
            request=request,
            code=code,
            message=str(exc),
            status_code=status_code,
            details=_domain_details(exc),
        )

    # Catch-all for unexpected errors
    logger.exception(f"Unexpected error: {exc}")
    return _build_error_response(
        request=request,
        code="INTERNAL_ERROR",
        message="An unexpected error occurred",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


async def error_handler_middleware(
    request: Request,
    call_next: RequestResponseEndpoint,
) -> Response:
    """Middleware to catch and format all exceptions.

    Args:
        request: HTTP request.
        call_next: Next handler in chain.

    Returns:
        HTTP response.
    """
    try:
        return await call_next(request)
    except Exception as exc:
        return _handle_exception(request, exc)


async def request_validation_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Render request validation failures in the standard error envelope."""
    logger.warning(
        "Request validation failed",
        extra={"path": request.url.path, "error_count": len(exc.errors())},
    )
    return _build_error_response(
        request=request,
        code="VALIDATION_ERROR",
        message="Request validation failed",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        details={"errors": jsonable_encoder(exc.errors())},
    )
