"""Data transfer objects for API boundaries."""

from contest_media.application.dtos.base import CamelModel
from contest_media.application.dtos.conversion import (
    ConversionAccepted,
    ConversionResponse,
    ConversionStatusResponse,
    ConversionStatusState,
)
from contest_media.application.dtos.playback import (
    AssetType,
    SignedUrlResponse,
    SubmissionResponse,
)
from contest_media.application.dtos.upload import (
    CompleteUploadRequest,
    CompleteUploadResponse,
    PresignedUploadRequest,
    PresignedUploadResponse,
    RawUploadResponse,
    UploadProgressResponse,
)

__all__ = [
    "CamelModel",
    # Upload
    "RawUploadResponse",
    "PresignedUploadRequest",
    "PresignedUploadResponse",
    "CompleteUploadRequest",
    "CompleteUploadResponse",
    "UploadProgressResponse",
    # Conversion
    "ConversionResponse",
    "ConversionAccepted",
    "ConversionStatusResponse",
    "ConversionStatusState",
    # Playback
    "AssetType",
    "SignedUrlResponse",
    "SubmissionResponse",
]
