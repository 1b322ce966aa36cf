"""Application layer - use cases and orchestration.

This layer contains:
- Services: upload, conversion and playback orchestration
- DTOs: Data transfer objects for API boundaries
"""

from contest_media.application.dtos import (
    AssetType,
    ConversionResponse,
    ConversionStatusResponse,
    RawUploadResponse,
    SignedUrlResponse,
    SubmissionResponse,
    UploadProgressResponse,
)
from contest_media.application.services import (
    ConversionService,
    PlaybackService,
    SubmissionStore,
    UploadService,
)

__all__ = [
    # DTOs
    "AssetType",
    "ConversionResponse",
    "ConversionStatusResponse",
    "RawUploadResponse",
    "SignedUrlResponse",
    "SubmissionResponse",
    "UploadProgressResponse",
    # Services
    "SubmissionStore",
    "UploadService",
    "ConversionService",
    "PlaybackService",
]
