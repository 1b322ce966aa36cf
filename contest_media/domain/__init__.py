"""Domain layer - business models and logic."""

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
from contest_media.domain.models import (
    ConversionPhase,
    ConversionProgress,
    ProcessingStatus,
    ResolutionLabel,
    Submission,
    UploadProgress,
    UploadState,
)

__all__ = [
    # Exceptions
    "DomainException",
    "SubmissionNotFoundException",
    "SubmissionAlreadyConvertedException",
    "RawAssetMissingException",
    "PlaylistNotAvailableException",
    "ConversionInProgressException",
    "UploadValidationError",
    "StorageObjectNotFoundException",
    "StorageOperationError",
    "TranscodeFailedError",
    "ConversionFailedError",
    "InvalidSegmentKeyException",
    # Models
    "Submission",
    "ProcessingStatus",
    "ResolutionLabel",
    "ConversionPhase",
    "ConversionProgress",
    "UploadProgress",
    "UploadState",
]
