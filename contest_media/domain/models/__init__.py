"""Domain models."""

from contest_media.domain.models.progress import (
    ConversionPhase,
    ConversionProgress,
    UploadProgress,
    UploadState,
)
from contest_media.domain.models.submission import (
    ProcessingStatus,
    ResolutionLabel,
    Submission,
)

__all__ = [
    # Submission
    "Submission",
    "ProcessingStatus",
    "ResolutionLabel",
    # Progress
    "ConversionPhase",
    "ConversionProgress",
    "UploadProgress",
    "UploadState",
]
