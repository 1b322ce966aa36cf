"""Ephemeral progress records for uploads and HLS conversions."""

from enum import Enum

from pydantic import BaseModel, Field


class ConversionPhase(str, Enum):
    """Phase of an HLS conversion."""

    DOWNLOADING = "downloading"
    CONVERTING = "converting"
    UPLOADING = "uploading"
    CLEANING = "cleaning"
    COMPLETED = "completed"
    ERROR = "error"


class UploadState(str, Enum):
    """State of a raw upload session."""

    UPLOADING = "uploading"
    COMPLETED = "completed"
    ERROR = "error"


class ConversionProgress(BaseModel):
    """Progress of one submission's conversion, keyed by submission ID."""

    status: ConversionPhase
    progress: int = Field(ge=0, le=100)
    message: str = ""
    error: str | None = None

    @property
    def is_terminal(self) -> bool:
        """Check if the conversion has finished, successfully or not."""
        return self.status in {ConversionPhase.COMPLETED, ConversionPhase.ERROR}


class UploadProgress(BaseModel):
    """Progress of one raw upload session, keyed by upload ID."""

    uploaded: int = Field(default=0, ge=0)
    total: int = Field(default=0, ge=0)
    percentage: int = Field(default=0, ge=0, le=100)
    status: UploadState = UploadState.UPLOADING
    error: str | None = None

    @property
    def is_terminal(self) -> bool:
        """Check if the upload has finished, successfully or not."""
        return self.status in {UploadState.COMPLETED, UploadState.ERROR}

    @property
    def uploaded_mb(self) -> float:
        """Uploaded size in megabytes, two decimals."""
        return round(self.uploaded / (1024 * 1024), 2)

    @property
    def total_mb(self) -> float:
        """Total size in megabytes, two decimals."""
        return round(self.total / (1024 * 1024), 2)
