"""DTOs for HLS conversion operations."""

from enum import Enum

from pydantic import Field

from contest_media.application.dtos.base import CamelModel


class ConversionResponse(CamelModel):
    """Outcome of a synchronous HLS conversion."""

    success: bool = True
    message: str
    hls_master_playlist_key: str
    uploaded_files: int = Field(ge=0, description="Number of HLS files uploaded")


class ConversionAccepted(CamelModel):
    """Acknowledgement of a conversion scheduled in the background."""

    success: bool = True
    status: str = "processing"
    submission_id: int
    message: str = "Conversion started"


class ConversionStatusState(str, Enum):
    """Status reported to pollers; adds `idle` to the conversion phases."""

    IDLE = "idle"
    DOWNLOADING = "downloading"
    CONVERTING = "converting"
    UPLOADING = "uploading"
    CLEANING = "cleaning"
    COMPLETED = "completed"
    ERROR = "error"


class ConversionStatusResponse(CamelModel):
    """Current conversion status of a submission."""

    success: bool = True
    status: ConversionStatusState
    progress: int = Field(ge=0, le=100)
    message: str = ""
    error: str | None = None
