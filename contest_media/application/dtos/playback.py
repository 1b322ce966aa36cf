"""DTOs for playback and submission lookup."""

from datetime import datetime
from enum import Enum

from pydantic import Field

from contest_media.application.dtos.base import CamelModel
from contest_media.domain.models import ProcessingStatus, ResolutionLabel, Submission


class AssetType(str, Enum):
    """Which asset a signed URL points at."""

    RAW = "raw"
    HLS = "hls"

    @classmethod
    def _missing_(cls, value: object) -> "AssetType | None":
        if value == "original":
            return cls.RAW
        return None


class SignedUrlResponse(CamelModel):
    """Time-limited URL for direct object access."""

    signed_url: str
    storage_key: str
    type: AssetType
    expires_in: int = Field(description="URL validity in seconds")


class SubmissionResponse(CamelModel):
    """Submission record as exposed to clients."""

    id: int
    owner_id: str
    raw_asset_key: str | None = None
    raw_asset_location: str | None = None
    playlist_asset_key: str | None = None
    playlist_asset_location: str | None = None
    resolution_label: ResolutionLabel
    processing_status: ProcessingStatus
    processing_error: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_submission(cls, submission: Submission) -> "SubmissionResponse":
        return cls.model_validate(submission.model_dump())
