"""Video submission domain model."""

from datetime import UTC, datetime
from enum import Enum
from typing import Self

from pydantic import BaseModel, Field, model_validator


class ProcessingStatus(str, Enum):
    """Processing status persisted on a submission."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ResolutionLabel(str, Enum):
    """Which asset a submission currently plays from."""

    RAW = "raw"
    HLS = "hls"


class Submission(BaseModel):
    """A registrant's video submission.

    Exactly one of the raw upload or the HLS master playlist is the
    playable asset at any time, and `resolution_label` names which.
    """

    id: int = Field(ge=1, description="Sequential submission ID")
    owner_id: str = Field(min_length=1, description="Registrant that owns the video")
    raw_asset_key: str | None = Field(
        default=None,
        description="Object key of the original upload",
    )
    raw_asset_location: str | None = Field(
        default=None,
        description="s3:// location of the original upload",
    )
    playlist_asset_key: str | None = Field(
        default=None,
        description="Object key of the HLS master playlist",
    )
    playlist_asset_location: str | None = Field(
        default=None,
        description="s3:// location of the HLS master playlist",
    )
    resolution_label: ResolutionLabel = ResolutionLabel.RAW
    processing_status: ProcessingStatus = ProcessingStatus.COMPLETED
    processing_error: str | None = Field(
        default=None,
        description="Diagnostic text when processing_status is failed",
    )
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @model_validator(mode="after")
    def _one_playable_asset(self) -> Self:
        has_raw = self.raw_asset_key is not None
        has_playlist = self.playlist_asset_key is not None
        if has_raw == has_playlist:
            raise ValueError(
                "exactly one of raw_asset_key and playlist_asset_key must be set"
            )
        expected = ResolutionLabel.HLS if has_playlist else ResolutionLabel.RAW
        if self.resolution_label != expected:
            raise ValueError(
                f"resolution_label must be '{expected.value}' for this asset"
            )
        return self

    @property
    def is_converted(self) -> bool:
        """Check if the submission plays from an HLS playlist."""
        return self.playlist_asset_key is not None

    @property
    def playable_key(self) -> str:
        """Object key of the asset currently used for playback."""
        return self.playlist_asset_key or self.raw_asset_key  # type: ignore[return-value]

    def with_playlist(self, playlist_key: str, playlist_location: str) -> Self:
        """Create a new instance pointing at an HLS playlist instead of the raw file.

        Args:
            playlist_key: Object key of the master playlist.
            playlist_location: s3:// location of the master playlist.

        Returns:
            A new Submission with the raw pointer cleared.
        """
        return self.model_validate(
            {
                **self.model_dump(),
                "playlist_asset_key": playlist_key,
                "playlist_asset_location": playlist_location,
                "raw_asset_key": None,
                "raw_asset_location": None,
                "resolution_label": ResolutionLabel.HLS,
                "processing_status": ProcessingStatus.COMPLETED,
                "processing_error": None,
                "updated_at": datetime.now(UTC),
            }
        )

    def hls_update_fields(self) -> dict[str, object]:
        """Fields written by the single-document HLS upgrade."""
        return {
            "playlist_asset_key": self.playlist_asset_key,
            "playlist_asset_location": self.playlist_asset_location,
            "raw_asset_key": None,
            "raw_asset_location": None,
            "resolution_label": self.resolution_label.value,
            "processing_status": self.processing_status.value,
            "processing_error": None,
            "updated_at": self.updated_at,
        }
