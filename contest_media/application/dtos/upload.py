"""DTOs for raw video upload operations."""

from pydantic import Field

from contest_media.application.dtos.base import CamelModel
from contest_media.domain.models import UploadProgress, UploadState


class RawUploadResponse(CamelModel):
    """Result of a proxied raw upload."""

    submission_id: int = Field(description="ID of the created submission")
    storage_key: str = Field(description="Object key of the stored upload")
    storage_url: str = Field(description="s3:// location of the stored upload")
    status: UploadState = Field(default=UploadState.COMPLETED)
    upload_id: str = Field(description="Upload session used for progress polling")


class PresignedUploadRequest(CamelModel):
    """Request for a signed URL the browser can PUT the video to."""

    owner_id: str = Field(min_length=1, description="Registrant uploading the video")
    file_name: str = Field(min_length=1, description="Client-side file name")
    file_type: str = Field(default="", description="Declared MIME type")
    file_size: int = Field(ge=0, description="Declared size in bytes")


class PresignedUploadResponse(CamelModel):
    """Signed direct-upload target."""

    presigned_url: str
    storage_key: str
    expires_in: int = Field(description="URL validity in seconds")


class CompleteUploadRequest(CamelModel):
    """Notification that a direct upload finished."""

    owner_id: str = Field(min_length=1)
    storage_key: str = Field(min_length=1)


class CompleteUploadResponse(CamelModel):
    """Submission created for a direct upload."""

    submission_id: int
    storage_key: str
    storage_url: str
    status: UploadState = Field(default=UploadState.COMPLETED)


class UploadProgressResponse(CamelModel):
    """Snapshot of an upload session."""

    upload_id: str
    uploaded: int
    total: int
    percentage: int
    status: UploadState
    error: str | None = None
    uploaded_mb: float
    total_mb: float

    @classmethod
    def from_progress(cls, upload_id: str, progress: UploadProgress) -> "UploadProgressResponse":
        return cls(
            upload_id=upload_id,
            uploaded=progress.uploaded,
            total=progress.total,
            percentage=progress.percentage,
            status=progress.status,
            error=progress.error,
            uploaded_mb=progress.uploaded_mb,
            total_mb=progress.total_mb,
        )
