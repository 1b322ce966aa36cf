"""Raw video upload service."""

from pathlib import PurePosixPath
from typing import BinaryIO
from uuid import uuid4

from contest_media.application.dtos.upload import (
    CompleteUploadRequest,
    CompleteUploadResponse,
    PresignedUploadRequest,
    PresignedUploadResponse,
    RawUploadResponse,
    UploadProgressResponse,
)
from contest_media.application.services.submissions import SubmissionStore
from contest_media.commons.infrastructure.blob.base import (
    BlobNotFoundError,
    BlobStorageBase,
    BlobStorageError,
    TransferCallback,
)
from contest_media.commons.settings.models import Settings
from contest_media.commons.telemetry import LogContext, get_logger
from contest_media.domain.exceptions import (
    StorageObjectNotFoundException,
    StorageOperationError,
    UploadValidationError,
)
from contest_media.domain.models import UploadProgress, UploadState
from contest_media.infrastructure.progress.base import ProgressStoreBase


class UploadService:
    """Accepts raw video uploads and registers them as submissions.

    Two paths lead to the same submission:
    - proxied: the server streams the request body to object storage and
      reports byte progress under an upload ID
    - direct: the client PUTs to a presigned URL, then confirms the key
    """

    def __init__(
        self,
        blob_storage: BlobStorageBase,
        submissions: SubmissionStore,
        progress_store: ProgressStoreBase[UploadProgress],
        settings: Settings,
    ) -> None:
        self._blob = blob_storage
        self._submissions = submissions
        self._progress = progress_store
        self._uploads = settings.uploads
        self._bucket = settings.blob_storage.buckets.videos
        self._logger = get_logger(__name__)

    def validate(
        self,
        owner_id: str,
        file_name: str,
        content_type: str,
        size: int,
    ) -> str:
        """Check an upload before any side effect.

        The file is accepted when either its declared MIME type (an empty
        type counts as valid) or its extension is on the allow-list.

        Returns:
            The extension to use in the storage key, without the dot.

        Raises:
            UploadValidationError: If the upload is rejected.
        """
        if not owner_id or not owner_id.strip():
            raise UploadValidationError("Owner ID is required", field="ownerId")

        suffix = PurePosixPath(file_name).suffix.lower()
        type_ok = not content_type or content_type in self._uploads.allowed_mime_types
        extension_ok = suffix in self._uploads.allowed_extensions
        if not (type_ok or extension_ok):
            raise UploadValidationError(
                "Invalid file type. Please upload a video file "
                f"({', '.join(self._uploads.allowed_extensions)})",
                field="fileType",
            )

        if size <= 0:
            raise UploadValidationError("File is empty", field="fileSize")
        if size > self._uploads.max_upload_size_bytes:
            raise UploadValidationError(
                f"File size exceeds maximum of {self._uploads.max_upload_size_mb}MB",
                field="fileSize",
            )

        return suffix.lstrip(".") or self._uploads.default_extension

    def owner_namespace(self, owner_id: str) -> str:
        return f"{self._uploads.owner_prefix}/{owner_id}/upload/"

    def build_key(self, owner_id: str, extension: str) -> str:
        """Build a fresh, never reused storage key for an owner's upload."""
        return f"{self.owner_namespace(owner_id)}{uuid4()}.{extension}"

    def _progress_reporter(self, upload_id: str, total: int) -> TransferCallback:
        last = 0

        def report(uploaded: int, _total: int | None) -> None:
            nonlocal last
            percentage = min(100, (uploaded * 100) // total) if total else 0
            # percentage is non-decreasing
            last = max(last, percentage)
            self._progress.set(
                upload_id,
                UploadProgress(
                    uploaded=min(uploaded, total),
                    total=total,
                    percentage=last,
                    status=UploadState.UPLOADING,
                ),
            )

        return report

    async def upload_raw(
        self,
        stream: BinaryIO,
        size: int,
        owner_id: str,
        file_name: str,
        content_type: str = "",
        upload_id: str | None = None,
    ) -> RawUploadResponse:
        """Stream a raw video to storage and create its submission.

        Args:
            stream: Readable binary stream positioned anywhere.
            size: Size of the stream in bytes.
            owner_id: Registrant uploading the video.
            file_name: Client-side file name.
            content_type: Declared MIME type, possibly empty.
            upload_id: Progress session ID. Generated when omitted.

        Returns:
            The created submission reference.

        Raises:
            UploadValidationError: If the upload is rejected.
            StorageOperationError: If object storage fails.
        """
        extension = self.validate(owner_id, file_name, content_type, size)
        upload_id = upload_id or str(uuid4())
        key = self.build_key(owner_id, extension)

        with LogContext(upload_id=upload_id, owner_id=owner_id):
            self._logger.info(
                "Starting raw upload",
                extra={"storage_key": key, "size_bytes": size},
            )
            self._progress.set(upload_id, UploadProgress(total=size))

            try:
                await self._blob.upload(
                    self._bucket,
                    key,
                    stream,
                    content_type=content_type or "application/octet-stream",
                    length=size,
                    progress_callback=self._progress_reporter(upload_id, size),
                )
            except BlobStorageError as e:
                self._fail_progress(upload_id, size, e.reason)
                self._logger.error(
                    "Raw upload failed",
                    extra={"storage_key": key, "error": e.reason},
                )
                raise StorageOperationError("upload", key, e.reason) from e

            location = self._blob.location_for(self._bucket, key)
            try:
                submission = await self._submissions.create(owner_id, key, location)
            except Exception as e:
                self._fail_progress(upload_id, size, str(e))
                raise

            self._progress.set(
                upload_id,
                UploadProgress(
                    uploaded=size,
                    total=size,
                    percentage=100,
                    status=UploadState.COMPLETED,
                ),
            )
            self._logger.info(
                "Raw upload completed",
                extra={"submission_id": submission.id, "storage_key": key},
            )

        return RawUploadResponse(
            submission_id=submission.id,
            storage_key=key,
            storage_url=location,
            upload_id=upload_id,
        )

    def _fail_progress(self, upload_id: str, size: int, reason: str) -> None:
        previous = self._progress.get(upload_id)
        self._progress.set(
            upload_id,
            UploadProgress(
                uploaded=previous.uploaded if previous else 0,
                total=size,
                percentage=previous.percentage if previous else 0,
                status=UploadState.ERROR,
                error=reason,
            ),
        )

    async def create_presigned_upload(
        self, request: PresignedUploadRequest
    ) -> PresignedUploadResponse:
        """Issue a signed PUT URL for a direct browser upload."""
        extension = self.validate(
            request.owner_id, request.file_name, request.file_type, request.file_size
        )
        key = self.build_key(request.owner_id, extension)
        expiry = self._uploads.presigned_url_expiry_seconds

        try:
            url = await self._blob.generate_presigned_url(
                self._bucket,
                key,
                expiry_seconds=expiry,
                method="PUT",
                content_type=request.file_type or None,
            )
        except BlobStorageError as e:
            raise StorageOperationError("presign", key, e.reason) from e

        self._logger.info(
            "Presigned upload URL issued",
            extra={"owner_id": request.owner_id, "storage_key": key},
        )
        return PresignedUploadResponse(presigned_url=url, storage_key=key, expires_in=expiry)

    async def complete_direct_upload(
        self, request: CompleteUploadRequest
    ) -> CompleteUploadResponse:
        """Register a submission for an object uploaded through a presigned URL.

        Raises:
            UploadValidationError: If the key is outside the owner's namespace
                or the stored object breaks the size limits.
            StorageObjectNotFoundException: If nothing was uploaded.
        """
        key = request.storage_key
        if not key.startswith(self.owner_namespace(request.owner_id)) or ".." in key:
            raise UploadValidationError(
                "Storage key does not belong to this owner", field="storageKey"
            )

        try:
            metadata = await self._blob.get_metadata(self._bucket, key)
        except BlobNotFoundError as e:
            raise StorageObjectNotFoundException(key) from e
        except BlobStorageError as e:
            raise StorageOperationError("stat", key, e.reason) from e

        if metadata.size_bytes <= 0 or metadata.size_bytes > self._uploads.max_upload_size_bytes:
            self._logger.warning(
                "Direct upload rejected by size",
                extra={"storage_key": key, "size_bytes": metadata.size_bytes},
            )
            raise UploadValidationError(
                f"Uploaded file must be between 1 byte and {self._uploads.max_upload_size_mb}MB",
                field="fileSize",
            )

        location = self._blob.location_for(self._bucket, key)
        submission = await self._submissions.create(request.owner_id, key, location)
        return CompleteUploadResponse(
            submission_id=submission.id,
            storage_key=key,
            storage_url=location,
        )

    def get_progress(self, upload_id: str) -> UploadProgressResponse | None:
        """Return the live progress of an upload session, if any."""
        progress = self._progress.get(upload_id)
        if progress is None:
            return None
        return UploadProgressResponse.from_progress(upload_id, progress)
