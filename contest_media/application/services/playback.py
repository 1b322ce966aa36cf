"""Playback of converted submissions."""

from collections.abc import AsyncIterator
from dataclasses import dataclass

from contest_media.application.dtos.playback import AssetType, SignedUrlResponse
from contest_media.application.services.conversion import content_type_for
from contest_media.application.services.playlist import rewrite_playlist
from contest_media.application.services.submissions import SubmissionStore
from contest_media.commons.infrastructure.blob.base import (
    BlobNotFoundError,
    BlobStorageBase,
    BlobStorageError,
)
from contest_media.commons.settings.models import Settings
from contest_media.commons.telemetry import get_logger
from contest_media.domain.exceptions import (
    InvalidSegmentKeyException,
    PlaylistNotAvailableException,
    RawAssetMissingException,
    StorageObjectNotFoundException,
    StorageOperationError,
    SubmissionNotFoundException,
)
from contest_media.domain.models import Submission


@dataclass
class SegmentStream:
    """An HLS object ready to be streamed to a client."""

    key: str
    content_type: str
    chunks: AsyncIterator[bytes]


class PlaybackService:
    """Serves HLS playlists, segments and signed URLs for submissions."""

    def __init__(
        self,
        blob_storage: BlobStorageBase,
        submissions: SubmissionStore,
        settings: Settings,
    ) -> None:
        self._blob = blob_storage
        self._submissions = submissions
        self._bucket = settings.blob_storage.buckets.videos
        self._hls_prefix = settings.transcoding.hls_key_prefix.rstrip("/") + "/"
        self._chunk_size = settings.playback.stream_chunk_size
        self._logger = get_logger(__name__)

    async def find_submission(
        self,
        submission_id: int | None = None,
        owner_id: str | None = None,
    ) -> Submission:
        """Look a submission up by ID, or take the owner's latest one.

        Raises:
            SubmissionNotFoundException: If no submission matches.
        """
        if submission_id is not None:
            submission = await self._submissions.get(submission_id)
            if submission is None:
                raise SubmissionNotFoundException(submission_id)
            return submission

        if owner_id:
            submission = await self._submissions.latest_for_owner(owner_id)
            if submission is None:
                raise SubmissionNotFoundException(f"owner {owner_id}")
            return submission

        raise ValueError("submission_id or owner_id is required")

    async def render_playlist(self, submission: Submission, segment_proxy_url: str) -> str:
        """Fetch a submission's master playlist and route its media through the proxy.

        Raises:
            PlaylistNotAvailableException: If the submission was never converted.
            StorageObjectNotFoundException: If the playlist object is missing.
        """
        playlist_key = submission.playlist_asset_key
        if not playlist_key:
            raise PlaylistNotAvailableException(submission.id)

        try:
            content = await self._blob.download(self._bucket, playlist_key)
        except BlobNotFoundError as e:
            raise StorageObjectNotFoundException(playlist_key) from e
        except BlobStorageError as e:
            raise StorageOperationError("download", playlist_key, e.reason) from e

        return rewrite_playlist(
            content.decode("utf-8"), playlist_key, segment_proxy_url
        )

    async def open_segment(self, key: str) -> SegmentStream:
        """Check an HLS object exists and open a stream over it.

        Raises:
            InvalidSegmentKeyException: If the key is outside the HLS namespace.
            StorageObjectNotFoundException: If the object does not exist.
        """
        if not key.startswith(self._hls_prefix) or ".." in key.split("/"):
            raise InvalidSegmentKeyException(key)

        try:
            await self._blob.get_metadata(self._bucket, key)
        except BlobNotFoundError as e:
            raise StorageObjectNotFoundException(key) from e
        except BlobStorageError as e:
            raise StorageOperationError("stat", key, e.reason) from e

        content_type = content_type_for(key)
        if content_type == "application/octet-stream":
            content_type = "video/mp2t"

        return SegmentStream(
            key=key,
            content_type=content_type,
            chunks=self._blob.download_stream(self._bucket, key, self._chunk_size),
        )

    async def signed_url(
        self,
        submission: Submission,
        asset_type: AssetType,
        expires_in: int,
    ) -> SignedUrlResponse:
        """Issue a time-limited GET URL for a submission's raw file or playlist.

        Raises:
            RawAssetMissingException: If the raw file was requested but is gone.
            PlaylistNotAvailableException: If HLS was requested before conversion.
        """
        if asset_type is AssetType.HLS:
            key = submission.playlist_asset_key
            if not key:
                raise PlaylistNotAvailableException(submission.id)
        else:
            key = submission.raw_asset_key
            if not key:
                raise RawAssetMissingException(submission.id)

        try:
            url = await self._blob.generate_presigned_url(
                self._bucket, key, expiry_seconds=expires_in, method="GET"
            )
        except BlobStorageError as e:
            raise StorageOperationError("presign", key, e.reason) from e

        self._logger.debug(
            "Signed URL issued",
            extra={"submission_id": submission.id, "asset_type": asset_type.value},
        )
        return SignedUrlResponse(
            signed_url=url,
            storage_key=key,
            type=asset_type,
            expires_in=expires_in,
        )
