"""HLS conversion orchestration service."""

import asyncio
import shutil
import tempfile
from pathlib import Path, PurePosixPath
from uuid import uuid4

from contest_media.application.dtos.conversion import (
    ConversionResponse,
    ConversionStatusResponse,
    ConversionStatusState,
)
from contest_media.application.services.submissions import SubmissionStore
from contest_media.commons.infrastructure.blob.base import (
    BlobNotFoundError,
    BlobStorageBase,
    BlobStorageError,
)
from contest_media.commons.settings.models import Settings
from contest_media.commons.telemetry import LogContext, get_logger, timed
from contest_media.domain.exceptions import (
    ConversionFailedError,
    ConversionInProgressException,
    DomainException,
    RawAssetMissingException,
    StorageObjectNotFoundException,
    StorageOperationError,
    SubmissionAlreadyConvertedException,
    SubmissionNotFoundException,
    TranscodeFailedError,
)
from contest_media.domain.models import ConversionPhase, ConversionProgress, Submission
from contest_media.infrastructure.progress.base import ProgressStoreBase
from contest_media.infrastructure.transcoder.base import TranscodeError, TranscoderBase

_CONTENT_TYPES = {
    ".m3u8": "application/vnd.apple.mpegurl",
    ".ts": "video/mp2t",
}

_MB = 1024 * 1024

# Conversions outlive the request that started them
_running: set[asyncio.Task[ConversionResponse]] = set()


def content_type_for(file_name: str) -> str:
    """Return the MIME type an HLS output file is stored with."""
    return _CONTENT_TYPES.get(
        PurePosixPath(file_name).suffix.lower(), "application/octet-stream"
    )


class ConversionReporter:
    """Publishes one submission's conversion progress.

    Progress never decreases while the conversion is healthy; `fail`
    resets it to 0 with the error detail.
    """

    def __init__(self, store: ProgressStoreBase[ConversionProgress], key: str) -> None:
        self._store = store
        self._key = key
        self._last = 0

    def update(self, phase: ConversionPhase, progress: int, message: str) -> None:
        self._last = max(self._last, min(progress, 100))
        self._store.set(
            self._key,
            ConversionProgress(status=phase, progress=self._last, message=message),
        )

    def complete(self, message: str) -> None:
        self.update(ConversionPhase.COMPLETED, 100, message)

    def fail(self, message: str, error: str) -> None:
        self._store.set(
            self._key,
            ConversionProgress(
                status=ConversionPhase.ERROR,
                progress=0,
                message=message,
                error=error,
            ),
        )


class ConversionService:
    """Converts a submission's raw upload into an HLS rendition.

    Pipeline phases:
    1. Download the raw object into a private workspace
    2. Transcode it to an HLS playlist with segments
    3. Upload every output file under a fresh prefix
    4. Point the submission at the playlist and delete the raw object

    The submission record is only touched by the single conditional update
    in phase 4, so any earlier failure leaves it exactly as it was.
    """

    def __init__(
        self,
        blob_storage: BlobStorageBase,
        transcoder: TranscoderBase,
        submissions: SubmissionStore,
        progress_store: ProgressStoreBase[ConversionProgress],
        settings: Settings,
    ) -> None:
        self._blob = blob_storage
        self._transcoder = transcoder
        self._submissions = submissions
        self._progress = progress_store
        self._bucket = settings.blob_storage.buckets.videos
        self._hls_prefix = settings.transcoding.hls_key_prefix
        self._master_name = settings.transcoding.master_playlist_name
        self._temp_dir = settings.transcoding.temp_dir
        self._logger = get_logger(__name__)

    async def load_convertible(self, submission_id: int) -> Submission:
        """Fetch a submission and check it can be converted.

        Raises:
            SubmissionNotFoundException: If the submission does not exist.
            SubmissionAlreadyConvertedException: If it already has a playlist.
            RawAssetMissingException: If it has no raw upload.
        """
        submission = await self._submissions.get(submission_id)
        if submission is None:
            raise SubmissionNotFoundException(submission_id)
        if submission.is_converted:
            raise SubmissionAlreadyConvertedException(submission_id)
        if not submission.raw_asset_key:
            raise RawAssetMissingException(submission_id)
        return submission

    async def begin(self, submission_id: int) -> Submission:
        """Check preconditions and claim the submission for this process.

        Raises:
            ConversionInProgressException: If a conversion is already running.
        """
        submission = await self.load_convertible(submission_id)
        claimed = self._progress.claim(
            str(submission_id),
            ConversionProgress(
                status=ConversionPhase.DOWNLOADING,
                progress=5,
                message="Starting download from storage...",
            ),
        )
        if not claimed:
            raise ConversionInProgressException(submission_id)
        return submission

    async def convert_to_hls(self, submission_id: int) -> ConversionResponse:
        """Convert a submission to HLS and wait for the result.

        Cancelling the caller does not stop the conversion; it runs to
        completion or failure and reports through the progress store.
        """
        submission = await self.begin(submission_id)
        return await asyncio.shield(self.start(submission))

    def start(self, submission: Submission) -> "asyncio.Task[ConversionResponse]":
        """Schedule the pipeline for a claimed submission as its own task."""
        task = asyncio.create_task(self.run(submission))
        _running.add(task)
        task.add_done_callback(_running.discard)
        return task

    async def run_detached(self, submission: Submission) -> None:
        """Run a claimed conversion whose outcome is only reported as progress."""
        try:
            await asyncio.shield(self.start(submission))
        except DomainException as e:
            self._logger.warning(
                f"Background conversion failed: {e}",
                extra={"submission_id": submission.id},
            )

    @timed
    async def run(self, submission: Submission) -> ConversionResponse:  # noqa: PLR0915
        """Run the conversion pipeline for a claimed submission.

        Raises:
            TranscodeFailedError: If the transcoder fails.
            StorageObjectNotFoundException: If the raw object is gone.
            StorageOperationError: If object storage fails.
            SubmissionAlreadyConvertedException: If another conversion won.
            ConversionFailedError: For any other failure.
        """
        reporter = ConversionReporter(self._progress, str(submission.id))
        raw_key = submission.raw_asset_key or ""
        phase = ConversionPhase.DOWNLOADING
        workspace: Path | None = None
        uploaded: list[str] = []
        attached = False
        cancelled = False

        with LogContext(submission_id=submission.id):
            self._logger.info(
                "Starting HLS conversion",
                extra={"raw_asset_key": raw_key},
            )
            try:
                workspace = self._create_workspace()
                source = workspace / f"original{PurePosixPath(raw_key).suffix or '.mp4'}"
                output_dir = workspace / "hls"

                await self._download(raw_key, source, reporter)

                phase = ConversionPhase.CONVERTING
                reporter.update(phase, 30, "Starting HLS conversion...")
                reporter.update(phase, 40, "Processing video with FFmpeg...")
                await self._transcoder.transcode_to_hls(source, output_dir)
                reporter.update(phase, 50, "HLS conversion completed")

                phase = ConversionPhase.UPLOADING
                reporter.update(phase, 60, "Preparing HLS files for upload...")
                base_key = f"{self._hls_prefix}/{submission.id}/{uuid4()}"
                files = sorted(p for p in output_dir.iterdir() if p.is_file())
                for index, path in enumerate(files, start=1):
                    key = f"{base_key}/{path.name}"
                    await self._blob.upload_file(
                        self._bucket,
                        key,
                        path,
                        content_type=content_type_for(path.name),
                    )
                    uploaded.append(key)
                    reporter.update(
                        phase,
                        60 + (index * 20) // len(files),
                        f"Uploading {index}/{len(files)} files to storage...",
                    )

                phase = ConversionPhase.CLEANING
                master_key = next(
                    (k for k in uploaded if PurePosixPath(k).name == self._master_name),
                    None,
                )
                if master_key is None:
                    raise ConversionFailedError(
                        submission.id,
                        phase.value,
                        "Master playlist not found after conversion",
                    )

                reporter.update(phase, 85, "Updating submission...")
                updated = await self._submissions.attach_playlist(
                    submission,
                    master_key,
                    self._blob.location_for(self._bucket, master_key),
                )
                if updated is None:
                    raise SubmissionAlreadyConvertedException(submission.id)
                attached = True

                reporter.update(phase, 90, "Deleting original video from storage...")
                reporter.update(phase, 92, await self._delete_raw(raw_key))
                reporter.complete("Conversion completed successfully!")

            except TranscodeError as e:
                reporter.fail("FFmpeg conversion failed", e.detail)
                self._logger.error(
                    "Transcoder failed",
                    extra={"returncode": e.returncode, "error": e.message},
                )
                raise TranscodeFailedError(submission.id, e.detail) from e
            except BlobNotFoundError as e:
                reporter.fail("Conversion failed", str(e))
                await self._discard(uploaded, attached)
                raise StorageObjectNotFoundException(e.path) from e
            except BlobStorageError as e:
                reporter.fail("Conversion failed", str(e))
                self._logger.error(
                    f"Storage failure during {phase.value}",
                    extra={"phase": phase.value, "error": e.reason},
                )
                await self._discard(uploaded, attached)
                raise StorageOperationError(e.operation, e.path, e.reason) from e
            except DomainException as e:
                reporter.fail("Conversion failed", str(e))
                self._logger.error(
                    f"Conversion failed during {phase.value}: {e}",
                    extra={"phase": phase.value},
                )
                await self._discard(uploaded, attached)
                raise
            except asyncio.CancelledError:
                cancelled = True
                reporter.fail(
                    "Conversion cancelled",
                    "Conversion was cancelled before completing",
                )
                self._logger.warning(
                    f"Conversion cancelled during {phase.value}",
                    extra={"phase": phase.value, "workspace": str(workspace)},
                )
                await self._discard(uploaded, attached)
                raise
            except Exception as e:
                reporter.fail("Conversion failed", str(e) or type(e).__name__)
                self._logger.exception(
                    f"Unexpected conversion failure during {phase.value}",
                    extra={"phase": phase.value},
                )
                await self._discard(uploaded, attached)
                raise ConversionFailedError(submission.id, phase.value, str(e)) from e
            finally:
                # ffmpeg may still be writing into a cancelled workspace
                if workspace is not None and not cancelled:
                    self._remove_workspace(workspace)

            self._logger.info(
                "HLS conversion completed",
                extra={"playlist_key": master_key, "uploaded_files": len(uploaded)},
            )

        return ConversionResponse(
            message="Video converted to HLS successfully",
            hls_master_playlist_key=master_key,
            uploaded_files=len(uploaded),
        )

    def _create_workspace(self) -> Path:
        if self._temp_dir:
            Path(self._temp_dir).mkdir(parents=True, exist_ok=True)
        workspace = Path(tempfile.mkdtemp(prefix="hls-", dir=self._temp_dir))
        (workspace / "hls").mkdir()
        return workspace

    def _remove_workspace(self, workspace: Path) -> None:
        try:
            shutil.rmtree(workspace)
        except OSError as e:
            self._logger.warning(
                f"Could not remove workspace {workspace}: {e}",
                extra={"workspace": str(workspace)},
            )

    async def _download(
        self,
        raw_key: str,
        destination: Path,
        reporter: ConversionReporter,
    ) -> None:
        phase = ConversionPhase.DOWNLOADING
        total: int | None = None
        try:
            metadata = await self._blob.get_metadata(self._bucket, raw_key)
            total = metadata.size_bytes
            reporter.update(phase, 5, f"File size: {total / _MB:.2f} MB")
        except BlobNotFoundError:
            raise
        except BlobStorageError as e:
            self._logger.warning(
                "Could not read raw video size, downloading without byte progress",
                extra={"error": e.reason},
            )

        reporter.update(phase, 10, "Downloading video...")

        def on_chunk(downloaded: int, reported_total: int | None) -> None:
            size = total or reported_total
            if not size:
                return
            percentage = min(100, (downloaded * 100) // size)
            reporter.update(
                phase,
                10 + percentage // 10,
                f"Downloading: {percentage}% "
                f"({downloaded / _MB:.2f} MB / {size / _MB:.2f} MB)",
            )

        await self._blob.download_to_file(
            self._bucket, raw_key, destination, progress_callback=on_chunk
        )
        reporter.update(phase, 20, "Video downloaded successfully")

    async def _delete_raw(self, raw_key: str) -> str:
        try:
            await self._blob.delete(self._bucket, raw_key)
        except BlobStorageError as e:
            self._logger.warning(
                "Could not delete original video",
                extra={"raw_asset_key": raw_key, "error": e.reason},
            )
            return "Warning: Could not delete original video"
        return "Original video deleted from storage"

    async def _discard(self, keys: list[str], attached: bool) -> None:
        """Delete uploaded HLS files that no submission points at."""
        if attached:
            return
        for key in keys:
            try:
                await self._blob.delete(self._bucket, key)
            except BlobStorageError as e:
                self._logger.warning(
                    f"Could not delete orphaned HLS file {key}",
                    extra={"error": e.reason},
                )

    async def get_status(self, submission_id: int) -> ConversionStatusResponse:
        """Report live conversion progress, or derive it from the submission.

        Raises:
            SubmissionNotFoundException: If nothing is known about the submission.
        """
        record = self._progress.get(str(submission_id))
        if record is not None:
            return ConversionStatusResponse(
                status=ConversionStatusState(record.status.value),
                progress=record.progress,
                message=record.message,
                error=record.error,
            )

        submission = await self._submissions.get(submission_id)
        if submission is None:
            raise SubmissionNotFoundException(submission_id)
        if submission.is_converted:
            return ConversionStatusResponse(
                status=ConversionStatusState.COMPLETED,
                progress=100,
                message="Video already converted to HLS",
            )
        return ConversionStatusResponse(
            status=ConversionStatusState.IDLE,
            progress=0,
            message="No conversion in progress",
        )
