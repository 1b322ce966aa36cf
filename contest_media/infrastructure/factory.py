"""Infrastructure factory for creating service instances from configuration."""

from typing import Any, cast

from contest_media.commons.infrastructure.blob import BlobStorageBase, MinioBlobStorage
from contest_media.commons.infrastructure.documentdb import (
    DocumentDBBase,
    MongoDBDocumentDB,
)
from contest_media.commons.settings.models import Settings
from contest_media.commons.telemetry import get_logger
from contest_media.domain.models import ConversionProgress, UploadProgress
from contest_media.infrastructure.progress import (
    InMemoryProgressStore,
    ProgressStoreBase,
    ProgressSweeper,
)
from contest_media.infrastructure.transcoder import (
    FFmpegHLSTranscoder,
    TranscoderBase,
    TranscodeParams,
)

logger = get_logger(__name__)


class InfrastructureFactory:
    """Factory for creating infrastructure service instances.

    Creates concrete implementations based on configuration settings and
    caches one instance of each per factory.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize factory with settings.

        Args:
            settings: Application settings.
        """
        self._settings = settings
        self._instances: dict[str, Any] = {}

    @property
    def settings(self) -> Settings:
        return self._settings

    def get_blob_storage(self) -> BlobStorageBase:
        """Get blob storage instance.

        Returns:
            Configured blob storage provider.
        """
        if "blob_storage" not in self._instances:
            blob_settings = self._settings.blob_storage
            self._instances["blob_storage"] = MinioBlobStorage(
                endpoint=blob_settings.endpoint,
                access_key=blob_settings.access_key,
                secret_key=blob_settings.secret_key,
                secure=blob_settings.use_ssl,
                region=blob_settings.region,
            )
        return cast("BlobStorageBase", self._instances["blob_storage"])

    def get_document_db(self) -> DocumentDBBase:
        """Get document database instance.

        Returns:
            Configured document database provider.
        """
        if "document_db" not in self._instances:
            doc_settings = self._settings.document_db
            if doc_settings.username and doc_settings.password:
                connection_string = (
                    f"mongodb://{doc_settings.username}:{doc_settings.password}"
                    f"@{doc_settings.host}:{doc_settings.port}"
                    f"/?authSource={doc_settings.auth_source}"
                )
            else:
                connection_string = f"mongodb://{doc_settings.host}:{doc_settings.port}"
            self._instances["document_db"] = MongoDBDocumentDB(
                connection_string=connection_string,
                database_name=doc_settings.database,
            )
        return cast("DocumentDBBase", self._instances["document_db"])

    def get_transcoder(self) -> TranscoderBase:
        """Get HLS transcoder instance.

        Returns:
            Configured transcoder.
        """
        if "transcoder" not in self._instances:
            t = self._settings.transcoding
            self._instances["transcoder"] = FFmpegHLSTranscoder(
                ffmpeg_path=t.ffmpeg_path,
                timeout_seconds=t.timeout_seconds,
                default_params=TranscodeParams(
                    video_codec=t.video_codec,
                    audio_codec=t.audio_codec,
                    segment_seconds=t.segment_seconds,
                    playlist_type=t.playlist_type,
                    list_size=t.list_size,
                    master_playlist_name=t.master_playlist_name,
                    segment_filename_pattern=t.segment_filename_pattern,
                ),
            )
        return cast("TranscoderBase", self._instances["transcoder"])

    def get_upload_progress_store(self) -> ProgressStoreBase[UploadProgress]:
        """Get the process-wide upload progress store."""
        if "upload_progress" not in self._instances:
            self._instances["upload_progress"] = InMemoryProgressStore[UploadProgress](
                retention_seconds=self._settings.progress.retention_seconds,
                name="upload_progress",
            )
        return cast("ProgressStoreBase[UploadProgress]", self._instances["upload_progress"])

    def get_conversion_progress_store(self) -> ProgressStoreBase[ConversionProgress]:
        """Get the process-wide conversion progress store."""
        if "conversion_progress" not in self._instances:
            self._instances["conversion_progress"] = InMemoryProgressStore[
                ConversionProgress
            ](
                retention_seconds=self._settings.progress.retention_seconds,
                name="conversion_progress",
            )
        return cast(
            "ProgressStoreBase[ConversionProgress]",
            self._instances["conversion_progress"],
        )

    def get_progress_sweeper(self) -> ProgressSweeper:
        """Get the sweeper purging both progress stores."""
        if "progress_sweeper" not in self._instances:
            self._instances["progress_sweeper"] = ProgressSweeper(
                stores=[
                    self.get_upload_progress_store(),
                    self.get_conversion_progress_store(),
                ],
                interval_seconds=self._settings.progress.sweep_interval_seconds,
            )
        return cast("ProgressSweeper", self._instances["progress_sweeper"])

    async def close_all(self) -> None:
        """Close all service connections."""
        for name, instance in self._instances.items():
            if hasattr(instance, "close"):
                try:
                    close_result = instance.close()
                    if hasattr(close_result, "__await__"):
                        await close_result
                except Exception as e:
                    logger.warning(f"Failed to close {name}: {e}")

        self._instances.clear()


class _FactoryHolder:
    """Holder for the factory singleton to avoid global statements."""

    instance: InfrastructureFactory | None = None


def get_factory(settings: Settings | None = None) -> InfrastructureFactory:
    """Get or create the infrastructure factory singleton.

    Args:
        settings: Settings to use. Required on first call.

    Returns:
        Infrastructure factory instance.

    Raises:
        ValueError: If settings not provided on first call.
    """
    if _FactoryHolder.instance is None:
        if settings is None:
            raise ValueError("Settings required to initialize factory")
        _FactoryHolder.instance = InfrastructureFactory(settings)

    return _FactoryHolder.instance


def reset_factory() -> None:
    """Reset the factory singleton (for testing)."""
    _FactoryHolder.instance = None
