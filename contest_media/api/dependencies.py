"""FastAPI dependency injection for services and settings."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from contest_media.application.services.conversion import ConversionService
from contest_media.application.services.playback import PlaybackService
from contest_media.application.services.submissions import SubmissionStore
from contest_media.application.services.upload import UploadService
from contest_media.commons.settings.loader import get_settings as _load_settings
from contest_media.commons.settings.models import Settings
from contest_media.commons.telemetry import get_logger
from contest_media.infrastructure.factory import (
    InfrastructureFactory,
    get_factory,
    reset_factory,
)

logger = get_logger(__name__)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Application settings loaded from config files and environment.
    """
    return _load_settings()


def get_infrastructure_factory(
    settings: Annotated[Settings, Depends(get_settings)],
) -> InfrastructureFactory:
    """Get infrastructure factory with all providers."""
    return get_factory(settings)


def get_submission_store(
    factory: Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> SubmissionStore:
    """Get the submission store backed by the document database."""
    return SubmissionStore(document_db=factory.get_document_db(), settings=settings)


def get_upload_service(
    factory: Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)],
    submissions: Annotated[SubmissionStore, Depends(get_submission_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> UploadService:
    """Get raw upload service with all dependencies."""
    return UploadService(
        blob_storage=factory.get_blob_storage(),
        submissions=submissions,
        progress_store=factory.get_upload_progress_store(),
        settings=settings,
    )


def get_conversion_service(
    factory: Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)],
    submissions: Annotated[SubmissionStore, Depends(get_submission_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ConversionService:
    """Get HLS conversion service with all dependencies."""
    return ConversionService(
        blob_storage=factory.get_blob_storage(),
        transcoder=factory.get_transcoder(),
        submissions=submissions,
        progress_store=factory.get_conversion_progress_store(),
        settings=settings,
    )


def get_playback_service(
    factory: Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)],
    submissions: Annotated[SubmissionStore, Depends(get_submission_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> PlaybackService:
    """Get playback service with all dependencies."""
    return PlaybackService(
        blob_storage=factory.get_blob_storage(),
        submissions=submissions,
        settings=settings,
    )


# Type aliases for cleaner route signatures
SettingsDep = Annotated[Settings, Depends(get_settings)]
FactoryDep = Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)]
UploadServiceDep = Annotated[UploadService, Depends(get_upload_service)]
ConversionServiceDep = Annotated[ConversionService, Depends(get_conversion_service)]
PlaybackServiceDep = Annotated[PlaybackService, Depends(get_playback_service)]


async def init_services(settings: Settings) -> None:
    """Initialize all infrastructure services on startup.

    Args:
        settings: Application settings.
    """
    factory = get_factory(settings)

    # Pre-initialize critical services to fail fast
    blob = factory.get_blob_storage()
    document_db = factory.get_document_db()
    factory.get_transcoder()

    bucket = settings.blob_storage.buckets.videos
    try:
        if await blob.create_bucket(bucket):
            logger.info(f"Created bucket {bucket}")
    except Exception as e:
        logger.warning(f"Could not ensure bucket {bucket}: {e}")

    try:
        await document_db.create_index(
            settings.document_db.collections.submissions,
            [("owner_id", 1), ("created_at", -1)],
            name="owner_latest",
        )
    except Exception as e:
        logger.warning(f"Could not create submission index: {e}")

    factory.get_progress_sweeper().start()


async def shutdown_services() -> None:
    """Shutdown all infrastructure services."""
    try:
        factory = get_factory()
        await factory.get_progress_sweeper().stop()
        await factory.close_all()
    except ValueError:
        pass  # Factory not initialized
    finally:
        reset_factory()
        get_settings.cache_clear()
