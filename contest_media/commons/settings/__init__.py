"""Settings management module."""

from contest_media.commons.settings.loader import (
    SettingsLoader,
    get_settings,
    reset_settings,
)
from contest_media.commons.settings.models import (
    AppSettings,
    BlobStorageSettings,
    BucketSettings,
    DocumentCollectionSettings,
    DocumentDBSettings,
    PlaybackSettings,
    ProgressSettings,
    ServerSettings,
    Settings,
    TelemetrySettings,
    TranscodingSettings,
    UploadSettings,
)

__all__ = [
    # Loader
    "SettingsLoader",
    "get_settings",
    "reset_settings",
    # Main settings
    "Settings",
    "AppSettings",
    "ServerSettings",
    # Storage
    "BlobStorageSettings",
    "BucketSettings",
    "DocumentDBSettings",
    "DocumentCollectionSettings",
    # Pipeline
    "UploadSettings",
    "TranscodingSettings",
    "ProgressSettings",
    "PlaybackSettings",
    # Telemetry
    "TelemetrySettings",
]
