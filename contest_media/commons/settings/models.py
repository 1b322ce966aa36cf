"""Pydantic settings models for application configuration."""

from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseModel):
    """Application-level settings."""

    name: str = "contest-media"
    version: str = "0.1.0"
    environment: Literal["dev", "staging", "prod"] = "dev"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


class ServerSettings(BaseModel):
    """HTTP server settings."""

    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    workers: int = Field(default=1, ge=1, le=32)
    reload: bool = False
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    api_prefix: str = "/v1"
    docs_enabled: bool = True
    public_base_url: str | None = None


class BucketSettings(BaseModel):
    """Bucket name configuration."""

    videos: str = "contest-videos"


class BlobStorageSettings(BaseModel):
    """Blob storage settings (MinIO/S3)."""

    provider: Literal["minio", "s3"] = "minio"
    endpoint: str = "localhost:9000"
    access_key: str = ""
    secret_key: str = ""
    use_ssl: bool = False
    region: str = "us-east-1"
    buckets: BucketSettings = Field(default_factory=BucketSettings)
    presigned_url_expiry_seconds: int = 3600


class DocumentCollectionSettings(BaseModel):
    """Document DB collection names."""

    submissions: str = "video_submissions"
    counters: str = "counters"


class DocumentDBSettings(BaseModel):
    """Document database settings (MongoDB)."""

    provider: Literal["mongodb"] = "mongodb"
    host: str = "localhost"
    port: int = 27017
    username: str = ""
    password: str = ""
    database: str = "contest_media"
    auth_source: str = "admin"
    collections: DocumentCollectionSettings = Field(
        default_factory=DocumentCollectionSettings
    )


class UploadSettings(BaseModel):
    """Raw video upload validation and key layout."""

    max_upload_size_mb: int = Field(default=500, ge=1)
    allowed_mime_types: list[str] = Field(
        default_factory=lambda: [
            "video/mp4",
            "video/webm",
            "video/quicktime",
            "video/x-msvideo",
            "video/avi",
            "video/x-matroska",
            "video/3gpp",
            "video/x-flv",
            "application/octet-stream",
        ]
    )
    allowed_extensions: list[str] = Field(
        default_factory=lambda: [
            ".mp4",
            ".webm",
            ".mov",
            ".avi",
            ".mkv",
            ".3gp",
            ".flv",
            ".m4v",
        ]
    )
    owner_prefix: str = "students"
    default_extension: str = "mp4"
    presigned_url_expiry_seconds: int = 3600

    @property
    def max_upload_size_bytes(self) -> int:
        """Upload ceiling in bytes."""
        return self.max_upload_size_mb * 1024 * 1024


class TranscodingSettings(BaseModel):
    """HLS transcoding settings."""

    ffmpeg_path: str = "ffmpeg"
    video_codec: str = "libx264"
    audio_codec: str = "aac"
    segment_seconds: int = Field(default=10, ge=1)
    playlist_type: Literal["vod", "event"] = "vod"
    list_size: int = Field(default=0, ge=0)
    master_playlist_name: str = "master.m3u8"
    segment_filename_pattern: str = "segment_%03d.ts"
    hls_key_prefix: str = "hls"
    temp_dir: str | None = None
    timeout_seconds: int | None = 3600


class ProgressSettings(BaseModel):
    """Ephemeral progress tracking settings."""

    retention_seconds: float = Field(default=30.0, ge=0)
    sweep_interval_seconds: float = Field(default=5.0, gt=0)


class PlaybackSettings(BaseModel):
    """Playback proxy and signed URL settings."""

    playlist_cache_control: str = "no-cache"
    segment_cache_control: str = "public, max-age=31536000, immutable"
    signed_url_default_expiry_seconds: int = 3600
    signed_url_max_expiry_seconds: int = 7 * 24 * 3600
    stream_chunk_size: int = 64 * 1024


class TelemetrySettings(BaseModel):
    """Telemetry and observability settings."""

    enabled: bool = True
    log_format: Literal["json", "text"] = "json"
    log_level: str = "INFO"


class Settings(BaseSettings):
    """Root settings container with environment loading."""

    app: AppSettings = Field(default_factory=AppSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    blob_storage: BlobStorageSettings = Field(default_factory=BlobStorageSettings)
    document_db: DocumentDBSettings = Field(default_factory=DocumentDBSettings)
    uploads: UploadSettings = Field(default_factory=UploadSettings)
    transcoding: TranscodingSettings = Field(default_factory=TranscodingSettings)
    progress: ProgressSettings = Field(default_factory=ProgressSettings)
    playback: PlaybackSettings = Field(default_factory=PlaybackSettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CONTEST_MEDIA__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )
