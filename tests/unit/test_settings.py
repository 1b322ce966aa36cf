"""Unit tests for settings models and loader."""

import json
import os
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest

from contest_media.commons.settings.loader import (
    SettingsLoader,
    get_settings,
    reset_settings,
)
from contest_media.commons.settings.models import (
    AppSettings,
    BlobStorageSettings,
    DocumentDBSettings,
    PlaybackSettings,
    ProgressSettings,
    ServerSettings,
    Settings,
    TelemetrySettings,
    TranscodingSettings,
    UploadSettings,
)


class TestAppSettings:
    """Tests for AppSettings model."""

    def test_default_values(self):
        settings = AppSettings()
        assert settings.name == "contest-media"
        assert settings.environment == "dev"
        assert settings.debug is False
        assert settings.log_level == "INFO"

    def test_invalid_environment(self):
        with pytest.raises(ValueError):
            AppSettings(environment="invalid")  # type: ignore[arg-type]


class TestServerSettings:
    """Tests for ServerSettings model."""

    def test_default_values(self):
        settings = ServerSettings()
        assert settings.port == 8000
        assert settings.api_prefix == "/v1"
        assert settings.public_base_url is None

    def test_port_validation(self):
        with pytest.raises(ValueError):
            ServerSettings(port=0)

        with pytest.raises(ValueError):
            ServerSettings(port=70000)


class TestStorageSettings:
    """Tests for blob storage and document database settings."""

    def test_blob_defaults(self):
        settings = BlobStorageSettings()
        assert settings.provider == "minio"
        assert settings.buckets.videos == "contest-videos"

    def test_document_db_collections(self):
        settings = DocumentDBSettings()
        assert settings.collections.submissions == "video_submissions"
        assert settings.collections.counters == "counters"


class TestUploadSettings:
    """Tests for UploadSettings model."""

    def test_default_limit_is_500_mb(self):
        settings = UploadSettings()
        assert settings.max_upload_size_mb == 500
        assert settings.max_upload_size_bytes == 500 * 1024 * 1024

    def test_allow_lists(self):
        settings = UploadSettings()
        assert "video/mp4" in settings.allowed_mime_types
        assert ".mov" in settings.allowed_extensions
        assert settings.owner_prefix == "students"

    def test_limit_must_be_positive(self):
        with pytest.raises(ValueError):
            UploadSettings(max_upload_size_mb=0)


class TestTranscodingSettings:
    """Tests for TranscodingSettings model."""

    def test_default_values(self):
        settings = TranscodingSettings()
        assert settings.video_codec == "libx264"
        assert settings.audio_codec == "aac"
        assert settings.segment_seconds == 10
        assert settings.playlist_type == "vod"
        assert settings.list_size == 0
        assert settings.master_playlist_name == "master.m3u8"
        assert settings.timeout_seconds == 3600

    def test_invalid_playlist_type(self):
        with pytest.raises(ValueError):
            TranscodingSettings(playlist_type="live")  # type: ignore[arg-type]


class TestRootSettings:
    """Tests for root Settings model."""

    def test_default_values(self):
        settings = Settings()
        assert isinstance(settings.app, AppSettings)
        assert isinstance(settings.uploads, UploadSettings)
        assert isinstance(settings.transcoding, TranscodingSettings)
        assert isinstance(settings.progress, ProgressSettings)
        assert isinstance(settings.playback, PlaybackSettings)
        assert isinstance(settings.telemetry, TelemetrySettings)
        assert settings.progress.retention_seconds == 30.0


class TestSettingsLoader:
    """Tests for SettingsLoader."""

    def teardown_method(self):
        for key in list(os.environ.keys()):
            if key.startswith("CONTEST_MEDIA__"):
                del os.environ[key]

    def test_load_empty_config(self):
        with TemporaryDirectory() as tmpdir:
            loader = SettingsLoader(config_dir=Path(tmpdir), environment="dev")
            settings = loader.load()
            assert settings.app.name == "contest-media"

    def test_load_environment_override(self):
        with TemporaryDirectory() as tmpdir:
            config_dir = Path(tmpdir)
            with (config_dir / "appsettings.json").open("w") as f:
                json.dump({"uploads": {"max_upload_size_mb": 200}}, f)
            with (config_dir / "appsettings.prod.json").open("w") as f:
                json.dump({"server": {"docs_enabled": False}}, f)

            loader = SettingsLoader(config_dir=config_dir, environment="prod")
            settings = loader.load()

            assert settings.uploads.max_upload_size_mb == 200
            assert settings.server.docs_enabled is False

    def test_env_vars_win_over_files(self):
        with TemporaryDirectory() as tmpdir:
            config_dir = Path(tmpdir)
            with (config_dir / "appsettings.json").open("w") as f:
                json.dump({"transcoding": {"segment_seconds": 6}}, f)

            os.environ["CONTEST_MEDIA__TRANSCODING__SEGMENT_SECONDS"] = "4"
            os.environ["CONTEST_MEDIA__TRANSCODING__TIMEOUT_SECONDS"] = "null"
            os.environ["CONTEST_MEDIA__UPLOADS__ALLOWED_EXTENSIONS"] = '[".mp4"]'

            settings = SettingsLoader(config_dir=config_dir, environment="dev").load()

            assert settings.transcoding.segment_seconds == 4
            assert settings.transcoding.timeout_seconds is None
            assert settings.uploads.allowed_extensions == [".mp4"]

    def test_config_dir_from_environment(self, monkeypatch, tmp_path):
        (tmp_path / "appsettings.json").write_text(
            json.dumps({"blob_storage": {"buckets": {"videos": "finals"}}})
        )
        monkeypatch.setenv("CONTEST_MEDIA_CONFIG_DIR", str(tmp_path))

        settings = SettingsLoader(environment="dev").load()

        assert settings.blob_storage.buckets.videos == "finals"

    def test_plain_strings_are_kept(self):
        os.environ["CONTEST_MEDIA__BLOB_STORAGE__ENDPOINT"] = "minio:9000"

        with TemporaryDirectory() as tmpdir:
            settings = SettingsLoader(config_dir=Path(tmpdir), environment="dev").load()

        assert settings.blob_storage.endpoint == "minio:9000"

    def test_deep_merge(self):
        loader = SettingsLoader()
        base = {"a": {"b": 1, "c": 2}, "d": 3}
        override = {"a": {"b": 10, "e": 4}, "f": 5}

        result = loader._deep_merge(base, override)

        assert result == {"a": {"b": 10, "c": 2, "e": 4}, "d": 3, "f": 5}


class TestGetSettings:
    """Tests for get_settings function."""

    def setup_method(self):
        reset_settings()

    def teardown_method(self):
        reset_settings()

    def test_get_settings_cached(self):
        with TemporaryDirectory() as tmpdir:
            settings1 = get_settings(config_dir=Path(tmpdir))
            settings2 = get_settings(config_dir=Path(tmpdir))
            assert settings1 is settings2

    def test_get_settings_reload(self):
        with TemporaryDirectory() as tmpdir:
            settings1 = get_settings(config_dir=Path(tmpdir))
            settings2 = get_settings(config_dir=Path(tmpdir), reload=True)
            assert settings1 is not settings2
