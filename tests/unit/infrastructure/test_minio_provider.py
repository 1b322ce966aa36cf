"""Unit tests for MinIO blob storage provider."""

import io
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock, patch

import pytest
from minio.error import S3Error
from urllib3.exceptions import HTTPError

from contest_media.commons.infrastructure.blob import (
    BlobNotFoundError,
    BlobStorageError,
)


class _S3Error(S3Error):
    """S3Error carrying only an error code."""

    def __init__(self, code: str) -> None:
        Exception.__init__(self, code)
        self._test_code = code

    @property
    def code(self) -> str:
        return self._test_code

    def __str__(self) -> str:
        return f"S3 operation failed; code: {self._test_code}"


def _stat(size: int = 6) -> MagicMock:
    stat = MagicMock()
    stat.size = size
    stat.content_type = "video/mp4"
    stat.last_modified = datetime(2024, 1, 1, tzinfo=UTC)
    stat.etag = "etag-1"
    return stat


class TestMinioBlobStorage:
    """Tests for MinioBlobStorage provider."""

    @pytest.fixture
    def mock_client(self):
        """Create a mock MinIO client."""
        with patch(
            "contest_media.commons.infrastructure.blob.minio_provider.Minio"
        ) as mock_minio_class:
            client = MagicMock()
            mock_minio_class.return_value = client
            yield client

    @pytest.fixture
    def storage(self, mock_client):
        from contest_media.commons.infrastructure.blob.minio_provider import (
            MinioBlobStorage,
        )

        return MinioBlobStorage(
            endpoint="localhost:9000",
            access_key="key",
            secret_key="secret",
        )

    # =========================================================================
    # Upload Tests
    # =========================================================================

    async def test_upload_bytes(self, storage, mock_client):
        mock_client.stat_object.return_value = _stat(6)

        metadata = await storage.upload("bucket", "a.mp4", b"abcdef", content_type="video/mp4")

        kwargs = mock_client.put_object.call_args.kwargs
        assert kwargs["bucket_name"] == "bucket"
        assert kwargs["object_name"] == "a.mp4"
        assert kwargs["length"] == 6
        assert kwargs["content_type"] == "video/mp4"
        assert metadata.size_bytes == 6

    async def test_upload_reports_progress(self, storage, mock_client):
        """Test that the callback sees every chunk the client reads."""
        mock_client.stat_object.return_value = _stat(10)

        def put_object(**kwargs):
            data = kwargs["data"]
            while data.read(4):
                pass

        mock_client.put_object.side_effect = put_object
        seen: list[tuple[int, int | None]] = []

        await storage.upload(
            "bucket",
            "a.mp4",
            io.BytesIO(b"0123456789"),
            length=10,
            progress_callback=lambda done, total: seen.append((done, total)),
        )

        assert seen == [(4, 10), (8, 10), (10, 10)]

    async def test_upload_failure_is_translated(self, storage, mock_client):
        mock_client.put_object.side_effect = HTTPError("connection reset")

        with pytest.raises(BlobStorageError) as exc_info:
            await storage.upload("bucket", "a.mp4", b"abc")

        assert exc_info.value.operation == "upload"
        assert "connection reset" in exc_info.value.reason

    # =========================================================================
    # Download Tests
    # =========================================================================

    async def test_download(self, storage, mock_client):
        response = MagicMock()
        response.read.return_value = b"#EXTM3U"
        mock_client.get_object.return_value = response

        assert await storage.download("bucket", "hls/1/x/master.m3u8") == b"#EXTM3U"
        response.close.assert_called_once()
        response.release_conn.assert_called_once()

    async def test_download_missing_object(self, storage, mock_client):
        mock_client.get_object.side_effect = _S3Error("NoSuchKey")

        with pytest.raises(BlobNotFoundError):
            await storage.download("bucket", "missing")

    async def test_download_to_file_streams_chunks(self, storage, mock_client, tmp_path):
        response = MagicMock()
        response.headers = {"Content-Length": "6"}
        response.stream.return_value = iter([b"abc", b"def"])
        mock_client.get_object.return_value = response
        seen: list[tuple[int, int | None]] = []

        written = await storage.download_to_file(
            "bucket",
            "a.mp4",
            tmp_path / "a.mp4",
            chunk_size=3,
            progress_callback=lambda done, total: seen.append((done, total)),
        )

        assert written == 6
        assert (tmp_path / "a.mp4").read_bytes() == b"abcdef"
        assert seen == [(3, 6), (6, 6)]
        response.stream.assert_called_once_with(3)

    async def test_download_stream(self, storage, mock_client):
        response = MagicMock()
        response.read.side_effect = [b"ab", b"cd", b""]
        mock_client.get_object.return_value = response

        chunks = [chunk async for chunk in storage.download_stream("bucket", "s.ts", 2)]

        assert chunks == [b"ab", b"cd"]
        response.release_conn.assert_called_once()

    # =========================================================================
    # Metadata / Delete Tests
    # =========================================================================

    async def test_get_metadata(self, storage, mock_client):
        mock_client.stat_object.return_value = _stat(1024)

        metadata = await storage.get_metadata("bucket", "a.mp4")

        assert metadata.size_bytes == 1024
        assert metadata.content_type == "video/mp4"
        assert metadata.etag == "etag-1"

    async def test_exists_false_for_missing(self, storage, mock_client):
        mock_client.stat_object.side_effect = _S3Error("NoSuchKey")
        assert await storage.exists("bucket", "missing") is False

    async def test_delete_existing(self, storage, mock_client):
        mock_client.stat_object.return_value = _stat()

        assert await storage.delete("bucket", "a.mp4") is True
        mock_client.remove_object.assert_called_once_with("bucket", "a.mp4")

    async def test_delete_missing(self, storage, mock_client):
        mock_client.stat_object.side_effect = _S3Error("NoSuchKey")

        assert await storage.delete("bucket", "a.mp4") is False
        mock_client.remove_object.assert_not_called()

    # =========================================================================
    # Presign Tests
    # =========================================================================

    async def test_presigned_put(self, storage, mock_client):
        mock_client.presigned_put_object.return_value = "https://minio/put"

        url = await storage.generate_presigned_url(
            "bucket", "a.mp4", expiry_seconds=600, method="PUT", content_type="video/mp4"
        )

        assert url == "https://minio/put"
        mock_client.presigned_put_object.assert_called_once_with(
            bucket_name="bucket", object_name="a.mp4", expires=timedelta(seconds=600)
        )

    async def test_presigned_get(self, storage, mock_client):
        mock_client.presigned_get_object.return_value = "https://minio/get"

        url = await storage.generate_presigned_url("bucket", "a.mp4", expiry_seconds=60)

        assert url == "https://minio/get"
        mock_client.presigned_put_object.assert_not_called()

    # =========================================================================
    # Bucket / Health Tests
    # =========================================================================

    async def test_create_bucket_when_missing(self, storage, mock_client):
        mock_client.bucket_exists.return_value = False

        assert await storage.create_bucket("bucket") is True
        mock_client.make_bucket.assert_called_once_with("bucket")

    async def test_create_bucket_when_present(self, storage, mock_client):
        mock_client.bucket_exists.return_value = True

        assert await storage.create_bucket("bucket") is False

    async def test_health_check(self, storage, mock_client):
        mock_client.list_buckets.side_effect = HTTPError("refused")

        result = await storage.health_check()

        assert result.healthy is False
        assert "refused" in result.message

    def test_location_for(self, storage):
        assert storage.location_for("bucket", "a/b.mp4") == "s3://bucket/a/b.mp4"
