"""MinIO implementation of blob storage."""

import asyncio
import io
import time
from collections.abc import AsyncIterator
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import BinaryIO

from minio import Minio
from minio.error import InvalidResponseError, S3Error, ServerError
from urllib3.exceptions import HTTPError

from contest_media.commons.infrastructure.blob.base import (
    BlobMetadata,
    BlobNotFoundError,
    BlobStorageBase,
    BlobStorageError,
    HealthStatus,
    TransferCallback,
)

_MISSING_CODES = frozenset({"NoSuchKey", "NoSuchObject", "NotFound"})
_TRANSPORT_ERRORS = (S3Error, ServerError, InvalidResponseError, HTTPError)


def _translate(
    exc: Exception, operation: str, bucket: str, path: str
) -> BlobStorageError:
    if isinstance(exc, S3Error) and exc.code in _MISSING_CODES:
        return BlobNotFoundError(bucket, path)
    return BlobStorageError(operation, bucket, path, str(exc))


class _ProgressReader(io.RawIOBase):
    """Read-through wrapper reporting bytes consumed by the uploader."""

    def __init__(
        self,
        source: BinaryIO,
        length: int,
        callback: TransferCallback,
    ) -> None:
        super().__init__()
        self._source = source
        self._length = length
        self._callback = callback
        self._consumed = 0

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        chunk = self._source.read(size)
        if chunk:
            self._consumed += len(chunk)
            self._callback(self._consumed, self._length)
        return chunk


class MinioBlobStorage(BlobStorageBase):
    """MinIO implementation of blob storage.

    Works with both MinIO (local development) and AWS S3 (production).
    Every blocking client call runs in the default executor.
    """

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        secure: bool = False,
        region: str | None = None,
    ) -> None:
        """Initialize MinIO client.

        Args:
            endpoint: MinIO/S3 endpoint (e.g., "localhost:9000").
            access_key: Access key ID.
            secret_key: Secret access key.
            secure: Use HTTPS connection.
            region: AWS region (optional, for S3).
        """
        self._client = Minio(
            endpoint=endpoint,
            access_key=access_key,
            secret_key=secret_key,
            secure=secure,
            region=region,
        )
        self._endpoint = endpoint
        self._secure = secure

    async def upload(
        self,
        bucket: str,
        path: str,
        data: BinaryIO | bytes,
        content_type: str = "application/octet-stream",
        metadata: dict[str, str] | None = None,
        length: int | None = None,
        progress_callback: TransferCallback | None = None,
    ) -> BlobMetadata:
        """Upload a blob to storage."""
        loop = asyncio.get_event_loop()

        if isinstance(data, bytes):
            data_io: BinaryIO = io.BytesIO(data)
            length = len(data)
        else:
            if length is None:
                data.seek(0, io.SEEK_END)
                length = data.tell()
            data.seek(0)
            data_io = data

        if progress_callback is not None:
            data_io = _ProgressReader(data_io, length, progress_callback)  # type: ignore[assignment]

        def _upload() -> None:
            self._client.put_object(
                bucket_name=bucket,
                object_name=path,
                data=data_io,
                length=length,
                content_type=content_type,
                metadata=metadata,  # type: ignore[arg-type]
            )

        try:
            await loop.run_in_executor(None, _upload)
        except _TRANSPORT_ERRORS as e:
            raise _translate(e, "upload", bucket, path) from e
        return await self.get_metadata(bucket, path)

    async def download(self, bucket: str, path: str) -> bytes:
        """Download a blob from storage."""
        loop = asyncio.get_event_loop()

        def _download() -> bytes:
            response = self._client.get_object(bucket, path)
            try:
                data: bytes = response.read()
                return data
            finally:
                response.close()
                response.release_conn()

        try:
            return await loop.run_in_executor(None, _download)
        except _TRANSPORT_ERRORS as e:
            raise _translate(e, "download", bucket, path) from e

    async def download_stream(  # type: ignore[override]
        self,
        bucket: str,
        path: str,
        chunk_size: int = 65536,
    ) -> AsyncIterator[bytes]:
        """Stream download a blob in chunks."""
        loop = asyncio.get_event_loop()

        try:
            response = await loop.run_in_executor(
                None, self._client.get_object, bucket, path
            )
        except _TRANSPORT_ERRORS as e:
            raise _translate(e, "download", bucket, path) from e

        try:
            while True:
                chunk: bytes = await loop.run_in_executor(
                    None, response.read, chunk_size
                )
                if not chunk:
                    break
                yield chunk
        finally:
            response.close()
            response.release_conn()

    async def download_to_file(
        self,
        bucket: str,
        path: str,
        local_path: Path,
        chunk_size: int = 65536,
        progress_callback: TransferCallback | None = None,
    ) -> int:
        """Download a blob to a local file using streaming."""
        loop = asyncio.get_event_loop()

        def _download() -> int:
            response = self._client.get_object(bucket, path)
            header = response.headers.get("Content-Length")
            total = int(header) if header else None
            written = 0
            try:
                with local_path.open("wb") as fh:
                    for chunk in response.stream(chunk_size):
                        fh.write(chunk)
                        written += len(chunk)
                        if progress_callback is not None:
                            progress_callback(written, total)
            finally:
                response.close()
                response.release_conn()
            return written

        try:
            return await loop.run_in_executor(None, _download)
        except _TRANSPORT_ERRORS as e:
            raise _translate(e, "download", bucket, path) from e

    async def delete(self, bucket: str, path: str) -> bool:
        """Delete a blob from storage."""
        loop = asyncio.get_event_loop()

        if not await self.exists(bucket, path):
            return False

        try:
            await loop.run_in_executor(None, self._client.remove_object, bucket, path)
        except _TRANSPORT_ERRORS as e:
            raise _translate(e, "delete", bucket, path) from e
        return True

    async def exists(self, bucket: str, path: str) -> bool:
        """Check if a blob exists."""
        try:
            await self.get_metadata(bucket, path)
        except BlobNotFoundError:
            return False
        return True

    async def get_metadata(self, bucket: str, path: str) -> BlobMetadata:
        """Get blob metadata without downloading."""
        loop = asyncio.get_event_loop()

        def _stat() -> BlobMetadata:
            stat = self._client.stat_object(bucket, path)
            return BlobMetadata(
                path=path,
                size_bytes=stat.size or 0,
                content_type=stat.content_type or "application/octet-stream",
                created_at=stat.last_modified or datetime.now(UTC),
                etag=stat.etag or "",
            )

        try:
            return await loop.run_in_executor(None, _stat)
        except _TRANSPORT_ERRORS as e:
            raise _translate(e, "stat", bucket, path) from e

    async def generate_presigned_url(
        self,
        bucket: str,
        path: str,
        expiry_seconds: int = 3600,
        method: str = "GET",
        content_type: str | None = None,
    ) -> str:
        """Generate a presigned URL for direct access."""
        loop = asyncio.get_event_loop()
        expires = timedelta(seconds=expiry_seconds)

        def _presign() -> str:
            # content_type is advisory for PUT; S3 v4 presigning leaves it unsigned
            if method.upper() == "PUT":
                return str(
                    self._client.presigned_put_object(
                        bucket_name=bucket,
                        object_name=path,
                        expires=expires,
                    )
                )
            return str(
                self._client.presigned_get_object(
                    bucket_name=bucket,
                    object_name=path,
                    expires=expires,
                )
            )

        try:
            return await loop.run_in_executor(None, _presign)
        except _TRANSPORT_ERRORS as e:
            raise _translate(e, "presign", bucket, path) from e

    async def create_bucket(self, bucket: str) -> bool:
        """Create a new bucket."""
        loop = asyncio.get_event_loop()

        def _create() -> bool:
            if self._client.bucket_exists(bucket):
                return False
            self._client.make_bucket(bucket)
            return True

        return await loop.run_in_executor(None, _create)

    async def health_check(self) -> HealthStatus:
        """Check service health."""
        start = time.perf_counter()
        try:
            loop = asyncio.get_event_loop()
            await loop.run_in_executor(None, self._client.list_buckets)
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=True,
                latency_ms=latency_ms,
                message="MinIO is healthy",
                details={"endpoint": self._endpoint},
            )
        except Exception as e:
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=False,
                latency_ms=latency_ms,
                message=f"MinIO health check failed: {e}",
                details={"endpoint": self._endpoint, "error": str(e)},
            )
