"""Abstract base class for blob storage operations."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import BinaryIO

# Called with (bytes transferred so far, total bytes or None when unknown)
TransferCallback = Callable[[int, int | None], None]


class BlobStorageError(Exception):
    """Raised when the blob store rejects or fails an operation."""

    def __init__(self, operation: str, bucket: str, path: str, reason: str) -> None:
        self.operation = operation
        self.bucket = bucket
        self.path = path
        self.reason = reason
        super().__init__(f"Blob {operation} failed for {bucket}/{path}: {reason}")


class BlobNotFoundError(BlobStorageError):
    """Raised when a blob is not found."""

    def __init__(self, bucket: str, path: str) -> None:
        super().__init__("lookup", bucket, path, "not found")
        self.message = f"Blob not found: {bucket}/{path}"


@dataclass
class BlobMetadata:
    """Metadata for a stored blob."""

    path: str
    size_bytes: int
    content_type: str
    created_at: datetime
    etag: str


@dataclass
class HealthStatus:
    """Health check result."""

    healthy: bool
    latency_ms: float
    message: str | None = None
    details: dict[str, str] | None = None


class BlobStorageBase(ABC):
    """Abstract base class for blob storage operations.

    Implementations should handle:
    - MinIO (local development)
    - AWS S3

    Failures surface as BlobStorageError (BlobNotFoundError for missing
    objects); provider-specific exception types never escape.
    """

    @abstractmethod
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
        """Upload a blob to storage.

        Args:
            bucket: Target bucket name.
            path: Path within the bucket.
            data: File-like object or bytes to upload.
            content_type: MIME type of the content.
            metadata: Optional key-value metadata.
            length: Number of bytes to read from `data`. Measured by seeking
                when omitted.
            progress_callback: Invoked after every chunk the transport reads.

        Returns:
            Metadata of the uploaded blob, read back from the store.
        """

    async def upload_file(
        self,
        bucket: str,
        path: str,
        local_path: Path,
        content_type: str = "application/octet-stream",
    ) -> BlobMetadata:
        """Upload a local file.

        Args:
            bucket: Target bucket name.
            path: Path within the bucket.
            local_path: File to upload.
            content_type: MIME type of the content.

        Returns:
            Metadata of the uploaded blob.
        """
        with local_path.open("rb") as fh:
            return await self.upload(
                bucket,
                path,
                fh,
                content_type=content_type,
                length=local_path.stat().st_size,
            )

    @abstractmethod
    async def download(self, bucket: str, path: str) -> bytes:
        """Download a blob from storage.

        Raises:
            BlobNotFoundError: If blob doesn't exist.
        """

    @abstractmethod
    def download_stream(
        self,
        bucket: str,
        path: str,
        chunk_size: int = 65536,
    ) -> AsyncIterator[bytes]:
        """Stream download a blob in chunks.

        Args:
            bucket: Source bucket name.
            path: Path within the bucket.
            chunk_size: Size of each chunk in bytes.

        Yields:
            Chunks of blob content.
        """
        ...

    @abstractmethod
    async def download_to_file(
        self,
        bucket: str,
        path: str,
        local_path: Path,
        chunk_size: int = 65536,
        progress_callback: TransferCallback | None = None,
    ) -> int:
        """Download a blob to a local file using streaming.

        The blob is written chunk by chunk so large videos never sit in
        memory as a whole.

        Args:
            bucket: Source bucket name.
            path: Path within the bucket.
            local_path: Local filesystem path to write to.
            chunk_size: Size of each chunk in bytes.
            progress_callback: Invoked after every chunk written.

        Returns:
            Number of bytes written.

        Raises:
            BlobNotFoundError: If blob doesn't exist.
        """

    @abstractmethod
    async def delete(self, bucket: str, path: str) -> bool:
        """Delete a blob from storage.

        Returns:
            True if deleted, False if didn't exist.
        """

    @abstractmethod
    async def exists(self, bucket: str, path: str) -> bool:
        """Check if a blob exists."""

    @abstractmethod
    async def get_metadata(self, bucket: str, path: str) -> BlobMetadata:
        """Get blob metadata without downloading (HEAD).

        Raises:
            BlobNotFoundError: If blob doesn't exist.
        """

    @abstractmethod
    async def generate_presigned_url(
        self,
        bucket: str,
        path: str,
        expiry_seconds: int = 3600,
        method: str = "GET",
        content_type: str | None = None,
    ) -> str:
        """Generate a presigned URL for direct access.

        Args:
            bucket: Bucket name.
            path: Path within the bucket.
            expiry_seconds: URL validity duration.
            method: HTTP method (GET or PUT).
            content_type: Content type a PUT must be sent with.

        Returns:
            Presigned URL string.
        """

    @abstractmethod
    async def create_bucket(self, bucket: str) -> bool:
        """Create a new bucket.

        Returns:
            True if created, False if already exists.
        """

    @abstractmethod
    async def health_check(self) -> HealthStatus:
        """Check service health."""

    def location_for(self, bucket: str, path: str) -> str:
        """Return the canonical s3:// location of a blob."""
        return f"s3://{bucket}/{path}"
