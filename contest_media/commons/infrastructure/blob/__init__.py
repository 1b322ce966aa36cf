"""Blob storage abstractions and implementations."""

from contest_media.commons.infrastructure.blob.base import (
    BlobMetadata,
    BlobNotFoundError,
    BlobStorageBase,
    BlobStorageError,
    HealthStatus,
    TransferCallback,
)
from contest_media.commons.infrastructure.blob.minio_provider import MinioBlobStorage

__all__ = [
    # Base classes
    "BlobMetadata",
    "BlobStorageBase",
    "HealthStatus",
    "TransferCallback",
    # Implementations
    "MinioBlobStorage",
    # Exceptions
    "BlobStorageError",
    "BlobNotFoundError",
]
