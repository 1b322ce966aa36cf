"""Abstract base class for document database operations."""

from abc import ABC, abstractmethod
from typing import Any

from contest_media.commons.infrastructure.blob.base import HealthStatus

DocumentId = int | str


class DocumentDBBase(ABC):
    """Abstract base class for document database operations.

    Documents expose their primary key as `id`; how the backend stores it
    is an implementation detail.
    """

    @abstractmethod
    async def insert(
        self,
        collection: str,
        document: dict[str, Any],
    ) -> DocumentId:
        """Insert a document.

        Args:
            collection: Collection/table name.
            document: Document to insert.

        Returns:
            The document ID (the given `id`, or a generated one).
        """

    @abstractmethod
    async def find_by_id(
        self,
        collection: str,
        document_id: DocumentId,
    ) -> dict[str, Any] | None:
        """Find a document by ID.

        Returns:
            Document if found, None otherwise.
        """

    @abstractmethod
    async def find(
        self,
        collection: str,
        filters: dict[str, Any],
        skip: int = 0,
        limit: int = 100,
        sort: list[tuple[str, int]] | None = None,
    ) -> list[dict[str, Any]]:
        """Find documents matching filters.

        Args:
            collection: Collection/table name.
            filters: Query filters.
            skip: Number of documents to skip.
            limit: Maximum documents to return.
            sort: Sort order [(field, direction)].
                  Direction: 1 for ascending, -1 for descending.

        Returns:
            List of matching documents.
        """

    @abstractmethod
    async def update_where(
        self,
        collection: str,
        document_id: DocumentId,
        conditions: dict[str, Any],
        updates: dict[str, Any],
    ) -> bool:
        """Update a document only if it still satisfies `conditions`.

        The match and the write happen as one atomic operation, which makes
        this usable as a compare-and-set.

        Args:
            collection: Collection/table name.
            document_id: Document ID to update.
            conditions: Extra filters the document must match.
            updates: Fields to set.

        Returns:
            True if the document matched and was updated.
        """

    @abstractmethod
    async def next_sequence(self, counters_collection: str, name: str) -> int:
        """Atomically increment and return a named counter.

        The first call for a name returns 1.
        """

    @abstractmethod
    async def create_index(
        self,
        collection: str,
        fields: list[tuple[str, int]],
        unique: bool = False,
        name: str | None = None,
    ) -> str:
        """Create an index on the collection.

        Returns:
            Index name.
        """

    @abstractmethod
    async def health_check(self) -> HealthStatus:
        """Check service health."""

    async def close(self) -> None:
        """Release client resources."""
