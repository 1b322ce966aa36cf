"""MongoDB implementation of document database."""

import time
from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ReturnDocument

from contest_media.commons.infrastructure.blob.base import HealthStatus
from contest_media.commons.infrastructure.documentdb.base import (
    DocumentDBBase,
    DocumentId,
)


def _to_storage(document: dict[str, Any]) -> dict[str, Any]:
    doc = document.copy()
    if "id" in doc:
        doc["_id"] = doc.pop("id")
    return doc


def _from_storage(doc: dict[str, Any]) -> dict[str, Any]:
    # Restore 'id' from '_id' for domain model compatibility
    doc["id"] = doc.pop("_id")
    return dict(doc)


class MongoDBDocumentDB(DocumentDBBase):
    """MongoDB implementation of document database.

    Uses Motor for async operations. The domain `id` is stored as `_id`
    with its native type, so integer IDs stay integers.
    """

    def __init__(
        self,
        connection_string: str,
        database_name: str,
    ) -> None:
        """Initialize MongoDB client.

        Args:
            connection_string: MongoDB connection URI.
            database_name: Name of the database to use.
        """
        self._client: AsyncIOMotorClient[dict[str, Any]] = AsyncIOMotorClient(
            connection_string
        )
        self._db: AsyncIOMotorDatabase[dict[str, Any]] = self._client[database_name]
        self._database_name = database_name

    async def insert(
        self,
        collection: str,
        document: dict[str, Any],
    ) -> DocumentId:
        """Insert a document, using its 'id' as MongoDB's '_id' if present."""
        result = await self._db[collection].insert_one(_to_storage(document))
        inserted = result.inserted_id
        return inserted if isinstance(inserted, int | str) else str(inserted)

    async def find_by_id(
        self,
        collection: str,
        document_id: DocumentId,
    ) -> dict[str, Any] | None:
        """Find a document by ID."""
        doc = await self._db[collection].find_one({"_id": document_id})
        if doc:
            return _from_storage(doc)
        return None

    async def find(
        self,
        collection: str,
        filters: dict[str, Any],
        skip: int = 0,
        limit: int = 100,
        sort: list[tuple[str, int]] | None = None,
    ) -> list[dict[str, Any]]:
        """Find documents matching filters."""
        cursor = self._db[collection].find(filters)

        if sort:
            cursor = cursor.sort(sort)

        cursor = cursor.skip(skip).limit(limit)

        results: list[dict[str, Any]] = []
        async for doc in cursor:
            results.append(_from_storage(doc))

        return results

    async def update_where(
        self,
        collection: str,
        document_id: DocumentId,
        conditions: dict[str, Any],
        updates: dict[str, Any],
    ) -> bool:
        """Update a document only if it still satisfies `conditions`."""
        update_doc = updates.copy()
        update_doc.pop("id", None)

        result = await self._db[collection].update_one(
            {**conditions, "_id": document_id},
            {"$set": update_doc},
        )
        return bool(result.matched_count > 0)

    async def next_sequence(self, counters_collection: str, name: str) -> int:
        """Atomically increment and return a named counter."""
        doc = await self._db[counters_collection].find_one_and_update(
            {"_id": name},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return int(doc["seq"])

    async def create_index(
        self,
        collection: str,
        fields: list[tuple[str, int]],
        unique: bool = False,
        name: str | None = None,
    ) -> str:
        """Create an index on the collection."""
        kwargs: dict[str, Any] = {"unique": unique}
        if name:
            kwargs["name"] = name
        index_name = await self._db[collection].create_index(fields, **kwargs)
        return str(index_name)

    async def health_check(self) -> HealthStatus:
        """Check service health."""
        start = time.perf_counter()
        try:
            await self._client.admin.command("ping")
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=True,
                latency_ms=latency_ms,
                message="MongoDB is healthy",
                details={"database": self._database_name},
            )
        except Exception as e:
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=False,
                latency_ms=latency_ms,
                message=f"MongoDB health check failed: {e}",
                details={"database": self._database_name, "error": str(e)},
            )

    async def close(self) -> None:
        """Close the client connection."""
        self._client.close()
