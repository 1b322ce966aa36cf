"""Document database abstractions and implementations."""

from contest_media.commons.infrastructure.documentdb.base import (
    DocumentDBBase,
    DocumentId,
)
from contest_media.commons.infrastructure.documentdb.mongodb_provider import (
    MongoDBDocumentDB,
)

__all__ = [
    # Base classes
    "DocumentDBBase",
    "DocumentId",
    # Implementations
    "MongoDBDocumentDB",
]
