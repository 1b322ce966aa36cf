"""Persistence of video submissions."""

from typing import Any

from contest_media.commons.infrastructure.documentdb.base import DocumentDBBase
from contest_media.commons.settings.models import Settings
from contest_media.commons.telemetry import get_logger
from contest_media.domain.models import Submission


def _to_document(submission: Submission) -> dict[str, Any]:
    doc = submission.model_dump()
    doc["resolution_label"] = submission.resolution_label.value
    doc["processing_status"] = submission.processing_status.value
    return doc


class SubmissionStore:
    """Reads and writes submission records in the document database.

    Submission IDs are sequential integers drawn from a counter document.
    """

    def __init__(self, document_db: DocumentDBBase, settings: Settings) -> None:
        self._db = document_db
        self._collection = settings.document_db.collections.submissions
        self._counters = settings.document_db.collections.counters
        self._logger = get_logger(__name__)

    async def create(
        self,
        owner_id: str,
        raw_asset_key: str,
        raw_asset_location: str,
    ) -> Submission:
        """Create a submission pointing at an uploaded raw video."""
        submission_id = await self._db.next_sequence(self._counters, self._collection)
        submission = Submission(
            id=submission_id,
            owner_id=owner_id,
            raw_asset_key=raw_asset_key,
            raw_asset_location=raw_asset_location,
        )
        await self._db.insert(self._collection, _to_document(submission))
        self._logger.info(
            "Submission created",
            extra={"submission_id": submission.id, "owner_id": owner_id},
        )
        return submission

    async def get(self, submission_id: int) -> Submission | None:
        doc = await self._db.find_by_id(self._collection, submission_id)
        return Submission.model_validate(doc) if doc else None

    async def latest_for_owner(self, owner_id: str) -> Submission | None:
        """Return the owner's most recently created submission."""
        docs = await self._db.find(
            self._collection,
            {"owner_id": owner_id},
            limit=1,
            sort=[("created_at", -1)],
        )
        return Submission.model_validate(docs[0]) if docs else None

    async def attach_playlist(
        self,
        submission: Submission,
        playlist_key: str,
        playlist_location: str,
    ) -> Submission | None:
        """Swap a submission from its raw file to an HLS playlist.

        The write only applies while the stored record has no playlist, so
        two racing conversions cannot both win.

        Returns:
            The updated submission, or None if another conversion got there first.
        """
        updated = submission.with_playlist(playlist_key, playlist_location)
        applied = await self._db.update_where(
            self._collection,
            submission.id,
            {"playlist_asset_key": None},
            updated.hls_update_fields(),
        )
        return updated if applied else None
