"""Unit tests for the playback service."""

import pytest
from fakes import InMemoryBlobStorage, InMemoryDocumentDB

from contest_media.application.dtos.playback import AssetType
from contest_media.application.services.playback import PlaybackService
from contest_media.application.services.submissions import SubmissionStore
from contest_media.commons.settings.models import Settings
from contest_media.domain.exceptions import (
    InvalidSegmentKeyException,
    PlaylistNotAvailableException,
    RawAssetMissingException,
    StorageObjectNotFoundException,
    SubmissionNotFoundException,
)

BUCKET = "contest-videos"
PROXY = "http://testserver/v1/video/segment-proxy"
PLAYLIST_KEY = "hls/1/run-a/master.m3u8"
PLAYLIST = "#EXTM3U\n#EXT-X-TARGETDURATION:10\n#EXTINF:10.0,\nsegment_000.ts\n#EXT-X-ENDLIST\n"


@pytest.fixture
def settings():
    settings = Settings()
    settings.playback.stream_chunk_size = 4
    return settings


@pytest.fixture
def blob():
    return InMemoryBlobStorage()


@pytest.fixture
def submissions(settings):
    return SubmissionStore(document_db=InMemoryDocumentDB(), settings=settings)


@pytest.fixture
def service(blob, submissions, settings):
    return PlaybackService(blob_storage=blob, submissions=submissions, settings=settings)


@pytest.fixture
async def raw_submission(submissions):
    return await submissions.create("42", "students/42/upload/a.mp4", "s3://b/a.mp4")


@pytest.fixture
async def converted_submission(submissions, blob, raw_submission):
    blob.put(BUCKET, PLAYLIST_KEY, PLAYLIST.encode(), "application/vnd.apple.mpegurl")
    blob.put(BUCKET, "hls/1/run-a/segment_000.ts", b"0123456789", "video/mp2t")
    return await submissions.attach_playlist(
        raw_submission, PLAYLIST_KEY, f"s3://{BUCKET}/{PLAYLIST_KEY}"
    )


class TestFindSubmission:
    """Tests for submission lookup."""

    async def test_by_id(self, service, raw_submission):
        found = await service.find_submission(submission_id=raw_submission.id)
        assert found.id == raw_submission.id

    async def test_by_owner_returns_latest(self, service, submissions, raw_submission):
        newer = await submissions.create("42", "students/42/upload/b.mp4", "s3://b/b.mp4")
        docs = service._submissions._db.collections["video_submissions"]
        docs[raw_submission.id]["created_at"] = docs[newer.id]["created_at"].replace(year=2000)

        found = await service.find_submission(owner_id="42")

        assert found.id == newer.id

    async def test_id_takes_precedence_over_owner(self, service, raw_submission):
        found = await service.find_submission(submission_id=raw_submission.id, owner_id="other")
        assert found.id == raw_submission.id

    async def test_unknown_id(self, service):
        with pytest.raises(SubmissionNotFoundException):
            await service.find_submission(submission_id=99)

    async def test_unknown_owner(self, service):
        with pytest.raises(SubmissionNotFoundException):
            await service.find_submission(owner_id="nobody")

    async def test_requires_a_reference(self, service):
        with pytest.raises(ValueError):
            await service.find_submission()


class TestRenderPlaylist:
    """Tests for playlist rendering."""

    async def test_rewrites_segments(self, service, converted_submission):
        playlist = await service.render_playlist(converted_submission, PROXY)

        lines = playlist.split("\n")
        assert lines[:3] == ["#EXTM3U", "#EXT-X-TARGETDURATION:10", "#EXTINF:10.0,"]
        assert lines[3] == f"{PROXY}?key=hls%2F1%2Frun-a%2Fsegment_000.ts"
        assert lines[4] == "#EXT-X-ENDLIST"

    async def test_unconverted_submission(self, service, raw_submission):
        with pytest.raises(PlaylistNotAvailableException):
            await service.render_playlist(raw_submission, PROXY)

    async def test_missing_playlist_object(self, service, blob, converted_submission):
        del blob.objects[(BUCKET, PLAYLIST_KEY)]

        with pytest.raises(StorageObjectNotFoundException):
            await service.render_playlist(converted_submission, PROXY)


class TestOpenSegment:
    """Tests for the segment proxy."""

    async def test_streams_segment(self, service, converted_submission):
        segment = await service.open_segment("hls/1/run-a/segment_000.ts")

        assert segment.content_type == "video/mp2t"
        chunks = [chunk async for chunk in segment.chunks]
        assert chunks == [b"0123", b"4567", b"89"]

    async def test_stream_reads_current_object(self, service, blob, converted_submission):
        key = "hls/1/run-a/segment_000.ts"
        segment = await service.open_segment(key)
        blob.put(BUCKET, key, b"abcdef", "video/mp2t")

        chunks = [chunk async for chunk in segment.chunks]

        assert b"".join(chunks) == b"abcdef"

    async def test_sub_playlist_content_type(self, service, converted_submission):
        segment = await service.open_segment(PLAYLIST_KEY)
        assert segment.content_type == "application/vnd.apple.mpegurl"

    @pytest.mark.parametrize(
        "key",
        [
            "students/42/upload/a.mp4",
            "hls/../students/42/upload/a.mp4",
            "hlsx/1/segment.ts",
        ],
    )
    async def test_rejects_keys_outside_hls(self, service, key):
        with pytest.raises(InvalidSegmentKeyException):
            await service.open_segment(key)

    async def test_missing_segment(self, service):
        with pytest.raises(StorageObjectNotFoundException):
            await service.open_segment("hls/1/run-a/segment_999.ts")


class TestSignedUrl:
    """Tests for signed URL issuance."""

    async def test_raw_url(self, service, blob, raw_submission):
        response = await service.signed_url(raw_submission, AssetType.RAW, 600)

        assert response.storage_key == "students/42/upload/a.mp4"
        assert response.type == AssetType.RAW
        assert response.expires_in == 600
        assert blob.presigned[-1] == {
            "path": "students/42/upload/a.mp4",
            "method": "GET",
            "expiry": 600,
        }

    async def test_hls_url(self, service, converted_submission):
        response = await service.signed_url(converted_submission, AssetType.HLS, 3600)
        assert response.storage_key == PLAYLIST_KEY

    async def test_hls_before_conversion(self, service, raw_submission):
        with pytest.raises(PlaylistNotAvailableException):
            await service.signed_url(raw_submission, AssetType.HLS, 3600)

    async def test_raw_after_conversion(self, service, converted_submission):
        with pytest.raises(RawAssetMissingException):
            await service.signed_url(converted_submission, AssetType.RAW, 3600)
