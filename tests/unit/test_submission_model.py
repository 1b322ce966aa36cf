"""Unit tests for the Submission model."""

import pytest
from pydantic import ValidationError

from contest_media.domain.models import (
    ProcessingStatus,
    ResolutionLabel,
    Submission,
)


class TestEnums:
    """Tests for submission enums."""

    def test_values(self):
        assert ResolutionLabel.RAW.value == "raw"
        assert ResolutionLabel.HLS.value == "hls"
        assert ProcessingStatus.COMPLETED.value == "completed"
        assert ProcessingStatus.FAILED.value == "failed"


class TestSubmission:
    """Tests for Submission model."""

    @pytest.fixture
    def raw_submission(self) -> Submission:
        """Create a freshly uploaded submission."""
        return Submission(
            id=7,
            owner_id="42",
            raw_asset_key="students/42/upload/abc.mp4",
            raw_asset_location="s3://contest-videos/students/42/upload/abc.mp4",
        )

    def test_defaults_for_raw_upload(self, raw_submission):
        assert raw_submission.resolution_label == ResolutionLabel.RAW
        assert raw_submission.processing_status == ProcessingStatus.COMPLETED
        assert raw_submission.processing_error is None
        assert raw_submission.is_converted is False
        assert raw_submission.playable_key == "students/42/upload/abc.mp4"

    def test_requires_exactly_one_asset(self):
        with pytest.raises(ValidationError):
            Submission(id=1, owner_id="42")

        with pytest.raises(ValidationError):
            Submission(
                id=1,
                owner_id="42",
                raw_asset_key="a.mp4",
                playlist_asset_key="hls/1/x/master.m3u8",
                resolution_label=ResolutionLabel.HLS,
            )

    def test_label_must_match_asset(self):
        with pytest.raises(ValidationError):
            Submission(
                id=1,
                owner_id="42",
                raw_asset_key="a.mp4",
                resolution_label=ResolutionLabel.HLS,
            )

    def test_id_must_be_positive(self):
        with pytest.raises(ValidationError):
            Submission(id=0, owner_id="42", raw_asset_key="a.mp4")

    def test_with_playlist_swaps_assets(self, raw_submission):
        converted = raw_submission.with_playlist(
            "hls/7/run/master.m3u8", "s3://contest-videos/hls/7/run/master.m3u8"
        )

        assert converted.is_converted is True
        assert converted.raw_asset_key is None
        assert converted.raw_asset_location is None
        assert converted.playlist_asset_key == "hls/7/run/master.m3u8"
        assert converted.resolution_label == ResolutionLabel.HLS
        assert converted.updated_at >= raw_submission.updated_at
        # Original instance untouched
        assert raw_submission.raw_asset_key == "students/42/upload/abc.mp4"

    def test_hls_update_fields(self, raw_submission):
        converted = raw_submission.with_playlist("hls/7/run/master.m3u8", "s3://b/k")

        fields = converted.hls_update_fields()

        assert fields["playlist_asset_key"] == "hls/7/run/master.m3u8"
        assert fields["raw_asset_key"] is None
        assert fields["resolution_label"] == "hls"
        assert fields["processing_status"] == "completed"
        assert "id" not in fields
        assert "owner_id" not in fields

    def test_roundtrip_from_document(self, raw_submission):
        doc = raw_submission.model_dump()
        doc["resolution_label"] = "raw"

        restored = Submission.model_validate(doc)

        assert restored == raw_submission
