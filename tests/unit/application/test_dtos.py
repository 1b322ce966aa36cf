"""Unit tests for Application DTOs."""

import pytest
from pydantic import ValidationError

from contest_media.application.dtos import (
    AssetType,
    ConversionAccepted,
    ConversionResponse,
    ConversionStatusResponse,
    ConversionStatusState,
    PresignedUploadRequest,
    RawUploadResponse,
    SubmissionResponse,
    UploadProgressResponse,
)
from contest_media.domain.models import Submission, UploadProgress, UploadState


class TestCamelCaseSerialization:
    """Tests for the camelCase wire format."""

    def test_raw_upload_response_by_alias(self):
        response = RawUploadResponse(
            submission_id=1,
            storage_key="students/42/upload/a.mp4",
            storage_url="s3://contest-videos/students/42/upload/a.mp4",
            upload_id="u-1",
        )

        data = response.model_dump(by_alias=True, mode="json")

        assert data == {
            "submissionId": 1,
            "storageKey": "students/42/upload/a.mp4",
            "storageUrl": "s3://contest-videos/students/42/upload/a.mp4",
            "status": "completed",
            "uploadId": "u-1",
        }

    def test_request_accepts_camel_and_snake_case(self):
        camel = PresignedUploadRequest.model_validate(
            {"ownerId": "42", "fileName": "a.mp4", "fileType": "video/mp4", "fileSize": 10}
        )
        snake = PresignedUploadRequest(owner_id="42", file_name="a.mp4", file_size=10)

        assert camel.owner_id == snake.owner_id == "42"
        assert snake.file_type == ""

    def test_presigned_request_rejects_negative_size(self):
        with pytest.raises(ValidationError):
            PresignedUploadRequest(owner_id="42", file_name="a.mp4", file_size=-1)


class TestConversionDtos:
    """Tests for conversion DTOs."""

    def test_conversion_response(self):
        response = ConversionResponse(
            message="Video converted to HLS successfully",
            hls_master_playlist_key="hls/1/x/master.m3u8",
            uploaded_files=4,
        )
        data = response.model_dump(by_alias=True)
        assert data["success"] is True
        assert data["hlsMasterPlaylistKey"] == "hls/1/x/master.m3u8"
        assert data["uploadedFiles"] == 4

    def test_accepted_defaults(self):
        accepted = ConversionAccepted(submission_id=3)
        assert accepted.status == "processing"

    def test_status_includes_idle(self):
        status = ConversionStatusResponse(status=ConversionStatusState.IDLE, progress=0)
        assert status.model_dump(mode="json")["status"] == "idle"


class TestPlaybackDtos:
    """Tests for playback DTOs."""

    def test_asset_type_accepts_original_alias(self):
        assert AssetType("original") is AssetType.RAW
        assert AssetType("hls") is AssetType.HLS

    def test_asset_type_rejects_unknown(self):
        with pytest.raises(ValueError):
            AssetType("dash")

    def test_submission_response_from_submission(self):
        submission = Submission(id=5, owner_id="42", raw_asset_key="a.mp4")

        data = SubmissionResponse.from_submission(submission).model_dump(
            by_alias=True, mode="json"
        )

        assert data["id"] == 5
        assert data["ownerId"] == "42"
        assert data["rawAssetKey"] == "a.mp4"
        assert data["resolutionLabel"] == "raw"
        assert data["processingStatus"] == "completed"


class TestUploadProgressResponse:
    """Tests for UploadProgressResponse."""

    def test_from_progress(self):
        progress = UploadProgress(
            uploaded=1024 * 1024,
            total=4 * 1024 * 1024,
            percentage=25,
            status=UploadState.UPLOADING,
        )

        response = UploadProgressResponse.from_progress("u-1", progress)

        assert response.upload_id == "u-1"
        assert response.percentage == 25
        assert response.uploaded_mb == 1.0
        assert response.total_mb == 4.0
