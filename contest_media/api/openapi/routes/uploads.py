"""Raw video upload endpoints."""

import io
from typing import Annotated, BinaryIO

from fastapi import APIRouter, File, Form, Query, UploadFile, status

from contest_media.api.dependencies import UploadServiceDep
from contest_media.api.middleware.error_handler import APIError
from contest_media.application.dtos.upload import (
    CompleteUploadRequest,
    CompleteUploadResponse,
    PresignedUploadRequest,
    PresignedUploadResponse,
    RawUploadResponse,
    UploadProgressResponse,
)

router = APIRouter()


def _measure(stream: BinaryIO) -> int:
    stream.seek(0, io.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


@router.post(
    "/video/upload",
    response_model=RawUploadResponse,
    summary="Upload a video",
    description=(
        "Stream a video file to object storage and create a submission. "
        "Poll /video/upload-progress with the same uploadId for byte progress."
    ),
)
async def upload_video(
    service: UploadServiceDep,
    video: Annotated[UploadFile, File(description="Video file")],
    owner_id: Annotated[str, Form(alias="ownerId", description="Uploading registrant")],
    upload_id: Annotated[
        str | None,
        Form(alias="uploadId", description="Client-chosen progress session ID"),
    ] = None,
) -> RawUploadResponse:
    """Upload a raw video through the server."""
    size = video.size if video.size is not None else _measure(video.file)
    return await service.upload_raw(
        stream=video.file,
        size=size,
        owner_id=owner_id,
        file_name=video.filename or "",
        content_type=video.content_type or "",
        upload_id=upload_id,
    )


@router.post(
    "/video/presigned-upload-url",
    response_model=PresignedUploadResponse,
    summary="Get a direct upload URL",
    description="Validate an upload and return a signed PUT URL for it.",
)
async def presigned_upload_url(
    request: PresignedUploadRequest,
    service: UploadServiceDep,
) -> PresignedUploadResponse:
    """Issue a presigned PUT URL."""
    return await service.create_presigned_upload(request)


@router.post(
    "/video/upload-complete",
    response_model=CompleteUploadResponse,
    summary="Confirm a direct upload",
    description="Create the submission for an object uploaded via a presigned URL.",
)
async def upload_complete(
    request: CompleteUploadRequest,
    service: UploadServiceDep,
) -> CompleteUploadResponse:
    """Register a directly uploaded video."""
    return await service.complete_direct_upload(request)


@router.get(
    "/video/upload-progress",
    response_model=UploadProgressResponse,
    summary="Upload progress",
    description="Get byte progress of an upload session.",
)
async def upload_progress(
    service: UploadServiceDep,
    upload_id: Annotated[str, Query(alias="uploadId", min_length=1)],
) -> UploadProgressResponse:
    """Report progress of an upload session."""
    progress = service.get_progress(upload_id)
    if progress is None:
        raise APIError(
            code="UPLOAD_PROGRESS_NOT_FOUND",
            message=f"No upload in progress for {upload_id}",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"upload_id": upload_id},
        )
    return progress
