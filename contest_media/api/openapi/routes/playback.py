"""Playback endpoints: playlist proxy, segment proxy, signed URLs."""

from typing import Annotated

from fastapi import APIRouter, Query, Request, Response, status
from fastapi.responses import StreamingResponse

from contest_media.api.dependencies import PlaybackServiceDep, SettingsDep
from contest_media.api.middleware.error_handler import APIError
from contest_media.application.dtos.playback import (
    AssetType,
    SignedUrlResponse,
    SubmissionResponse,
)
from contest_media.application.services.playback import PlaybackService
from contest_media.commons.settings.models import Settings
from contest_media.domain.models import Submission

router = APIRouter()

PLAYLIST_MEDIA_TYPE = "application/vnd.apple.mpegurl"

_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, HEAD, OPTIONS",
    "Access-Control-Allow-Headers": "*",
}

SubmissionIdQuery = Annotated[int | None, Query(alias="submissionId", ge=1)]
OwnerIdQuery = Annotated[str | None, Query(alias="ownerId", min_length=1)]


async def _resolve(
    service: PlaybackService,
    submission_id: int | None,
    owner_id: str | None,
) -> Submission:
    if submission_id is None and not owner_id:
        raise APIError(
            code="MISSING_PARAMETER",
            message="submissionId or ownerId is required",
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    return await service.find_submission(submission_id=submission_id, owner_id=owner_id)


def _segment_proxy_url(request: Request, settings: Settings) -> str:
    base = settings.server.public_base_url or str(request.base_url)
    return f"{base.rstrip('/')}{settings.server.api_prefix}/video/segment-proxy"


@router.get(
    "/video/hls-proxy",
    summary="HLS playlist",
    description=(
        "Serve a submission's master playlist with every media reference "
        "rewritten to the segment proxy."
    ),
    response_class=Response,
    responses={200: {"content": {PLAYLIST_MEDIA_TYPE: {}}}},
)
async def hls_proxy(
    request: Request,
    service: PlaybackServiceDep,
    settings: SettingsDep,
    submission_id: SubmissionIdQuery = None,
    owner_id: OwnerIdQuery = None,
) -> Response:
    """Serve a rewritten HLS playlist."""
    submission = await _resolve(service, submission_id, owner_id)
    playlist = await service.render_playlist(
        submission, _segment_proxy_url(request, settings)
    )
    return Response(
        content=playlist,
        media_type=PLAYLIST_MEDIA_TYPE,
        headers={
            "Cache-Control": settings.playback.playlist_cache_control,
            "Access-Control-Allow-Origin": "*",
        },
    )


@router.get(
    "/video/segment-proxy",
    summary="HLS segment",
    description="Stream an HLS segment or sub-playlist from object storage.",
    response_class=StreamingResponse,
)
async def segment_proxy(
    service: PlaybackServiceDep,
    settings: SettingsDep,
    key: Annotated[str, Query(min_length=1, description="Object key")],
) -> StreamingResponse:
    """Stream one HLS object."""
    segment = await service.open_segment(key)
    return StreamingResponse(
        segment.chunks,
        media_type=segment.content_type,
        headers={
            "Cache-Control": settings.playback.segment_cache_control,
            **_CORS_HEADERS,
        },
    )


@router.get(
    "/video/signed-url",
    response_model=SignedUrlResponse,
    summary="Signed URL",
    description="Issue a time-limited URL for a submission's raw video or HLS playlist.",
)
async def signed_url(
    service: PlaybackServiceDep,
    settings: SettingsDep,
    submission_id: SubmissionIdQuery = None,
    owner_id: OwnerIdQuery = None,
    asset_type: Annotated[
        str,
        Query(alias="type", pattern="^(raw|original|hls)$"),
    ] = "raw",
    expires_in: Annotated[
        int | None,
        Query(alias="expiresIn", ge=60, description="Validity in seconds"),
    ] = None,
) -> SignedUrlResponse:
    """Issue a signed GET URL."""
    playback = settings.playback
    expiry = expires_in or playback.signed_url_default_expiry_seconds
    if expiry > playback.signed_url_max_expiry_seconds:
        raise APIError(
            code="INVALID_EXPIRY",
            message=(
                f"expiresIn must not exceed {playback.signed_url_max_expiry_seconds} seconds"
            ),
            details={"expires_in": expiry},
        )

    submission = await _resolve(service, submission_id, owner_id)
    return await service.signed_url(submission, AssetType(asset_type), expiry)


@router.get(
    "/video/status",
    response_model=SubmissionResponse,
    summary="Submission status",
    description="Get a submission by ID, or the latest submission of an owner.",
)
async def submission_status(
    service: PlaybackServiceDep,
    submission_id: SubmissionIdQuery = None,
    owner_id: OwnerIdQuery = None,
) -> SubmissionResponse:
    """Get a submission record."""
    submission = await _resolve(service, submission_id, owner_id)
    return SubmissionResponse.from_submission(submission)
