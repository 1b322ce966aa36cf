"""HLS conversion endpoints."""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Path, Query, Response, status

from contest_media.api.dependencies import ConversionServiceDep
from contest_media.application.dtos.conversion import (
    ConversionAccepted,
    ConversionResponse,
    ConversionStatusResponse,
)

router = APIRouter()


@router.post(
    "/admin/submissions/{submission_id}/convert-hls",
    response_model=ConversionResponse | ConversionAccepted,
    summary="Convert to HLS",
    description=(
        "Transcode a submission's raw video to HLS. With background=true the "
        "request returns 202 once the conversion is claimed; poll the status "
        "endpoint for progress."
    ),
    responses={status.HTTP_202_ACCEPTED: {"model": ConversionAccepted}},
)
async def convert_to_hls(
    submission_id: Annotated[int, Path(ge=1)],
    service: ConversionServiceDep,
    background_tasks: BackgroundTasks,
    response: Response,
    background: Annotated[bool, Query(description="Run after responding")] = False,
) -> ConversionResponse | ConversionAccepted:
    """Convert a submission to HLS."""
    if background:
        submission = await service.begin(submission_id)
        background_tasks.add_task(service.run_detached, submission)
        response.status_code = status.HTTP_202_ACCEPTED
        return ConversionAccepted(submission_id=submission_id)

    return await service.convert_to_hls(submission_id)


@router.get(
    "/admin/submissions/{submission_id}/convert-hls/status",
    response_model=ConversionStatusResponse,
    summary="Conversion status",
    description="Get live conversion progress, or the settled state of the submission.",
)
async def conversion_status(
    submission_id: Annotated[int, Path(ge=1)],
    service: ConversionServiceDep,
) -> ConversionStatusResponse:
    """Report conversion progress."""
    return await service.get_status(submission_id)
