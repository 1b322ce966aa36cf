"""Health check endpoints."""

import shutil
from enum import Enum

from fastapi import APIRouter
from pydantic import BaseModel, Field

from contest_media.api.dependencies import FactoryDep, SettingsDep
from contest_media.commons.settings.models import Settings
from contest_media.infrastructure.factory import InfrastructureFactory

router = APIRouter()


class HealthStatus(str, Enum):
    """Health check status."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ComponentHealth(BaseModel):
    """Health status of a single component."""

    name: str = Field(description="Component name")
    status: HealthStatus = Field(description="Component health status")
    message: str | None = Field(default=None, description="Additional details")
    latency_ms: float | None = Field(default=None, description="Probe latency")


class HealthResponse(BaseModel):
    """Health check response."""

    status: HealthStatus = Field(description="Overall health status")
    version: str = Field(description="Application version")
    environment: str = Field(description="Deployment environment")
    components: list[ComponentHealth] = Field(
        default_factory=list,
        description="Individual component health",
    )


class LivenessResponse(BaseModel):
    """Simple liveness response."""

    status: str = Field(default="ok")


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    ready: bool = Field(description="Whether the service is ready to accept requests")
    checks: dict[str, bool] = Field(
        default_factory=dict,
        description="Individual readiness checks",
    )


async def _probe(name: str, factory: InfrastructureFactory) -> ComponentHealth:
    try:
        if name == "blob_storage":
            result = await factory.get_blob_storage().health_check()
        else:
            result = await factory.get_document_db().health_check()
    except Exception as e:
        return ComponentHealth(name=name, status=HealthStatus.UNHEALTHY, message=str(e))

    return ComponentHealth(
        name=name,
        status=HealthStatus.HEALTHY if result.healthy else HealthStatus.UNHEALTHY,
        message=result.message,
        latency_ms=round(result.latency_ms, 2),
    )


def _transcoder_health(settings: Settings) -> ComponentHealth:
    ffmpeg = settings.transcoding.ffmpeg_path
    if shutil.which(ffmpeg):
        return ComponentHealth(name="transcoder", status=HealthStatus.HEALTHY)
    return ComponentHealth(
        name="transcoder",
        status=HealthStatus.UNHEALTHY,
        message=f"{ffmpeg} not found",
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Get overall health status of the service and its components.",
)
async def health_check(
    settings: SettingsDep,
    factory: FactoryDep,
) -> HealthResponse:
    """Check health of all service components."""
    components = [
        await _probe("blob_storage", factory),
        await _probe("document_db", factory),
        _transcoder_health(settings),
    ]

    unhealthy_count = sum(1 for c in components if c.status == HealthStatus.UNHEALTHY)
    if unhealthy_count == 0:
        overall_status = HealthStatus.HEALTHY
    elif unhealthy_count == 1:
        overall_status = HealthStatus.DEGRADED
    else:
        overall_status = HealthStatus.UNHEALTHY

    return HealthResponse(
        status=overall_status,
        version=settings.app.version,
        environment=settings.app.environment,
        components=components,
    )


@router.get(
    "/health/live",
    response_model=LivenessResponse,
    summary="Liveness probe",
    description="Simple liveness check for Kubernetes probes.",
)
async def liveness() -> LivenessResponse:
    """Simple liveness check - just verifies the app is running."""
    return LivenessResponse(status="ok")


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    description="Readiness check for Kubernetes probes.",
)
async def readiness(
    factory: FactoryDep,
) -> ReadinessResponse:
    """Check if service is ready to accept requests.

    Verifies the object store and document database respond.
    """
    checks = {
        name: (await _probe(name, factory)).status == HealthStatus.HEALTHY
        for name in ("blob_storage", "document_db")
    }
    return ReadinessResponse(ready=all(checks.values()), checks=checks)
