"""
Health check endpoints.

Provides liveness and readiness probes. Readiness checks that the artifact
directory exists.
"""

from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from rarityforge.api.deps import get_output_dir

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    artifacts: str | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness probe.

    Returns healthy if the service is running.
    Does not check dependencies.
    """
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    output_dir: Annotated[Path, Depends(get_output_dir)],
) -> HealthResponse:
    """
    Readiness probe.

    Returns 503 if the artifact directory is missing.
    """
    if output_dir.is_dir():
        return HealthResponse(status="ready", artifacts="available")
    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return HealthResponse(status="not ready", artifacts="missing")
