"""Health check endpoint for liveness probes."""

from fastapi import APIRouter, status
from pydantic import BaseModel

router = APIRouter()


class HealthResponse(BaseModel):  # type: ignore[misc]
    """Response model for health check endpoint."""

    status: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check endpoint",
    tags=["health"],
)
async def health_check() -> HealthResponse:
    """
    Report that the process is up and serving requests.

    The relay keeps no external dependencies, so liveness is the only
    signal.

    Returns:
        HealthResponse: Always `{"status": "ok"}`.
    """
    return HealthResponse(status="ok")
