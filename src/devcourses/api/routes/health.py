"""Health check endpoint."""

from datetime import UTC, datetime

from fastapi import APIRouter

from devcourses.api.models import APIResponse, HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=APIResponse[HealthResponse])
def health() -> APIResponse[HealthResponse]:
    """Report that the service is up."""
    return APIResponse(data=HealthResponse(status="ok", timestamp=datetime.now(UTC)))
