"""System endpoints: health check."""

from fastapi import APIRouter

from stakesim.web.schemas import HealthResponse

router = APIRouter(tags=["system"])

VERSION = "0.1.0"


@router.get("/health", response_model=HealthResponse)
def health():
    """API health check."""
    return HealthResponse(status="ok", version=VERSION)
