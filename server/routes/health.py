"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from server.dependencies import get_active_platforms
from server.schemas.responses import HealthResponseDTO

router = APIRouter(tags=["Health"])

VERSION = "1.0.0"


@router.get("/health", response_model=HealthResponseDTO)
async def health_check(platforms: list[str] = Depends(get_active_platforms)):
    """Health check endpoint. Degraded while no review platform is configured."""
    return HealthResponseDTO(
        status="healthy" if platforms else "degraded",
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        version=VERSION,
        platforms=platforms,
    )
