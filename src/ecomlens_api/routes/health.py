"""Health check endpoint."""

from fastapi import APIRouter

from ecomlens_api import __version__
from ecomlens_api.config import get_settings
from ecomlens_api.models.responses import HealthResponse
from ecomlens_api.services.studio_service import get_studio_service
from ecomlens_api.storage.memory import get_storage

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Check the health status of the API and its storage.",
)
async def health_check() -> HealthResponse:
    """
    Health check endpoint.

    Reports the active blob store, whether a Gemini API key is set and how
    many studio workspaces are held in memory.
    """
    settings = get_settings()
    components = {
        "api": {"status": "up", "latency_ms": 0},
        "storage": await get_storage().blobs.health_check(),
        "model": {
            "status": "up" if settings.gemini_api_key else "unconfigured",
            "name": settings.gemini_model,
        },
        "studio": {"status": "up", "workspaces": get_studio_service().active_workspaces},
    }

    status = "healthy" if components["storage"].get("status") == "up" else "degraded"

    return HealthResponse(
        status=status,
        version=__version__,
        components=components,
    )


@router.get(
    "/",
    summary="Root",
    description="API root endpoint with basic info.",
)
async def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {
        "name": "EcomLens API",
        "version": __version__,
        "documentation": "/docs",
        "health": "/health",
    }
