"""API routes module."""

from ecomlens_api.routes.admin import router as admin_router
from ecomlens_api.routes.auth import router as auth_router
from ecomlens_api.routes.health import router as health_router
from ecomlens_api.routes.studio import router as studio_router

__all__ = [
    "admin_router",
    "auth_router",
    "health_router",
    "studio_router",
]
