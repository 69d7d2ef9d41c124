"""Services module."""

from ecomlens_api.services.admin_service import AdminService
from ecomlens_api.services.generation_client import GenerationClient
from ecomlens_api.services.quota_service import QuotaService, is_allowed
from ecomlens_api.services.session_service import SessionService
from ecomlens_api.services.studio_service import StudioService, StudioWorkspace

__all__ = [
    "AdminService",
    "GenerationClient",
    "QuotaService",
    "SessionService",
    "StudioService",
    "StudioWorkspace",
    "is_allowed",
]
