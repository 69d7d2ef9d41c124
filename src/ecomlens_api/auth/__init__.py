"""Authentication module."""

from ecomlens_api.auth.auth_service import AuthService, get_auth_service
from ecomlens_api.auth.dependencies import get_current_user, get_session_token, require_role

__all__ = ["AuthService", "get_auth_service", "get_current_user", "get_session_token", "require_role"]
