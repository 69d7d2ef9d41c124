"""FastAPI authentication dependencies."""

from collections.abc import Awaitable, Callable

from fastapi import Depends, Header

from ecomlens_api.config import UserRole
from ecomlens_api.errors.exceptions import (
    InsufficientRoleError,
    InvalidSessionError,
    MissingCredentialsError,
)
from ecomlens_api.models.user import UserRecord
from ecomlens_api.services.session_service import SessionService, get_session_service


async def get_session_token(
    x_session_token: str | None = Header(default=None, alias="X-Session-Token"),
) -> str:
    """Extract session token from header."""
    if not x_session_token:
        raise MissingCredentialsError()
    return x_session_token


async def get_current_user(
    token: str = Depends(get_session_token),
    sessions: SessionService = Depends(get_session_service),
) -> UserRecord:
    """
    Get the current logged-in user.

    The record is re-read from storage with the daily reset applied.
    """
    user = await sessions.get_current(token)
    if user is None:
        raise InvalidSessionError()
    return user


def require_role(role: UserRole) -> Callable[..., Awaitable[UserRecord]]:
    """
    Create a dependency that requires a user role.

    Usage:
        @router.get("/users")
        async def list_users(user: UserRecord = Depends(require_role(UserRole.ADMIN))):
            ...
    """

    async def check_role(user: UserRecord = Depends(get_current_user)) -> UserRecord:
        if user.role != role:
            raise InsufficientRoleError(user.role, role)
        return user

    return check_role
