"""Email-only signup and login.

Passwords are required by the request models but never checked; an account
is identified by its email alone.
"""

import logging
import uuid
from collections.abc import Callable
from datetime import date

from ecomlens_api.config import UserRole, get_settings
from ecomlens_api.errors.exceptions import UserNotFoundError
from ecomlens_api.models.responses import SessionResponse, UserResponse
from ecomlens_api.models.user import UserRecord
from ecomlens_api.services.session_service import SessionService, get_session_service
from ecomlens_api.services.studio_service import StudioService, get_studio_service
from ecomlens_api.storage.memory import StorageManager, get_storage

logger = logging.getLogger(__name__)


class AuthService:
    """Creates accounts and opens and closes sessions."""

    def __init__(
        self,
        storage: StorageManager | None = None,
        sessions: SessionService | None = None,
        studio: StudioService | None = None,
        today: Callable[[], date] | None = None,
    ):
        self._storage = storage
        self._sessions = sessions
        self._studio = studio
        self._today = today or date.today
        self._default_usage_limit = get_settings().default_usage_limit

    @property
    def storage(self) -> StorageManager:
        """Get storage manager."""
        if self._storage is None:
            self._storage = get_storage()
        return self._storage

    @property
    def sessions(self) -> SessionService:
        """Get session service."""
        if self._sessions is None:
            self._sessions = get_session_service()
        return self._sessions

    @property
    def studio(self) -> StudioService:
        """Get studio service."""
        if self._studio is None:
            self._studio = get_studio_service()
        return self._studio

    async def _open_session(self, user: UserRecord) -> SessionResponse:
        token = self.sessions.new_token()
        await self.sessions.set_current(token, user.id)
        return SessionResponse(session_token=token, user=UserResponse.from_record(user))

    async def signup(self, email: str) -> SessionResponse:
        """
        Create a standard user and log them in.

        Raises:
            DuplicateUserError: If the email is already registered
        """
        user = UserRecord(
            id=str(uuid.uuid4()),
            email=email.lower(),
            role=UserRole.STANDARD,
            usage_count=0,
            usage_limit=self._default_usage_limit,
            last_reset_date=self._today(),
        )
        await self.storage.users.create(user)
        return await self._open_session(user)

    async def login(self, email: str) -> SessionResponse:
        """
        Log in an existing user, applying the daily reset.

        Raises:
            UserNotFoundError: If no user has this email
        """
        found = await self.storage.users.find_by_email(email)
        if found is None:
            raise UserNotFoundError("User not found. Please sign up.", email=email.lower())

        user = await self.storage.users.reset_usage_if_stale(found.id, self._today()) or found
        logger.info("User %s logged in", user.id)
        return await self._open_session(user)

    async def logout(self, token: str) -> None:
        """End a session and drop its studio workspace."""
        await self.sessions.clear_current(token)
        self.studio.discard(token)


# Global instance
_auth_service: AuthService | None = None


def get_auth_service() -> AuthService:
    """Get the auth service instance."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service


def reset_auth_service() -> None:
    """Reset the auth service (for testing)."""
    global _auth_service
    _auth_service = None
