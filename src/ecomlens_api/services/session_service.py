"""Session service mapping session tokens to users."""

import logging
import secrets
from collections.abc import Callable
from datetime import date

from ecomlens_api.config import get_settings
from ecomlens_api.errors.exceptions import StoreDecodeError
from ecomlens_api.models.user import UserRecord
from ecomlens_api.storage.memory import StorageManager, get_storage
from ecomlens_api.storage.schema import decode_session, encode_session

logger = logging.getLogger(__name__)


class SessionService:
    """
    Holds the "current user" for each session token.

    A session stores only the user ID. Every read goes back to the user
    repository, so the session view and the stored record never diverge.
    """

    def __init__(
        self,
        storage: StorageManager | None = None,
        today: Callable[[], date] | None = None,
        strict: bool | None = None,
    ):
        settings = get_settings()
        self._storage = storage
        self._today = today or date.today
        self._strict = settings.strict_store_decoding if strict is None else strict
        self._key_prefix = settings.session_storage_key

    @property
    def storage(self) -> StorageManager:
        """Get storage manager."""
        if self._storage is None:
            self._storage = get_storage()
        return self._storage

    def _key(self, token: str) -> str:
        return f"{self._key_prefix}:{token}"

    @staticmethod
    def new_token() -> str:
        """Issue an opaque session token."""
        return secrets.token_urlsafe(32)

    async def get_current(self, token: str) -> UserRecord | None:
        """
        Get the user a session points at, with the daily reset applied.

        A session pointing at a user that no longer exists is cleared. So is a
        malformed session blob, unless decoding is strict.

        Raises:
            StoreDecodeError: If the session blob is malformed and decoding is strict
        """
        key = self._key(token)
        try:
            user_id = decode_session(key, await self.storage.blobs.get(key))
        except StoreDecodeError as e:
            if self._strict:
                raise
            logger.warning("Clearing malformed session %s: %s", key, e.details["reason"])
            await self.storage.blobs.delete(key)
            return None
        if user_id is None:
            return None

        user = await self.storage.users.reset_usage_if_stale(user_id, self._today())
        if user is None:
            logger.warning("Session points at missing user %s, clearing it", user_id)
            await self.storage.blobs.delete(key)
        return user

    async def set_current(self, token: str, user_id: str) -> None:
        """Point a session at a user, replacing any previous pointer."""
        await self.storage.blobs.set(self._key(token), encode_session(user_id))

    async def clear_current(self, token: str) -> None:
        """End a session. The user record is untouched."""
        await self.storage.blobs.delete(self._key(token))


# Singleton instance
_session_service: SessionService | None = None


def get_session_service() -> SessionService:
    """Get session service instance."""
    global _session_service
    if _session_service is None:
        _session_service = SessionService()
    return _session_service


def reset_session_service() -> None:
    """Reset session service (for testing)."""
    global _session_service
    _session_service = None
