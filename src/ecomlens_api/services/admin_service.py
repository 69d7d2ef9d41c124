"""Admin operations on user limits."""

import logging

from ecomlens_api.errors.exceptions import UserNotFoundError
from ecomlens_api.models.user import UserRecord
from ecomlens_api.storage.memory import StorageManager, get_storage

logger = logging.getLogger(__name__)


class AdminService:
    """Service for listing users and changing their daily limits."""

    def __init__(self, storage: StorageManager | None = None):
        self._storage = storage

    @property
    def storage(self) -> StorageManager:
        """Get storage manager."""
        if self._storage is None:
            self._storage = get_storage()
        return self._storage

    async def list_all_users(self) -> list[UserRecord]:
        """All users in storage order."""
        return await self.storage.users.list()

    async def set_limit(self, user_id: str, new_limit: int) -> UserRecord:
        """
        Replace a user's daily limit. Negative values are stored as 0.

        Raises:
            UserNotFoundError: If no user has this ID
        """
        limit = max(0, new_limit)
        user = await self.storage.users.update(
            user_id, lambda u: u.model_copy(update={"usage_limit": limit})
        )
        if user is None:
            raise UserNotFoundError(user_id=user_id)

        logger.info("Set daily limit of user %s to %d", user_id, limit)
        return user

    async def adjust_limit(self, user_id: str, delta: int) -> UserRecord:
        """
        Add ``delta`` to a user's stored limit, never going below 0.

        Raises:
            UserNotFoundError: If no user has this ID
        """
        user = await self.storage.users.update(
            user_id,
            lambda u: u.model_copy(update={"usage_limit": max(0, u.usage_limit + delta)}),
        )
        if user is None:
            raise UserNotFoundError(user_id=user_id)

        logger.info("Adjusted daily limit of user %s by %+d to %d", user_id, delta, user.usage_limit)
        return user


# Singleton instance
_admin_service: AdminService | None = None


def get_admin_service() -> AdminService:
    """Get admin service instance."""
    global _admin_service
    if _admin_service is None:
        _admin_service = AdminService()
    return _admin_service


def reset_admin_service() -> None:
    """Reset admin service (for testing)."""
    global _admin_service
    _admin_service = None
