"""Daily generation quota."""

import logging

from ecomlens_api.errors.exceptions import QuotaExceededError, UserNotFoundError
from ecomlens_api.models.user import UserRecord
from ecomlens_api.storage.memory import StorageManager, get_storage

logger = logging.getLogger(__name__)


def is_allowed(user: UserRecord) -> bool:
    """True while the user has generations left today."""
    return user.usage_count < user.usage_limit


class QuotaService:
    """Service for checking and charging daily usage."""

    def __init__(self, storage: StorageManager | None = None):
        self._storage = storage

    @property
    def storage(self) -> StorageManager:
        """Get storage manager."""
        if self._storage is None:
            self._storage = get_storage()
        return self._storage

    def check(self, user: UserRecord) -> None:
        """
        Raise if the user may not generate.

        Raises:
            QuotaExceededError: If usage_count >= usage_limit
        """
        if not is_allowed(user):
            logger.info(
                "User %s blocked at %d/%d generations",
                user.id,
                user.usage_count,
                user.usage_limit,
            )
            raise QuotaExceededError(limit=user.usage_limit, used=user.usage_count)

    async def increment(self, user_id: str) -> UserRecord:
        """
        Charge one generation to a user.

        Raises:
            UserNotFoundError: If the user no longer exists
        """
        user = await self.storage.users.increment_usage(user_id)
        if user is None:
            raise UserNotFoundError(user_id=user_id)
        logger.info("User %s usage now %d/%d", user.id, user.usage_count, user.usage_limit)
        return user


# Singleton instance
_quota_service: QuotaService | None = None


def get_quota_service() -> QuotaService:
    """Get quota service instance."""
    global _quota_service
    if _quota_service is None:
        _quota_service = QuotaService()
    return _quota_service


def reset_quota_service() -> None:
    """Reset quota service (for testing)."""
    global _quota_service
    _quota_service = None
