"""User repository over a single versioned blob."""

import logging
from collections.abc import Callable
from datetime import date

from ecomlens_api.config import UserRole, get_settings
from ecomlens_api.errors.exceptions import DuplicateUserError, StoreDecodeError
from ecomlens_api.models.user import UserRecord
from ecomlens_api.storage.memory import BlobStore
from ecomlens_api.storage.schema import SCHEMA_VERSION, decode_users, encode_users

logger = logging.getLogger(__name__)

ADMIN_USER_ID = "admin-1"

RecordUpdate = Callable[[UserRecord], UserRecord | None]


class UserRepository:
    """
    All user records, stored together as one blob.

    Every mutation is a read-modify-write of the whole blob through
    ``BlobStore.update``, so concurrent increments or signups never lose
    each other's writes.
    """

    def __init__(
        self,
        blobs: BlobStore,
        key: str | None = None,
        strict: bool | None = None,
        today: Callable[[], date] | None = None,
    ):
        settings = get_settings()
        self._blobs = blobs
        self._key = key or settings.users_storage_key
        self._strict = settings.strict_store_decoding if strict is None else strict
        self._today = today or date.today
        self._admin_email = settings.admin_email
        self._admin_usage_limit = settings.admin_usage_limit

    def _decode(self, raw: str | None) -> tuple[list[UserRecord], int]:
        try:
            return decode_users(self._key, raw)
        except StoreDecodeError as e:
            if self._strict:
                raise
            logger.warning("Treating malformed user store as empty: %s", e.message)
            return [], SCHEMA_VERSION

    async def list(self) -> list[UserRecord]:
        """All users in storage insertion order."""
        users, _ = self._decode(await self._blobs.get(self._key))
        return users

    async def get(self, user_id: str) -> UserRecord | None:
        """Get a user by ID."""
        for user in await self.list():
            if user.id == user_id:
                return user
        return None

    async def find_by_email(self, email: str) -> UserRecord | None:
        """Find a user by email, ignoring case. First match wins."""
        needle = email.lower()
        for user in await self.list():
            if user.email.lower() == needle:
                return user
        return None

    async def create(self, record: UserRecord) -> UserRecord:
        """
        Append a new user.

        Raises:
            DuplicateUserError: If a user with the same email already exists
        """
        needle = record.email.lower()

        def apply(raw: str | None) -> str:
            users, _ = self._decode(raw)
            if any(user.email.lower() == needle for user in users):
                raise DuplicateUserError(record.email)
            return encode_users([*users, record])

        await self._blobs.update(self._key, apply)
        logger.info("Created %s user %s (%s)", record.role.value, record.id, record.email)
        return record

    async def update(self, user_id: str, fn: RecordUpdate) -> UserRecord | None:
        """
        Atomically apply ``fn`` to one user record.

        ``fn`` returns the replacement record, or None to leave it unchanged.

        Returns:
            The stored record after the update, or None if no user has this ID
        """
        result: UserRecord | None = None

        def apply(raw: str | None) -> str | None:
            nonlocal result
            result = None
            users, _ = self._decode(raw)
            for index, user in enumerate(users):
                if user.id != user_id:
                    continue
                changed = fn(user)
                if changed is None:
                    result = user
                    return None
                users[index] = result = changed
                return encode_users(users)
            return None

        await self._blobs.update(self._key, apply)
        return result

    async def upsert(self, record: UserRecord) -> UserRecord | None:
        """Replace the record with the same ID. No-op if it doesn't exist."""
        return await self.update(record.id, lambda _: record)

    async def increment_usage(self, user_id: str, amount: int = 1) -> UserRecord | None:
        """Atomically add to a user's usage count. Not clamped to the limit."""
        return await self.update(
            user_id,
            lambda user: user.model_copy(update={"usage_count": user.usage_count + amount}),
        )

    async def reset_usage_if_stale(
        self, user_id: str, today: date | None = None
    ) -> UserRecord | None:
        """Zero the usage count if it was last reset on a different day."""
        today = today or self._today()

        def reset(user: UserRecord) -> UserRecord | None:
            if user.last_reset_date == today:
                return None
            logger.info("Daily usage reset for user %s", user.id)
            return user.model_copy(update={"usage_count": 0, "last_reset_date": today})

        return await self.update(user_id, reset)

    async def seed_if_empty(self) -> UserRecord | None:
        """
        Create the admin user if the store has no users.

        Also rewrites a legacy store in the current schema version.

        Returns:
            The seeded admin, or None if users already existed
        """
        seeded: UserRecord | None = None
        migrated = False

        def apply(raw: str | None) -> str | None:
            nonlocal seeded, migrated
            seeded, migrated = None, False
            users, version = self._decode(raw)
            if users:
                migrated = version != SCHEMA_VERSION
                return encode_users(users) if migrated else None
            seeded = UserRecord(
                id=ADMIN_USER_ID,
                email=self._admin_email.lower(),
                role=UserRole.ADMIN,
                usage_count=0,
                usage_limit=self._admin_usage_limit,
                last_reset_date=self._today(),
            )
            return encode_users([seeded])

        await self._blobs.update(self._key, apply)

        if migrated:
            logger.info("Migrated user store %s to schema version %d", self._key, SCHEMA_VERSION)
        if seeded:
            logger.info("Seeded admin user %s", seeded.email)
        return seeded
