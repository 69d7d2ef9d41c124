"""In-memory blob storage and the storage manager."""

import asyncio
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Optional, Protocol

if TYPE_CHECKING:
    from ecomlens_api.storage.user_repository import UserRepository

BlobUpdate = Callable[[str | None], str | None]


class BlobStore(Protocol):
    """Named string blobs with an atomic read-modify-write."""

    backend: str

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def delete(self, key: str) -> bool: ...

    async def update(self, key: str, fn: BlobUpdate) -> str | None:
        """
        Atomically replace a blob with ``fn(current)``.

        ``fn`` may be called more than once and must be free of side effects
        other than capturing its latest result. Returning None (or the current
        value) leaves the blob untouched.

        Returns:
            The blob value after the update
        """
        ...

    async def health_check(self) -> dict[str, Any]: ...


class InMemoryBlobStore:
    """Blob store backed by a dictionary, for development and tests."""

    backend = "memory"

    def __init__(self) -> None:
        self._blobs: dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> str | None:
        """Get a blob by key."""
        return self._blobs.get(key)

    async def set(self, key: str, value: str) -> None:
        """Store a blob, replacing any previous value."""
        async with self._lock:
            self._blobs[key] = value

    async def delete(self, key: str) -> bool:
        """Delete a blob by key."""
        async with self._lock:
            return self._blobs.pop(key, None) is not None

    async def update(self, key: str, fn: BlobUpdate) -> str | None:
        """Atomically replace a blob with ``fn(current)``."""
        async with self._lock:
            current = self._blobs.get(key)
            new_value = fn(current)
            if new_value is None or new_value == current:
                return current
            self._blobs[key] = new_value
            return new_value

    async def health_check(self) -> dict[str, Any]:
        """Report store health."""
        return {"status": "up", "type": "in-memory", "blobs": len(self._blobs)}


class StorageManager:
    """Central holder for the active blob store and the user repository."""

    _instance: Optional["StorageManager"] = None

    def __init__(self, blob_store: BlobStore | None = None):
        self.blobs: BlobStore = blob_store or InMemoryBlobStore()
        self.users = self._build_repository()

    def _build_repository(self) -> "UserRepository":
        from ecomlens_api.storage.user_repository import UserRepository

        return UserRepository(self.blobs)

    @classmethod
    def get_instance(cls) -> "StorageManager":
        """Get singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton (for testing)."""
        cls._instance = None

    def use(self, blob_store: BlobStore) -> None:
        """Switch to a different blob store (e.g. Redis once connected)."""
        self.blobs = blob_store
        self.users = self._build_repository()


def get_storage() -> StorageManager:
    """Dependency to get storage manager."""
    return StorageManager.get_instance()
