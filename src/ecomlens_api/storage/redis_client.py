"""Redis client management and the Redis-backed blob store."""

import logging
import time
from typing import Any, Optional

import redis.asyncio as redis
from redis.asyncio import Redis

from ecomlens_api.config import get_settings
from ecomlens_api.errors.exceptions import StorageConflictError
from ecomlens_api.storage.lua_scripts import COMPARE_AND_SET_SCRIPT, lua_scripts
from ecomlens_api.storage.memory import BlobUpdate

logger = logging.getLogger(__name__)


class RedisManager:
    """Manages Redis connection pool."""

    _instance: Optional["RedisManager"] = None
    _redis: Redis | None = None

    def __init__(self) -> None:
        self._settings = get_settings()
        self._pool: redis.ConnectionPool | None = None

    @classmethod
    def get_instance(cls) -> "RedisManager":
        """Get singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    async def connect(self) -> None:
        """Initialize Redis connection pool."""
        if self._redis is not None:
            return

        try:
            self._pool = redis.ConnectionPool.from_url(
                self._settings.redis_url,
                max_connections=self._settings.redis_max_connections,
                decode_responses=True,
            )
            self._redis = Redis(connection_pool=self._pool)

            # Test connection
            await self._redis.ping()  # type: ignore[misc]
            logger.info("Connected to Redis at %s", self._settings.redis_url)
        except Exception as e:
            logger.error("Failed to connect to Redis: %s", e)
            self._redis = None
            raise

    async def disconnect(self) -> None:
        """Close Redis connection pool."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None
            logger.info("Disconnected from Redis")

        if self._pool:
            await self._pool.disconnect()
            self._pool = None

    @property
    def client(self) -> Redis | None:
        """Get Redis client instance."""
        return self._redis

    @classmethod
    async def reset(cls) -> None:
        """Reset the singleton (for testing)."""
        if cls._instance:
            await cls._instance.disconnect()
        cls._instance = None


class RedisBlobStore:
    """
    Blob store on plain Redis string keys.

    Updates are optimistic: read the blob, compute the new value, then write
    it with a compare-and-set Lua script. A lost race re-reads and retries.
    """

    backend = "redis"
    MAX_UPDATE_ATTEMPTS = 10

    def __init__(self, client: Redis):
        self._redis = client

    async def get(self, key: str) -> str | None:
        """Get a blob by key."""
        return await self._redis.get(key)  # type: ignore[no-any-return]

    async def set(self, key: str, value: str) -> None:
        """Store a blob, replacing any previous value."""
        await self._redis.set(key, value)

    async def delete(self, key: str) -> bool:
        """Delete a blob by key."""
        return bool(await self._redis.delete(key))

    async def update(self, key: str, fn: BlobUpdate) -> str | None:
        """
        Atomically replace a blob with ``fn(current)``.

        Raises:
            StorageConflictError: If every attempt lost to a concurrent writer
        """
        for attempt in range(1, self.MAX_UPDATE_ATTEMPTS + 1):
            current = await self._redis.get(key)
            new_value = fn(current)
            if new_value is None or new_value == current:
                return current  # type: ignore[no-any-return]

            if await self._compare_and_set(key, current, new_value):
                return new_value

            logger.debug("Concurrent write to %s, retrying (attempt %d)", key, attempt)

        logger.warning(
            "Giving up on %s after %d conflicting writes", key, self.MAX_UPDATE_ATTEMPTS
        )
        raise StorageConflictError(key, self.MAX_UPDATE_ATTEMPTS)

    async def _compare_and_set(self, key: str, expected: str | None, new_value: str) -> bool:
        args = (
            key,
            "0" if expected is None else "1",
            expected or "",
            new_value,
        )
        if lua_scripts.compare_and_set_sha:
            result: Any = await self._redis.evalsha(  # type: ignore[misc]
                lua_scripts.compare_and_set_sha, 1, *args
            )
        else:
            # Fallback to inline script
            result = await self._redis.eval(  # type: ignore[misc]
                COMPARE_AND_SET_SCRIPT, 1, *args
            )
        return bool(int(result))

    async def health_check(self) -> dict[str, Any]:
        """Check Redis health."""
        try:
            start = time.perf_counter()
            await self._redis.ping()  # type: ignore[misc]
            latency = (time.perf_counter() - start) * 1000

            return {"status": "up", "type": "redis", "latency_ms": round(latency, 2)}
        except Exception as e:
            return {"status": "error", "type": "redis", "error": str(e), "latency_ms": None}


async def get_redis() -> Redis | None:
    """Get the connected Redis client, if any."""
    manager = RedisManager.get_instance()
    return manager.client


async def init_redis() -> None:
    """Initialize Redis connection (call at startup)."""
    manager = RedisManager.get_instance()
    try:
        await manager.connect()
    except Exception as e:
        logger.warning("Redis not available, falling back to in-memory storage: %s", e)


async def close_redis() -> None:
    """Close Redis connection (call at shutdown)."""
    await RedisManager.reset()
