"""
Redis store adapter.

Distributed cache backend. Values are encoded with orjson on write and
decoded on read; every key is namespaced with REDIS_KEY_PREFIX so flush and
pattern deletes never touch keys owned by other applications sharing the
database.

Backend failures never escape: they are logged, reported to the error
listener, and degraded to a miss / no-op.
"""

import math
from typing import Any

import orjson
from redis.exceptions import RedisError

from src.core.config.constants import LOG_KEY_LENGTH, CacheType, Stage
from src.core.exceptions import CacheError, CacheSerializationError, ConfigurationError
from src.core.interfaces.cache import ErrorListener
from src.core.logging.logger import get_logger, log_stage
from src.infrastructure.cache.redis_client import RedisClient

logger = get_logger(__name__)

_BACKEND_ERRORS = (CacheError, RedisError, OSError)

_GLOB_METACHARACTERS = frozenset("*?[")


class RedisStore:
    """
    Redis-backed implementation of the CacheBackend protocol.

    Args:
        client: Redis client (connected by connect())
        key_prefix: Namespace prepended to every key
        default_ttl: TTL in seconds applied when set() gets none
        on_error: Listener notified of degraded failures

    Raises:
        ConfigurationError: If key_prefix is empty or contains glob
            metacharacters (it is embedded in SCAN patterns)
    """

    cache_type = CacheType.DISTRIBUTED

    def __init__(
        self,
        client: RedisClient,
        key_prefix: str,
        default_ttl: int,
        on_error: ErrorListener | None = None,
    ):
        if not key_prefix or _GLOB_METACHARACTERS.intersection(key_prefix):
            raise ConfigurationError(
                "REDIS_KEY_PREFIX must be non-empty and free of glob metacharacters (*, ?, [)",
                details={"key_prefix": key_prefix},
            )

        self._redis = client
        self._prefix = key_prefix
        self._default_ttl = default_ttl
        self._on_error = on_error

    def _full_key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def connect(self) -> None:
        """
        Raises:
            CacheConnectionError: If Redis cannot be reached
        """
        await self._redis.connect()

    async def disconnect(self) -> None:
        await self._redis.disconnect()

    async def get(self, key: str) -> Any | None:
        try:
            raw = await self._redis.get(self._full_key(key))
        except _BACKEND_ERRORS as e:
            self._degrade("get", key, e)
            return None

        if raw is None:
            return None

        try:
            return orjson.loads(raw)
        except orjson.JSONDecodeError as e:
            self._degrade("get", key, CacheSerializationError.from_exception(e, key=key))
            return None

    async def set(self, key: str, value: Any, ttl: float | None = None) -> bool:
        ttl = self._default_ttl if ttl is None else ttl
        if not (math.isfinite(ttl) and ttl > 0):
            self._degrade("set", key, ValueError(f"TTL must be a finite positive number, got {ttl}"))
            return False

        try:
            payload = orjson.dumps(value)
        except TypeError as e:
            self._degrade("set", key, CacheSerializationError.from_exception(e, key=key))
            return False

        try:
            return await self._redis.set(self._full_key(key), payload.decode("utf-8"), ttl_ms=max(1, int(ttl * 1000)))
        except _BACKEND_ERRORS as e:
            self._degrade("set", key, e)
            return False

    async def delete(self, key: str) -> bool:
        try:
            await self._redis.delete(self._full_key(key))
        except _BACKEND_ERRORS as e:
            self._degrade("delete", key, e)
        return True

    async def delete_pattern(self, pattern: str) -> int:
        """Delete namespaced keys matching the pattern, in SCAN-sized batches."""
        deleted = 0
        batch: list[str] = []
        try:
            async for full_key in self._redis.scan_iter(match=self._full_key(pattern)):
                batch.append(full_key)
                if len(batch) >= 100:
                    deleted += await self._redis.delete(*batch)
                    batch.clear()
            if batch:
                deleted += await self._redis.delete(*batch)
        except _BACKEND_ERRORS as e:
            self._degrade("delete_pattern", pattern, e)
        return deleted

    async def flush_all(self) -> None:
        removed = await self.delete_pattern("*")
        log_stage(logger, Stage.FLUSH, "Redis cache namespace flushed", prefix=self._prefix, removed=removed)

    def size(self) -> None:
        # Counting namespaced keys needs a SCAN round-trip.
        return None

    async def health_check(self) -> dict[str, Any]:
        health = await self._redis.health_check()
        return {**health, "type": self.cache_type.value, "key_prefix": self._prefix}

    def _degrade(self, operation: str, key: str, error: Exception) -> None:
        logger.warning(
            "Redis cache operation failed, degrading",
            stage=Stage.REDIS.value,
            operation=operation,
            cache_key=key[:LOG_KEY_LENGTH],
            error=str(error),
        )
        if self._on_error is not None:
            self._on_error(error)
