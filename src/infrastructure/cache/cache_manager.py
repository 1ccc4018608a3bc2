#!/usr/bin/env python3
"""
Cache Manager

Architecture:
    CacheManager (Public API)
        ├── CacheBackend (selected once at initialize)
        │   ├── MemoryStore (in-process fallback)
        │   └── RedisStore (distributed)
        └── CacheStats (hit/miss/set/delete/error counters)

The cache only ever holds data that callers can recompute: every failure of the
cache layer degrades to a miss or a no-op so a request never fails because of
it. Only producer errors raised inside get_or_set reach the caller.

Lifecycle:
    UNINITIALIZED -> INITIALIZING -> READY -> CLOSED

Outside READY every operation is a safe no-op (get -> None, set -> False,
delete -> True, flush -> nothing, get_or_set -> producer result).

Usage:
    cache = await init_cache()  # also configures logging if nothing has

    key = cache.generate_key(CachePrefix.JOBS, {"userId": user_id, "status": "active"})
    result = await cache.get_or_set(key, lambda: load_jobs(user_id), ttl=CACHE_TTL["jobs"])
    jobs, from_cache = result.data, result.from_cache

    await cache.invalidate_user_cache(user_id)
    await close_cache()

Author: Platform Team
Date: 2026-03-02
"""

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import redis.asyncio as redis
import structlog

from src.core.config.constants import (
    LOG_KEY_LENGTH,
    USER_SCOPED_PREFIXES,
    CacheState,
    CacheType,
    Stage,
)
from src.core.config.settings import Settings, get_settings
from src.core.exceptions import CacheConnectionError
from src.core.interfaces.cache import CacheBackend, ErrorListener
from src.core.logging.logger import get_logger, log_stage, setup_logging
from src.infrastructure.cache.keys import generate_key
from src.infrastructure.cache.memory_store import MemoryStore
from src.infrastructure.cache.redis_client import RedisClient
from src.infrastructure.cache.redis_store import RedisStore
from src.infrastructure.cache.stats import CacheStats

logger = get_logger(__name__)

T = TypeVar("T")

Producer = Callable[[], Awaitable[T] | T]


@dataclass(frozen=True)
class CacheResult(Generic[T]):
    """Value returned by get_or_set, annotated with its provenance."""

    data: T
    from_cache: bool


# =============================================================================
# BACKEND SELECTION
# =============================================================================


def create_memory_store(settings: Settings, on_error: ErrorListener | None = None) -> MemoryStore:
    return MemoryStore(
        max_keys=settings.cache.CACHE_MEMORY_MAX_KEYS,
        check_period=settings.cache.CACHE_MEMORY_CHECK_PERIOD,
        default_ttl=settings.cache.CACHE_DEFAULT_TTL,
        on_error=on_error,
    )


def create_store(
    settings: Settings,
    on_error: ErrorListener | None = None,
    redis_client: redis.Redis | None = None,
) -> CacheBackend:
    """
    Select the store adapter from configuration.

    Redis when REDIS_URL or REDIS_HOST is set (or a client is injected),
    the in-process memory store otherwise.

    Args:
        settings: Application settings
        on_error: Listener for degraded adapter failures
        redis_client: Pre-built redis.asyncio client to use instead of building one
    """
    redis_settings = settings.redis

    if redis_client is not None or redis_settings.is_configured:
        return RedisStore(
            RedisClient(redis_settings, client=redis_client),
            key_prefix=redis_settings.REDIS_KEY_PREFIX,
            default_ttl=settings.cache.CACHE_DEFAULT_TTL,
            on_error=on_error,
        )

    return create_memory_store(settings, on_error)


# =============================================================================
# PUBLIC API
# =============================================================================


class CacheManager:
    """
    Cache facade used by every caller.

    Owns the store adapter and the statistics; callers never touch the
    backend directly. Create one per process (see get_cache_manager) or
    construct explicitly and inject it.

    Args:
        settings: Settings to read (defaults to the global settings)
        redis_client: Optional pre-built redis.asyncio client (forces the
            distributed backend)
    """

    def __init__(self, settings: Settings | None = None, redis_client: redis.Redis | None = None):
        self._settings = settings or get_settings()
        self._redis_client = redis_client
        self._stats = CacheStats()
        self._store: CacheBackend | None = None
        self._state = CacheState.UNINITIALIZED
        self._init_lock = asyncio.Lock()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @property
    def state(self) -> CacheState:
        return self._state

    @property
    def cache_type(self) -> CacheType | None:
        """Active backend, or None before initialize()."""
        return self._store.cache_type if self._store is not None else None

    async def initialize(self) -> None:
        """
        Select and connect the store adapter. Idempotent.

        If the distributed store cannot be reached, falls back to the
        in-process memory store for the rest of the process lifetime.
        """
        async with self._init_lock:
            if self._state is CacheState.READY:
                return

            self._state = CacheState.INITIALIZING

            try:
                store = create_store(self._settings, self._stats.record_error, self._redis_client)
                await store.connect()
            except CacheConnectionError as e:
                self._stats.record_error(e)
                log_stage(
                    logger,
                    Stage.BACKEND_SELECTION,
                    "Redis connection failed, using in-memory cache",
                    level="warning",
                    error=e.message,
                )
                await store.disconnect()
                store = create_memory_store(self._settings, self._stats.record_error)
                await store.connect()
            except BaseException:
                self._state = CacheState.UNINITIALIZED
                raise

            self._store = store
            self._state = CacheState.READY

        log_stage(logger, Stage.INITIALIZATION, "Cache initialized", cache_type=store.cache_type.value)

    async def shutdown(self) -> None:
        """Release the backend. Safe to call before initialize() and more than once."""
        async with self._init_lock:
            store, self._store = self._store, None
            if store is None:
                return

            self._state = CacheState.CLOSED
            await self._guarded("shutdown", "*", store.disconnect(), None)

        log_stage(logger, Stage.SHUTDOWN, "Cache closed", cache_type=store.cache_type.value)

    def _active_store(self) -> CacheBackend | None:
        return self._store if self._state is CacheState.READY else None

    async def _guarded(self, operation: str, key: str, call: Awaitable[T], fallback: T) -> T:
        # Adapters already degrade; this catches anything they did not anticipate.
        try:
            return await call
        except Exception as e:
            self._stats.record_error(e)
            logger.error(
                "Cache operation failed",
                operation=operation,
                cache_key=key[:LOG_KEY_LENGTH],
                error=str(e),
                exc_info=True,
            )
            return fallback

    # -------------------------------------------------------------------------
    # Core Cache Operations
    # -------------------------------------------------------------------------

    async def get(self, key: str) -> Any | None:
        """
        Get a cached value.

        Returns:
            The value, or None on miss, expiry, backend failure, or when the
            cache is not ready
        """
        store = self._active_store()
        if store is None:
            return None

        value = await self._guarded("get", key, store.get(key), None)

        if value is None:
            self._stats.record_miss()
            log_stage(logger, Stage.LOOKUP, "Cache miss", level="debug", cache_key=key[:LOG_KEY_LENGTH])
        else:
            self._stats.record_hit()
            log_stage(logger, Stage.LOOKUP, "Cache hit", level="debug", cache_key=key[:LOG_KEY_LENGTH])

        return value

    async def set(self, key: str, value: Any, ttl: float | None = None) -> bool:
        """
        Cache a value.

        Args:
            key: Cache key
            value: JSON-serializable value
            ttl: Time-to-live in seconds (None = backend default)

        Returns:
            True if the value is now cached. False is not an error for callers.
        """
        store = self._active_store()
        if store is None:
            return False

        stored = await self._guarded("set", key, store.set(key, value, ttl), False)
        if stored:
            self._stats.record_set()
            log_stage(logger, Stage.POPULATE, "Cache set", level="debug", cache_key=key[:LOG_KEY_LENGTH], ttl=ttl)
        return stored

    async def delete(self, key: str) -> bool:
        """Delete a key. Always returns True, including for absent keys."""
        store = self._active_store()
        if store is None:
            return True

        await self._guarded("delete", key, store.delete(key), True)
        self._stats.record_delete()
        log_stage(logger, Stage.INVALIDATE, "Cache invalidated", level="debug", cache_key=key[:LOG_KEY_LENGTH])
        return True

    async def delete_pattern(self, pattern: str) -> int:
        """
        Delete every key matching a glob-style pattern, e.g. "jobs:123*".

        Returns:
            Number of keys deleted
        """
        store = self._active_store()
        if store is None:
            return 0

        deleted = await self._guarded("delete_pattern", pattern, store.delete_pattern(pattern), 0)
        self._stats.record_delete(deleted)
        log_stage(logger, Stage.INVALIDATE, "Cache pattern invalidated", pattern=pattern, deleted=deleted)
        return deleted

    async def flush(self) -> None:
        """Remove every cached entry across all prefixes and reset the counters."""
        store = self._active_store()
        if store is None:
            return

        await self._guarded("flush", "*", store.flush_all(), None)
        self._stats.reset()
        log_stage(logger, Stage.FLUSH, "Cache flushed", cache_type=store.cache_type.value)

    # -------------------------------------------------------------------------
    # Advanced Patterns
    # -------------------------------------------------------------------------

    async def get_or_set(self, key: str, producer: Producer[T], ttl: float | None = None) -> CacheResult[T]:
        """
        Get from cache or compute and cache the result (cache-aside pattern).

        Concurrent misses on the same key are not coalesced: each caller runs
        the producer and the last write wins.

        Args:
            key: Cache key
            producer: Zero-argument callable (sync or async) returning the
                canonical value
            ttl: Time-to-live in seconds

        Returns:
            CacheResult with from_cache=True on a hit

        Raises:
            Whatever the producer raises; nothing is cached in that case.
        """
        cached = await self.get(key)
        if cached is not None:
            return CacheResult(data=cached, from_cache=True)

        log_stage(logger, Stage.COMPUTE, "Computing uncached value", level="debug", cache_key=key[:LOG_KEY_LENGTH])
        try:
            data = producer()
            if inspect.isawaitable(data):
                data = await data
        except Exception as e:
            self._stats.record_error(e)
            raise

        await self.set(key, data, ttl)
        return CacheResult(data=data, from_cache=False)

    async def invalidate_user_cache(self, user_id: str) -> None:
        """
        Delete the per-user keys of every user-scoped prefix.

        Rebuilds exactly generate_key(prefix, user_id) for each prefix in
        USER_SCOPED_PREFIXES. Entries keyed by compound identifiers
        (e.g. {"userId": ..., "status": ...}) are not reached; invalidate those
        explicitly with delete().
        """
        for prefix in USER_SCOPED_PREFIXES:
            await self.delete(generate_key(prefix, user_id))

        log_stage(
            logger,
            Stage.INVALIDATE,
            "User cache invalidated",
            prefixes=[prefix.value for prefix in USER_SCOPED_PREFIXES],
        )

    # -------------------------------------------------------------------------
    # Utilities
    # -------------------------------------------------------------------------

    generate_key = staticmethod(generate_key)

    # -------------------------------------------------------------------------
    # Monitoring
    # -------------------------------------------------------------------------

    def get_stats(self) -> dict[str, Any]:
        """
        Get cache statistics. Synchronous, no I/O.

        Returns:
            Counters plus hit_rate, total_operations, cache_type, keys
            (None when the backend cannot count without I/O) and state
        """
        cache_type = self.cache_type
        return {
            **self._stats.snapshot(),
            "cache_type": cache_type.value if cache_type is not None else None,
            "keys": self._store.size() if self._store is not None else 0,
            "state": self._state.value,
        }

    def reset_stats(self) -> None:
        """Reset counters only; cached entries are kept."""
        self._stats.reset()

    async def health_check(self) -> dict[str, Any]:
        """
        Perform health check on the cache system.

        Returns:
            Dict with overall status, state, backend type, backend health and
            the service (name, version, environment) it belongs to
        """
        app = self._settings.app
        service = {"name": app.APP_NAME, "version": app.APP_VERSION, "environment": app.ENVIRONMENT}

        store = self._active_store()
        if store is None:
            return {
                "status": "degraded",
                "state": self._state.value,
                "cache_type": None,
                "backend": None,
                "service": service,
            }

        backend = await self._guarded(
            "health_check", "*", store.health_check(), {"status": "error", "error": "health check failed"}
        )
        return {
            "status": "healthy" if backend.get("status") == "healthy" else "degraded",
            "state": self._state.value,
            "cache_type": store.cache_type.value,
            "backend": backend,
            "service": service,
        }


# =============================================================================
# GLOBAL INSTANCE (SINGLETON PATTERN)
# =============================================================================

_cache_manager: CacheManager | None = None


def get_cache_manager() -> CacheManager:
    """
    Get the process-wide cache manager (created on first use).

    Returns:
        CacheManager: Global cache manager instance
    """
    global _cache_manager

    if _cache_manager is None:
        _cache_manager = CacheManager()

    return _cache_manager


async def init_cache() -> CacheManager:
    """
    Initialize the process-wide cache manager.

    Configures structlog from LOG_LEVEL / LOG_FORMAT unless the host
    application already did; call setup_logging() first to choose otherwise.

    Returns:
        CacheManager: Initialized cache manager
    """
    manager = get_cache_manager()
    if not structlog.is_configured():
        log_settings = manager._settings.logging
        setup_logging(log_settings.LOG_LEVEL, log_settings.LOG_FORMAT)

    await manager.initialize()
    return manager


async def close_cache() -> None:
    """Shutdown the process-wide cache manager. Safe to call at any time."""
    if _cache_manager is not None:
        await _cache_manager.shutdown()
