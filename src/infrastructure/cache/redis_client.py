"""
Redis Client with Connection Pooling

Architecture:
    RedisClient (Public API)
        ├── ConnectionManager (Connection lifecycle, connect retry)
        ├── OperationExecutor (Command execution with error handling)
        └── HealthMonitor (Health checks and pool metrics)

Every command failure is raised as a CacheError subclass; deciding whether to
degrade is left to the store adapter.

Author: Platform Team
Date: 2026-03-02
"""

import time
from collections.abc import AsyncIterator
from typing import Any

import redis.asyncio as redis
from redis.exceptions import ConnectionError, RedisError, TimeoutError
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential, wait_random

from src.core.config.constants import REDIS_SCAN_COUNT, Stage
from src.core.config.settings import RedisSettings
from src.core.exceptions import CacheConnectionError, CacheKeyError
from src.core.logging.logger import get_logger

logger = get_logger(__name__)


# =============================================================================
# LAYER 1: CONNECTION MANAGEMENT
# =============================================================================


class ConnectionManager:
    """
    Manages Redis connection lifecycle and pooling.

    The client is built from REDIS_URL when set, otherwise from the individual
    host/port/db/password/TLS settings. A pre-built client may be injected
    (e.g. a fakeredis instance in tests).
    """

    def __init__(self, settings: RedisSettings, client: redis.Redis | None = None):
        self._settings = settings
        self._client: redis.Redis | None = client
        self._is_connected = False

    def _build_client(self) -> redis.Redis:
        common = {
            "max_connections": self._settings.REDIS_MAX_CONNECTIONS,
            "socket_timeout": self._settings.REDIS_SOCKET_TIMEOUT,
            "socket_connect_timeout": self._settings.REDIS_SOCKET_CONNECT_TIMEOUT,
            "health_check_interval": self._settings.REDIS_HEALTH_CHECK_INTERVAL,
            "decode_responses": True,  # Return strings instead of bytes
        }

        if self._settings.REDIS_URL:
            return redis.from_url(self._settings.REDIS_URL, **common)

        return redis.Redis(
            host=self._settings.REDIS_HOST,
            port=self._settings.REDIS_PORT,
            db=self._settings.REDIS_DB,
            password=self._settings.REDIS_PASSWORD,
            ssl=self._settings.REDIS_TLS,
            **common,
        )

    def describe(self) -> dict[str, Any]:
        """Connection target for logs and health output (no credentials)."""
        if self._settings.REDIS_URL:
            return {"url": self._settings.REDIS_URL.split("@")[-1]}
        return {"host": self._settings.REDIS_HOST, "port": self._settings.REDIS_PORT}

    async def connect(self) -> redis.Redis:
        """
        Establish the connection and verify it with PING.

        Connection attempts are retried with exponential backoff and jitter.

        Raises:
            CacheConnectionError: If every attempt fails
        """
        if self._is_connected and self._client is not None:
            return self._client

        if self._client is None:
            self._client = self._build_client()

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._settings.REDIS_CONNECT_RETRIES),
                wait=wait_exponential(multiplier=self._settings.REDIS_RETRY_DELAY, max=2.0)
                + wait_random(0, self._settings.REDIS_RETRY_DELAY),
                retry=retry_if_exception_type((ConnectionError, TimeoutError)),
                reraise=True,
                before_sleep=lambda retry_state: logger.warning(
                    "Redis connection attempt failed, retrying",
                    stage=Stage.REDIS.value,
                    attempt=retry_state.attempt_number,
                ),
            ):
                with attempt:
                    await self._client.ping()
        except (RedisError, OSError) as e:
            logger.error("Failed to connect to Redis", stage=Stage.REDIS.value, error=str(e))
            raise CacheConnectionError.from_exception(
                e, message=f"Failed to connect to Redis: {e}", **self.describe()
            ) from e

        self._is_connected = True

        logger.info(
            "Redis connected successfully",
            stage=Stage.REDIS.value,
            max_connections=self._settings.REDIS_MAX_CONNECTIONS,
            **self.describe(),
        )

        return self._client

    async def disconnect(self) -> None:
        """Close the client and its connection pool."""
        if self._client is not None:
            try:
                await self._client.aclose()
            except RedisError as e:
                logger.warning("Error while closing Redis connection", stage=Stage.REDIS.value, error=str(e))
            self._client = None

        if self._is_connected:
            logger.info("Redis disconnected", stage=Stage.REDIS.value)
        self._is_connected = False

    def get_client(self) -> redis.Redis | None:
        return self._client

    def is_connected(self) -> bool:
        return self._is_connected


# =============================================================================
# LAYER 2: OPERATION EXECUTOR
# =============================================================================


class OperationExecutor:
    """
    Executes Redis commands with consistent error handling.

    Error Handling Strategy:
    - Catch RedisError (connection errors and timeouts included)
    - Log with context
    - Raise CacheKeyError with details
    """

    def __init__(self, redis_client: redis.Redis):
        self._redis = redis_client

    async def get(self, key: str) -> str | None:
        try:
            return await self._redis.get(key)
        except RedisError as e:
            logger.error("Redis GET failed", stage=Stage.REDIS.value, key=key, error=str(e))
            raise CacheKeyError(message=f"Redis GET failed: {e}", details={"key": key}) from e

    async def set(self, key: str, value: str, ttl_ms: int | None = None) -> bool:
        """
        Set a value, with an optional TTL in milliseconds (SET ... PX).

        Returns:
            True if set successfully
        """
        try:
            result = await self._redis.set(key, value, px=ttl_ms)
            return bool(result)
        except RedisError as e:
            logger.error("Redis SET failed", stage=Stage.REDIS.value, key=key, error=str(e))
            raise CacheKeyError(message=f"Redis SET failed: {e}", details={"key": key}) from e

    async def delete(self, *keys: str) -> int:
        """
        Delete keys.

        Returns:
            Number of keys deleted
        """
        if not keys:
            return 0
        try:
            return await self._redis.delete(*keys)
        except RedisError as e:
            logger.error("Redis DELETE failed", stage=Stage.REDIS.value, keys=len(keys), error=str(e))
            raise CacheKeyError(message=f"Redis DELETE failed: {e}", details={"keys": list(keys)}) from e

    async def scan_iter(self, match: str, count: int = REDIS_SCAN_COUNT) -> AsyncIterator[str]:
        """Iterate keys matching a pattern with cursor-based SCAN."""
        try:
            async for key in self._redis.scan_iter(match=match, count=count):
                yield key
        except RedisError as e:
            logger.error("Redis SCAN failed", stage=Stage.REDIS.value, match=match, error=str(e))
            raise CacheKeyError(message=f"Redis SCAN failed: {e}", details={"match": match}) from e


# =============================================================================
# LAYER 3: HEALTH MONITORING
# =============================================================================


class HealthMonitor:
    """Health checks: connection status and ping latency."""

    def __init__(self, connection_manager: ConnectionManager):
        self._conn_mgr = connection_manager

    async def health_check(self) -> dict[str, Any]:
        health = {
            "status": "healthy",
            "connected": self._conn_mgr.is_connected(),
            **self._conn_mgr.describe(),
            "ping_latency_ms": None,
        }

        client = self._conn_mgr.get_client()
        if client is None or not self._conn_mgr.is_connected():
            health["status"] = "unhealthy"
            health["error"] = "Client not connected"
            return health

        try:
            start = time.perf_counter()
            await client.ping()
            health["ping_latency_ms"] = round((time.perf_counter() - start) * 1000, 2)
        except RedisError as e:
            health["status"] = "unhealthy"
            health["error"] = str(e)

        return health


# =============================================================================
# LAYER 4: PUBLIC API
# =============================================================================


class RedisClient:
    """
    Async Redis client with connection pooling and health checks.

    Usage:
        client = RedisClient(settings.redis)
        await client.connect()

        await client.set("key", "value", ttl_ms=60_000)
        value = await client.get("key")

        await client.disconnect()
    """

    def __init__(self, settings: RedisSettings, client: redis.Redis | None = None):
        self._settings = settings
        self._conn_mgr = ConnectionManager(settings, client)
        self._executor: OperationExecutor | None = None
        self._health_monitor = HealthMonitor(self._conn_mgr)

    async def connect(self) -> None:
        """
        Establish connection.

        Raises:
            CacheConnectionError: If connection fails
        """
        client = await self._conn_mgr.connect()
        self._executor = OperationExecutor(client)

    async def disconnect(self) -> None:
        await self._conn_mgr.disconnect()
        self._executor = None

    def is_connected(self) -> bool:
        return self._conn_mgr.is_connected()

    def _require_executor(self) -> OperationExecutor:
        if self._executor is None:
            raise CacheConnectionError(message="Redis client is not connected")
        return self._executor

    # -------------------------------------------------------------------------
    # Delegate to OperationExecutor
    # -------------------------------------------------------------------------

    async def get(self, key: str) -> str | None:
        """Get value from Redis."""
        return await self._require_executor().get(key)

    async def set(self, key: str, value: str, ttl_ms: int | None = None) -> bool:
        """Set value in Redis."""
        return await self._require_executor().set(key, value, ttl_ms)

    async def delete(self, *keys: str) -> int:
        """Delete keys from Redis."""
        return await self._require_executor().delete(*keys)

    def scan_iter(self, match: str, count: int = REDIS_SCAN_COUNT) -> AsyncIterator[str]:
        """Iterate keys matching a pattern."""
        return self._require_executor().scan_iter(match, count)

    async def health_check(self) -> dict[str, Any]:
        """Perform health check on Redis connection."""
        return await self._health_monitor.health_check()
