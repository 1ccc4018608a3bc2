"""
Unit Tests for RedisClient

Runs against fakeredis; failure paths use a client double whose commands raise.
"""

from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from src.core.config.settings import RedisSettings
from src.core.exceptions import CacheConnectionError, CacheKeyError
from src.infrastructure.cache.redis_client import ConnectionManager, RedisClient
from tests.test_fixtures.cache_factory import CacheTestFactory


def _redis_settings(**overrides) -> RedisSettings:
    values = {
        "REDIS_URL": "redis://localhost:6379/0",
        "REDIS_HOST": None,
        "REDIS_CONNECT_RETRIES": 1,
        "REDIS_RETRY_DELAY": 0,
    }
    values.update(overrides)
    return RedisSettings(**values)


@pytest.mark.unit
class TestConnection:
    """Test connection lifecycle."""

    @pytest.mark.asyncio
    async def test_connect_and_disconnect(self, fake_redis):
        """Test that connect pings and disconnect resets state."""
        client = RedisClient(_redis_settings(), client=fake_redis)

        await client.connect()
        assert client.is_connected() is True

        await client.disconnect()
        assert client.is_connected() is False

    @pytest.mark.asyncio
    async def test_connect_retries_then_raises(self):
        """Test that connection errors are retried and then wrapped."""
        failing = CacheTestFactory.failing_redis_client()
        client = RedisClient(_redis_settings(REDIS_CONNECT_RETRIES=3), client=failing)

        with pytest.raises(CacheConnectionError) as exc_info:
            await client.connect()

        assert failing.ping.await_count == 3
        assert exc_info.value.details["original_error"] == "ConnectionError"
        assert client.is_connected() is False

    @pytest.mark.asyncio
    @pytest.mark.filterwarnings("error::DeprecationWarning")
    async def test_connect_backoff_emits_no_deprecation_warning(self):
        """Test that the retry backoff uses only current tenacity parameters."""
        failing = CacheTestFactory.failing_redis_client()
        client = RedisClient(_redis_settings(REDIS_CONNECT_RETRIES=2, REDIS_RETRY_DELAY=0.01), client=failing)

        with pytest.raises(CacheConnectionError):
            await client.connect()

        assert failing.ping.await_count == 2

    @pytest.mark.asyncio
    async def test_commands_before_connect_raise(self, fake_redis):
        """Test that using the client before connect is an error."""
        client = RedisClient(_redis_settings(), client=fake_redis)

        with pytest.raises(CacheConnectionError):
            await client.get("k")

    def test_describe_hides_credentials(self):
        """Test that the URL password never reaches logs."""
        manager = ConnectionManager(_redis_settings(REDIS_URL="redis://:s3cret@cache.internal:6379/0"))
        assert manager.describe() == {"url": "cache.internal:6379/0"}

    def test_builds_client_from_host_settings(self):
        """Test client construction from discrete host settings."""
        manager = ConnectionManager(_redis_settings(REDIS_URL=None, REDIS_HOST="cache.internal", REDIS_PORT=6380))

        client = manager._build_client()
        kwargs = client.connection_pool.connection_kwargs

        assert kwargs["host"] == "cache.internal"
        assert kwargs["port"] == 6380
        assert manager.describe() == {"host": "cache.internal", "port": 6380}


@pytest.mark.unit
class TestOperations:
    """Test command execution."""

    @pytest.mark.asyncio
    async def test_set_with_ttl_in_milliseconds(self, redis_client, fake_redis):
        """Test SET ... PX."""
        assert await redis_client.set("k", "v", ttl_ms=60_000) is True

        assert await redis_client.get("k") == "v"
        assert 0 < await fake_redis.pttl("k") <= 60_000

    @pytest.mark.asyncio
    async def test_delete_returns_count(self, redis_client):
        """Test multi-key delete."""
        await redis_client.set("a", "1")
        await redis_client.set("b", "1")

        assert await redis_client.delete("a", "b", "missing") == 2
        assert await redis_client.delete() == 0

    @pytest.mark.asyncio
    async def test_scan_iter(self, redis_client):
        """Test pattern iteration."""
        for key in ("jobs:1", "jobs:2", "user:1"):
            await redis_client.set(key, "x")

        keys = [key async for key in redis_client.scan_iter(match="jobs:*")]

        assert sorted(keys) == ["jobs:1", "jobs:2"]

    @pytest.mark.asyncio
    async def test_command_failure_raises_cache_key_error(self):
        """Test that RedisError is wrapped with the key."""
        failing = CacheTestFactory.failing_redis_client()
        failing.ping = AsyncMock(return_value=True)
        client = RedisClient(_redis_settings(), client=failing)
        await client.connect()

        with pytest.raises(CacheKeyError) as exc_info:
            await client.get("user:1")

        assert exc_info.value.details == {"key": "user:1"}
        assert isinstance(exc_info.value.__cause__, RedisConnectionError)


@pytest.mark.unit
class TestHealth:
    """Test health checks."""

    @pytest.mark.asyncio
    async def test_healthy_when_connected(self, redis_client):
        """Test ping latency reporting."""
        health = await redis_client.health_check()

        assert health["status"] == "healthy"
        assert health["connected"] is True
        assert health["ping_latency_ms"] is not None

    @pytest.mark.asyncio
    async def test_unhealthy_before_connect(self, fake_redis):
        """Test report for an unconnected client."""
        client = RedisClient(_redis_settings(), client=fake_redis)

        health = await client.health_check()

        assert health["status"] == "unhealthy"
        assert health["error"] == "Client not connected"
