"""
Integration Tests for the Redis-backed cache

Exercises CacheManager against a real Redis server.
"""

import os
import uuid

import pytest

from src.core.config.constants import CacheType
from src.core.config.settings import Settings
from src.infrastructure.cache.cache_manager import CacheManager


@pytest.fixture
async def live_cache(use_real_redis):
    if not use_real_redis:
        pytest.skip("USE_REAL_REDIS not set")

    settings = Settings(
        REDIS_URL=os.getenv("REDIS_URL", "redis://localhost:6379/15"),
        REDIS_KEY_PREFIX=f"hotsho-test-{uuid.uuid4().hex[:8]}:",
        CACHE_MEMORY_CHECK_PERIOD=0,
    )
    manager = CacheManager(settings=settings)
    await manager.initialize()
    yield manager
    await manager.flush()
    await manager.shutdown()


@pytest.mark.integration
class TestRedisCache:
    """End-to-end cache behavior on Redis."""

    @pytest.mark.asyncio
    async def test_uses_distributed_backend(self, live_cache):
        """Test that a reachable server is selected."""
        assert live_cache.cache_type is CacheType.DISTRIBUTED

    @pytest.mark.asyncio
    async def test_cache_aside_round_trip(self, live_cache):
        """Test get_or_set hit after miss."""
        key = live_cache.generate_key("jobs", {"userId": "u1", "status": "active"})

        first = await live_cache.get_or_set(key, lambda: [{"id": 1}], ttl=30)
        second = await live_cache.get_or_set(key, lambda: [{"id": 2}], ttl=30)

        assert first.from_cache is False
        assert second.from_cache is True
        assert second.data == [{"id": 1}]

    @pytest.mark.asyncio
    async def test_invalidate_user_cache(self, live_cache):
        """Test per-user invalidation."""
        await live_cache.set("user:u1", {"id": "u1"})
        await live_cache.set("dashboard:u1", {"widgets": 2})

        await live_cache.invalidate_user_cache("u1")

        assert await live_cache.get("user:u1") is None
        assert await live_cache.get("dashboard:u1") is None
