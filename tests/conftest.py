"""
Pytest Configuration and Shared Test Fixtures

This module provides pytest configuration and reusable fixtures for all tests.
All fixtures defined here are automatically available to all test files.
"""

import os
import sys

import pytest

# Add project root to sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from tests.test_fixtures.cache_factory import CacheTestFactory, FakeClock  # noqa: E402

# ============================================================================
# Pytest Configuration
# ============================================================================

# pytest-asyncio runs in auto mode (see pyproject.toml)


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def memory_settings():
    """
    Settings with no Redis configured.

    The expiry sweep is disabled so tests control expiry through the clock.
    """
    from src.core.config.settings import Settings

    return Settings(
        REDIS_URL=None,
        REDIS_HOST=None,
        CACHE_MEMORY_CHECK_PERIOD=0,
        ENVIRONMENT="test",
    )


@pytest.fixture
def redis_settings():
    """Settings pointing at Redis, with a single fast connection attempt."""
    from src.core.config.settings import Settings

    return Settings(
        REDIS_URL="redis://localhost:6379/0",
        REDIS_HOST=None,
        REDIS_CONNECT_RETRIES=1,
        REDIS_RETRY_DELAY=0,
        CACHE_MEMORY_CHECK_PERIOD=0,
        ENVIRONMENT="test",
    )


# ============================================================================
# Environment-Based Integration Toggles
# ============================================================================


@pytest.fixture(scope="session")
def use_real_redis():
    """Check if real Redis should be used for integration tests."""
    return os.getenv("USE_REAL_REDIS", "0").lower() in ("1", "true", "yes")


# ============================================================================
# Infrastructure Fixtures
# ============================================================================


@pytest.fixture
def fake_clock():
    """Controllable monotonic clock for TTL tests."""
    return FakeClock()


@pytest.fixture
def fake_redis():
    """In-process Redis (fakeredis) speaking the redis.asyncio API."""
    import fakeredis.aioredis

    return fakeredis.aioredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)


@pytest.fixture
def failing_redis():
    """redis.asyncio client double whose every command fails."""
    return CacheTestFactory.failing_redis_client()


@pytest.fixture
async def redis_client(redis_settings, fake_redis):
    """Connected RedisClient backed by fakeredis."""
    from src.infrastructure.cache.redis_client import RedisClient

    client = RedisClient(redis_settings.redis, client=fake_redis)
    await client.connect()
    yield client
    await client.disconnect()


@pytest.fixture
async def memory_cache(memory_settings):
    """Initialized CacheManager on the in-memory store."""
    from src.infrastructure.cache.cache_manager import CacheManager

    manager = CacheManager(settings=memory_settings)
    await manager.initialize()
    yield manager
    await manager.shutdown()


@pytest.fixture
async def redis_cache(redis_settings, fake_redis):
    """Initialized CacheManager on the Redis store (fakeredis)."""
    from src.infrastructure.cache.cache_manager import CacheManager

    manager = CacheManager(settings=redis_settings, redis_client=fake_redis)
    await manager.initialize()
    yield manager
    await manager.shutdown()


@pytest.fixture(params=["memory", "redis"])
async def any_cache(request, memory_settings, redis_settings, fake_redis):
    """Initialized CacheManager, once per backend."""
    from src.infrastructure.cache.cache_manager import CacheManager

    if request.param == "memory":
        manager = CacheManager(settings=memory_settings)
    else:
        manager = CacheManager(settings=redis_settings, redis_client=fake_redis)

    await manager.initialize()
    yield manager
    await manager.shutdown()


@pytest.fixture(autouse=True)
def reset_global_cache_manager():
    """Drop the process-wide cache manager between tests."""
    from src.infrastructure.cache import cache_manager

    yield
    cache_manager._cache_manager = None
