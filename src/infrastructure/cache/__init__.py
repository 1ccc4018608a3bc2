"""
Cache Module

Application cache with a distributed (Redis) backend and an in-process
memory fallback, behind a single CacheManager facade.
"""

from .cache_manager import (
    CacheManager,
    CacheResult,
    close_cache,
    create_store,
    get_cache_manager,
    init_cache,
)
from .keys import generate_key
from .memory_store import MemoryStore
from .redis_client import RedisClient
from .redis_store import RedisStore
from .stats import CacheStats

__all__ = [
    "CacheManager",
    "CacheResult",
    "CacheStats",
    "MemoryStore",
    "RedisClient",
    "RedisStore",
    "create_store",
    "generate_key",
    "get_cache_manager",
    "init_cache",
    "close_cache",
]
