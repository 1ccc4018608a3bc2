"""
Cache-Related Exceptions

All exceptions related to caching operations (Redis, in-memory cache, key generation).

Callers of the cache facade never see CacheConnectionError or CacheKeyError from
backend operations: the store adapters catch them and degrade. Only key
generation lets CacheKeyError escape, since a malformed identifier is a
programming error.
"""

from src.core.exceptions.base import HotshoError


class CacheError(HotshoError):
    """Base exception for cache-related errors."""
    pass


class CacheConnectionError(CacheError):
    """
    Raised when unable to connect to the distributed cache (Redis).

    Common causes:
    - Redis server is down
    - Network connectivity issues
    - Incorrect host/port/URL configuration
    - Authentication failure
    """
    pass


class CacheKeyError(CacheError):
    """
    Raised when a cache key operation fails.

    Common causes:
    - Empty prefix or un-serializable identifier passed to generate_key
    - Redis command failure or timeout
    """
    pass


class CacheSerializationError(CacheError):
    """
    Raised when a value cannot be encoded for, or decoded from, the wire format.
    """
    pass
