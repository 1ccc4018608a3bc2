"""
Cache Backend Protocol

This module defines the contract every cache store adapter implements, so the
cache manager can run on the in-process memory store or on Redis without
knowing which one it holds.

Architectural Decision: Protocol-based abstraction
- Two implementations (MemoryStore, RedisStore) behind one interface
- Facilitates testing with fake implementations
- Type-safe interface with runtime checking

Contract:
- get/set/delete/delete_pattern/flush_all never raise; backend failures
  degrade (get -> None, set -> False, delete -> True, delete_pattern -> 0,
  flush_all -> no-op) and are reported through the adapter's error listener.
- size() is synchronous and performs no I/O.

Author: Platform Team
Date: 2026-03-02
"""

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from src.core.config.constants import CacheType

ErrorListener = Callable[[Exception], None]


@runtime_checkable
class CacheBackend(Protocol):
    """
    Protocol defining the interface for cache store adapters.

    Implementations:
    - MemoryStore: process-local bounded map with TTL (fallback)
    - RedisStore: distributed Redis-backed store

    Usage:
        async def warm(store: CacheBackend, key: str, value: Any) -> bool:
            return await store.set(key, value, ttl=60)
    """

    cache_type: CacheType

    async def connect(self) -> None:
        """
        Prepare the store for use.

        Raises:
            CacheConnectionError: If the backend cannot be reached
        """
        ...

    async def disconnect(self) -> None:
        """Release resources. Safe to call more than once."""
        ...

    async def get(self, key: str) -> Any | None:
        """
        Get a value.

        Returns:
            The stored value, or None if absent, expired or unreadable
        """
        ...

    async def set(self, key: str, value: Any, ttl: float | None = None) -> bool:
        """
        Store a value.

        Args:
            key: Cache key
            value: JSON-serializable value
            ttl: Time-to-live in seconds (None = backend default)

        Returns:
            True if the value is now cached
        """
        ...

    async def delete(self, key: str) -> bool:
        """Delete a key. Idempotent: returns True even if the key was absent."""
        ...

    async def delete_pattern(self, pattern: str) -> int:
        """
        Delete every key matching a glob-style pattern (e.g. "jobs:123*").

        Returns:
            Number of keys deleted
        """
        ...

    async def flush_all(self) -> None:
        """Remove every entry owned by this store."""
        ...

    def size(self) -> int | None:
        """Number of stored entries, or None when unknown without I/O."""
        ...

    async def health_check(self) -> dict[str, Any]:
        """
        Perform a health check.

        Returns:
            Dict with at least a "status" field
        """
        ...
