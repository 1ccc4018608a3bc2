"""
In-process memory store.

Fallback cache backend used when no distributed store is configured (or it
cannot be reached at startup). Entries live in a bounded LRU map with optional
per-entry TTL.

Implementation Details:
- OrderedDict for O(1) access and LRU ordering
- Lazy expiry on read, plus an optional periodic sweep task
- Values are stored by reference (no copy on get/set)
- Not shared across worker processes
"""

import asyncio
import contextlib
import fnmatch
import math
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from src.core.config.constants import (
    DEFAULT_TTL,
    LOG_KEY_LENGTH,
    MEMORY_CACHE_CHECK_PERIOD,
    MEMORY_CACHE_MAX_KEYS,
    CacheType,
    Stage,
)
from src.core.interfaces.cache import ErrorListener
from src.core.logging.logger import get_logger, log_stage

logger = get_logger(__name__)


@dataclass(slots=True)
class _CacheEntry:
    value: Any
    expires_at: float | None  # monotonic seconds; None = no expiry

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class MemoryStore:
    """
    Bounded in-memory TTL store.

    Eviction Policy:
    - Expired entries are dropped when read or swept
    - At capacity the least recently used entry is evicted

    Args:
        max_keys: Maximum number of entries
        check_period: Seconds between expiry sweeps (0 disables the sweep task)
        default_ttl: TTL in seconds applied when set() gets none (None = no expiry)
        on_error: Listener notified of degraded failures
        clock: Monotonic time source in seconds (injectable for tests)
    """

    cache_type = CacheType.MEMORY

    def __init__(
        self,
        max_keys: int = MEMORY_CACHE_MAX_KEYS,
        check_period: float = MEMORY_CACHE_CHECK_PERIOD,
        default_ttl: float | None = DEFAULT_TTL,
        on_error: ErrorListener | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_keys <= 0:
            raise ValueError("max_keys must be a positive integer")

        self._max_keys = max_keys
        self._check_period = check_period
        self._default_ttl = default_ttl
        self._on_error = on_error
        self._clock = clock
        self._entries: OrderedDict[str, _CacheEntry] = OrderedDict()
        self._lock = asyncio.Lock()
        self._sweep_task: asyncio.Task | None = None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def connect(self) -> None:
        """Start the periodic expiry sweep (if enabled)."""
        if self._check_period > 0 and self._sweep_task is None:
            self._sweep_task = asyncio.create_task(self._sweep_loop())

        log_stage(
            logger,
            Stage.BACKEND_SELECTION,
            "In-memory cache ready",
            max_keys=self._max_keys,
            check_period=self._check_period,
        )

    async def disconnect(self) -> None:
        """Stop the sweep task and drop every entry."""
        if self._sweep_task is not None:
            self._sweep_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._sweep_task
            self._sweep_task = None

        async with self._lock:
            self._entries.clear()

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self._check_period)
            removed = await self.purge_expired()
            if removed:
                logger.debug("Expired cache entries purged", stage=Stage.INVALIDATE.value, removed=removed)

    async def purge_expired(self) -> int:
        """
        Remove every expired entry.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        async with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                del self._entries[key]
        return len(expired)

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def get(self, key: str) -> Any | None:
        """Get a value, evicting it if expired. Marks the key as recently used."""
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            if entry.is_expired(self._clock()):
                del self._entries[key]
                return None

            self._entries.move_to_end(key)
            return entry.value

    async def set(self, key: str, value: Any, ttl: float | None = None) -> bool:
        """
        Store a value. ttl=None applies the default TTL.

        Returns:
            False if the TTL is not positive
        """
        ttl = self._default_ttl if ttl is None else ttl
        if ttl is not None and not (math.isfinite(ttl) and ttl > 0):
            self._report(ValueError(f"TTL must be a finite positive number, got {ttl}"), key)
            return False

        expires_at = self._clock() + ttl if ttl is not None else None

        async with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
            self._entries[key] = _CacheEntry(value=value, expires_at=expires_at)

            while len(self._entries) > self._max_keys:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted least recently used entry", cache_key=evicted[:LOG_KEY_LENGTH])

        return True

    async def delete(self, key: str) -> bool:
        async with self._lock:
            self._entries.pop(key, None)
        return True

    async def delete_pattern(self, pattern: str) -> int:
        """Delete keys matching a glob-style pattern."""
        async with self._lock:
            matching = [key for key in self._entries if fnmatch.fnmatchcase(key, pattern)]
            for key in matching:
                del self._entries[key]
        return len(matching)

    async def flush_all(self) -> None:
        async with self._lock:
            self._entries.clear()

    def size(self) -> int:
        """Number of stored entries (expired entries not yet purged included)."""
        return len(self._entries)

    def get_max_size(self) -> int:
        """Get maximum capacity."""
        return self._max_keys

    def get_keys(self) -> list[str]:
        """All keys in LRU order (oldest first)."""
        return list(self._entries.keys())

    async def health_check(self) -> dict[str, Any]:
        return {
            "status": "healthy",
            "type": self.cache_type.value,
            "size": self.size(),
            "max_size": self._max_keys,
            "sweeping": self._sweep_task is not None and not self._sweep_task.done(),
        }

    def _report(self, error: Exception, key: str) -> None:
        logger.warning("Memory cache operation rejected", cache_key=key[:LOG_KEY_LENGTH], error=str(error))
        if self._on_error is not None:
            self._on_error(error)
