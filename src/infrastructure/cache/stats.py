"""
Cache statistics recorder.

Plain counters incremented by the cache manager and by store adapters (through
the error listener). Reading a snapshot never performs I/O.
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class CacheStats:
    """
    Process-wide cache counters.

    Metrics Tracked:
    - hits / misses (reads)
    - sets / deletes (writes)
    - errors and the last error message
    """

    hits: int = 0
    misses: int = 0
    sets: int = 0
    deletes: int = 0
    errors: int = 0
    last_error: str | None = None

    def record_hit(self) -> None:
        self.hits += 1

    def record_miss(self) -> None:
        self.misses += 1

    def record_set(self) -> None:
        self.sets += 1

    def record_delete(self, count: int = 1) -> None:
        self.deletes += count

    def record_error(self, error: Exception) -> None:
        self.errors += 1
        self.last_error = str(error) or error.__class__.__name__

    @property
    def hit_rate(self) -> float:
        """hits / (hits + misses), 0.0 before the first read."""
        reads = self.hits + self.misses
        return self.hits / reads if reads > 0 else 0.0

    @property
    def total_operations(self) -> int:
        return self.hits + self.misses + self.sets + self.deletes

    def reset(self) -> None:
        """Zero every counter. Cached entries are not touched."""
        self.hits = 0
        self.misses = 0
        self.sets = 0
        self.deletes = 0
        self.errors = 0
        self.last_error = None

    def snapshot(self) -> dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "sets": self.sets,
            "deletes": self.deletes,
            "errors": self.errors,
            "last_error": self.last_error,
            "hit_rate": self.hit_rate,
            "total_operations": self.total_operations,
        }
