"""
Core Interfaces Module

Protocols for core components, enabling dependency injection and testability.

Components:
-----------
- **cache.py**: CacheBackend protocol implemented by the cache store adapters

Interfaces follow the Protocol pattern (PEP 544) for structural subtyping:
runtime checking with @runtime_checkable, no inheritance required.

Usage:
------
```python
from src.core.interfaces import CacheBackend

async def read_through(store: CacheBackend, key: str):
    return await store.get(key)
```
"""

from src.core.interfaces.cache import CacheBackend, ErrorListener

__all__ = [
    "CacheBackend",
    "ErrorListener",
]
