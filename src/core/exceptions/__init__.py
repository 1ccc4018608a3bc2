"""
Exception Module

Structured exception hierarchy for the caching layer.

Module Structure:
-----------------
- **base.py**: HotshoError base class + ConfigurationError
- **cache.py**: Cache-related exceptions (Redis, key generation, serialization)

Usage:
------
```python
from src.core.exceptions import CacheConnectionError, CacheKeyError
```
"""

# Base exception
from src.core.exceptions.base import ConfigurationError, HotshoError

# Cache exceptions
from src.core.exceptions.cache import (
    CacheConnectionError,
    CacheError,
    CacheKeyError,
    CacheSerializationError,
)

__all__ = [
    # Base
    "HotshoError",
    "ConfigurationError",
    # Cache
    "CacheError",
    "CacheConnectionError",
    "CacheKeyError",
    "CacheSerializationError",
]
