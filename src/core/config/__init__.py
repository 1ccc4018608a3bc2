"""
Configuration Module

Centralized, type-safe configuration for the caching layer.

Components:
-----------
- **settings.py**: Pydantic-based configuration with environment variable loading
- **constants.py**: TTL table, key prefixes, enums

Usage:
------
```python
from src.core.config import CACHE_TTL, CachePrefix, get_settings

settings = get_settings()
if settings.redis.is_configured:
    ...

ttl = CACHE_TTL[CachePrefix.JOBS.value]
```

Environment Variables:
---------------------
```bash
# Distributed store (unset -> in-memory cache)
REDIS_URL=redis://localhost:6379/0
REDIS_HOST=localhost
REDIS_KEY_PREFIX=hotsho:

# Cache
CACHE_DEFAULT_TTL=300
CACHE_MEMORY_MAX_KEYS=1000

# Logging
LOG_LEVEL=INFO
LOG_FORMAT=json
```

Testing:
-------
```python
from src.core.config.settings import Settings

settings = Settings(REDIS_URL=None, REDIS_HOST=None)
```
"""

from src.core.config.constants import (
    CACHE_TTL,
    DEFAULT_TTL,
    MEMORY_CACHE_CHECK_PERIOD,
    MEMORY_CACHE_MAX_KEYS,
    REDIS_KEY_PREFIX,
    USER_SCOPED_PREFIXES,
    CachePrefix,
    CacheState,
    CacheType,
    Stage,
)
from src.core.config.settings import Settings, get_settings, reload_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "reload_settings",
    # Enums
    "Stage",
    "CacheType",
    "CacheState",
    "CachePrefix",
    # Cache
    "CACHE_TTL",
    "DEFAULT_TTL",
    "USER_SCOPED_PREFIXES",
    "MEMORY_CACHE_MAX_KEYS",
    "MEMORY_CACHE_CHECK_PERIOD",
    "REDIS_KEY_PREFIX",
]
