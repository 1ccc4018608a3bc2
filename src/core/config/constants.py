"""
System Constants and Enumerations

This module defines the constants shared by the caching layer and its callers.

Architectural Decision: Centralized constants for maintainability
- Single source of truth for TTLs and key prefixes
- Type-safe enums for state management
- Callers use CACHE_TTL instead of hard-coding seconds

Author: Platform Team
Date: 2026-03-02
"""

from enum import Enum
from types import MappingProxyType

# ============================================================================
# Stage Identifiers (for structured logging)
# ============================================================================


class Stage(str, Enum):
    """
    Cache processing stages used as the ``stage`` field of log events.

    Format: {AREA}.{STEP}_{DESCRIPTIVE_NAME}
    """

    INITIALIZATION = "CACHE.0_INITIALIZATION"
    BACKEND_SELECTION = "CACHE.1_BACKEND_SELECTION"
    LOOKUP = "CACHE.2_LOOKUP"
    POPULATE = "CACHE.3_POPULATE"
    INVALIDATE = "CACHE.4_INVALIDATE"
    COMPUTE = "CACHE.5_COMPUTE"
    FLUSH = "CACHE.6_FLUSH"
    SHUTDOWN = "CACHE.7_SHUTDOWN"
    REDIS = "REDIS"


# ============================================================================
# Cache Types and Lifecycle
# ============================================================================


class CacheType(str, Enum):
    """
    Backend adapter behind the cache facade.

    MEMORY: process-local bounded map (fallback)
    DISTRIBUTED: Redis
    """

    MEMORY = "memory"
    DISTRIBUTED = "distributed"


class CacheState(str, Enum):
    """
    Cache manager lifecycle.

    UNINITIALIZED -> INITIALIZING -> READY -> CLOSED
    """

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    CLOSED = "closed"


# ============================================================================
# Key Prefixes
# ============================================================================


class CachePrefix(str, Enum):
    """
    Key namespaces, one per domain area.

    Used both for key generation and for scoped invalidation.
    """

    USER = "user"
    JOBS = "jobs"
    JOB_DETAILS = "jobDetails"
    ANALYTICS = "analytics"
    DASHBOARD = "dashboard"
    COMPANY_INFO = "companyInfo"
    SALARY_DATA = "salaryData"
    TEMPLATES = "templates"


# Prefixes whose keys are generated from a bare user id.
# invalidate_user_cache() rebuilds exactly these keys.
USER_SCOPED_PREFIXES: tuple[CachePrefix, ...] = (
    CachePrefix.USER,
    CachePrefix.JOBS,
    CachePrefix.DASHBOARD,
    CachePrefix.ANALYTICS,
)

# ============================================================================
# TTLs (seconds)
# ============================================================================

DEFAULT_TTL = 300  # 5 minutes

CACHE_TTL = MappingProxyType(
    {
        CachePrefix.USER.value: 600,  # user data changes infrequently
        CachePrefix.JOBS.value: 120,  # job lists change often
        CachePrefix.JOB_DETAILS.value: 300,
        CachePrefix.ANALYTICS.value: 900,  # expensive to compute
        CachePrefix.DASHBOARD.value: 180,
        CachePrefix.COMPANY_INFO.value: 3600,
        CachePrefix.SALARY_DATA.value: 1800,
        CachePrefix.TEMPLATES.value: 3600,
    }
)

# ============================================================================
# Memory Store
# ============================================================================

MEMORY_CACHE_MAX_KEYS = 1000
MEMORY_CACHE_CHECK_PERIOD = 60  # seconds between expiry sweeps

# ============================================================================
# Redis
# ============================================================================

REDIS_KEY_PREFIX = "hotsho:"
REDIS_SCAN_COUNT = 100

# Characters of a cache key kept in log events
LOG_KEY_LENGTH = 40
