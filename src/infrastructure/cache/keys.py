"""
Cache key generation.

Keys have the form ``<prefix>:<identifier>``. Plain identifiers (strings, ids)
are used verbatim. Structured identifiers (query objects such as
``{"userId": "1", "status": "active"}``) are canonicalized with sorted keys and
hashed, so two structurally equal objects always map to the same key no matter
their insertion order.
"""

import hashlib
from collections.abc import Mapping
from enum import Enum
from typing import Any

import orjson

from src.core.exceptions import CacheKeyError

# Marks a hashed structured identifier, keeping it apart from plain ones.
STRUCTURED_MARKER = "#"

_STRUCTURED_TYPES = (Mapping, list, tuple)


def _canonical_json(identifier: Any) -> bytes:
    """Serialize a structured identifier with recursively sorted keys."""
    if isinstance(identifier, Mapping) and not isinstance(identifier, dict):
        identifier = dict(identifier)
    try:
        return orjson.dumps(identifier, option=orjson.OPT_SORT_KEYS)
    except (TypeError, orjson.JSONEncodeError) as e:
        raise CacheKeyError(
            message=f"Identifier is not serializable: {e}",
            details={"identifier_type": type(identifier).__name__},
        ) from e


def generate_key(prefix: str | Enum, identifier: Any) -> str:
    """
    Generate a cache key from a namespace prefix and an identifier.

    Args:
        prefix: Key namespace (e.g. "jobs" or CachePrefix.JOBS)
        identifier: A string/scalar used verbatim, or a mapping/list that is
            canonicalized and hashed

    Returns:
        Cache key string

    Raises:
        CacheKeyError: If the prefix is empty or the identifier cannot be serialized

    Example:
        >>> generate_key("user", "123")
        'user:123'
        >>> a = generate_key("jobs", {"userId": "1", "status": "active"})
        >>> b = generate_key("jobs", {"status": "active", "userId": "1"})
        >>> a == b
        True
    """
    if isinstance(prefix, Enum):
        prefix = prefix.value
    if not prefix:
        raise CacheKeyError(message="Cache key prefix must be a non-empty string")

    if isinstance(identifier, _STRUCTURED_TYPES):
        # BLAKE2b, 16 bytes = 32 hex chars
        digest = hashlib.blake2b(_canonical_json(identifier), digest_size=16).hexdigest()
        return f"{prefix}:{STRUCTURED_MARKER}{digest}"

    if isinstance(identifier, Enum):
        identifier = identifier.value

    return f"{prefix}:{identifier}"
