"""
Caching layer: namespaces, backing stores and the cache-aside service.
"""

from .cache_service import CacheService, StoreResult, DEFAULT_KEY_PREFIX
from .namespaces import CacheNamespace, DEFAULT_TTL, NAMESPACE_ABBREVIATIONS, abbreviation
from .store import KeyValueStore, RedisStore

__all__ = [
    "CacheService",
    "StoreResult",
    "DEFAULT_KEY_PREFIX",
    "CacheNamespace",
    "DEFAULT_TTL",
    "NAMESPACE_ABBREVIATIONS",
    "abbreviation",
    "KeyValueStore",
    "RedisStore",
]
