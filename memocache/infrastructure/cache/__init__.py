"""Cache: store protocol, store adapters, and key prefix utilities.

Used by the gateway and invalidation services. Key format is in keys.py
and memocache.domain.value_objects.cache_key (DRY).
"""

from memocache.infrastructure.cache.cache_protocol import CacheStore, Compute
from memocache.infrastructure.cache.keys import (
    function_prefix,
    lock_key,
    namespace_prefix,
    owner_prefix,
)
from memocache.infrastructure.cache.memory_cache import MemoryCacheStore
from memocache.infrastructure.cache.redis_cache import RedisCacheStore

__all__ = [
    "CacheStore",
    "Compute",
    "MemoryCacheStore",
    "RedisCacheStore",
    "function_prefix",
    "lock_key",
    "namespace_prefix",
    "owner_prefix",
]
