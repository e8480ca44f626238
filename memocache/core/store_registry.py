"""Named cache store registry.

Owners pick their store by name (or pass an instance) when they are
declared; the name is resolved here. The default name comes from
settings.memo_default_cache and is backed lazily by a store built from
settings.memo_backend unless a store was registered under it first.
"""

from __future__ import annotations

import logging
import threading

from memocache.core.config import get_settings
from memocache.core.constants import BACKEND_REDIS
from memocache.infrastructure.cache.cache_protocol import CacheStore
from memocache.infrastructure.cache.memory_cache import MemoryCacheStore
from memocache.infrastructure.cache.redis_cache import RedisCacheStore
from memocache.infrastructure.exceptions import StoreNotFoundError

logger = logging.getLogger(__name__)

_store_registry: dict[str, CacheStore] = {}
_registry_lock = threading.Lock()


def default_cache() -> str:
    """Return the default store name (settings.memo_default_cache)."""
    return get_settings().memo_default_cache


def build_store_from_settings() -> CacheStore:
    """Create the store selected by settings.memo_backend."""
    if get_settings().memo_backend == BACKEND_REDIS:
        return RedisCacheStore()
    return MemoryCacheStore()


def register_store(name: str, store: CacheStore) -> None:
    """Register a store instance under name, replacing any previous one.

    Args:
        name: Store name used by Memoizer(cache=...) and invalidate(cache=...).
        store: Instance implementing CacheStore.
    """
    with _registry_lock:
        _store_registry[name] = store
    logger.debug("Registered memo store: %s", name)


def unregister_store(name: str) -> CacheStore | None:
    """Remove and return the store registered under name, if any."""
    with _registry_lock:
        return _store_registry.pop(name, None)


def list_stores() -> list[str]:
    """List registered store names."""
    with _registry_lock:
        return list(_store_registry.keys())


def get_store(name: str | None = None) -> CacheStore:
    """Return the store registered under name (default store when None).

    Raises:
        StoreNotFoundError: If name is not registered and is not the default name.
    """
    name = name or default_cache()
    with _registry_lock:
        store = _store_registry.get(name)
        if store is None and name == default_cache():
            store = _store_registry[name] = build_store_from_settings()
            logger.info("Created default memo store %r (%s backend)", name, get_settings().memo_backend)
    if store is None:
        raise StoreNotFoundError(name)
    return store


def resolve_store(cache: str | CacheStore | None) -> CacheStore:
    """Resolve a store name, a store instance, or None (default) to a store."""
    if cache is None or isinstance(cache, str):
        return get_store(cache)
    return cache
