"""memocache: memoized functions backed by a shared cache store.

Declare with Memoizer(__name__).defmemo(...) or the module-level defmemo,
call the returned dispatcher with await, and invalidate per call, per
function, or per owner with invalidate(...).
"""

from memocache.application.memoize import (
    ANY,
    MemoizedFunction,
    Memoizer,
    defmemo,
    deferred,
    get_memoized,
    invalidate,
)
from memocache.core.store_registry import (
    default_cache,
    get_store,
    list_stores,
    register_store,
    unregister_store,
)
from memocache.domain.exceptions import (
    ArgumentEncodingError,
    InvalidDeclarationError,
    MemoException,
    NoMatchingVariantError,
)
from memocache.infrastructure.cache import CacheStore, MemoryCacheStore, RedisCacheStore
from memocache.infrastructure.exceptions import (
    StoreException,
    StoreNotFoundError,
    StoreUnavailableError,
)
from memocache.shared.telemetry.logging import get_logger, setup_logging

__version__ = "0.1.0"

__all__ = [
    # Declaration
    "ANY",
    "MemoizedFunction",
    "Memoizer",
    "defmemo",
    "deferred",
    "get_memoized",
    # Administration
    "invalidate",
    # Stores
    "CacheStore",
    "MemoryCacheStore",
    "RedisCacheStore",
    "default_cache",
    "get_store",
    "list_stores",
    "register_store",
    "unregister_store",
    # Exceptions
    "ArgumentEncodingError",
    "InvalidDeclarationError",
    "MemoException",
    "NoMatchingVariantError",
    "StoreException",
    "StoreNotFoundError",
    "StoreUnavailableError",
    # Logging
    "get_logger",
    "setup_logging",
]
