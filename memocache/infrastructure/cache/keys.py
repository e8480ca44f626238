"""Cache key prefix builders. Single place for key format (DRY).

Components are checked by the same validator CacheKey uses, so a prefix
can only be built for owners and functions that can appear in a key.
"""

from memocache.core.constants import (
    CACHE_KEY_NAMESPACE,
    CACHE_KEY_SEP,
    CACHE_LOCK_PREFIX,
)
from memocache.domain.value_objects.cache_key import validate_key_component


def namespace_prefix() -> str:
    """Prefix shared by every memo entry (memo:)."""
    return f"{CACHE_KEY_NAMESPACE}{CACHE_KEY_SEP}"


def owner_prefix(owner: str) -> str:
    """Prefix for all entries of one owner (memo:<owner>:)."""
    validate_key_component(owner, "owner")
    return f"{CACHE_KEY_NAMESPACE}{CACHE_KEY_SEP}{owner}{CACHE_KEY_SEP}"


def function_prefix(owner: str, function: str) -> str:
    """Prefix for all entries of one function (memo:<owner>:<function>:)."""
    validate_key_component(function, "function")
    return f"{owner_prefix(owner)}{function}{CACHE_KEY_SEP}"


def lock_key(key: str) -> str:
    """Lease lock key guarding the computation of key (lock:<key>)."""
    return f"{CACHE_LOCK_PREFIX}{CACHE_KEY_SEP}{key}"
