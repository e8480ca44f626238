"""Domain value objects."""

from memocache.domain.value_objects.cache_key import CacheKey

__all__ = ["CacheKey"]
