"""Application services: key derivation, fetch-or-populate gateway, invalidation."""

from memocache.application.services.cache_gateway import CacheGateway
from memocache.application.services.invalidation_service import InvalidationService
from memocache.application.services.key_service import (
    KeyService,
    canonicalize,
    derive_key,
)

__all__ = [
    "CacheGateway",
    "InvalidationService",
    "KeyService",
    "canonicalize",
    "derive_key",
]
