"""Invalidation service: delete memo entries by exact key or key prefix.

Three granularities map onto the key hierarchy memo:<owner>:<function>:<digest>:
one call (exact key), one function (owner+function prefix), one owner
(owner prefix). Prefix invalidation is a full scan of the store's key
space followed by batched deletes; it is an administrative operation,
not a hot path.

No snapshot isolation: an entry committed while a scan is running may
survive it. Callers that need a strict cut must stop writers first.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from memocache.application.services.key_service import derive_key
from memocache.core.constants import INVALIDATION_CHUNK_SIZE
from memocache.infrastructure.cache.cache_protocol import CacheStore
from memocache.infrastructure.cache.keys import function_prefix, owner_prefix

logger = logging.getLogger(__name__)


class InvalidationService:
    """Deletes memo entries from one store. All operations are idempotent."""

    def __init__(self, store: CacheStore) -> None:
        self.store = store

    async def invalidate_exact(self, owner: str, function: str, args: Sequence[Any]) -> int:
        """Delete the entry for one normalized argument tuple.

        Returns:
            1 if an entry was removed, else 0.
        """
        key = str(derive_key(owner, function, args))
        deleted = int(await self.store.delete(key))
        if deleted:
            logger.info("Cache INVALIDATE: %s", key)
        return deleted

    async def invalidate_function(self, owner: str, function: str) -> int:
        """Delete every entry of one function (all variants, all arguments)."""
        return await self.invalidate_prefix(function_prefix(owner, function))

    async def invalidate_owner(self, owner: str) -> int:
        """Delete every entry of every function of one owner."""
        return await self.invalidate_prefix(owner_prefix(owner))

    async def invalidate_prefix(self, prefix: str) -> int:
        """Scan the store and delete keys starting with prefix, in chunks.

        Args:
            prefix: Structural prefix ending with the key separator.

        Returns:
            Number of entries deleted.
        """
        deleted = 0
        chunk: list[str] = []
        async for key in self.store.iter_keys(match_prefix=prefix):
            if not key.startswith(prefix):
                continue
            chunk.append(key)
            if len(chunk) >= INVALIDATION_CHUNK_SIZE:
                deleted += await self.store.delete_many(chunk)
                chunk = []
        if chunk:
            deleted += await self.store.delete_many(chunk)
        if deleted > 0:
            logger.info("Cache INVALIDATE: %s* (%s keys)", prefix, deleted)
        return deleted
