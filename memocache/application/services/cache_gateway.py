"""Cache gateway: fetch-or-populate over a memo store.

Every memoized call goes through fetch_or_populate. The store's fetch
primitive provides per-key mutual exclusion, so a missing key is computed
at most once no matter how many callers race for it. A get-then-set is
never used here.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from memocache.domain.value_objects.cache_key import CacheKey
from memocache.infrastructure.cache.cache_protocol import CacheStore
from memocache.infrastructure.exceptions import StoreException

logger = logging.getLogger(__name__)


class CacheGateway:
    """Runs computations through a store's fetch-or-populate primitive."""

    def __init__(self, store: CacheStore) -> None:
        self.store = store

    async def fetch_or_populate(
        self,
        key: CacheKey | str,
        ttl_ms: int | None,
        compute: Callable[[], Awaitable[Any]],
    ) -> Any:
        """Return the cached value for key, computing and committing it on a miss.

        Args:
            key: Cache key (rendered with str()).
            ttl_ms: Lifetime in milliseconds, or None for a permanent entry.
            compute: Zero-argument coroutine factory producing the value.

        Returns:
            The committed value (fresh or cached).

        Raises:
            StoreException: Store unreachable or failed; never retried.
        """
        rendered = str(key)
        computed = False

        async def on_miss() -> Any:
            nonlocal computed
            computed = True
            logger.debug("Cache MISS: %s", rendered)
            return await compute()

        try:
            value = await self.store.fetch(rendered, on_miss, ttl_ms)
        except StoreException:
            logger.error("Memo store failed for key %s", rendered)
            raise
        if not computed:
            logger.debug("Cache HIT: %s", rendered)
        return value
