"""In-process memo store with TTL and per-key single-flight.

Default store for the "memory" backend and for tests. Entries live in a
dict keyed by the rendered cache key. A computation for a missing key
holds an asyncio.Lock dedicated to that key, so concurrent callers of the
same key wait for the one commit while other keys proceed independently.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from typing import Any

from memocache.infrastructure.cache.cache_protocol import Compute
from memocache.infrastructure.cache.key_locks import KeyLockTable

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    value: Any
    expire_at: float | None


class MemoryCacheStore:
    """In-memory cache store implementing CacheStore.

    Not shared across processes. Expired entries are dropped lazily when
    read or enumerated.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize an empty store.

        Args:
            clock: Monotonic clock in seconds; injectable for tests.
        """
        self._clock = clock
        self._data: dict[str, _Entry] = {}
        self._locks = KeyLockTable()

    def _lookup(self, key: str) -> tuple[bool, Any]:
        entry = self._data.get(key)
        if entry is None:
            return False, None
        if entry.expire_at is not None and self._clock() > entry.expire_at:
            del self._data[key]
            return False, None
        return True, entry.value

    def _commit(self, key: str, value: Any, ttl_ms: int | None) -> None:
        expire_at = None if ttl_ms is None else self._clock() + ttl_ms / 1000
        self._data[key] = _Entry(value=value, expire_at=expire_at)
        logger.debug("Cache SET: %s (TTL: %sms)", key, ttl_ms)

    async def fetch(self, key: str, compute: Compute, ttl_ms: int | None = None) -> Any:
        hit, value = self._lookup(key)
        if hit:
            return value
        async with self._locks.hold(key):
            # Another caller may have committed while we waited.
            hit, value = self._lookup(key)
            if hit:
                return value
            value = await compute()
            self._commit(key, value, ttl_ms)
            return value

    async def get(self, key: str) -> Any:
        _, value = self._lookup(key)
        return value

    async def delete(self, key: str) -> bool:
        removed = self._data.pop(key, None) is not None
        if removed:
            logger.debug("Cache DELETE: %s", key)
        return removed

    async def delete_many(self, keys: list[str]) -> int:
        deleted = 0
        for key in keys:
            if await self.delete(key):
                deleted += 1
        return deleted

    async def iter_keys(self, match_prefix: str | None = None) -> AsyncIterator[str]:
        # Snapshot: writes during iteration are not observed.
        for key in list(self._data):
            if match_prefix is not None and not key.startswith(match_prefix):
                continue
            hit, _ = self._lookup(key)
            if hit:
                yield key

    async def clear(self) -> int:
        count = len(self._data)
        self._data.clear()
        logger.warning("Cache CLEARED: %s entries deleted", count)
        return count

    def __len__(self) -> int:
        return sum(1 for key in list(self._data) if self._lookup(key)[0])
