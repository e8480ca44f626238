"""Per-key asyncio locks for single-flight computation within a process."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field


@dataclass
class _KeyLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    holders: int = 0


class KeyLockTable:
    """Locks keyed by cache key, created on demand and dropped when idle.

    Holders of different keys never contend; holders of the same key run
    one at a time in arrival order.
    """

    def __init__(self) -> None:
        self._locks: dict[str, _KeyLock] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        key_lock = self._locks.get(key)
        if key_lock is None:
            key_lock = self._locks[key] = _KeyLock()
        key_lock.holders += 1
        try:
            async with key_lock.lock:
                yield
        finally:
            key_lock.holders -= 1
            if key_lock.holders == 0 and self._locks.get(key) is key_lock:
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)
