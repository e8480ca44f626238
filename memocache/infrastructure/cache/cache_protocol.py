"""Cache store protocol consumed by the memoization core (DIP).

The core never owns entry storage. It needs a store that can
fetch-or-populate a key under per-key mutual exclusion, delete keys, and
enumerate its key space for prefix invalidation.
"""

from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any, Protocol, runtime_checkable

Compute = Callable[[], Awaitable[Any]]


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for memo stores (in-memory, Redis)."""

    async def fetch(self, key: str, compute: Compute, ttl_ms: int | None = None) -> Any:
        """Return the live value for key, or run compute once and commit it.

        Concurrent callers for the same key must not run compute more than
        once: the first computes and commits, the rest wait and read the
        committed value. ttl_ms=None stores the entry without expiry.
        """
        ...

    async def get(self, key: str) -> Any:
        """Return the live value for key or None."""
        ...

    async def delete(self, key: str) -> bool:
        """Remove key. Returns True if an entry was removed."""
        ...

    async def delete_many(self, keys: list[str]) -> int:
        """Remove keys. Returns the number of entries removed."""
        ...

    def iter_keys(self, match_prefix: str | None = None) -> AsyncIterator[str]:
        """Yield stored keys (full scan).

        match_prefix is a hint a store may use to narrow the scan; callers
        still check the prefix themselves.
        """
        ...

    async def clear(self) -> int:
        """Remove every entry. Returns the number of entries removed."""
        ...
