"""Redis-backed memo store.

Provides fetch-or-populate over redis.asyncio with per-key mutual
exclusion across processes. The first caller of a missing key takes a
lease lock (SET NX PX on lock:<key>), computes while renewing the lease,
commits, and releases the lease with a token check. Other callers in the same process wait on a
local per-key lock; callers in other processes poll until the value is
committed or the lease lapses.

Values are pickled; the core never sees the serialized form. Any Redis
error is fatal for the operation (StoreUnavailableError), with no retry
and no uncached fallback.
"""

from __future__ import annotations

import asyncio
import logging
import os
import pickle
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import redis.asyncio as redis

from memocache.core.config import get_settings
from memocache.core.constants import INVALIDATION_CHUNK_SIZE
from memocache.infrastructure.cache.cache_protocol import Compute
from memocache.infrastructure.cache.keys import lock_key, namespace_prefix
from memocache.infrastructure.cache.key_locks import KeyLockTable
from memocache.infrastructure.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)

# Delete the lease only if we still own it (token match).
_LUA_RELEASE = "if redis.call('get', KEYS[1]) == ARGV[1] then return redis.call('del', KEYS[1]) else return 0 end"

# Push the lease expiry out only while we still own it.
_LUA_RENEW = "if redis.call('get', KEYS[1]) == ARGV[1] then return redis.call('pexpire', KEYS[1], ARGV[2]) else return 0 end"

_GLOB_SPECIAL = frozenset("*?[]\\")


def _escape_glob(value: str) -> str:
    """Escape Redis MATCH glob characters so value matches literally."""
    return "".join(f"\\{ch}" if ch in _GLOB_SPECIAL else ch for ch in value)


class RedisCacheStore:
    """Async Redis cache store implementing CacheStore.

    Uses memocache.core.config for connection settings. The client is
    created lazily on first use; call connect() at startup to fail fast
    when Redis is unreachable, and disconnect() at shutdown.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        *,
        lock_timeout_ms: int | None = None,
        poll_interval_ms: int | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            redis_client: Optional Redis client for testing or DI. Must not
                decode responses (values are pickled bytes).
            lock_timeout_ms: Lease lifetime for an in-flight computation.
            poll_interval_ms: Wait between checks while another process computes.
        """
        self.redis = redis_client
        self.settings = get_settings()
        self.lock_timeout_ms = lock_timeout_ms or self.settings.memo_lock_timeout_ms
        self.poll_interval_ms = poll_interval_ms or self.settings.memo_lock_poll_interval_ms
        self._locks = KeyLockTable()

    def _client(self) -> redis.Redis:
        if self.redis is None:
            self.redis = redis.Redis(
                host=self.settings.redis_host,
                port=self.settings.redis_port,
                db=self.settings.redis_db,
                password=self.settings.redis_password.get_secret_value() if self.settings.redis_password else None,
                decode_responses=False,
                socket_connect_timeout=self.settings.redis_socket_connect_timeout,
                socket_keepalive=True,
            )
        return self.redis

    @asynccontextmanager
    async def _guard(self, operation: str, key: str | None = None) -> AsyncIterator[None]:
        try:
            yield
        except redis.RedisError as e:
            logger.exception("Cache %s error for key %s", operation, key)
            raise StoreUnavailableError(operation, str(e), key) from e

    async def connect(self) -> None:
        """Create the client and ping Redis. Raises StoreUnavailableError if unreachable."""
        async with self._guard("connect"):
            await self._client().ping()
        logger.info(
            "Redis memo store connected: %s:%s",
            self.settings.redis_host,
            self.settings.redis_port,
        )

    async def disconnect(self) -> None:
        """Close the Redis connection. Call on shutdown."""
        if self.redis is not None:
            await self.redis.aclose()
            self.redis = None
            logger.info("Redis memo store disconnected")

    def is_available(self) -> bool:
        """Return True if a client has been created."""
        return self.redis is not None

    async def _read(self, key: str) -> tuple[bool, Any]:
        async with self._guard("get", key):
            payload = await self._client().get(key)
        if payload is None:
            return False, None
        try:
            return True, pickle.loads(payload)
        except (pickle.UnpicklingError, EOFError, AttributeError, ImportError) as e:
            logger.exception("Cache payload for key %s could not be decoded", key)
            raise StoreUnavailableError("get", f"undecodable payload: {e}", key) from e

    async def _write(self, key: str, value: Any, ttl_ms: int | None) -> None:
        payload = pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)
        async with self._guard("set", key):
            if ttl_ms is None:
                await self._client().set(key, payload)
            else:
                await self._client().set(key, payload, px=ttl_ms)
        logger.debug("Cache SET: %s (TTL: %sms)", key, ttl_ms)

    async def _try_lease(self, key: str) -> str | None:
        token = os.urandom(16).hex()
        async with self._guard("lock", key):
            acquired = await self._client().set(lock_key(key), token, nx=True, px=self.lock_timeout_ms)
        return token if acquired else None

    async def _release_lease(self, key: str, token: str) -> None:
        async with self._guard("unlock", key):
            await self._client().eval(_LUA_RELEASE, 1, lock_key(key), token)

    async def _renew_lease(self, key: str, token: str) -> None:
        interval = self.lock_timeout_ms / 3000
        while True:
            await asyncio.sleep(interval)
            async with self._guard("renew", key):
                renewed = await self._client().eval(_LUA_RENEW, 1, lock_key(key), token, self.lock_timeout_ms)
            if not renewed:
                logger.warning("Lease for %s lost while computing", key)
                return

    async def _fetch_leased(self, key: str, compute: Compute, ttl_ms: int | None) -> Any:
        while True:
            found, value = await self._read(key)
            if found:
                return value
            token = await self._try_lease(key)
            if token is None:
                # Another process is computing this key.
                await asyncio.sleep(self.poll_interval_ms / 1000)
                continue
            renewer = asyncio.create_task(self._renew_lease(key, token))
            try:
                found, value = await self._read(key)
                if found:
                    return value
                value = await compute()
                await self._write(key, value, ttl_ms)
                return value
            finally:
                renewer.cancel()
                # Renewal failures were already logged by _guard.
                await asyncio.gather(renewer, return_exceptions=True)
                await self._release_lease(key, token)

    async def fetch(self, key: str, compute: Compute, ttl_ms: int | None = None) -> Any:
        """Fetch-or-populate key with single-flight across processes.

        The lease is renewed every third of lock_timeout_ms while compute
        runs. If this process stalls or loses Redis for longer than
        lock_timeout_ms the lease lapses and another process may compute
        the same key; its result and ours both get written, last one wins.
        """
        found, value = await self._read(key)
        if found:
            return value
        async with self._locks.hold(key):
            return await self._fetch_leased(key, compute, ttl_ms)

    async def get(self, key: str) -> Any:
        _, value = await self._read(key)
        return value

    async def delete(self, key: str) -> bool:
        async with self._guard("delete", key):
            removed = await self._client().delete(key)
        logger.debug("Cache DELETE: %s", key)
        return bool(removed)

    async def delete_many(self, keys: list[str]) -> int:
        """Delete keys with batched UNLINK (non-blocking on the server)."""
        deleted = 0
        for start in range(0, len(keys), INVALIDATION_CHUNK_SIZE):
            chunk = keys[start : start + INVALIDATION_CHUNK_SIZE]
            async with self._guard("delete_many"):
                async with self._client().pipeline(transaction=False) as pipe:
                    pipe.unlink(*chunk)
                    results = await pipe.execute()
            deleted += sum(int(r or 0) for r in results)
        return deleted

    async def iter_keys(self, match_prefix: str | None = None) -> AsyncIterator[str]:
        """Yield memo keys using SCAN (never KEYS) limited to the memo namespace."""
        pattern = _escape_glob(match_prefix or namespace_prefix()) + "*"
        async with self._guard("scan"):
            async for raw in self._client().scan_iter(match=pattern):
                yield raw.decode("utf-8") if isinstance(raw, bytes) else raw

    async def clear(self) -> int:
        """Delete every memo entry (memo:*); other keys in the database are kept."""
        keys = [key async for key in self.iter_keys()]
        deleted = await self.delete_many(keys)
        logger.warning("Cache CLEARED: %s memo keys deleted", deleted)
        return deleted
