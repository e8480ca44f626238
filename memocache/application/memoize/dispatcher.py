"""Memoized function dispatcher: the public, cache-aware entry point.

One dispatcher exists per (owner, function). It walks its variants in
declaration order and the first one that accepts the call wins. A call
that omits defaulted parameters is first normalized by the variant that
accepts it, then forwarded as a full-arity call through every variant
again, the same way a shorter overload delegates to the full one. The
winning variant's normalized arguments are keyed and fetched through the
cache gateway, which only runs the hidden body on a miss.
"""

from __future__ import annotations

import functools
import types
from collections.abc import Sequence
from typing import Any

from memocache.application.memoize.variant import Variant
from memocache.application.services.cache_gateway import CacheGateway
from memocache.application.services.invalidation_service import InvalidationService
from memocache.application.services.key_service import derive_key
from memocache.core.store_registry import resolve_store
from memocache.domain.exceptions import NoMatchingVariantError
from memocache.domain.value_objects.cache_key import CacheKey
from memocache.infrastructure.cache.cache_protocol import CacheStore


class MemoizedFunction:
    """Awaitable dispatcher over the variants of one memoized function.

    Calling it returns a coroutine; await it for the (possibly cached)
    result. The original bodies are not reachable from here except
    through a cache fetch. Declared inside a class body it binds like a
    method, so the instance becomes part of the key and must be encodable.
    """

    def __init__(self, owner: str, name: str, cache: str | CacheStore) -> None:
        """Create an empty dispatcher.

        Args:
            owner: Owner identity (top level of the key hierarchy).
            name: Function identity shared by every variant.
            cache: Store name or store instance, fixed for the function's lifetime.
        """
        self.owner = owner
        self.name = name
        self.cache = cache
        self._variants: list[Variant] = []

    @property
    def variant_count(self) -> int:
        return len(self._variants)

    @property
    def expirations(self) -> tuple[int | None, ...]:
        """TTL in milliseconds of each variant, in declaration order."""
        return tuple(variant.ttl_ms for variant in self._variants)

    @property
    def store(self) -> CacheStore:
        return resolve_store(self.cache)

    def add_variant(self, variant: Variant) -> None:
        """Append a clause; the first one also provides name and docstring."""
        if not self._variants:
            for attr in functools.WRAPPER_ASSIGNMENTS:
                if hasattr(variant.impl, attr):
                    setattr(self, attr, getattr(variant.impl, attr))
        self._variants.append(variant)

    def _resolve(self, args: Sequence[Any], kwargs: dict[str, Any]) -> tuple[Variant, tuple[Any, ...]]:
        for variant in self._variants:
            bound = variant.bind(args, kwargs)
            if bound is None:
                continue
            values, used_defaults = bound
            if not variant.matches(values):
                continue
            if used_defaults:
                # Forward to the full arity; each hop supplies strictly more arguments.
                full_args, full_kwargs = variant.as_call(values)
                return self._resolve(full_args, full_kwargs)
            return variant, values
        raise NoMatchingVariantError(self.owner, self.name, len(args) + len(kwargs))

    def key_for(self, *args: Any, **kwargs: Any) -> CacheKey:
        """Return the cache key a call with these arguments would use."""
        _, values = self._resolve(args, kwargs)
        return derive_key(self.owner, self.name, values)

    async def __call__(self, *args: Any, **kwargs: Any) -> Any:
        variant, values = self._resolve(args, kwargs)
        key = derive_key(self.owner, self.name, values)
        gateway = CacheGateway(self.store)
        return await gateway.fetch_or_populate(key, variant.ttl_ms, lambda: variant.invoke(values))

    async def invalidate(self, *args: Any, **kwargs: Any) -> int:
        """Drop the cached entry for one call (arguments normalized like a call)."""
        _, values = self._resolve(args, kwargs)
        return await InvalidationService(self.store).invalidate_exact(self.owner, self.name, values)

    async def invalidate_all(self) -> int:
        """Drop every cached entry of this function."""
        return await InvalidationService(self.store).invalidate_function(self.owner, self.name)

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        # Declared in a class body: bind like a method, with self as the first argument.
        if instance is None:
            return self
        return types.MethodType(self, instance)

    def __repr__(self) -> str:
        return f"<MemoizedFunction {self.owner}.{self.name} ({len(self._variants)} variant(s))>"
