"""Declaration API: register memoized functions and invalidate them.

Usage:

    from memocache import Memoizer, deferred

    memo = Memoizer(__name__)                    # default store
    reports = Memoizer(__name__, cache="reports")  # per-owner store override

    @memo.defmemo(expires_in=60_000)
    def get_user(user_id):
        return repo.get(user_id)

    @memo.defmemo(match=("",), expires_in=60_000)
    def fetch(key):
        return default_value()

    @memo.defmemo(when=lambda key: isinstance(key, str), expires_in=60_000)
    def fetch(key):
        return do_fetch(key)

    @memo.defmemo  # permanent
    def get_config(key, section="main"):
        return load_config(key, section)

    await fetch("")          # first variant
    await invalidate(__name__, "get_user", [123])
    await invalidate(__name__, "get_user")
    await invalidate(__name__)

Redefining a name appends a variant to the same dispatcher, so the module
attribute always ends up bound to that shared dispatcher.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from types import ModuleType
from typing import Any

from memocache.application.memoize.dispatcher import MemoizedFunction
from memocache.application.memoize.variant import Variant
from memocache.application.services.invalidation_service import InvalidationService
from memocache.core.store_registry import default_cache, resolve_store
from memocache.domain.exceptions import InvalidDeclarationError
from memocache.infrastructure.cache.cache_protocol import CacheStore
from memocache.infrastructure.cache.keys import function_prefix

_functions: dict[tuple[str, str], MemoizedFunction] = {}
_functions_lock = threading.Lock()


def get_memoized(owner: str, name: str) -> MemoizedFunction | None:
    """Return the registered dispatcher for (owner, name), if any."""
    with _functions_lock:
        return _functions.get((owner, name))


def _owner_name(owner: str | ModuleType) -> str:
    return owner.__name__ if isinstance(owner, ModuleType) else owner


class Memoizer:
    """Declares memoized functions for one owner with one store choice.

    Args:
        owner: Owner identity (usually __name__ or a module). None uses
            each decorated function's __module__.
        cache: Store name or store instance for every function declared
            here. None selects the default store name at declaration time.
    """

    def __init__(
        self,
        owner: str | ModuleType | None = None,
        *,
        cache: str | CacheStore | None = None,
    ) -> None:
        self.owner = _owner_name(owner) if owner is not None else None
        self.cache = cache

    def defmemo(
        self,
        fn: Callable[..., Any] | None = None,
        *,
        expires_in: int | None = None,
        expires: int | None = None,
        when: Callable[..., Any] | None = None,
        match: Sequence[Any] | None = None,
        name: str | None = None,
    ) -> Any:
        """Decorator declaring one variant of a memoized function.

        Usable bare (@memo.defmemo) or with options.

        Args:
            fn: The function body (when used bare).
            expires_in: TTL in milliseconds; None caches permanently.
            expires: Alias of expires_in.
            when: Guard called with the normalized arguments.
            match: Per-position patterns: ANY, a type (isinstance) or a literal.
            name: Function identity; defaults to fn.__qualname__.

        Returns:
            The shared MemoizedFunction dispatcher for the function identity.

        Raises:
            InvalidDeclarationError: If the declaration cannot be registered.
        """

        def decorator(func: Callable[..., Any]) -> MemoizedFunction:
            return self._register(func, expires_in=expires_in, expires=expires, when=when, match=match, name=name)

        if fn is not None:
            return decorator(fn)
        return decorator

    def _register(
        self,
        func: Callable[..., Any],
        *,
        expires_in: int | None,
        expires: int | None,
        when: Callable[..., Any] | None,
        match: Sequence[Any] | None,
        name: str | None,
    ) -> MemoizedFunction:
        function = name or getattr(func, "__qualname__", None) or getattr(func, "__name__", "")
        owner = self.owner or func.__module__
        if expires_in is not None and expires is not None and expires_in != expires:
            raise InvalidDeclarationError(function, "give either expires_in or expires, not both")
        ttl_ms = expires_in if expires_in is not None else expires
        try:
            function_prefix(owner, function)
        except ValueError as e:
            raise InvalidDeclarationError(function, str(e)) from e

        variant = Variant.from_function(func, function=function, ttl_ms=ttl_ms, guard=when, pattern=match)
        cache = self.cache if self.cache is not None else default_cache()

        with _functions_lock:
            dispatcher = _functions.get((owner, function))
            if dispatcher is None:
                dispatcher = _functions[(owner, function)] = MemoizedFunction(owner, function, cache)
            elif dispatcher.cache != cache:
                raise InvalidDeclarationError(
                    function, "all variants of a function must use the same cache store"
                )
            dispatcher.add_variant(variant)
        return dispatcher

    async def invalidate(self, function: str | MemoizedFunction | None = None, args: Sequence[Any] | None = None) -> int:
        """Invalidate this owner's entries (see module-level invalidate)."""
        if self.owner is None:
            raise ValueError("Memoizer without a fixed owner cannot invalidate by owner")
        return await invalidate(self, function, args)


_default_memoizer = Memoizer()


def defmemo(
    fn: Callable[..., Any] | None = None,
    *,
    expires_in: int | None = None,
    expires: int | None = None,
    when: Callable[..., Any] | None = None,
    match: Sequence[Any] | None = None,
    name: str | None = None,
) -> Any:
    """Declare a memoized function owned by its module, on the default store."""
    return _default_memoizer.defmemo(
        fn, expires_in=expires_in, expires=expires, when=when, match=match, name=name
    )


async def invalidate(
    owner: str | ModuleType | Memoizer,
    function: str | MemoizedFunction | None = None,
    args: Sequence[Any] | None = None,
    *,
    cache: str | CacheStore | None = None,
) -> int:
    """Invalidate cached results.

        await invalidate(MyModule)                      # every function of the owner
        await invalidate(MyModule, "get_user")          # every call of one function
        await invalidate(MyModule, "get_user", [123])   # one normalized argument tuple
        await invalidate(MyModule, "get_user", cache="my_cache")

    args must be the full normalized tuple (defaults included); use
    MemoizedFunction.invalidate(...) to normalize a call's arguments.

    Store resolution: explicit cache, else the Memoizer's store, else the
    store the function was declared with, else the default store.

    Returns:
        Number of entries deleted (0 is success).
    """
    store_choice: str | CacheStore | None = cache
    if isinstance(owner, Memoizer):
        if owner.owner is None:
            raise ValueError("Memoizer without a fixed owner cannot invalidate by owner")
        if store_choice is None:
            store_choice = owner.cache
        owner_name = owner.owner
    else:
        owner_name = _owner_name(owner)

    function_name: str | None
    if isinstance(function, MemoizedFunction):
        function_name = function.name
        if store_choice is None:
            store_choice = function.cache
    else:
        function_name = function
        registered = get_memoized(owner_name, function) if function is not None else None
        if store_choice is None and registered is not None:
            store_choice = registered.cache

    service = InvalidationService(resolve_store(store_choice))
    if function_name is None:
        if args is not None:
            raise ValueError("args can only be given together with a function")
        return await service.invalidate_owner(owner_name)
    if args is None:
        return await service.invalidate_function(owner_name, function_name)
    return await service.invalidate_exact(owner_name, function_name, tuple(args))
