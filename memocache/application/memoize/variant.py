"""Variant declarations: one guarded/pattern-matched clause of a memoized function.

A variant holds the original body (the hidden implementation), its
signature, an optional per-position pattern, an optional guard, and its
own TTL. Variants never change after declaration.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from memocache.domain.exceptions import InvalidDeclarationError

_SUPPORTED_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.KEYWORD_ONLY,
)


class _Any:
    """Wildcard pattern: matches any value in its position."""

    def __repr__(self) -> str:
        return "ANY"


ANY = _Any()


class Deferred:
    """Default value computed at call time instead of once at definition.

    The thunk may take earlier parameters of the function by name:

        def list_items(page, limit=deferred(lambda page: 10 if page == 1 else 50)): ...
    """

    def __init__(self, thunk: Callable[..., Any]) -> None:
        self.thunk = thunk
        self.parameters = _required_parameters(thunk)

    def resolve(self, earlier: dict[str, Any]) -> Any:
        return self.thunk(**{name: earlier[name] for name in self.parameters})

    def __repr__(self) -> str:
        return f"deferred({self.thunk!r})"


def _required_parameters(thunk: Callable[..., Any]) -> tuple[str, ...]:
    """Names the thunk needs from earlier parameters (those without a default)."""
    try:
        signature = inspect.signature(thunk)
    except (ValueError, TypeError):
        # Builtins such as dict or list expose no signature; call them bare.
        return ()
    return tuple(
        name
        for name, param in signature.parameters.items()
        if param.default is inspect.Parameter.empty
        and param.kind in (inspect.Parameter.POSITIONAL_OR_KEYWORD, inspect.Parameter.KEYWORD_ONLY)
    )


def deferred(thunk: Callable[..., Any]) -> Deferred:
    """Mark a parameter default to be evaluated on every call that omits it."""
    return Deferred(thunk)


def _pattern_matches(pattern: Any, value: Any) -> bool:
    if pattern is ANY:
        return True
    if isinstance(pattern, type):
        return isinstance(value, pattern)
    return type(value) is type(pattern) and value == pattern


def _validate_ttl(function: str, ttl_ms: Any) -> None:
    if ttl_ms is None:
        return
    if isinstance(ttl_ms, bool) or not isinstance(ttl_ms, int) or ttl_ms <= 0:
        raise InvalidDeclarationError(
            function, f"expires_in must be a positive number of milliseconds, got {ttl_ms!r}"
        )


@dataclass(frozen=True)
class Variant:
    """One clause of a memoized function.

    Attributes:
        function: Function identity shared by all clauses.
        impl: The original body; only reachable through the dispatcher.
        signature: Signature of impl, used to bind and normalize calls.
        ttl_ms: Entry lifetime in milliseconds, or None for permanent.
        guard: Optional predicate called with the normalized arguments.
        pattern: Optional per-position patterns (ANY, a type, or a literal).
    """

    function: str
    impl: Callable[..., Any]
    signature: inspect.Signature
    ttl_ms: int | None = None
    guard: Callable[..., Any] | None = None
    pattern: tuple[Any, ...] | None = None

    @classmethod
    def from_function(
        cls,
        impl: Callable[..., Any],
        *,
        function: str,
        ttl_ms: int | None = None,
        guard: Callable[..., Any] | None = None,
        pattern: Sequence[Any] | None = None,
    ) -> Variant:
        """Validate a declaration and build its variant.

        Raises:
            InvalidDeclarationError: Unsupported body, parameter kind,
                deferred default, pattern length, guard, or TTL.
        """
        if inspect.isgeneratorfunction(impl) or inspect.isasyncgenfunction(impl):
            raise InvalidDeclarationError(function, "generator functions cannot be memoized")
        _validate_ttl(function, ttl_ms)
        if guard is not None:
            if not callable(guard):
                raise InvalidDeclarationError(function, "guard must be callable")
            if inspect.iscoroutinefunction(guard):
                raise InvalidDeclarationError(function, "guard must be a plain function, not a coroutine")

        signature = inspect.signature(impl)
        seen: list[str] = []
        for name, param in signature.parameters.items():
            if param.kind not in _SUPPORTED_KINDS:
                raise InvalidDeclarationError(
                    function, f"parameter {name!r} uses unsupported kind {param.kind.description}"
                )
            if isinstance(param.default, Deferred):
                unknown = [p for p in param.default.parameters if p not in seen]
                if unknown:
                    raise InvalidDeclarationError(
                        function,
                        f"deferred default of {name!r} refers to {unknown}, "
                        "which are not earlier parameters",
                    )
            seen.append(name)

        if pattern is not None:
            pattern = tuple(pattern)
            if len(pattern) > len(signature.parameters):
                raise InvalidDeclarationError(
                    function,
                    f"pattern has {len(pattern)} positions but the function takes "
                    f"{len(signature.parameters)} parameters",
                )

        return cls(
            function=function,
            impl=impl,
            signature=signature,
            ttl_ms=ttl_ms,
            guard=guard,
            pattern=pattern,
        )

    @property
    def is_async(self) -> bool:
        return inspect.iscoroutinefunction(self.impl)

    def bind(self, args: Sequence[Any], kwargs: dict[str, Any]) -> tuple[tuple[Any, ...], bool] | None:
        """Normalize a call to the full argument tuple, or None if it does not fit.

        Omitted parameters are filled from their defaults in signature
        order; deferred defaults are evaluated now, seeing the earlier
        values.

        Returns:
            (values, used_defaults), or None when the signature rejects the call.
        """
        try:
            bound = self.signature.bind(*args, **kwargs)
        except TypeError:
            return None
        values: list[Any] = []
        earlier: dict[str, Any] = {}
        used_defaults = False
        for name, param in self.signature.parameters.items():
            if name in bound.arguments:
                value = bound.arguments[name]
            else:
                used_defaults = True
                value = param.default
                if isinstance(value, Deferred):
                    value = value.resolve(earlier)
            values.append(value)
            earlier[name] = value
        return tuple(values), used_defaults

    def as_call(self, values: Sequence[Any]) -> tuple[tuple[Any, ...], dict[str, Any]]:
        """Split a normalized tuple into (args, kwargs) for this signature."""
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for (name, param), value in zip(self.signature.parameters.items(), values):
            if param.kind is inspect.Parameter.KEYWORD_ONLY:
                kwargs[name] = value
            else:
                args.append(value)
        return tuple(args), kwargs

    def matches(self, values: Sequence[Any]) -> bool:
        """Test pattern then guard against a normalized argument tuple."""
        if self.pattern is not None:
            for pattern, value in zip(self.pattern, values):
                if not _pattern_matches(pattern, value):
                    return False
        if self.guard is not None:
            args, kwargs = self.as_call(values)
            return bool(self.guard(*args, **kwargs))
        return True

    async def invoke(self, values: Sequence[Any]) -> Any:
        """Run the hidden implementation with a normalized argument tuple.

        Plain bodies run in a worker thread so a blocking body never stalls
        callers of other keys.
        """
        args, kwargs = self.as_call(values)
        if self.is_async:
            return await self.impl(*args, **kwargs)
        return await asyncio.to_thread(self.impl, *args, **kwargs)
