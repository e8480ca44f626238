"""Domain exceptions for memocache.

Defines errors raised while declaring memoized functions, dispatching
calls, and deriving cache keys. Store failures live in
memocache.infrastructure.exceptions and share the same base.
"""

from typing import Any


class MemoException(Exception):
    """Base exception for all memocache errors.

    All custom exceptions inherit from this class so callers can catch
    every memoization failure in one place.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. owner, function).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class InvalidDeclarationError(MemoException):
    """Raised at decoration time when a memoized function cannot be registered."""

    def __init__(self, function: str, reason: str) -> None:
        super().__init__(
            f"Cannot memoize {function}: {reason}",
            "INVALID_DECLARATION",
            {"function": function, "reason": reason},
        )


class NoMatchingVariantError(MemoException, TypeError):
    """Raised when no declared variant accepts the call's arguments.

    Also a TypeError, matching what Python raises for a call that does
    not fit a function's signature.
    """

    def __init__(self, owner: str, function: str, arity: int) -> None:
        super().__init__(
            f"No variant of {owner}.{function} matches the given {arity} argument(s)",
            "NO_MATCHING_VARIANT",
            {"owner": owner, "function": function, "arity": arity},
        )


class ArgumentEncodingError(MemoException):
    """Raised when an argument has no canonical encoding for key derivation."""

    def __init__(self, type_name: str) -> None:
        super().__init__(
            f"Cannot derive a cache key from argument of type {type_name}",
            "ARGUMENT_ENCODING_ERROR",
            {"type": type_name},
        )
