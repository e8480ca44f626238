"""Infrastructure exceptions for cache store operations.

Store errors extend MemoException so callers handle declaration,
dispatch, and store failures consistently. They are fatal: the core
never retries and never falls back to uncached computation.
"""

from memocache.domain.exceptions import MemoException


class StoreException(MemoException):
    """Base exception for cache store operations."""


class StoreUnavailableError(StoreException):
    """Store unreachable or an operation on it failed."""

    def __init__(self, operation: str, reason: str, key: str | None = None) -> None:
        details = {"operation": operation, "reason": reason}
        if key is not None:
            details["key"] = key
        super().__init__(
            f"Cache store {operation} failed: {reason}",
            "STORE_UNAVAILABLE",
            details,
        )


class StoreNotFoundError(StoreException):
    """No store registered under the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"No cache store registered as {name!r}",
            "STORE_NOT_FOUND",
            {"name": name},
        )
