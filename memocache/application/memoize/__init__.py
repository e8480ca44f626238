"""Memoize declaration API: variants, dispatchers, and the Memoizer."""

from memocache.application.memoize.dispatcher import MemoizedFunction
from memocache.application.memoize.memoizer import (
    Memoizer,
    defmemo,
    get_memoized,
    invalidate,
)
from memocache.application.memoize.variant import ANY, Deferred, Variant, deferred

__all__ = [
    "ANY",
    "Deferred",
    "MemoizedFunction",
    "Memoizer",
    "Variant",
    "defmemo",
    "deferred",
    "get_memoized",
    "invalidate",
]
