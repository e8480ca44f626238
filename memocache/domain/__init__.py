"""Domain layer: value objects and exceptions.

No dependencies on infrastructure. Used by application and
infrastructure layers.
"""

from memocache.domain.exceptions import (
    ArgumentEncodingError,
    InvalidDeclarationError,
    MemoException,
    NoMatchingVariantError,
)
from memocache.domain.value_objects import CacheKey

__all__ = [
    # Exceptions
    "ArgumentEncodingError",
    "InvalidDeclarationError",
    "MemoException",
    "NoMatchingVariantError",
    # Value objects
    "CacheKey",
]
