"""Cache key value object.

A memo key is structured, not an opaque hash: owner, then function, then
the argument digest. The rendered form keeps that order so owner and
owner+function prefixes enumerate exactly the entries beneath them.
"""

from dataclasses import dataclass

from memocache.core.constants import CACHE_KEY_NAMESPACE, CACHE_KEY_SEP


def validate_key_component(value: str, name: str) -> None:
    """Raise ValueError if value is empty or contains the cache key separator.

    Owner "a" must never match entries of owner "a:b", so no component may
    carry CACHE_KEY_SEP.

    Args:
        value: String component used in a cache key.
        name: Name of the component (for error message).

    Raises:
        ValueError: If value is empty or contains CACHE_KEY_SEP.
    """
    if not value:
        raise ValueError(f"Cache key component {name!r} must be a non-empty string")
    if CACHE_KEY_SEP in value:
        raise ValueError(
            f"Cache key component {name!r} must not contain separator {CACHE_KEY_SEP!r}"
        )


@dataclass(frozen=True)
class CacheKey:
    """Value object for one memoized call (owner, function, argument digest).

    Immutable and comparable by value; str() gives the key stored in the
    external cache store.
    """

    owner: str
    function: str
    digest: str

    def __post_init__(self) -> None:
        validate_key_component(self.owner, "owner")
        validate_key_component(self.function, "function")
        validate_key_component(self.digest, "digest")

    def render(self) -> str:
        """Return the stored form: memo:<owner>:<function>:<digest>."""
        return CACHE_KEY_SEP.join((CACHE_KEY_NAMESPACE, self.owner, self.function, self.digest))

    def __str__(self) -> str:
        return self.render()
