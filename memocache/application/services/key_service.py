"""Key service: canonical argument encoding and cache key derivation.

Keys are derived from (owner, function, argument tuple). Arguments are
turned into a tagged, JSON-compatible tree and serialized as canonical
JSON, so value-equal arguments produce the same key regardless of dict
insertion order or set iteration order. Types are kept apart (1, 1.0 and
True key differently; a list never keys like a tuple).

The tree is reduced to a short blake2b digest to bound key length. Two
different argument tuples could in theory share a digest and therefore a
cache entry; that risk is accepted in exchange for fixed-size keys.
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
import math
from collections.abc import Sequence
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from pathlib import PurePath
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from memocache.core.constants import ARGS_DIGEST_SIZE
from memocache.domain.exceptions import ArgumentEncodingError
from memocache.domain.value_objects.cache_key import CacheKey


def _type_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def _sort_token(node: Any) -> str:
    return json.dumps(node, sort_keys=True, separators=(",", ":"))


def canonicalize(value: Any) -> Any:
    """Convert a value into a tagged, JSON-serializable tree.

    Scalars map to themselves; everything else becomes [tag, ...] so
    that differently-typed containers never encode alike.

    Raises:
        ArgumentEncodingError: If the value's type has no canonical form.
    """
    # Enum before str/int: IntEnum and StrEnum members are also ints/strs.
    if isinstance(value, Enum):
        return ["e", _type_name(type(value)), canonicalize(value.value)]
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        if math.isfinite(value):
            return value
        return ["f", repr(value)]
    if isinstance(value, tuple):
        return ["t", [canonicalize(item) for item in value]]
    if isinstance(value, list):
        return ["l", [canonicalize(item) for item in value]]
    if isinstance(value, dict):
        pairs = [[canonicalize(k), canonicalize(v)] for k, v in value.items()]
        pairs.sort(key=lambda pair: _sort_token(pair[0]))
        return ["d", pairs]
    if isinstance(value, (set, frozenset)):
        members = [canonicalize(item) for item in value]
        members.sort(key=_sort_token)
        return ["s", members]
    if isinstance(value, (bytes, bytearray)):
        return ["b", bytes(value).hex()]
    # datetime before date: datetime is a date subclass.
    if isinstance(value, datetime):
        return ["dt", value.isoformat()]
    if isinstance(value, date):
        return ["da", value.isoformat()]
    if isinstance(value, time):
        return ["tm", value.isoformat()]
    if isinstance(value, timedelta):
        return ["td", [value.days, value.seconds, value.microseconds]]
    if isinstance(value, Decimal):
        return ["dec", str(value.normalize())]
    if isinstance(value, UUID):
        return ["u", str(value)]
    if isinstance(value, PurePath):
        return ["p", _type_name(type(value)), str(value)]
    if isinstance(value, BaseModel):
        return ["m", _type_name(type(value)), canonicalize(value.model_dump())]
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        fields = {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
        return ["dc", _type_name(type(value)), canonicalize(fields)]
    raise ArgumentEncodingError(_type_name(type(value)))


class KeyService:
    """Single source of truth for memo key derivation.

    Pure: the same (owner, function, args) always yields the same key,
    in any process.
    """

    def __init__(self, digest_size: int = ARGS_DIGEST_SIZE) -> None:
        self.digest_size = digest_size

    @staticmethod
    def canonical_json(args: Sequence[Any]) -> str:
        """Canonical JSON for an argument tuple (deterministic across calls)."""
        return _sort_token(canonicalize(tuple(args)))

    def digest(self, args: Sequence[Any]) -> str:
        """Fixed-size hex digest of the canonical argument encoding."""
        encoded = self.canonical_json(args).encode("utf-8")
        return hashlib.blake2b(encoded, digest_size=self.digest_size).hexdigest()

    def derive(self, owner: str, function: str, args: Sequence[Any]) -> CacheKey:
        """Derive the structured key for one call."""
        return CacheKey(owner=owner, function=function, digest=self.digest(args))


_default_key_service = KeyService()


def derive_key(owner: str, function: str, args: Sequence[Any]) -> CacheKey:
    """Derive a cache key with the default key service."""
    return _default_key_service.derive(owner, function, args)
