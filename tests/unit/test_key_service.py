"""Tests for KeyService (canonical argument encoding and key derivation)."""

import enum
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from uuid import UUID

import pytest
from pydantic import BaseModel

from memocache.application.services.key_service import (
    KeyService,
    canonicalize,
    derive_key,
)
from memocache.domain.exceptions import ArgumentEncodingError
from memocache.domain.value_objects.cache_key import CacheKey


class Color(enum.Enum):
    RED = 1
    BLUE = 2


class Size(enum.IntEnum):
    SMALL = 1


@dataclass
class Point:
    x: int
    y: int


class User(BaseModel):
    id: int
    name: str


class TestCanonicalize:
    """Arguments map to a tagged tree; types stay apart."""

    def test_scalars_pass_through(self) -> None:
        assert canonicalize(None) is None
        assert canonicalize(True) is True
        assert canonicalize(5) == 5
        assert canonicalize("x") == "x"
        assert canonicalize(1.5) == 1.5

    def test_non_finite_float_tagged(self) -> None:
        assert canonicalize(float("inf")) == ["f", "inf"]
        assert canonicalize(float("nan")) == ["f", "nan"]

    def test_list_and_tuple_tagged_differently(self) -> None:
        assert canonicalize([1, 2]) == ["l", [1, 2]]
        assert canonicalize((1, 2)) == ["t", [1, 2]]

    def test_dict_pairs_sorted(self) -> None:
        assert canonicalize({"b": 1, "a": 2}) == ["d", [["a", 2], ["b", 1]]]

    def test_set_members_sorted(self) -> None:
        assert canonicalize({3, 1, 2}) == ["s", [1, 2, 3]]
        assert canonicalize(frozenset({2, 1})) == canonicalize({1, 2})

    def test_bytes_hex(self) -> None:
        assert canonicalize(b"\x01\xff") == ["b", "01ff"]
        assert canonicalize(bytearray(b"\x01\xff")) == canonicalize(b"\x01\xff")

    def test_enum_before_int(self) -> None:
        assert canonicalize(Size.SMALL) != canonicalize(1)
        assert canonicalize(Color.RED)[0] == "e"

    def test_datetime_before_date(self) -> None:
        dt = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        assert canonicalize(dt) == ["dt", dt.isoformat()]
        assert canonicalize(date(2024, 1, 2)) == ["da", "2024-01-02"]

    def test_misc_value_types(self) -> None:
        assert canonicalize(timedelta(days=1, seconds=2)) == ["td", [1, 2, 0]]
        assert canonicalize(Decimal("1.50")) == canonicalize(Decimal("1.5"))
        uid = UUID("12345678-1234-5678-1234-567812345678")
        assert canonicalize(uid) == ["u", str(uid)]

    def test_dataclass_and_model(self) -> None:
        assert canonicalize(Point(1, 2))[0] == "dc"
        assert canonicalize(User(id=1, name="a"))[0] == "m"
        assert canonicalize(Point(1, 2)) == canonicalize(Point(1, 2))

    def test_unsupported_type_raises(self) -> None:
        with pytest.raises(ArgumentEncodingError) as exc_info:
            canonicalize(object())
        assert exc_info.value.error_code == "ARGUMENT_ENCODING_ERROR"
        assert exc_info.value.details["type"] == "builtins.object"

    def test_unsupported_nested_type_raises(self) -> None:
        with pytest.raises(ArgumentEncodingError):
            canonicalize([1, {"k": lambda: None}])


class TestKeyServiceDigest:
    """Digests are deterministic and fixed-size."""

    def test_canonical_json_no_spaces(self) -> None:
        out = KeyService.canonical_json((1, "a"))
        assert " " not in out
        assert out == '["t",[1,"a"]]'

    def test_deterministic(self) -> None:
        svc = KeyService()
        assert svc.digest((1, {"a": [1, 2]})) == svc.digest((1, {"a": [1, 2]}))

    def test_dict_order_does_not_matter(self) -> None:
        svc = KeyService()
        assert svc.digest(({"a": 1, "b": 2},)) == svc.digest(({"b": 2, "a": 1},))

    def test_typed_values_differ(self) -> None:
        svc = KeyService()
        assert svc.digest((1,)) != svc.digest((1.0,))
        assert svc.digest((1,)) != svc.digest((True,))
        assert svc.digest(([1],)) != svc.digest(((1,),))

    def test_positions_matter(self) -> None:
        svc = KeyService()
        assert svc.digest((1, 2)) != svc.digest((2, 1))

    def test_digest_size(self) -> None:
        assert len(KeyService().digest((1,))) == 16
        assert len(KeyService(digest_size=16).digest((1,))) == 32

    def test_empty_args(self) -> None:
        assert len(KeyService().digest(())) == 16


class TestDeriveKey:
    """Keys carry owner and function before the digest."""

    def test_render_structure(self) -> None:
        key = derive_key("billing", "get_invoice", (42,))
        assert isinstance(key, CacheKey)
        assert key.owner == "billing"
        assert key.function == "get_invoice"
        assert str(key).startswith("memo:billing:get_invoice:")
        assert str(key) == f"memo:billing:get_invoice:{key.digest}"

    def test_same_args_different_function(self) -> None:
        a = derive_key("billing", "f", (1,))
        b = derive_key("billing", "g", (1,))
        assert a.digest == b.digest
        assert a != b

    def test_equal_keys_compare_equal(self) -> None:
        assert derive_key("o", "f", (1, "x")) == derive_key("o", "f", (1, "x"))
