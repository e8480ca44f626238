"""Memoizer declaration tests: options, store binding, rejected declarations."""

import pytest

from memocache.application.memoize.dispatcher import MemoizedFunction
from memocache.application.memoize.memoizer import Memoizer, get_memoized, invalidate
from memocache.domain.exceptions import InvalidDeclarationError
from memocache.infrastructure.cache.memory_cache import MemoryCacheStore


class TestDeclare:
    """defmemo works bare and with options."""

    def test_bare_decorator(self) -> None:
        memo = Memoizer("unit_bare")

        @memo.defmemo
        def f(x):
            """Doc for f."""
            return x

        assert isinstance(f, MemoizedFunction)
        assert f.owner == "unit_bare"
        assert f.name.endswith("f")
        assert f.__doc__ == "Doc for f."
        assert f.expirations == (None,)
        assert not hasattr(f, "__wrapped__")

    def test_expires_alias(self) -> None:
        memo = Memoizer("unit_alias")

        @memo.defmemo(expires=500, name="g")
        def g(x):
            return x

        assert g.expirations == (500,)
        assert get_memoized("unit_alias", "g") is g

    def test_matching_expires_and_expires_in_accepted(self) -> None:
        memo = Memoizer("unit_both")

        @memo.defmemo(expires=500, expires_in=500, name="h")
        def h(x):
            return x

        assert h.expirations == (500,)

    def test_conflicting_expiry_rejected(self) -> None:
        memo = Memoizer("unit_conflict")
        with pytest.raises(InvalidDeclarationError, match="not both"):

            @memo.defmemo(expires=500, expires_in=600, name="h")
            def h(x):
                return x

    def test_separator_in_owner_rejected(self) -> None:
        memo = Memoizer("bad:owner")
        with pytest.raises(InvalidDeclarationError):

            @memo.defmemo(name="f")
            def f(x):
                return x

    def test_separator_in_name_rejected(self) -> None:
        memo = Memoizer("unit_sep")
        with pytest.raises(InvalidDeclarationError):

            @memo.defmemo(name="a:b")
            def f(x):
                return x

    def test_variants_must_share_store(self) -> None:
        @Memoizer("unit_store", cache="one").defmemo(name="f")
        def f(x):
            return x

        with pytest.raises(InvalidDeclarationError, match="same cache store"):

            @Memoizer("unit_store", cache="two").defmemo(name="f")
            def f2(x):
                return x

        assert f.variant_count == 1

    def test_owner_from_module_object(self) -> None:
        import types

        module = types.ModuleType("unit_module_owner")
        assert Memoizer(module).owner == "unit_module_owner"

    def test_repr(self) -> None:
        @Memoizer("unit_repr").defmemo(name="f")
        def f(x):
            return x

        assert repr(f) == "<MemoizedFunction unit_repr.f (1 variant(s))>"


class TestStoreInstance:
    """A store instance can be bound directly."""

    @pytest.mark.asyncio
    async def test_store_instance(self, memo_store) -> None:
        store = MemoryCacheStore()

        @Memoizer("unit_instance", cache=store).defmemo(name="f")
        def f(x):
            return x * 3

        assert await f(2) == 6
        assert len(store) == 1
        assert len(memo_store) == 0
        assert await invalidate("unit_instance", "f", [2]) == 1
        assert len(store) == 0


class TestInvalidateArguments:
    """Owner forms and misuse."""

    @pytest.mark.asyncio
    async def test_memoizer_without_owner_rejected(self) -> None:
        with pytest.raises(ValueError):
            await invalidate(Memoizer())
        with pytest.raises(ValueError):
            await Memoizer().invalidate()
