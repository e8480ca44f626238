"""Store registry tests: named stores, default store creation, resolution."""

import pytest

from memocache.core.store_registry import (
    default_cache,
    get_store,
    list_stores,
    register_store,
    resolve_store,
    unregister_store,
)
from memocache.infrastructure.cache.memory_cache import MemoryCacheStore
from memocache.infrastructure.cache.redis_cache import RedisCacheStore
from memocache.infrastructure.exceptions import StoreNotFoundError


@pytest.fixture
def named_store():
    store = MemoryCacheStore()
    register_store("reports", store)
    yield store
    unregister_store("reports")


def test_default_cache_name_from_settings(monkeypatch) -> None:
    assert default_cache() == "memocache"
    monkeypatch.setenv("MEMO_DEFAULT_CACHE", "app_cache")
    from memocache.core.config import get_settings

    get_settings.cache_clear()
    assert default_cache() == "app_cache"


def test_get_registered_store(named_store) -> None:
    assert get_store("reports") is named_store
    assert "reports" in list_stores()


def test_default_store_is_registered_fixture(memo_store) -> None:
    assert get_store() is memo_store
    assert get_store(default_cache()) is memo_store


def test_unknown_store_raises() -> None:
    with pytest.raises(StoreNotFoundError) as exc_info:
        get_store("nope")
    assert exc_info.value.error_code == "STORE_NOT_FOUND"
    assert exc_info.value.details == {"name": "nope"}


def test_default_store_created_lazily_as_memory() -> None:
    unregister_store(default_cache())
    store = get_store()
    assert isinstance(store, MemoryCacheStore)
    assert get_store() is store


def test_default_store_created_from_redis_backend(monkeypatch) -> None:
    monkeypatch.setenv("MEMO_BACKEND", "redis")
    from memocache.core.config import get_settings

    get_settings.cache_clear()
    unregister_store(default_cache())
    store = get_store()
    assert isinstance(store, RedisCacheStore)
    assert store.is_available() is False
    unregister_store(default_cache())


def test_unregister_returns_store(named_store) -> None:
    assert unregister_store("reports") is named_store
    assert unregister_store("reports") is None
    with pytest.raises(StoreNotFoundError):
        get_store("reports")


def test_resolve_store(named_store, memo_store) -> None:
    other = MemoryCacheStore()
    assert resolve_store(other) is other
    assert resolve_store("reports") is named_store
    assert resolve_store(None) is memo_store
