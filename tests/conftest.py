"""Pytest configuration and fixtures for memocache.

Every test gets a fresh in-memory store registered under the default
cache name, so functions declared at module level with the default
store never see entries from another test. Settings are re-read per
test; tests that override env vars with monkeypatch see their values.
"""

from collections.abc import Iterator

import pytest

from memocache.core.config import get_settings
from memocache.core.store_registry import default_cache, register_store, unregister_store
from memocache.infrastructure.cache.memory_cache import MemoryCacheStore


class FakeClock:
    """Monotonic clock advanced by hand (seconds)."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: float) -> None:
        self.now += ms / 1000


@pytest.fixture(autouse=True)
def fresh_settings() -> Iterator[None]:
    """Drop cached settings before and after each test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def memo_store(fresh_settings: None) -> Iterator[MemoryCacheStore]:
    """Fresh in-memory store registered as the default cache for one test."""
    name = default_cache()
    store = MemoryCacheStore()
    register_store(name, store)
    yield store
    unregister_store(name)


@pytest.fixture
def clock() -> FakeClock:
    """Hand-driven clock for TTL tests."""
    return FakeClock()
