"""Memoization configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Backend choice is validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from memocache.core.constants import BACKEND_MEMORY, BACKEND_REDIS


class Settings(BaseSettings):
    """Settings loaded from environment and .env.

    All settings are optional with defaults. memo_backend decides which
    store is created for the default cache name when nothing was
    registered under it explicitly.
    """

    # App
    app_name: str = "memocache"
    debug: bool = False

    # Memoization
    memo_default_cache: str = "memocache"
    memo_backend: str = BACKEND_MEMORY
    # Redis lease lock held while one process computes a missing key
    memo_lock_timeout_ms: int = 30_000
    # How often waiting processes re-check a key another process is computing
    memo_lock_poll_interval_ms: int = 50

    # Redis
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None
    redis_socket_connect_timeout: int = 5

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_backend(self) -> "Settings":
        """Validate memo backend and lock timings."""
        if self.memo_backend not in (BACKEND_MEMORY, BACKEND_REDIS):
            raise ValueError(
                f"Invalid memo_backend '{self.memo_backend}'. "
                f"Must be one of: '{BACKEND_MEMORY}', '{BACKEND_REDIS}'"
            )
        if not self.memo_default_cache:
            raise ValueError("MEMO_DEFAULT_CACHE must be a non-empty store name.")
        if self.memo_lock_timeout_ms <= 0 or self.memo_lock_poll_interval_ms <= 0:
            raise ValueError(
                "MEMO_LOCK_TIMEOUT_MS and MEMO_LOCK_POLL_INTERVAL_MS must be positive."
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
