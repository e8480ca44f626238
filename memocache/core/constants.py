"""Core constants: cache key structure and shared literal values.

Single source of truth for memo key layout (DRY). Used by the key service,
the key prefix builders, and the store adapters.
"""

# Namespace for every memoized entry: memo:<owner>:<function>:<digest>
CACHE_KEY_NAMESPACE = "memo"

# Delimiter for composite keys
CACHE_KEY_SEP = ":"

# Prefix for Redis lease locks guarding in-flight computations (lock:<key>)
CACHE_LOCK_PREFIX = "lock"

# blake2b digest size in bytes for the argument digest (16 hex chars)
ARGS_DIGEST_SIZE = 8

# Keys deleted per round-trip during prefix invalidation
INVALIDATION_CHUNK_SIZE = 500

# Store backends accepted by settings.memo_backend
BACKEND_MEMORY = "memory"
BACKEND_REDIS = "redis"
