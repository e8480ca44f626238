"""Application layer: key derivation, cache gateway, invalidation, and the memoize API."""
