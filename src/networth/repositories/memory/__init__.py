"""In-memory repository implementations."""

from networth.repositories.memory.rate_cache_repo import InMemoryRateCacheRepository

__all__ = ["InMemoryRateCacheRepository"]
