"""Rate cache repository protocol."""

from datetime import datetime
from decimal import Decimal
from typing import Protocol, Optional

from networth.domain.models import CachedRate, CurrencyPair, PairHint


class RateCacheRepository(Protocol):
    """
    Interface for the last-known rate per pair and per-user pair hints.

    Writes are last-writer-wins per pair; rows are never deleted.
    """

    def get(self, pair: CurrencyPair) -> Optional[CachedRate]:
        """Cached rate stored for exactly this pair direction."""
        ...

    def put(self, pair: CurrencyPair, rate: Decimal, at: datetime) -> CachedRate:
        """Insert or overwrite the cached rate for a pair direction."""
        ...

    def ttl_expired(self, cached: CachedRate, now: datetime) -> bool:
        """True once the cached rate is at least the cache TTL old."""
        ...

    def last_update_time(self) -> Optional[datetime]:
        """Most recent write across all pairs."""
        ...

    def record_pair_hint(self, user_id: str, pair: CurrencyPair, at: datetime) -> None:
        """Count one use of a pair by a user."""
        ...

    def list_pair_hints(self, user_id: str, limit: int = 10) -> list[PairHint]:
        """Most used pairs for a user, most used first."""
        ...
