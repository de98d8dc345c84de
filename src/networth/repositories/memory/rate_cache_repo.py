"""In-process rate cache for deployments without a shared database."""

import threading
from datetime import datetime
from decimal import Decimal
from typing import Optional

from networth.core.timezone import ensure_utc
from networth.domain.models import CachedRate, CurrencyPair, PairHint


class InMemoryRateCacheRepository:
    """
    Dict-backed RateCacheRepository.

    Holds the same last-writer-wins semantics as the SQL store; contents are
    lost when the process exits.
    """

    def __init__(self, ttl_seconds: int = 600):
        self._ttl_seconds = ttl_seconds
        self._rates: dict[CurrencyPair, CachedRate] = {}
        self._hints: dict[tuple[str, CurrencyPair], PairHint] = {}
        self._lock = threading.Lock()

    def get(self, pair: CurrencyPair) -> Optional[CachedRate]:
        with self._lock:
            return self._rates.get(pair)

    def put(self, pair: CurrencyPair, rate: Decimal, at: datetime) -> CachedRate:
        cached = CachedRate(pair=pair, rate=rate, last_updated=ensure_utc(at))
        with self._lock:
            self._rates[pair] = cached
        return cached

    def ttl_expired(self, cached: CachedRate, now: datetime) -> bool:
        age = ensure_utc(now) - ensure_utc(cached.last_updated)
        return age.total_seconds() >= self._ttl_seconds

    def last_update_time(self) -> Optional[datetime]:
        with self._lock:
            if not self._rates:
                return None
            return max(c.last_updated for c in self._rates.values())

    def record_pair_hint(self, user_id: str, pair: CurrencyPair, at: datetime) -> None:
        key = (user_id, pair)
        with self._lock:
            hint = self._hints.get(key)
            if hint:
                hint.hits += 1
                hint.last_used = ensure_utc(at)
            else:
                self._hints[key] = PairHint(user_id=user_id, pair=pair, hits=1, last_used=ensure_utc(at))

    def list_pair_hints(self, user_id: str, limit: int = 10) -> list[PairHint]:
        with self._lock:
            hints = [h for (uid, _), h in self._hints.items() if uid == user_id]
        hints.sort(key=lambda h: (h.hits, h.last_used), reverse=True)
        return hints[:limit]
