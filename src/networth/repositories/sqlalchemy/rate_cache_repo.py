"""SQLAlchemy implementation of RateCacheRepository."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from networth.core.timezone import UTC, ensure_utc, to_naive_utc
from networth.domain.models import CachedRate, CurrencyPair, PairHint
from networth.repositories.sqlalchemy.orm_models import ExchangeRateORM, PairHintORM


class SqlAlchemyRateCacheRepository:
    """SQLAlchemy-backed store for last known rates and pair usage hints."""

    def __init__(self, db: Session, ttl_seconds: int = 600):
        self._db = db
        self._ttl_seconds = ttl_seconds

    # Rate cache operations

    def get(self, pair: CurrencyPair) -> Optional[CachedRate]:
        """Cached rate stored for exactly this pair direction."""
        orm_rate = (
            self._db.query(ExchangeRateORM)
            .filter(
                ExchangeRateORM.from_currency == pair.base,
                ExchangeRateORM.to_currency == pair.quote,
            )
            .first()
        )
        return self._rate_to_domain(orm_rate) if orm_rate else None

    def put(self, pair: CurrencyPair, rate: Decimal, at: datetime) -> CachedRate:
        """Insert or overwrite the cached rate for a pair direction."""
        orm_rate = (
            self._db.query(ExchangeRateORM)
            .filter(
                ExchangeRateORM.from_currency == pair.base,
                ExchangeRateORM.to_currency == pair.quote,
            )
            .first()
        )

        if orm_rate:
            orm_rate.rate = rate
            orm_rate.last_updated = to_naive_utc(at)
        else:
            orm_rate = ExchangeRateORM(
                from_currency=pair.base,
                to_currency=pair.quote,
                rate=rate,
                last_updated=to_naive_utc(at),
            )
            self._db.add(orm_rate)

        self._db.commit()
        self._db.refresh(orm_rate)
        return self._rate_to_domain(orm_rate)

    def ttl_expired(self, cached: CachedRate, now: datetime) -> bool:
        """True once the cached rate is at least the cache TTL old."""
        age = ensure_utc(now) - ensure_utc(cached.last_updated)
        return age.total_seconds() >= self._ttl_seconds

    def last_update_time(self) -> Optional[datetime]:
        """Most recent write across all pairs."""
        latest = self._db.query(func.max(ExchangeRateORM.last_updated)).scalar()
        return UTC.localize(latest) if latest else None

    # Pair hint operations

    def record_pair_hint(self, user_id: str, pair: CurrencyPair, at: datetime) -> None:
        """Count one use of a pair by a user."""
        orm_hint = (
            self._db.query(PairHintORM)
            .filter(
                PairHintORM.user_id == user_id,
                PairHintORM.from_currency == pair.base,
                PairHintORM.to_currency == pair.quote,
            )
            .first()
        )

        if orm_hint:
            orm_hint.hits = (orm_hint.hits or 0) + 1
            orm_hint.last_used = to_naive_utc(at)
        else:
            self._db.add(
                PairHintORM(
                    user_id=user_id,
                    from_currency=pair.base,
                    to_currency=pair.quote,
                    hits=1,
                    last_used=to_naive_utc(at),
                )
            )
        self._db.commit()

    def list_pair_hints(self, user_id: str, limit: int = 10) -> list[PairHint]:
        """Most used pairs for a user, most used first."""
        orm_hints = (
            self._db.query(PairHintORM)
            .filter(PairHintORM.user_id == user_id)
            .order_by(PairHintORM.hits.desc(), PairHintORM.last_used.desc())
            .limit(limit)
            .all()
        )
        return [self._hint_to_domain(h) for h in orm_hints]

    @staticmethod
    def _rate_to_domain(orm: ExchangeRateORM) -> CachedRate:
        """Convert ORM rate row to domain model."""
        return CachedRate(
            pair=CurrencyPair(orm.from_currency, orm.to_currency),
            rate=Decimal(str(orm.rate)),
            last_updated=UTC.localize(orm.last_updated),
        )

    @staticmethod
    def _hint_to_domain(orm: PairHintORM) -> PairHint:
        """Convert ORM hint row to domain model."""
        return PairHint(
            user_id=orm.user_id,
            pair=CurrencyPair(orm.from_currency, orm.to_currency),
            hits=orm.hits,
            last_used=UTC.localize(orm.last_used),
        )
