"""SQLAlchemy implementation of SnapshotRepository."""

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from networth.domain.models import PerformanceSnapshot
from networth.repositories.sqlalchemy.orm_models import PerformanceHistoryORM


class SqlAlchemySnapshotRepository:
    """SQLAlchemy-backed performance history, one row per (user, date)."""

    def __init__(self, db: Session):
        self._db = db

    def get(self, user_id: str, on_date: date) -> Optional[PerformanceSnapshot]:
        """Snapshot for exactly this date."""
        orm_row = self._find(user_id, on_date)
        return self._to_domain(orm_row) if orm_row else None

    def upsert(self, snapshot: PerformanceSnapshot) -> PerformanceSnapshot:
        """Insert or fully overwrite the row for (user_id, date)."""
        orm_row = self._find(snapshot.user_id, snapshot.date)

        if orm_row:
            orm_row.total_pl = snapshot.total_pl
            orm_row.investment_pl = snapshot.investment_pl
            orm_row.currency_pl = snapshot.currency_pl
            orm_row.daily_pl = snapshot.daily_pl
            orm_row.base_currency = snapshot.base_currency
        else:
            orm_row = PerformanceHistoryORM(
                user_id=snapshot.user_id,
                date=snapshot.date,
                total_pl=snapshot.total_pl,
                investment_pl=snapshot.investment_pl,
                currency_pl=snapshot.currency_pl,
                daily_pl=snapshot.daily_pl,
                base_currency=snapshot.base_currency,
            )
            self._db.add(orm_row)

        self._db.commit()
        self._db.refresh(orm_row)
        return self._to_domain(orm_row)

    def find_previous(self, user_id: str, before: date) -> Optional[PerformanceSnapshot]:
        """Most recent snapshot with date strictly before ``before``."""
        orm_row = (
            self._db.query(PerformanceHistoryORM)
            .filter(
                PerformanceHistoryORM.user_id == user_id,
                PerformanceHistoryORM.date < before,
            )
            .order_by(PerformanceHistoryORM.date.desc())
            .first()
        )
        return self._to_domain(orm_row) if orm_row else None

    def list_range(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[PerformanceSnapshot]:
        """Snapshots in the inclusive date range, ordered by date ascending."""
        query = self._db.query(PerformanceHistoryORM).filter(
            PerformanceHistoryORM.user_id == user_id
        )
        if start_date:
            query = query.filter(PerformanceHistoryORM.date >= start_date)
        if end_date:
            query = query.filter(PerformanceHistoryORM.date <= end_date)

        return [self._to_domain(r) for r in query.order_by(PerformanceHistoryORM.date).all()]

    def latest(self, user_id: str) -> Optional[PerformanceSnapshot]:
        """Most recent snapshot for a user."""
        orm_row = (
            self._db.query(PerformanceHistoryORM)
            .filter(PerformanceHistoryORM.user_id == user_id)
            .order_by(PerformanceHistoryORM.date.desc())
            .first()
        )
        return self._to_domain(orm_row) if orm_row else None

    def _find(self, user_id: str, on_date: date) -> Optional[PerformanceHistoryORM]:
        return (
            self._db.query(PerformanceHistoryORM)
            .filter(
                PerformanceHistoryORM.user_id == user_id,
                PerformanceHistoryORM.date == on_date,
            )
            .first()
        )

    @staticmethod
    def _to_domain(orm: PerformanceHistoryORM) -> PerformanceSnapshot:
        """Convert ORM model to domain model."""
        return PerformanceSnapshot(
            user_id=orm.user_id,
            date=orm.date,
            total_pl=Decimal(str(orm.total_pl)),
            investment_pl=Decimal(str(orm.investment_pl)),
            currency_pl=Decimal(str(orm.currency_pl)),
            daily_pl=Decimal(str(orm.daily_pl)),
            base_currency=orm.base_currency,
        )
