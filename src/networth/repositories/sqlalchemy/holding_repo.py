"""SQLAlchemy implementation of HoldingRepository."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from networth.core.timezone import UTC, to_naive_utc
from networth.domain.models import CurrencyHolding, CurrencyPair
from networth.repositories.sqlalchemy.orm_models import CurrencyHoldingORM


class SqlAlchemyHoldingRepository:
    """SQLAlchemy-backed currency holding ledger."""

    def __init__(self, db: Session):
        self._db = db

    def create(self, holding: CurrencyHolding) -> CurrencyHolding:
        """Persist a new holding."""
        orm_holding = CurrencyHoldingORM(
            holding_id=holding.holding_id,
            user_id=holding.user_id,
            base_currency=holding.pair.base,
            quote_currency=holding.pair.quote,
            amount=holding.amount,
            avg_cost=holding.avg_cost,
            current_rate=holding.current_rate,
            updated_at=to_naive_utc(holding.updated_at) if holding.updated_at else None,
        )
        self._db.add(orm_holding)
        self._db.commit()
        self._db.refresh(orm_holding)
        return self._to_domain(orm_holding)

    def get_by_id(self, holding_id: str) -> Optional[CurrencyHolding]:
        """Retrieve holding by ID."""
        orm_holding = self._db.query(CurrencyHoldingORM).filter(
            CurrencyHoldingORM.holding_id == holding_id
        ).first()
        return self._to_domain(orm_holding) if orm_holding else None

    def list_holdings(self, user_id: str) -> list[CurrencyHolding]:
        """List all holdings owned by a user."""
        orm_holdings = (
            self._db.query(CurrencyHoldingORM)
            .filter(CurrencyHoldingORM.user_id == user_id)
            .order_by(CurrencyHoldingORM.base_currency, CurrencyHoldingORM.quote_currency)
            .all()
        )
        return [self._to_domain(h) for h in orm_holdings]

    def update(self, holding: CurrencyHolding) -> CurrencyHolding:
        """Update amount, average cost and rate of an existing holding."""
        orm_holding = self._db.query(CurrencyHoldingORM).filter(
            CurrencyHoldingORM.holding_id == holding.holding_id
        ).first()
        if not orm_holding:
            raise ValueError(f"Holding not found: {holding.holding_id}")

        orm_holding.amount = holding.amount
        orm_holding.avg_cost = holding.avg_cost
        orm_holding.current_rate = holding.current_rate
        orm_holding.updated_at = to_naive_utc(holding.updated_at) if holding.updated_at else None

        self._db.commit()
        self._db.refresh(orm_holding)
        return self._to_domain(orm_holding)

    def update_current_rate(
        self,
        holding_id: str,
        rate: Decimal,
        updated_at: datetime,
    ) -> None:
        """Store a refreshed market rate for a holding."""
        self._db.query(CurrencyHoldingORM).filter(
            CurrencyHoldingORM.holding_id == holding_id
        ).update(
            {
                CurrencyHoldingORM.current_rate: rate,
                CurrencyHoldingORM.updated_at: to_naive_utc(updated_at),
            }
        )
        self._db.commit()

    @staticmethod
    def _to_domain(orm: CurrencyHoldingORM) -> CurrencyHolding:
        """Convert ORM model to domain model."""
        return CurrencyHolding(
            holding_id=orm.holding_id,
            user_id=orm.user_id,
            pair=CurrencyPair(orm.base_currency, orm.quote_currency),
            amount=Decimal(str(orm.amount)) if orm.amount else Decimal("0"),
            avg_cost=Decimal(str(orm.avg_cost)),
            current_rate=Decimal(str(orm.current_rate)),
            updated_at=UTC.localize(orm.updated_at) if orm.updated_at else None,
        )
