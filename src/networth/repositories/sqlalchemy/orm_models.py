"""SQLAlchemy ORM model definitions."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Column,
    String,
    Date,
    DateTime,
    Integer,
    Text,
    ForeignKey,
    Index,
    Numeric,
    Enum as SqlEnum,
)
from sqlalchemy.orm import relationship

from networth.repositories.sqlalchemy.database import Base
from networth.core.timezone import now_utc, to_naive_utc
from networth.domain.models.enums import AccountType


def utc_now_naive() -> datetime:
    """Column default: current UTC time, stored naive like every other timestamp."""
    return to_naive_utc(now_utc())


class UserORM(Base):
    """SQLAlchemy model for User."""

    __tablename__ = "users"

    user_id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    base_currency = Column(String(3), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utc_now_naive)

    accounts = relationship("AccountORM", back_populates="user")


class AccountORM(Base):
    """SQLAlchemy model for Account."""

    __tablename__ = "accounts"

    account_id = Column(String(36), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.user_id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    currency = Column(String(3), nullable=False)
    account_type = Column(
        SqlEnum(AccountType),
        default=AccountType.INVESTMENT,
        nullable=False,
    )
    account_number = Column(String(64), nullable=True)
    original_capital = Column(Numeric(precision=18, scale=2), default=Decimal("0"), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utc_now_naive)

    user = relationship("UserORM", back_populates="accounts")
    history = relationship("AccountHistoryORM", back_populates="account")


class AccountHistoryORM(Base):
    """SQLAlchemy model for AccountHistoryEntry (append-only balance log)."""

    __tablename__ = "account_balance_history"
    __table_args__ = (
        Index("ix_balance_history_account_date", "account_id", "date"),
    )

    entry_id = Column(String(36), primary_key=True)
    account_id = Column(String(36), ForeignKey("accounts.account_id"), nullable=False)
    balance = Column(Numeric(precision=18, scale=2), nullable=False)
    currency = Column(String(3), nullable=False)
    date = Column(Date, nullable=False)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utc_now_naive)

    account = relationship("AccountORM", back_populates="history")


class CurrencyHoldingORM(Base):
    """SQLAlchemy model for CurrencyHolding."""

    __tablename__ = "currency_holdings"

    holding_id = Column(String(36), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.user_id"), nullable=False, index=True)
    base_currency = Column(String(3), nullable=False)
    quote_currency = Column(String(3), nullable=False)
    amount = Column(Numeric(precision=18, scale=4), nullable=False)
    avg_cost = Column(Numeric(precision=18, scale=8), nullable=False)
    current_rate = Column(Numeric(precision=18, scale=8), nullable=False)
    updated_at = Column(DateTime, nullable=True)


class ExchangeRateORM(Base):
    """SQLAlchemy model for CachedRate."""

    __tablename__ = "exchange_rates"

    from_currency = Column(String(3), primary_key=True)
    to_currency = Column(String(3), primary_key=True)
    rate = Column(Numeric(precision=24, scale=10), nullable=False)
    last_updated = Column(DateTime, nullable=False)


class PairHintORM(Base):
    """SQLAlchemy model for per-user pair usage hints."""

    __tablename__ = "pair_hints"

    user_id = Column(String(36), primary_key=True)
    from_currency = Column(String(3), primary_key=True)
    to_currency = Column(String(3), primary_key=True)
    hits = Column(Integer, nullable=False, default=0)
    last_used = Column(DateTime, nullable=False)


class PerformanceHistoryORM(Base):
    """SQLAlchemy model for PerformanceSnapshot, one row per (user, date)."""

    __tablename__ = "performance_history"

    user_id = Column(String(36), ForeignKey("users.user_id"), primary_key=True)
    date = Column(Date, primary_key=True)
    total_pl = Column(Numeric(precision=18, scale=2), nullable=False)
    investment_pl = Column(Numeric(precision=18, scale=2), nullable=False)
    currency_pl = Column(Numeric(precision=18, scale=2), nullable=False)
    daily_pl = Column(Numeric(precision=18, scale=2), nullable=False)
    base_currency = Column(String(3), nullable=True)
