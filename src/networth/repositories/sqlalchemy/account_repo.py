"""SQLAlchemy implementation of AccountRepository."""

from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from networth.core.timezone import UTC, now_utc, to_naive_utc
from networth.domain.models import Account, AccountHistoryEntry
from networth.repositories.sqlalchemy.orm_models import AccountORM, AccountHistoryORM


class SqlAlchemyAccountRepository:
    """SQLAlchemy-backed account ledger."""

    def __init__(self, db: Session):
        self._db = db

    def create(self, account: Account) -> Account:
        """Persist a new account."""
        orm_account = AccountORM(
            account_id=account.account_id,
            user_id=account.user_id,
            name=account.name,
            currency=account.currency,
            account_type=account.account_type,
            account_number=account.account_number,
            original_capital=account.original_capital,
            created_at=to_naive_utc(account.created_at or now_utc()),
        )
        self._db.add(orm_account)
        self._db.commit()
        self._db.refresh(orm_account)
        return self._to_domain(orm_account)

    def get_by_id(self, account_id: str) -> Optional[Account]:
        """Retrieve account by ID."""
        orm_account = self._db.query(AccountORM).filter(
            AccountORM.account_id == account_id
        ).first()
        return self._to_domain(orm_account) if orm_account else None

    def list_accounts(self, user_id: str) -> list[Account]:
        """List all accounts owned by a user."""
        orm_accounts = (
            self._db.query(AccountORM)
            .filter(AccountORM.user_id == user_id)
            .order_by(AccountORM.created_at, AccountORM.account_id)
            .all()
        )
        return [self._to_domain(a) for a in orm_accounts]

    def add_history_entry(self, entry: AccountHistoryEntry) -> AccountHistoryEntry:
        """Append a balance history entry."""
        orm_entry = AccountHistoryORM(
            entry_id=entry.entry_id,
            account_id=entry.account_id,
            balance=entry.balance,
            currency=entry.currency,
            date=entry.date,
            note=entry.note,
            created_at=to_naive_utc(entry.created_at or now_utc()),
        )
        self._db.add(orm_entry)
        self._db.commit()
        self._db.refresh(orm_entry)
        return self._entry_to_domain(orm_entry)

    def history_entries(self, account_id: str) -> list[AccountHistoryEntry]:
        """Balance history, most recent first (date desc, then created_at desc)."""
        orm_entries = (
            self._db.query(AccountHistoryORM)
            .filter(AccountHistoryORM.account_id == account_id)
            .order_by(
                AccountHistoryORM.date.desc(),
                AccountHistoryORM.created_at.desc(),
            )
            .all()
        )
        return [self._entry_to_domain(e) for e in orm_entries]

    @staticmethod
    def _to_domain(orm: AccountORM) -> Account:
        """Convert ORM model to domain model."""
        return Account(
            account_id=orm.account_id,
            user_id=orm.user_id,
            name=orm.name,
            currency=orm.currency,
            account_type=orm.account_type,
            account_number=orm.account_number,
            original_capital=Decimal(str(orm.original_capital)) if orm.original_capital else Decimal("0"),
            created_at=UTC.localize(orm.created_at) if orm.created_at else None,
        )

    @staticmethod
    def _entry_to_domain(orm: AccountHistoryORM) -> AccountHistoryEntry:
        """Convert ORM history row to domain model."""
        return AccountHistoryEntry(
            entry_id=orm.entry_id,
            account_id=orm.account_id,
            balance=Decimal(str(orm.balance)) if orm.balance else Decimal("0"),
            currency=orm.currency,
            date=orm.date,
            note=orm.note,
            created_at=UTC.localize(orm.created_at) if orm.created_at else None,
        )
