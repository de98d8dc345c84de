"""Account and balance history domain models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from networth.domain.models.enums import AccountType


@dataclass
class Account:
    """
    A tracked account (bank, brokerage, manual or broker-synced).

    ``original_capital`` is fixed at creation and doubles as the opening
    balance when no history entry precedes a requested date.
    """

    account_id: str
    user_id: str
    name: str
    currency: str
    account_type: AccountType = AccountType.INVESTMENT
    original_capital: Decimal = field(default_factory=lambda: Decimal("0"))
    account_number: Optional[str] = None
    created_at: Optional[datetime] = field(default=None)

    def __post_init__(self) -> None:
        if isinstance(self.account_type, str):
            self.account_type = AccountType(self.account_type)

    @property
    def is_capital_bearing(self) -> bool:
        """Bank accounts hold cash, not invested capital."""
        return self.account_type != AccountType.BANK


@dataclass
class AccountHistoryEntry:
    """
    Append-only balance record for an account.

    Ordered by ``date`` with ``created_at`` breaking same-day ties.
    """

    entry_id: str
    account_id: str
    balance: Decimal
    currency: str
    date: date
    note: Optional[str] = None
    created_at: Optional[datetime] = field(default=None)
