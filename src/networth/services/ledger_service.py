"""Ledger service: users, accounts, balance history and currency holdings."""

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Optional

from networth.core.exceptions import AppError, NotFoundError, ValidationError
from networth.core.timezone import now_utc, today_in
from networth.domain.models import (
    Account,
    AccountHistoryEntry,
    AccountType,
    CurrencyHolding,
    CurrencyPair,
    User,
    normalize_currency,
)
from networth.domain.views import TriggerOutcome
from networth.repositories.protocols import AccountRepository, HoldingRepository, UserRepository
from networth.services.exchange_rate_service import ExchangeRateService

logger = logging.getLogger(__name__)


@dataclass
class AccountCreate:
    """Input data for creating an account."""

    name: str
    currency: str
    account_type: AccountType = AccountType.INVESTMENT
    original_capital: Decimal = Decimal("0")
    current_balance: Optional[Decimal] = None
    opened_on: Optional[date] = None
    account_number: Optional[str] = None


@dataclass
class HoldingCreate:
    """Input data for creating a currency holding."""

    pair: str
    amount: Decimal
    avg_cost: Decimal
    current_rate: Optional[Decimal] = None


@dataclass
class HoldingUpdate:
    """Partial update data for a currency holding."""

    amount: Optional[Decimal] = None
    avg_cost: Optional[Decimal] = None
    current_rate: Optional[Decimal] = None


@dataclass
class EditResult:
    """A ledger write together with the outcome of the follow-up recompute."""

    entity: Any
    trigger: TriggerOutcome


class LedgerService:
    """
    Write side of the account and holding ledgers.

    Every edit is followed by the ``on_edit`` soft trigger (normally the
    snapshot service's ``refresh_after_edit``). The trigger never fails the
    edit; its warning travels back in the ``EditResult``.
    """

    def __init__(
        self,
        user_repo: UserRepository,
        account_repo: AccountRepository,
        holding_repo: HoldingRepository,
        rate_service: Optional[ExchangeRateService] = None,
        on_edit: Optional[Callable[[str], TriggerOutcome]] = None,
        default_base_currency: str = "USD",
        timezone_name: str = "Europe/Dublin",
    ):
        self._user_repo = user_repo
        self._account_repo = account_repo
        self._holding_repo = holding_repo
        self._rates = rate_service
        self._on_edit = on_edit
        self._default_base_currency = default_base_currency
        self._timezone_name = timezone_name

    # Users

    def create_user(self, name: str, base_currency: Optional[str] = None) -> User:
        if not name or not name.strip():
            raise ValidationError("User name is required")
        user = User(
            user_id=str(uuid.uuid4()),
            name=name.strip(),
            base_currency=normalize_currency(base_currency or self._default_base_currency),
            created_at=now_utc(),
        )
        return self._user_repo.create(user)

    def get_user(self, user_id: str) -> User:
        user = self._user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user

    # Accounts

    def create_account(self, user_id: str, data: AccountCreate) -> EditResult:
        """
        Create an account and its first balance history entry.

        The first entry records ``current_balance`` (defaulting to the
        original capital) on ``opened_on`` (defaulting to today).
        """
        self.get_user(user_id)
        if not data.name or not data.name.strip():
            raise ValidationError("Account name is required")
        if data.original_capital < 0:
            raise ValidationError("original_capital cannot be negative")

        account = Account(
            account_id=str(uuid.uuid4()),
            user_id=user_id,
            name=data.name.strip(),
            currency=normalize_currency(data.currency),
            account_type=data.account_type,
            original_capital=data.original_capital,
            account_number=data.account_number,
            created_at=now_utc(),
        )
        created = self._account_repo.create(account)

        opening_balance = data.current_balance if data.current_balance is not None else data.original_capital
        self._account_repo.add_history_entry(
            AccountHistoryEntry(
                entry_id=str(uuid.uuid4()),
                account_id=created.account_id,
                balance=opening_balance,
                currency=created.currency,
                date=data.opened_on or self._today(),
                note="Account created",
                created_at=now_utc(),
            )
        )
        logger.info("Created %s account %s for user %s", created.account_type.value, created.account_id, user_id)
        return EditResult(entity=created, trigger=self._trigger(user_id))

    def get_account(self, account_id: str) -> Account:
        account = self._account_repo.get_by_id(account_id)
        if not account:
            raise NotFoundError("Account", account_id)
        return account

    def list_accounts(self, user_id: str) -> list[Account]:
        self.get_user(user_id)
        return self._account_repo.list_accounts(user_id)

    def record_balance(
        self,
        account_id: str,
        balance: Decimal,
        on_date: Optional[date] = None,
        note: Optional[str] = None,
    ) -> EditResult:
        """Append a balance history entry; history is never rewritten."""
        account = self.get_account(account_id)
        entry = self._account_repo.add_history_entry(
            AccountHistoryEntry(
                entry_id=str(uuid.uuid4()),
                account_id=account_id,
                balance=balance,
                currency=account.currency,
                date=on_date or self._today(),
                note=note,
                created_at=now_utc(),
            )
        )
        return EditResult(entity=entry, trigger=self._trigger(account.user_id))

    def account_history(self, account_id: str) -> list[AccountHistoryEntry]:
        self.get_account(account_id)
        return self._account_repo.history_entries(account_id)

    # Holdings

    def add_holding(self, user_id: str, data: HoldingCreate) -> EditResult:
        """Create a holding; without an explicit current rate the market rate is looked up."""
        self.get_user(user_id)
        pair = CurrencyPair.parse(data.pair)
        if pair.is_identity:
            raise ValidationError("A holding needs two different currencies")
        self._validate_holding_values(data.amount, data.avg_cost, data.current_rate)

        current_rate = data.current_rate or self._market_rate(pair, fallback=data.avg_cost)
        holding = CurrencyHolding(
            holding_id=str(uuid.uuid4()),
            user_id=user_id,
            pair=pair,
            amount=data.amount,
            avg_cost=data.avg_cost,
            current_rate=current_rate,
            updated_at=now_utc(),
        )
        created = self._holding_repo.create(holding)
        return EditResult(entity=created, trigger=self._trigger(user_id))

    def update_holding(self, holding_id: str, patch: HoldingUpdate) -> EditResult:
        holding = self._holding_repo.get_by_id(holding_id)
        if not holding:
            raise NotFoundError("Holding", holding_id)
        self._validate_holding_values(patch.amount, patch.avg_cost, patch.current_rate)

        if patch.amount is not None:
            holding.amount = patch.amount
        if patch.avg_cost is not None:
            holding.avg_cost = patch.avg_cost
        if patch.current_rate is not None:
            holding.current_rate = patch.current_rate
        holding.updated_at = now_utc()

        updated = self._holding_repo.update(holding)
        return EditResult(entity=updated, trigger=self._trigger(holding.user_id))

    def list_holdings(self, user_id: str) -> list[CurrencyHolding]:
        self.get_user(user_id)
        return self._holding_repo.list_holdings(user_id)

    # Helpers

    @staticmethod
    def _validate_holding_values(
        amount: Optional[Decimal],
        avg_cost: Optional[Decimal],
        current_rate: Optional[Decimal],
    ) -> None:
        if amount is not None and amount < 0:
            raise ValidationError("amount cannot be negative")
        if avg_cost is not None and avg_cost <= 0:
            raise ValidationError("avg_cost must be positive")
        if current_rate is not None and current_rate <= 0:
            raise ValidationError("current_rate must be positive")

    def _market_rate(self, pair: CurrencyPair, fallback: Decimal) -> Decimal:
        if self._rates is None:
            return fallback
        try:
            return self._rates.resolve(pair.base, pair.quote)
        except AppError as e:
            logger.warning("No market rate for %s, using average cost: %s", pair, e.message)
            return fallback

    def _trigger(self, user_id: str) -> TriggerOutcome:
        if self._on_edit is None:
            return TriggerOutcome()
        return self._on_edit(user_id)

    def _today(self) -> date:
        return today_in(self._timezone_name)
