"""Point-in-time account balances over the append-only history log."""

from datetime import date

from networth.domain.models import Account
from networth.domain.views import BalanceAsOf
from networth.repositories.protocols import AccountRepository


class BalanceResolver:
    """Answers "what was this account's balance on date D?"."""

    def __init__(self, account_repo: AccountRepository):
        self._account_repo = account_repo

    def balance_as_of(self, account: Account, on_date: date) -> BalanceAsOf:
        """
        Balance from the latest entry dated on or before ``on_date``.

        Entries are scanned most-recent-first; anything dated after the target
        is skipped. Without a qualifying entry the account's original capital
        is the opening balance.
        """
        for entry in self._account_repo.history_entries(account.account_id):
            if entry.date <= on_date:
                return BalanceAsOf(
                    balance=entry.balance,
                    currency=entry.currency or account.currency,
                    entry_date=entry.date,
                )

        return BalanceAsOf(balance=account.original_capital, currency=account.currency)

    def current_balance(self, account: Account) -> BalanceAsOf:
        """Balance from the most recent history entry, whatever its date."""
        entries = self._account_repo.history_entries(account.account_id)
        if entries:
            latest = entries[0]
            return BalanceAsOf(
                balance=latest.balance,
                currency=latest.currency or account.currency,
                entry_date=latest.date,
            )
        return BalanceAsOf(balance=account.original_capital, currency=account.currency)
