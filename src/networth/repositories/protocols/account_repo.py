"""Account ledger repository protocol."""

from typing import Protocol, Optional

from networth.domain.models import Account, AccountHistoryEntry


class AccountRepository(Protocol):
    """Interface for accounts and their append-only balance history."""

    def create(self, account: Account) -> Account:
        """Persist a new account."""
        ...

    def get_by_id(self, account_id: str) -> Optional[Account]:
        """Retrieve account by ID."""
        ...

    def list_accounts(self, user_id: str) -> list[Account]:
        """List all accounts owned by a user."""
        ...

    def add_history_entry(self, entry: AccountHistoryEntry) -> AccountHistoryEntry:
        """Append a balance history entry."""
        ...

    def history_entries(self, account_id: str) -> list[AccountHistoryEntry]:
        """Balance history, most recent first (date desc, then created_at desc)."""
        ...
