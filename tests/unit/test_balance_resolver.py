"""
Unit tests for BalanceResolver.

Tests cover:
- Latest entry on or before the target date wins
- Entries after the target date are ignored
- Opening balance floor when no entry qualifies
- Same-day ties broken by creation time
"""

from datetime import date
from decimal import Decimal

import pytest

from networth.services import BalanceResolver

from tests.conftest import utc_datetime


@pytest.fixture
def resolver(account_repo) -> BalanceResolver:
    return BalanceResolver(account_repo)


@pytest.fixture
def account_with_history(user_factory, account_factory, history_factory):
    """Account opened with 80, entries 2024-01-01 (100) and 2024-01-10 (150)."""
    user = user_factory()
    account = account_factory(user, original_capital=Decimal("80"))
    history_factory(account, Decimal("100"), date(2024, 1, 1))
    history_factory(account, Decimal("150"), date(2024, 1, 10))
    return account


class TestBalanceAsOf:
    """Tests for point-in-time balance lookup."""

    def test_between_entries_uses_earlier_entry(self, resolver, account_with_history):
        """
        GIVEN entries on 01-01 (100) and 01-10 (150)
        WHEN asking for 01-05
        THEN the balance is 100
        """
        result = resolver.balance_as_of(account_with_history, date(2024, 1, 5))

        assert result.balance == Decimal("100")
        assert result.entry_date == date(2024, 1, 1)
        assert result.currency == "USD"

    def test_after_last_entry_uses_last_entry(self, resolver, account_with_history):
        result = resolver.balance_as_of(account_with_history, date(2024, 1, 15))

        assert result.balance == Decimal("150")

    def test_on_entry_date_includes_that_entry(self, resolver, account_with_history):
        result = resolver.balance_as_of(account_with_history, date(2024, 1, 10))

        assert result.balance == Decimal("150")

    def test_before_first_entry_uses_opening_balance(self, resolver, account_with_history):
        """
        GIVEN the earliest entry is 2024-01-01
        WHEN asking for 2023-12-31
        THEN the opening balance (original capital) is returned
        """
        result = resolver.balance_as_of(account_with_history, date(2023, 12, 31))

        assert result.balance == Decimal("80")
        assert result.is_opening_balance

    def test_no_history_uses_opening_balance(self, resolver, user_factory, account_factory):
        account = account_factory(user_factory(), currency="EUR", original_capital=Decimal("500"))

        result = resolver.balance_as_of(account, date(2024, 6, 1))

        assert result.balance == Decimal("500")
        assert result.currency == "EUR"
        assert result.entry_date is None

    def test_same_day_entries_latest_created_wins(
        self, resolver, user_factory, account_factory, history_factory
    ):
        """
        GIVEN two entries on the same date
        WHEN resolving that date
        THEN the one created later wins
        """
        account = account_factory(user_factory())
        history_factory(account, Decimal("200"), date(2024, 3, 1), created_at=utc_datetime(2024, 3, 1, 9))
        history_factory(account, Decimal("210"), date(2024, 3, 1), created_at=utc_datetime(2024, 3, 1, 17))

        assert resolver.balance_as_of(account, date(2024, 3, 1)).balance == Decimal("210")

    def test_backdated_entry_recorded_later_is_respected(
        self, resolver, user_factory, account_factory, history_factory
    ):
        account = account_factory(user_factory())
        history_factory(account, Decimal("300"), date(2024, 2, 1), created_at=utc_datetime(2024, 2, 1))
        history_factory(account, Decimal("250"), date(2024, 1, 15), created_at=utc_datetime(2024, 2, 2))

        assert resolver.balance_as_of(account, date(2024, 1, 20)).balance == Decimal("250")
        assert resolver.balance_as_of(account, date(2024, 2, 5)).balance == Decimal("300")


class TestCurrentBalance:
    def test_current_balance_is_most_recent_entry(self, resolver, account_with_history):
        assert resolver.current_balance(account_with_history).balance == Decimal("150")
