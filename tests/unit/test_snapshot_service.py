"""
Unit tests for PerformanceSnapshotService.

Tests cover:
- Total / investment / currency P/L decomposition
- Multi-currency accounts and the holding conversion rule
- Bank accounts carrying no invested capital
- daily_pl chaining across gaps
- Idempotent recomputation and the reconciliation check
- Soft triggers and scheduled runs
"""

from datetime import date
from decimal import Decimal

import pytest

from networth.core.exceptions import (
    NotFoundError,
    RateUnavailableError,
    ReconciliationViolation,
    ValidationError,
)
from networth.domain.models import AccountType, PerformanceSnapshot

from tests.conftest import TODAY, assert_decimal_equal, utc_datetime


JAN_1 = date(2024, 1, 1)
JAN_5 = date(2024, 1, 5)


@pytest.fixture
def investor(user_factory, account_factory, history_factory):
    """USD user with one investment account: capital 1000, balance 1000 on 01-01 and 1100 on 01-05."""
    user = user_factory(base_currency="USD")
    account = account_factory(user, currency="USD", original_capital=Decimal("1000"))
    history_factory(account, Decimal("1000"), JAN_1)
    history_factory(account, Decimal("1100"), JAN_5)
    return user


# =============================================================================
# DECOMPOSITION
# =============================================================================


class TestComputeSnapshot:
    """Tests for the P/L decomposition."""

    def test_investment_gain_only(self, snapshot_service, investor):
        """
        GIVEN an account worth 1100 against 1000 invested, no holdings
        WHEN computing 2024-01-05
        THEN total 100, investment 100, currency 0
        """
        snapshot = snapshot_service.compute_snapshot(investor.user_id, JAN_5)

        assert snapshot.total_pl == Decimal("100")
        assert snapshot.investment_pl == Decimal("100")
        assert snapshot.currency_pl == Decimal("0")
        assert snapshot.daily_pl == Decimal("0")
        assert snapshot.base_currency == "USD"

    def test_currency_holding_adds_currency_effect(self, snapshot_service, investor, holding_factory):
        """
        GIVEN the same account plus EUR/USD 1000 @ 1.05, now 1.10
        WHEN computing 2024-01-05
        THEN currency 50, total 150, investment stays 100
        """
        holding_factory(investor, pair="EUR/USD", amount=Decimal("1000"),
                        avg_cost=Decimal("1.05"), current_rate=Decimal("1.10"))

        snapshot = snapshot_service.compute_snapshot(investor.user_id, JAN_5)

        assert snapshot.currency_pl == Decimal("50")
        assert snapshot.total_pl == Decimal("150")
        assert snapshot.investment_pl == Decimal("100")

    def test_before_any_entry_uses_opening_balance(self, snapshot_service, investor):
        snapshot = snapshot_service.compute_snapshot(investor.user_id, date(2023, 12, 31))

        assert snapshot.total_pl == Decimal("0")

    def test_foreign_account_converted_to_base(
        self, snapshot_service, user_factory, account_factory, history_factory
    ):
        """
        GIVEN a EUR account with 1000 invested and 1100 balance, EUR/USD 1.10
        WHEN computing for a USD user
        THEN balance and capital are both converted: 1210 - 1100 = 110
        """
        user = user_factory(base_currency="USD")
        account = account_factory(user, currency="EUR", original_capital=Decimal("1000"))
        history_factory(account, Decimal("1100"), JAN_1)

        snapshot = snapshot_service.compute_snapshot(user.user_id, JAN_5)

        assert snapshot.total_pl == Decimal("110")
        assert snapshot.investment_pl == Decimal("110")

    def test_bank_account_has_no_invested_capital(
        self, snapshot_service, user_factory, account_factory, history_factory
    ):
        """
        GIVEN a bank account with a 300 balance (capital field set to 500)
        WHEN computing
        THEN the capital is ignored and the full balance counts
        """
        user = user_factory()
        bank = account_factory(user, account_type=AccountType.BANK, original_capital=Decimal("500"))
        history_factory(bank, Decimal("300"), JAN_1)

        snapshot = snapshot_service.compute_snapshot(user.user_id, JAN_5)

        assert snapshot.total_pl == Decimal("300")

    def test_holding_with_base_on_base_side_divides_by_rate(
        self, snapshot_service, user_factory, holding_factory
    ):
        """
        GIVEN a EUR user holding EUR/USD 1000 @ 1.05, now 1.10 (P/L 50 USD)
        WHEN computing
        THEN the P/L is converted as 50 / 1.10 = 45.45 EUR
        """
        user = user_factory(base_currency="EUR")
        holding_factory(user, pair="EUR/USD")

        snapshot = snapshot_service.compute_snapshot(user.user_id, JAN_5)

        assert snapshot.currency_pl == Decimal("45.45")
        assert snapshot.total_pl == Decimal("45.45")
        assert snapshot.investment_pl == Decimal("0")

    def test_cross_holding_taken_as_base(self, snapshot_service, user_factory, holding_factory):
        """
        GIVEN a GBP user holding EUR/USD with a 50 USD P/L
        WHEN computing
        THEN the quote-currency figure is used unconverted
        """
        user = user_factory(base_currency="GBP")
        holding_factory(user, pair="EUR/USD")

        snapshot = snapshot_service.compute_snapshot(user.user_id, JAN_5)

        assert snapshot.currency_pl == Decimal("50")

    def test_fractional_amounts_reconcile_exactly(
        self, snapshot_service, snapshot_repo, user_factory, account_factory, history_factory, holding_factory
    ):
        user = user_factory(base_currency="USD")
        eur = account_factory(user, currency="EUR", original_capital=Decimal("333.33"))
        history_factory(eur, Decimal("345.67"), JAN_1)
        holding_factory(user, pair="GBP/USD", amount=Decimal("123.4567"),
                        avg_cost=Decimal("1.23456789"), current_rate=Decimal("1.27654321"))

        snapshot_service.compute_snapshot(user.user_id, JAN_5)

        stored = snapshot_repo.get(user.user_id, JAN_5)
        assert stored.total_pl == stored.investment_pl + stored.currency_pl

    def test_unknown_user_raises(self, snapshot_service):
        with pytest.raises(NotFoundError):
            snapshot_service.compute_snapshot("missing", JAN_5)

    def test_unavailable_rate_propagates_and_writes_nothing(
        self, snapshot_service, snapshot_repo, user_factory, account_factory
    ):
        user = user_factory()
        account_factory(user, currency="CHF", original_capital=Decimal("100"))

        with pytest.raises(RateUnavailableError):
            snapshot_service.compute_snapshot(user.user_id, JAN_5)

        assert snapshot_repo.get(user.user_id, JAN_5) is None


# =============================================================================
# DAILY P/L AND IDEMPOTENCE
# =============================================================================


class TestDailyPlAndIdempotence:
    """Tests for daily_pl chaining and overwrite semantics."""

    def test_daily_pl_spans_gap_to_previous_snapshot(self, snapshot_service, investor):
        """
        GIVEN a snapshot on 01-01 and none until 01-05
        WHEN computing 01-05
        THEN daily_pl is the change since 01-01
        """
        snapshot_service.compute_snapshot(investor.user_id, JAN_1)

        snapshot = snapshot_service.compute_snapshot(investor.user_id, JAN_5)

        assert snapshot.daily_pl == Decimal("100")

    def test_recompute_is_idempotent(self, snapshot_service, snapshot_repo, investor):
        """
        GIVEN unchanged inputs
        WHEN the same date is computed twice
        THEN one row exists and it is identical
        """
        first = snapshot_service.compute_snapshot(investor.user_id, JAN_5)
        second = snapshot_service.compute_snapshot(investor.user_id, JAN_5)

        assert first == second
        assert len(snapshot_repo.list_range(investor.user_id)) == 1

    def test_recompute_overwrites_after_edit(self, snapshot_service, investor, account_repo, history_factory):
        snapshot_service.compute_snapshot(investor.user_id, JAN_5)
        account = account_repo.list_accounts(investor.user_id)[0]
        history_factory(account, Decimal("1250"), JAN_5, created_at=utc_datetime(2024, 1, 5, 18))

        snapshot = snapshot_service.compute_snapshot(investor.user_id, JAN_5)

        assert snapshot.total_pl == Decimal("250")
        assert snapshot_service.get_snapshot(investor.user_id, JAN_5).total_pl == Decimal("250")

    def test_reconciliation_violation_writes_nothing(self, snapshot_service, snapshot_repo, investor, monkeypatch):
        """
        GIVEN a calculation whose parts do not add up
        WHEN computing
        THEN ReconciliationViolation is raised and the stored row is untouched
        """
        original = snapshot_service.compute_snapshot(investor.user_id, JAN_5)
        broken = PerformanceSnapshot(
            user_id=investor.user_id,
            date=JAN_5,
            total_pl=Decimal("999"),
            investment_pl=Decimal("100"),
            currency_pl=Decimal("0"),
            daily_pl=Decimal("0"),
            base_currency="USD",
        )
        monkeypatch.setattr(snapshot_service, "_calculate", lambda user, on_date: broken)

        with pytest.raises(ReconciliationViolation):
            snapshot_service.compute_snapshot(investor.user_id, JAN_5)

        assert snapshot_repo.get(investor.user_id, JAN_5) == original


# =============================================================================
# READS
# =============================================================================


class TestReads:
    def test_list_snapshots_in_range_ascending(self, snapshot_service, investor):
        for day in (date(2024, 1, 3), JAN_1, JAN_5):
            snapshot_service.compute_snapshot(investor.user_id, day)

        snapshots = snapshot_service.list_snapshots(investor.user_id, JAN_1, date(2024, 1, 4))

        assert [s.date for s in snapshots] == [JAN_1, date(2024, 1, 3)]

    def test_list_snapshots_rejects_inverted_range(self, snapshot_service, investor):
        with pytest.raises(ValidationError):
            snapshot_service.list_snapshots(investor.user_id, JAN_5, JAN_1)

    def test_latest_snapshot(self, snapshot_service, investor):
        snapshot_service.compute_snapshot(investor.user_id, JAN_1)
        snapshot_service.compute_snapshot(investor.user_id, JAN_5)

        assert snapshot_service.latest_snapshot(investor.user_id).date == JAN_5

    def test_recompute_today_uses_service_date(self, snapshot_service, investor):
        snapshot = snapshot_service.recompute_today(investor.user_id)

        assert snapshot.date == TODAY
        assert_decimal_equal(snapshot.total_pl, Decimal("100"))


# =============================================================================
# TRIGGERS
# =============================================================================


class TestTriggers:
    """Tests for soft and scheduled triggers."""

    def test_refresh_after_edit_returns_snapshot(self, snapshot_service, investor):
        outcome = snapshot_service.refresh_after_edit(investor.user_id)

        assert outcome.ok
        assert outcome.snapshot.date == TODAY

    def test_refresh_after_edit_never_raises(self, snapshot_service, user_factory, account_factory):
        """
        GIVEN a user whose account currency has no rate
        WHEN the soft trigger runs
        THEN it returns a warning instead of raising
        """
        user = user_factory()
        account_factory(user, currency="CHF", original_capital=Decimal("10"))

        outcome = snapshot_service.refresh_after_edit(user.user_id)

        assert not outcome.ok
        assert "CHF/USD" in outcome.warning

    def test_compute_all_users_counts_failures(self, snapshot_service, investor, user_factory, account_factory):
        broken = user_factory(name="Broken")
        account_factory(broken, currency="CHF", original_capital=Decimal("10"))

        result = snapshot_service.compute_all_users_today()

        assert result == {"computed": 1, "failed": 1}
        assert snapshot_service.get_snapshot(investor.user_id, TODAY) is not None

    def test_calculate_today_if_missing_skips_existing(self, snapshot_service, investor, user_factory):
        snapshot_service.recompute_today(investor.user_id)
        newcomer = user_factory(name="Newcomer")

        written = snapshot_service.calculate_today_if_missing()

        assert written == 1
        assert snapshot_service.get_snapshot(newcomer.user_id, TODAY).total_pl == Decimal("0")
