"""
Unit tests for snapshot backfill.

Tests cover:
- Ascending computation with daily_pl chaining
- Re-running overwrites without duplicates
- Cooperative cancellation between dates
- Per-date failures reported with a resume point
- Range validation
"""

import threading
from datetime import date
from decimal import Decimal

import pytest

from networth.core.exceptions import NotFoundError, PartialBackfillError, ValidationError


@pytest.fixture
def investor(user_factory, account_factory, history_factory):
    """Capital 1000; balance 1000 from 01-01, 1040 from 01-03, 1100 from 01-05."""
    user = user_factory()
    account = account_factory(user, original_capital=Decimal("1000"))
    history_factory(account, Decimal("1000"), date(2024, 1, 1))
    history_factory(account, Decimal("1040"), date(2024, 1, 3))
    history_factory(account, Decimal("1100"), date(2024, 1, 5))
    return user


START = date(2024, 1, 1)
END = date(2024, 1, 5)


class TestBackfill:
    """Tests for backfill over a date range."""

    def test_backfill_chains_daily_pl(self, snapshot_service, snapshot_repo, investor):
        """
        GIVEN balances changing on 01-03 and 01-05
        WHEN backfilling 01-01..01-05
        THEN one row per date is written, each daily_pl relative to the day before
        """
        result = snapshot_service.backfill(investor.user_id, START, END)

        rows = snapshot_repo.list_range(investor.user_id, START, END)
        assert result.written == 5
        assert [r.total_pl for r in rows] == [Decimal("0"), Decimal("0"), Decimal("40"), Decimal("40"), Decimal("100")]
        assert [r.daily_pl for r in rows] == [Decimal("0"), Decimal("0"), Decimal("40"), Decimal("0"), Decimal("60")]

    def test_repeat_backfill_yields_identical_rows(self, snapshot_service, snapshot_repo, investor):
        snapshot_service.backfill(investor.user_id, START, END)
        first = snapshot_repo.list_range(investor.user_id)

        snapshot_service.backfill(investor.user_id, START, END)
        second = snapshot_repo.list_range(investor.user_id)

        assert first == second
        assert len(second) == 5

    def test_single_day_range(self, snapshot_service, investor):
        result = snapshot_service.backfill(investor.user_id, END, END)

        assert result.written == 1
        assert result.snapshots[0].date == END

    def test_start_after_end_is_rejected(self, snapshot_service, investor):
        with pytest.raises(ValidationError):
            snapshot_service.backfill(investor.user_id, END, START)

    def test_unknown_user_is_rejected(self, snapshot_service):
        with pytest.raises(NotFoundError):
            snapshot_service.backfill("missing", START, END)


class TestBackfillInterruptions:
    """Tests for cancellation and failed dates."""

    def test_cancellation_between_dates(self, snapshot_service, snapshot_repo, investor, monkeypatch):
        """
        GIVEN a cancel signal raised after the second date
        WHEN backfilling five dates
        THEN two rows are written and the error names 01-02 as last success
        """
        cancel = threading.Event()
        computed = []
        original = snapshot_service.compute_snapshot

        def compute_then_cancel(user_id, day):
            snapshot = original(user_id, day)
            computed.append(day)
            if len(computed) == 2:
                cancel.set()
            return snapshot

        monkeypatch.setattr(snapshot_service, "compute_snapshot", compute_then_cancel)

        with pytest.raises(PartialBackfillError) as exc_info:
            snapshot_service.backfill(investor.user_id, START, END, cancel_event=cancel)

        error = exc_info.value
        assert error.cancelled is True
        assert error.written == 2
        assert error.last_successful_date == date(2024, 1, 2)
        assert len(snapshot_repo.list_range(investor.user_id)) == 2

    def test_cancelled_before_start_writes_nothing(self, snapshot_service, snapshot_repo, investor):
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(PartialBackfillError) as exc_info:
            snapshot_service.backfill(investor.user_id, START, END, cancel_event=cancel)

        assert exc_info.value.last_successful_date is None
        assert snapshot_repo.list_range(investor.user_id) == []

    def test_failed_date_is_skipped_and_reported(self, snapshot_service, snapshot_repo, investor, monkeypatch):
        """
        GIVEN computation failing on 01-03 only
        WHEN backfilling 01-01..01-05
        THEN the other dates are written and the resume point is 01-02
        """
        original = snapshot_service.compute_snapshot

        def flaky(user_id, day):
            if day == date(2024, 1, 3):
                raise RuntimeError("provider outage")
            return original(user_id, day)

        monkeypatch.setattr(snapshot_service, "compute_snapshot", flaky)

        with pytest.raises(PartialBackfillError) as exc_info:
            snapshot_service.backfill(investor.user_id, START, END)

        error = exc_info.value
        assert error.cancelled is False
        assert error.written == 4
        assert error.failed_dates == [date(2024, 1, 3)]
        assert error.last_successful_date == date(2024, 1, 2)
        written = [r.date for r in snapshot_repo.list_range(investor.user_id)]
        assert date(2024, 1, 3) not in written
        assert len(written) == 4
