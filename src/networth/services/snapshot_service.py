"""Daily performance snapshots: calculation, storage and backfill."""

import logging
import threading
from datetime import date
from decimal import Decimal
from typing import Callable, Optional

from networth.core.exceptions import (
    NotFoundError,
    PartialBackfillError,
    ReconciliationViolation,
    ValidationError,
)
from networth.core.money import ZERO, to_money
from networth.core.timezone import iter_dates, today_in
from networth.domain.models import Account, CurrencyHolding, PerformanceSnapshot, User
from networth.domain.views import BackfillResult, TriggerOutcome
from networth.repositories.protocols import (
    AccountRepository,
    HoldingRepository,
    SnapshotRepository,
    UserRepository,
)
from networth.services.balance_resolver import BalanceResolver
from networth.services.exchange_rate_service import ExchangeRateService
from networth.services.locks import UserLocks, get_user_locks

logger = logging.getLogger(__name__)


class PerformanceSnapshotService:
    """
    Computes and stores one P/L snapshot per user per calendar date.

    All figures are in the user's base currency. ``total_pl`` combines the
    account P/L (balance minus invested capital) with the currency P/L of the
    user's holdings; ``investment_pl`` is the remainder, so the two effects
    are never double counted. Recomputing a date overwrites its row.
    """

    def __init__(
        self,
        user_repo: UserRepository,
        account_repo: AccountRepository,
        holding_repo: HoldingRepository,
        snapshot_repo: SnapshotRepository,
        rate_service: ExchangeRateService,
        balance_resolver: Optional[BalanceResolver] = None,
        locks: Optional[UserLocks] = None,
        timezone_name: str = "Europe/Dublin",
        today_fn: Optional[Callable[[], date]] = None,
    ):
        self._user_repo = user_repo
        self._account_repo = account_repo
        self._holding_repo = holding_repo
        self._snapshot_repo = snapshot_repo
        self._rates = rate_service
        self._balances = balance_resolver or BalanceResolver(account_repo)
        self._locks = locks or get_user_locks()
        self._timezone_name = timezone_name
        self._today_fn = today_fn

    def today(self) -> date:
        """Today's calendar date in the snapshot timezone."""
        if self._today_fn:
            return self._today_fn()
        return today_in(self._timezone_name)

    # Calculation

    def compute_snapshot(self, user_id: str, on_date: date) -> PerformanceSnapshot:
        """
        Compute and upsert the snapshot for ``user_id`` on ``on_date``.

        Raises:
            NotFoundError: Unknown user.
            RateUnavailableError: A needed rate was never available.
            ReconciliationViolation: The figures do not add up; nothing is written.
        """
        with self._locks.hold(user_id):
            user = self._get_user(user_id)
            snapshot = self._calculate(user, on_date)

            if not snapshot.reconciles:
                detail = (
                    f"total {snapshot.total_pl} != investment {snapshot.investment_pl}"
                    f" + currency {snapshot.currency_pl}"
                )
                logger.error("Reconciliation failed for user %s on %s: %s", user_id, on_date, detail)
                raise ReconciliationViolation(user_id, on_date, detail)

            stored = self._snapshot_repo.upsert(snapshot)
            logger.debug(
                "Snapshot %s %s: total=%s investment=%s currency=%s daily=%s",
                user_id, on_date, stored.total_pl, stored.investment_pl,
                stored.currency_pl, stored.daily_pl,
            )
            return stored

    def recompute_today(self, user_id: str) -> PerformanceSnapshot:
        """Compute (or overwrite) today's snapshot."""
        return self.compute_snapshot(user_id, self.today())

    def _calculate(self, user: User, on_date: date) -> PerformanceSnapshot:
        base = user.base_currency

        account_pl = ZERO
        for account in self._account_repo.list_accounts(user.user_id):
            account_pl += self._account_pl_in_base(account, on_date, base)

        currency_pl = ZERO
        for holding in self._holding_repo.list_holdings(user.user_id):
            currency_pl += to_money(self._holding_pl_in_base(holding, base))

        total_pl = account_pl + currency_pl
        investment_pl = total_pl - currency_pl

        previous = self._snapshot_repo.find_previous(user.user_id, on_date)
        daily_pl = total_pl - previous.total_pl if previous else ZERO

        return PerformanceSnapshot(
            user_id=user.user_id,
            date=on_date,
            total_pl=total_pl,
            investment_pl=investment_pl,
            currency_pl=currency_pl,
            daily_pl=daily_pl,
            base_currency=base,
        )

    def _account_pl_in_base(self, account: Account, on_date: date, base: str) -> Decimal:
        balance = self._balances.balance_as_of(account, on_date)
        capital = account.original_capital if account.is_capital_bearing else ZERO

        balance_in_base = to_money(balance.balance * self._rates.resolve(balance.currency, base))
        capital_in_base = ZERO
        if capital:
            capital_in_base = to_money(capital * self._rates.resolve(account.currency, base))
        return balance_in_base - capital_in_base

    @staticmethod
    def _holding_pl_in_base(holding: CurrencyHolding, base: str) -> Decimal:
        """
        Holding P/L converted with the pair's own rate.

        P/L is denominated in the quote currency. When base is the pair's base
        side, dividing by the current rate converts it. When base is on neither
        side the quote-currency figure is used as is.
        """
        pl = holding.profit_loss
        if holding.pair.quote == base:
            return pl
        if holding.pair.base == base and holding.current_rate:
            return pl / holding.current_rate
        return pl

    # Reads

    def get_snapshot(self, user_id: str, on_date: date) -> Optional[PerformanceSnapshot]:
        return self._snapshot_repo.get(user_id, on_date)

    def list_snapshots(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[PerformanceSnapshot]:
        """Snapshots in the inclusive range, oldest first."""
        if start_date and end_date and start_date > end_date:
            raise ValidationError("start_date must be on or before end_date")
        return self._snapshot_repo.list_range(user_id, start_date, end_date)

    def latest_snapshot(self, user_id: str) -> Optional[PerformanceSnapshot]:
        return self._snapshot_repo.latest(user_id)

    # Backfill

    def backfill(
        self,
        user_id: str,
        start_date: date,
        end_date: date,
        cancel_event: Optional[threading.Event] = None,
    ) -> BackfillResult:
        """
        Compute every calendar date from ``start_date`` to ``end_date`` in order.

        Uses historical balances with the rates currently available. A failing
        date is logged and skipped. Cancellation is honoured between dates.

        Raises:
            ValidationError: ``start_date`` after ``end_date``.
            PartialBackfillError: Cancelled, or at least one date failed.
        """
        if start_date > end_date:
            raise ValidationError("start_date must be on or before end_date")
        self._get_user(user_id)

        result = BackfillResult(user_id=user_id, start_date=start_date, end_date=end_date)
        failed_dates: list[date] = []
        last_successful: Optional[date] = None
        cancelled = False

        for day in iter_dates(start_date, end_date):
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Backfill for user %s cancelled before %s", user_id, day)
                cancelled = True
                break

            try:
                snapshot = self.compute_snapshot(user_id, day)
            except Exception:
                logger.exception("Backfill for user %s failed on %s", user_id, day)
                failed_dates.append(day)
                continue

            result.snapshots.append(snapshot)
            result.written += 1
            if not failed_dates:
                last_successful = day

        logger.info(
            "Backfill for user %s %s..%s: %d written, %d failed",
            user_id, start_date, end_date, result.written, len(failed_dates),
        )
        if cancelled or failed_dates:
            raise PartialBackfillError(
                last_successful_date=last_successful,
                written=result.written,
                failed_dates=failed_dates,
                cancelled=cancelled,
            )
        return result

    # Triggers

    def refresh_after_edit(self, user_id: str, refresh_rates: bool = True) -> TriggerOutcome:
        """
        Soft trigger after a ledger edit: refresh rates, then recompute today.

        Never raises; a failure is logged and reported as a warning.
        """
        try:
            if refresh_rates:
                self._rates.refresh_user_rates(user_id, force_refresh=False)
            snapshot = self.recompute_today(user_id)
        except Exception as e:
            logger.warning("Recompute after edit failed for user %s: %s", user_id, e)
            return TriggerOutcome(warning=f"Performance snapshot not updated: {e}")
        return TriggerOutcome(snapshot=snapshot)

    def compute_all_users_today(self, refresh_rates: bool = True) -> dict[str, int]:
        """Scheduled run over every user; per-user failures are counted, not raised."""
        computed = failed = 0
        for user in self._user_repo.list_all():
            try:
                if refresh_rates:
                    self._rates.refresh_user_rates(user.user_id, force_refresh=False)
                self.recompute_today(user.user_id)
                computed += 1
            except Exception:
                logger.exception("Daily snapshot failed for user %s", user.user_id)
                failed += 1

        logger.info("Daily snapshots: %d computed, %d failed", computed, failed)
        return {"computed": computed, "failed": failed}

    def calculate_today_if_missing(self) -> int:
        """Compute today's snapshot for users that have none yet; returns the count written."""
        today = self.today()
        written = 0
        for user in self._user_repo.list_all():
            if self._snapshot_repo.get(user.user_id, today) is not None:
                continue
            try:
                self.compute_snapshot(user.user_id, today)
                written += 1
            except Exception:
                logger.exception("Startup snapshot failed for user %s", user.user_id)
        return written

    def _get_user(self, user_id: str) -> User:
        user = self._user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user
