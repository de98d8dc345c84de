"""View models for service outputs."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from networth.domain.models import CurrencyPair, PerformanceSnapshot


@dataclass
class RateResult:
    """
    A resolved exchange rate.

    ``degraded`` is True when live sources failed and a stale cached value
    was served instead.
    """

    pair: CurrencyPair
    rate: Decimal
    as_of: Optional[datetime] = None
    degraded: bool = False
    from_cache: bool = False
    sources: list[str] = field(default_factory=list)


@dataclass
class BalanceAsOf:
    """Account balance at a point in time; ``entry_date`` is None for the opening balance."""

    balance: Decimal
    currency: str
    entry_date: Optional[date] = None

    @property
    def is_opening_balance(self) -> bool:
        return self.entry_date is None


@dataclass
class BackfillResult:
    """Summary of a completed backfill."""

    user_id: str
    start_date: date
    end_date: date
    written: int = 0
    snapshots: list[PerformanceSnapshot] = field(default_factory=list)


@dataclass
class RateRefreshSummary:
    """Outcome of refreshing every pair a user needs."""

    user_id: str
    resolved: dict[str, Decimal] = field(default_factory=dict)
    degraded: list[str] = field(default_factory=list)
    unavailable: list[str] = field(default_factory=list)
    holdings_updated: int = 0
    holdings_kept: int = 0


@dataclass
class TriggerOutcome:
    """Result of a soft recompute trigger; ``warning`` is set when it failed."""

    snapshot: Optional[PerformanceSnapshot] = None
    warning: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.warning is None
