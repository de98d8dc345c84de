"""Performance snapshot domain model."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional


@dataclass
class PerformanceSnapshot:
    """
    Aggregated P/L for one user on one calendar date, in the base currency.

    Rows are recomputed and overwritten, never patched. Every stored row
    satisfies ``total_pl == investment_pl + currency_pl``.
    """

    user_id: str
    date: date
    total_pl: Decimal
    investment_pl: Decimal
    currency_pl: Decimal
    daily_pl: Decimal
    base_currency: Optional[str] = None

    @property
    def reconciles(self) -> bool:
        return self.total_pl == self.investment_pl + self.currency_pl
