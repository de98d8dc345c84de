"""Currency pair and currency holding domain models."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from networth.core.exceptions import ValidationError


def normalize_currency(code: str) -> str:
    """Upper-case and validate a three-letter currency code."""
    normalized = (code or "").strip().upper()
    if len(normalized) != 3 or not normalized.isalpha():
        raise ValidationError(f"Invalid currency code: {code!r}")
    return normalized


@dataclass(frozen=True)
class CurrencyPair:
    """
    Ordered currency tuple.

    The rate of a pair expresses how many units of ``quote`` one unit of
    ``base`` buys (EUR/USD = 1.10 means 1 EUR buys 1.10 USD).
    """

    base: str
    quote: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "base", normalize_currency(self.base))
        object.__setattr__(self, "quote", normalize_currency(self.quote))

    @classmethod
    def parse(cls, value: str) -> "CurrencyPair":
        """Parse ``"EUR/USD"`` into a pair."""
        parts = (value or "").split("/")
        if len(parts) != 2:
            raise ValidationError(f"Invalid currency pair format: {value!r}")
        return cls(parts[0], parts[1])

    @property
    def is_identity(self) -> bool:
        return self.base == self.quote

    def inverse(self) -> "CurrencyPair":
        return CurrencyPair(self.quote, self.base)

    def canonical(self) -> "CurrencyPair":
        """Direction-independent representative (alphabetical order)."""
        return self if self.base <= self.quote else self.inverse()

    def __str__(self) -> str:
        return f"{self.base}/{self.quote}"


@dataclass
class CurrencyHolding:
    """
    A user's position in a currency pair.

    ``amount`` and ``avg_cost`` are user-edited; ``current_rate`` is refreshed
    by the exchange rate service.
    """

    holding_id: str
    user_id: str
    pair: CurrencyPair
    amount: Decimal
    avg_cost: Decimal
    current_rate: Decimal
    updated_at: Optional[datetime] = field(default=None)

    def __post_init__(self) -> None:
        if isinstance(self.pair, str):
            self.pair = CurrencyPair.parse(self.pair)

    @property
    def profit_loss(self) -> Decimal:
        """P/L expressed in the pair's quote currency."""
        return self.amount * (self.current_rate - self.avg_cost)

    @property
    def profit_loss_percent(self) -> Optional[Decimal]:
        if not self.avg_cost:
            return None
        return (self.current_rate - self.avg_cost) / self.avg_cost * 100
