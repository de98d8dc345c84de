"""Exchange rate domain models."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from networth.domain.models.currency import CurrencyPair


@dataclass(frozen=True)
class CurrencyPairQuote:
    """A single provider's quote. Ephemeral; never persisted."""

    pair: CurrencyPair
    rate: Decimal
    source: str
    observed_at: datetime


@dataclass
class CachedRate:
    """Last known combined rate for a pair direction."""

    pair: CurrencyPair
    rate: Decimal
    last_updated: datetime

    def inverse(self) -> "CachedRate":
        return CachedRate(
            pair=self.pair.inverse(),
            rate=Decimal("1") / self.rate,
            last_updated=self.last_updated,
        )


@dataclass
class PairHint:
    """How often a user needed a pair; feeds popular pair suggestions."""

    user_id: str
    pair: CurrencyPair
    hits: int
    last_used: datetime
