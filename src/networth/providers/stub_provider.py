"""Stub exchange rate provider for offline/testing use."""

from decimal import Decimal

from networth.core.exceptions import ProviderError
from networth.core.timezone import now_utc
from networth.domain.models import CurrencyPair, CurrencyPairQuote


# Deterministic fake USD values for common currencies (USD per one unit)
_STUB_USD_VALUES: dict[str, Decimal] = {
    "USD": Decimal("1"),
    "EUR": Decimal("1.10"),
    "GBP": Decimal("1.27"),
    "JPY": Decimal("0.0067"),
    "CAD": Decimal("0.74"),
    "AUD": Decimal("0.66"),
    "SGD": Decimal("0.74"),
    "HKD": Decimal("0.128"),
    "CHF": Decimal("1.13"),
    "CNY": Decimal("0.14"),
}


class StubRateProvider:
    """
    Stub provider with deterministic cross rates for offline operation.

    Unknown currencies raise ``ProviderError`` so the aggregator's fallback
    paths are exercised the same way as with a live source.
    """

    name = "stub"

    def __init__(self, usd_values: dict[str, Decimal] = None):
        self._usd_values = dict(usd_values or _STUB_USD_VALUES)

    def quote(self, pair: CurrencyPair) -> CurrencyPairQuote:
        base_usd = self._usd_values.get(pair.base)
        quote_usd = self._usd_values.get(pair.quote)
        if base_usd is None or quote_usd is None:
            raise ProviderError(self.name, f"no stub rate for {pair}")
        return CurrencyPairQuote(
            pair=pair,
            rate=base_usd / quote_usd,
            source=self.name,
            observed_at=now_utc(),
        )
