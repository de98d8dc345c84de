"""Exchange rate provider protocol."""

from typing import Protocol

from networth.domain.models import CurrencyPair, CurrencyPairQuote


class RateProviderAdapter(Protocol):
    """
    Protocol for a single external exchange rate source.

    Implementations return one quote per call and raise ``ProviderError`` on
    any failure (network, malformed payload, stale data). They never cache and
    never retry; the aggregator owns both.
    """

    name: str

    def quote(self, pair: CurrencyPair) -> CurrencyPairQuote:
        """Fetch the current rate for ``pair`` (units of quote per one base)."""
        ...
