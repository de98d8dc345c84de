"""Yahoo Finance exchange rate provider (via yfinance)."""

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation

from networth.core.exceptions import ProviderError
from networth.core.timezone import UTC, now_utc
from networth.domain.models import CurrencyPair, CurrencyPairQuote

logger = logging.getLogger(__name__)


# Lazy import so tests can patch before import
def _get_yf():
    import yfinance as yf
    return yf


def yahoo_symbol(pair: CurrencyPair) -> str:
    """Yahoo ticker for a currency pair, e.g. ``EURUSD=X``."""
    return f"{pair.base}{pair.quote}=X"


class YahooFinanceRateProvider:
    """Reads the regular market price of the ``{BASE}{QUOTE}=X`` ticker."""

    name = "yahoo"

    def quote(self, pair: CurrencyPair) -> CurrencyPairQuote:
        symbol = yahoo_symbol(pair)
        try:
            info = _get_yf().Ticker(symbol).info
        except Exception as e:
            raise ProviderError(self.name, f"lookup failed for {symbol}: {e}") from e

        if not isinstance(info, dict):
            raise ProviderError(self.name, f"no data for {symbol}")

        price = info.get("regularMarketPrice")
        if price is None:
            price = info.get("previousClose") or info.get("regularMarketPreviousClose")
        if price is None:
            raise ProviderError(self.name, f"no price for {symbol}")

        try:
            rate = Decimal(str(price))
        except (InvalidOperation, ValueError) as e:
            raise ProviderError(self.name, f"unparseable price {price!r} for {symbol}") from e
        if rate <= 0:
            raise ProviderError(self.name, f"non-positive price {rate} for {symbol}")

        market_time = info.get("regularMarketTime")
        if isinstance(market_time, (int, float)):
            observed_at = datetime.fromtimestamp(market_time, UTC)
        else:
            observed_at = now_utc()

        logger.debug("yahoo %s -> %s", symbol, rate)
        return CurrencyPairQuote(pair=pair, rate=rate, source=self.name, observed_at=observed_at)
