"""exchangerate-api.com provider (free ``/v4/latest/{BASE}`` endpoint)."""

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

import requests

from networth.core.exceptions import ProviderError
from networth.core.timezone import UTC, now_utc, parse_datetime_utc
from networth.domain.models import CurrencyPair, CurrencyPairQuote

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.exchangerate-api.com/v4/latest"


class ExchangeRateApiProvider:
    """
    Fetches the rate table for the pair's base currency and reads the quote.

    Payloads whose update time is older than ``max_age_seconds`` are rejected
    as stale. The update time is read from ``time_last_updated`` (v4, epoch
    seconds) or ``time_last_update_utc`` (v6, RFC 2822 string).
    """

    name = "exchangerate-api"

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 5.0,
        max_age_seconds: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_age_seconds = max_age_seconds
        self.session = session or requests.Session()

    def quote(self, pair: CurrencyPair) -> CurrencyPairQuote:
        url = f"{self.base_url}/{pair.base}"
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise ProviderError(self.name, f"request to {url} failed: {e}") from e
        except ValueError as e:
            raise ProviderError(self.name, f"invalid JSON from {url}") from e

        rates = payload.get("rates") if isinstance(payload, dict) else None
        if not isinstance(rates, dict) or rates.get(pair.quote) is None:
            raise ProviderError(self.name, f"no {pair.quote} rate in {pair.base} table")

        try:
            rate = Decimal(str(rates[pair.quote]))
        except (InvalidOperation, ValueError) as e:
            raise ProviderError(self.name, f"unparseable rate for {pair}") from e
        if rate <= 0:
            raise ProviderError(self.name, f"non-positive rate {rate} for {pair}")

        observed_at = self._observed_at(payload)
        if self.max_age_seconds is not None:
            age = (now_utc() - observed_at).total_seconds()
            if age > self.max_age_seconds:
                raise ProviderError(self.name, f"stale quote for {pair} ({int(age)}s old)")

        logger.debug("exchangerate-api %s -> %s", pair, rate)
        return CurrencyPairQuote(pair=pair, rate=rate, source=self.name, observed_at=observed_at)

    @staticmethod
    def _observed_at(payload: dict) -> datetime:
        stamp = payload.get("time_last_updated")
        if isinstance(stamp, (int, float)):
            return datetime.fromtimestamp(stamp, UTC)
        stamp_utc = payload.get("time_last_update_utc")
        if isinstance(stamp_utc, str):
            try:
                return parse_datetime_utc(stamp_utc)
            except (ValueError, OverflowError):
                logger.debug("Unparseable time_last_update_utc %r", stamp_utc)
        return now_utc()
