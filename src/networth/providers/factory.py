"""Builds the configured provider list."""

import logging

from networth.config.settings import Settings
from networth.providers.exchangerate_api_provider import ExchangeRateApiProvider
from networth.providers.rate_provider import RateProviderAdapter
from networth.providers.stub_provider import StubRateProvider
from networth.providers.yahoo_provider import YahooFinanceRateProvider

logger = logging.getLogger(__name__)


def build_providers(settings: Settings) -> list[RateProviderAdapter]:
    """Instantiate providers named in ``settings.rate_providers``, in order."""
    providers: list[RateProviderAdapter] = []
    for name in settings.rate_providers:
        key = name.strip().lower()
        if key == "yahoo":
            providers.append(YahooFinanceRateProvider())
        elif key == "exchangerate-api":
            providers.append(
                ExchangeRateApiProvider(
                    base_url=settings.exchangerate_api_url,
                    timeout=settings.provider_timeout_seconds,
                    max_age_seconds=settings.max_quote_age_seconds,
                )
            )
        elif key == "stub":
            providers.append(StubRateProvider())
        else:
            logger.warning("Unknown rate provider %r ignored", name)
    return providers
