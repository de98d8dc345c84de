"""Exchange rate providers module."""

from networth.providers.rate_provider import RateProviderAdapter
from networth.providers.yahoo_provider import YahooFinanceRateProvider, yahoo_symbol
from networth.providers.exchangerate_api_provider import ExchangeRateApiProvider
from networth.providers.stub_provider import StubRateProvider
from networth.providers.factory import build_providers

__all__ = [
    "RateProviderAdapter",
    "YahooFinanceRateProvider",
    "yahoo_symbol",
    "ExchangeRateApiProvider",
    "StubRateProvider",
    "build_providers",
]
