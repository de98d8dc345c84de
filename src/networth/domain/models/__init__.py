"""Domain models package."""

from networth.domain.models.enums import AccountType
from networth.domain.models.account import Account, AccountHistoryEntry
from networth.domain.models.currency import CurrencyPair, CurrencyHolding, normalize_currency
from networth.domain.models.rate import CurrencyPairQuote, CachedRate, PairHint
from networth.domain.models.snapshot import PerformanceSnapshot
from networth.domain.models.user import User

__all__ = [
    "AccountType",
    "Account",
    "AccountHistoryEntry",
    "CurrencyPair",
    "CurrencyHolding",
    "normalize_currency",
    "CurrencyPairQuote",
    "CachedRate",
    "PairHint",
    "PerformanceSnapshot",
    "User",
]
