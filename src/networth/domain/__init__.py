"""Domain layer - pure business models with no external dependencies."""

from networth.domain.models import (
    AccountType,
    Account,
    AccountHistoryEntry,
    CurrencyPair,
    CurrencyHolding,
    CurrencyPairQuote,
    CachedRate,
    PairHint,
    PerformanceSnapshot,
    User,
)

__all__ = [
    "AccountType",
    "Account",
    "AccountHistoryEntry",
    "CurrencyPair",
    "CurrencyHolding",
    "CurrencyPairQuote",
    "CachedRate",
    "PairHint",
    "PerformanceSnapshot",
    "User",
]
