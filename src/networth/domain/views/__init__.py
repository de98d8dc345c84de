"""View models for service outputs."""

from networth.domain.views.results import (
    RateResult,
    BalanceAsOf,
    BackfillResult,
    RateRefreshSummary,
    TriggerOutcome,
)

__all__ = [
    "RateResult",
    "BalanceAsOf",
    "BackfillResult",
    "RateRefreshSummary",
    "TriggerOutcome",
]
