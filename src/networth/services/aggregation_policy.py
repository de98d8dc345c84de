"""Combining several provider quotes into one rate."""

import logging
from decimal import Decimal
from statistics import median
from typing import Optional

from networth.config.settings import Settings
from networth.core.money import to_decimal, to_rate
from networth.domain.models import CurrencyPairQuote

logger = logging.getLogger(__name__)


class AggregationPolicy:
    """
    Weighted average of provider quotes with median-based outlier rejection.

    Quotes deviating from the median by more than ``outlier_threshold_pct``
    percent are dropped first, but only when at least ``outlier_min_sources``
    quotes are present. Sources without a configured weight count with
    ``default_weight``.
    """

    def __init__(
        self,
        weights: Optional[dict[str, float]] = None,
        default_weight: float = 1.0,
        outlier_threshold_pct: float = 5.0,
        outlier_min_sources: int = 3,
    ):
        self.weights = {k: to_decimal(v) for k, v in (weights or {}).items()}
        self.default_weight = to_decimal(default_weight)
        self.outlier_threshold_pct = to_decimal(outlier_threshold_pct)
        self.outlier_min_sources = outlier_min_sources

    @classmethod
    def from_settings(cls, settings: Settings) -> "AggregationPolicy":
        return cls(
            weights=settings.rate_source_weights,
            default_weight=settings.default_source_weight,
            outlier_threshold_pct=settings.outlier_threshold_pct,
            outlier_min_sources=settings.outlier_min_sources,
        )

    def weight_for(self, source: str) -> Decimal:
        return self.weights.get(source, self.default_weight)

    def reject_outliers(self, quotes: list[CurrencyPairQuote]) -> list[CurrencyPairQuote]:
        """Drop quotes too far from the median; returns the input unchanged below the quorum."""
        if len(quotes) < self.outlier_min_sources:
            return list(quotes)

        mid = median(q.rate for q in quotes)
        kept = [
            q for q in quotes
            if abs(q.rate - mid) / mid * 100 <= self.outlier_threshold_pct
        ]
        for q in quotes:
            if q not in kept:
                logger.info("Discarding outlier quote %s from %s for %s (median %s)", q.rate, q.source, q.pair, mid)

        # No consensus around the median: keep everything rather than nothing
        return kept or list(quotes)

    def combine(self, quotes: list[CurrencyPairQuote]) -> Decimal:
        """Combined rate for the quotes of a single pair."""
        if not quotes:
            raise ValueError("combine() needs at least one quote")
        if len(quotes) == 1:
            return to_rate(quotes[0].rate)

        candidates = self.reject_outliers(quotes)
        total_weight = sum((self.weight_for(q.source) for q in candidates), Decimal("0"))
        if total_weight <= 0:
            return to_rate(sum((q.rate for q in candidates), Decimal("0")) / len(candidates))

        weighted = sum((q.rate * self.weight_for(q.source) for q in candidates), Decimal("0"))
        return to_rate(weighted / total_weight)
