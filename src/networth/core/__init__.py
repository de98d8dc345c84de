"""Core utilities and shared functionality."""

from networth.core.timezone import (
    UTC,
    now_utc,
    ensure_utc,
    today_in,
    parse_datetime_utc,
    iter_dates,
)
from networth.core.exceptions import (
    AppError,
    ValidationError,
    NotFoundError,
    ProviderError,
    RateUnavailableError,
    ReconciliationViolation,
    PartialBackfillError,
)

__all__ = [
    "UTC",
    "now_utc",
    "ensure_utc",
    "today_in",
    "parse_datetime_utc",
    "iter_dates",
    "AppError",
    "ValidationError",
    "NotFoundError",
    "ProviderError",
    "RateUnavailableError",
    "ReconciliationViolation",
    "PartialBackfillError",
]
