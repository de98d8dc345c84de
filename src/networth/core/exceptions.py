"""Application-level exceptions."""

from datetime import date
from typing import Optional


class AppError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str, code: str = "APP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class NotFoundError(AppError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} not found: {identifier}", code="NOT_FOUND")


class ProviderError(AppError):
    """Raised by a single rate provider; always recovered by the aggregator."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"{source}: {message}", code="PROVIDER_ERROR")


class RateUnavailableError(AppError):
    """Raised when every provider failed and no rate was ever cached for the pair."""

    def __init__(self, from_currency: str, to_currency: str):
        self.from_currency = from_currency
        self.to_currency = to_currency
        super().__init__(
            f"Exchange rate unavailable for {from_currency}/{to_currency}",
            code="RATE_UNAVAILABLE",
        )


class ReconciliationViolation(AppError):
    """Raised when total P/L does not equal investment P/L plus currency P/L."""

    def __init__(self, user_id: str, on_date: date, detail: str):
        self.user_id = user_id
        self.on_date = on_date
        super().__init__(
            f"Snapshot for user {user_id} on {on_date.isoformat()} does not reconcile: {detail}",
            code="RECONCILIATION_VIOLATION",
        )


class PartialBackfillError(AppError):
    """
    Raised when a backfill was cancelled or some dates failed.

    ``last_successful_date`` ends the contiguous run of written dates starting
    at the requested start date, so a caller can resume from the day after it.
    """

    def __init__(
        self,
        last_successful_date: Optional[date],
        written: int,
        failed_dates: Optional[list[date]] = None,
        cancelled: bool = False,
    ):
        self.last_successful_date = last_successful_date
        self.written = written
        self.failed_dates = list(failed_dates or [])
        self.cancelled = cancelled
        reason = "cancelled" if cancelled else f"{len(self.failed_dates)} date(s) failed"
        last = last_successful_date.isoformat() if last_successful_date else "none"
        super().__init__(
            f"Backfill incomplete ({reason}); last successful date: {last}",
            code="PARTIAL_BACKFILL",
        )
