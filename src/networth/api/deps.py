"""Dependency injection for FastAPI."""

from fastapi import Depends
from sqlalchemy.orm import Session

from networth.config.settings import get_settings
from networth.providers import RateProviderAdapter, build_providers
from networth.repositories.sqlalchemy.database import get_db
from networth.repositories.sqlalchemy import (
    SqlAlchemyAccountRepository,
    SqlAlchemyHoldingRepository,
    SqlAlchemyUserRepository,
    SqlAlchemyRateCacheRepository,
    SqlAlchemySnapshotRepository,
)
from networth.services import (
    AggregationPolicy,
    ExchangeRateService,
    LedgerService,
    PerformanceSnapshotService,
)


def get_user_repo(db: Session = Depends(get_db)) -> SqlAlchemyUserRepository:
    """Provide UserRepository instance."""
    return SqlAlchemyUserRepository(db)


def get_account_repo(db: Session = Depends(get_db)) -> SqlAlchemyAccountRepository:
    """Provide AccountRepository instance."""
    return SqlAlchemyAccountRepository(db)


def get_holding_repo(db: Session = Depends(get_db)) -> SqlAlchemyHoldingRepository:
    """Provide HoldingRepository instance."""
    return SqlAlchemyHoldingRepository(db)


def get_rate_cache_repo(db: Session = Depends(get_db)) -> SqlAlchemyRateCacheRepository:
    """Provide RateCacheRepository instance."""
    return SqlAlchemyRateCacheRepository(db, ttl_seconds=get_settings().rate_cache_ttl_seconds)


def get_snapshot_repo(db: Session = Depends(get_db)) -> SqlAlchemySnapshotRepository:
    """Provide SnapshotRepository instance."""
    return SqlAlchemySnapshotRepository(db)


def get_rate_providers() -> list[RateProviderAdapter]:
    """Provide the configured exchange rate providers."""
    return build_providers(get_settings())


def get_exchange_rate_service(
    rate_cache: SqlAlchemyRateCacheRepository = Depends(get_rate_cache_repo),
    providers: list[RateProviderAdapter] = Depends(get_rate_providers),
    user_repo: SqlAlchemyUserRepository = Depends(get_user_repo),
    account_repo: SqlAlchemyAccountRepository = Depends(get_account_repo),
    holding_repo: SqlAlchemyHoldingRepository = Depends(get_holding_repo),
) -> ExchangeRateService:
    """Provide ExchangeRateService instance."""
    settings = get_settings()
    return ExchangeRateService(
        rate_cache=rate_cache,
        providers=providers,
        policy=AggregationPolicy.from_settings(settings),
        provider_timeout_seconds=settings.provider_timeout_seconds,
        max_quote_age_seconds=settings.max_quote_age_seconds,
        account_repo=account_repo,
        holding_repo=holding_repo,
        user_repo=user_repo,
    )


def get_snapshot_service(
    user_repo: SqlAlchemyUserRepository = Depends(get_user_repo),
    account_repo: SqlAlchemyAccountRepository = Depends(get_account_repo),
    holding_repo: SqlAlchemyHoldingRepository = Depends(get_holding_repo),
    snapshot_repo: SqlAlchemySnapshotRepository = Depends(get_snapshot_repo),
    rate_service: ExchangeRateService = Depends(get_exchange_rate_service),
) -> PerformanceSnapshotService:
    """Provide PerformanceSnapshotService instance."""
    return PerformanceSnapshotService(
        user_repo=user_repo,
        account_repo=account_repo,
        holding_repo=holding_repo,
        snapshot_repo=snapshot_repo,
        rate_service=rate_service,
        timezone_name=get_settings().snapshot_schedule_timezone,
    )


def get_ledger_service(
    user_repo: SqlAlchemyUserRepository = Depends(get_user_repo),
    account_repo: SqlAlchemyAccountRepository = Depends(get_account_repo),
    holding_repo: SqlAlchemyHoldingRepository = Depends(get_holding_repo),
    rate_service: ExchangeRateService = Depends(get_exchange_rate_service),
    snapshot_service: PerformanceSnapshotService = Depends(get_snapshot_service),
) -> LedgerService:
    """Provide LedgerService instance."""
    settings = get_settings()
    return LedgerService(
        user_repo=user_repo,
        account_repo=account_repo,
        holding_repo=holding_repo,
        rate_service=rate_service,
        on_edit=snapshot_service.refresh_after_edit,
        default_base_currency=settings.default_base_currency,
        timezone_name=settings.snapshot_schedule_timezone,
    )
