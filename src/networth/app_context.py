"""Application context for in-process service management.

Provides a centralized way to access all services without HTTP. Used by the
snapshot scheduler, which runs outside any request and needs its own session.
"""

from pathlib import Path
from typing import Optional

from sqlalchemy.orm import Session

from networth.config.settings import Settings, set_settings, get_settings
from networth.providers import RateProviderAdapter, build_providers
from networth.repositories.sqlalchemy.database import (
    init_db_with_path,
    reset_database,
    get_session,
)
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


class AppContext:
    """
    Application context providing in-process access to all services.

    Services share one database session, created lazily. Call ``close()``
    when done.
    """

    def __init__(
        self,
        session: Optional[Session] = None,
        providers: Optional[list[RateProviderAdapter]] = None,
    ):
        self._session = session
        self._providers = providers

        # Service instances (lazy initialized)
        self._rate_service: Optional[ExchangeRateService] = None
        self._snapshot_service: Optional[PerformanceSnapshotService] = None
        self._ledger_service: Optional[LedgerService] = None

    def initialize(self, data_dir: Path) -> None:
        """
        Point the application at a data directory and create the database.

        Args:
            data_dir: Data directory path.
        """
        settings = Settings(data_dir=data_dir)
        set_settings(settings)

        reset_database()
        init_db_with_path(settings.get_data_dir() / "networth.db")

        self.close()
        self._rate_service = None
        self._snapshot_service = None
        self._ledger_service = None

    def _get_session(self) -> Session:
        """Get or create database session."""
        if self._session is None:
            self._session = get_session()
        return self._session

    # Repository accessors
    def _get_user_repo(self) -> SqlAlchemyUserRepository:
        return SqlAlchemyUserRepository(self._get_session())

    def _get_account_repo(self) -> SqlAlchemyAccountRepository:
        return SqlAlchemyAccountRepository(self._get_session())

    def _get_holding_repo(self) -> SqlAlchemyHoldingRepository:
        return SqlAlchemyHoldingRepository(self._get_session())

    def _get_rate_cache_repo(self) -> SqlAlchemyRateCacheRepository:
        return SqlAlchemyRateCacheRepository(
            self._get_session(),
            ttl_seconds=get_settings().rate_cache_ttl_seconds,
        )

    def _get_snapshot_repo(self) -> SqlAlchemySnapshotRepository:
        return SqlAlchemySnapshotRepository(self._get_session())

    # Service accessors
    @property
    def rates(self) -> ExchangeRateService:
        """Get the ExchangeRateService instance."""
        if self._rate_service is None:
            settings = get_settings()
            providers = self._providers if self._providers is not None else build_providers(settings)
            self._rate_service = ExchangeRateService(
                rate_cache=self._get_rate_cache_repo(),
                providers=providers,
                policy=AggregationPolicy.from_settings(settings),
                provider_timeout_seconds=settings.provider_timeout_seconds,
                max_quote_age_seconds=settings.max_quote_age_seconds,
                account_repo=self._get_account_repo(),
                holding_repo=self._get_holding_repo(),
                user_repo=self._get_user_repo(),
            )
        return self._rate_service

    @property
    def snapshots(self) -> PerformanceSnapshotService:
        """Get the PerformanceSnapshotService instance."""
        if self._snapshot_service is None:
            self._snapshot_service = PerformanceSnapshotService(
                user_repo=self._get_user_repo(),
                account_repo=self._get_account_repo(),
                holding_repo=self._get_holding_repo(),
                snapshot_repo=self._get_snapshot_repo(),
                rate_service=self.rates,
                timezone_name=get_settings().snapshot_schedule_timezone,
            )
        return self._snapshot_service

    @property
    def ledger(self) -> LedgerService:
        """Get the LedgerService instance."""
        if self._ledger_service is None:
            settings = get_settings()
            self._ledger_service = LedgerService(
                user_repo=self._get_user_repo(),
                account_repo=self._get_account_repo(),
                holding_repo=self._get_holding_repo(),
                rate_service=self.rates,
                on_edit=self.snapshots.refresh_after_edit,
                default_base_currency=settings.default_base_currency,
                timezone_name=settings.snapshot_schedule_timezone,
            )
        return self._ledger_service

    def close(self) -> None:
        """Clean up resources."""
        if self._session:
            self._session.close()
            self._session = None


def run_daily_snapshots() -> dict[str, int]:
    """Scheduled job: refresh rates and compute today's snapshot for every user."""
    context = AppContext()
    try:
        return context.snapshots.compute_all_users_today()
    finally:
        context.close()


def calculate_today_if_missing() -> int:
    """Startup job: compute today's snapshot for users that have none."""
    context = AppContext()
    try:
        return context.snapshots.calculate_today_if_missing()
    finally:
        context.close()
