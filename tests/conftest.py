"""
Pytest configuration and fixtures for the net worth engine tests.

This module provides:
- In-memory SQLite database fixtures
- Fake exchange rate providers (fixed, failing, slow)
- A controllable clock for cache TTL tests
- Service and repository fixtures
- Factory helpers for users, accounts, balance history and holdings
"""

import time
import uuid
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Callable, Optional

import pytest
from sqlalchemy import create_engine, StaticPool
from sqlalchemy.orm import sessionmaker, Session
from fastapi.testclient import TestClient

from networth.main import app
from networth.api.deps import get_rate_providers
from networth.repositories.sqlalchemy.database import Base, get_db
# Import ORM models to register them with Base before creating tables
from networth.repositories.sqlalchemy import orm_models  # noqa: F401
from networth.repositories.sqlalchemy import (
    SqlAlchemyAccountRepository,
    SqlAlchemyHoldingRepository,
    SqlAlchemyUserRepository,
    SqlAlchemyRateCacheRepository,
    SqlAlchemySnapshotRepository,
)
from networth.repositories.memory import InMemoryRateCacheRepository
from networth.services import (
    AggregationPolicy,
    ExchangeRateService,
    LedgerService,
    PerformanceSnapshotService,
    UserLocks,
)
from networth.domain.models import (
    Account,
    AccountHistoryEntry,
    AccountType,
    CurrencyHolding,
    CurrencyPair,
    CurrencyPairQuote,
    User,
)
from networth.core.exceptions import ProviderError
from networth.core.timezone import UTC
from networth.config.settings import reset_settings


# =============================================================================
# TIME HELPERS
# =============================================================================


def utc_datetime(
    year: int,
    month: int,
    day: int,
    hour: int = 12,
    minute: int = 0,
    second: int = 0,
) -> datetime:
    """Create an aware UTC datetime."""
    return UTC.localize(datetime(year, month, day, hour, minute, second))


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


# Calendar date the snapshot service treats as "today"
TODAY = date(2024, 6, 15)


@pytest.fixture
def fixed_now() -> datetime:
    """Fixed 'now' timestamp for deterministic tests."""
    return utc_datetime(2024, 6, 15, 12, 0, 0)


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="function")
def test_engine():
    """Create test database engine with shared in-memory SQLite."""
    # Reset settings for clean state
    reset_settings()

    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def test_session(test_engine) -> Session:
    """Create test database session."""
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# REPOSITORY FIXTURES
# =============================================================================


@pytest.fixture
def user_repo(test_session) -> SqlAlchemyUserRepository:
    """Provide test UserRepository."""
    return SqlAlchemyUserRepository(test_session)


@pytest.fixture
def account_repo(test_session) -> SqlAlchemyAccountRepository:
    """Provide test AccountRepository."""
    return SqlAlchemyAccountRepository(test_session)


@pytest.fixture
def holding_repo(test_session) -> SqlAlchemyHoldingRepository:
    """Provide test HoldingRepository."""
    return SqlAlchemyHoldingRepository(test_session)


@pytest.fixture
def sql_rate_cache(test_session) -> SqlAlchemyRateCacheRepository:
    """Provide SQL-backed RateCacheRepository (10 minute TTL)."""
    return SqlAlchemyRateCacheRepository(test_session, ttl_seconds=600)


@pytest.fixture
def snapshot_repo(test_session) -> SqlAlchemySnapshotRepository:
    """Provide test SnapshotRepository."""
    return SqlAlchemySnapshotRepository(test_session)


@pytest.fixture
def rate_cache() -> InMemoryRateCacheRepository:
    """Provide in-memory RateCacheRepository (10 minute TTL)."""
    return InMemoryRateCacheRepository(ttl_seconds=600)


# =============================================================================
# RATE PROVIDER FIXTURES
# =============================================================================


class FixedRateProvider:
    """
    Deterministic rate provider for testing.

    Answers pairs in ``rates`` directly and their inverses as ``1/rate``.
    Records every requested pair.
    """

    def __init__(
        self,
        rates: dict[tuple[str, str], Decimal],
        name: str = "fixed",
        observed_at: Optional[datetime] = None,
    ):
        self.name = name
        self.rates = dict(rates)
        self.observed_at = observed_at
        self.calls: list[CurrencyPair] = []

    def quote(self, pair: CurrencyPair) -> CurrencyPairQuote:
        self.calls.append(pair)
        key = (pair.base, pair.quote)
        inverse_key = (pair.quote, pair.base)
        if key in self.rates:
            rate = self.rates[key]
        elif inverse_key in self.rates:
            rate = Decimal("1") / self.rates[inverse_key]
        else:
            raise ProviderError(self.name, f"no rate for {pair}")
        return CurrencyPairQuote(
            pair=pair,
            rate=rate,
            source=self.name,
            observed_at=self.observed_at or datetime.now(UTC),
        )

    @property
    def call_count(self) -> int:
        return len(self.calls)


class FailingRateProvider:
    """Rate provider that always fails."""

    def __init__(self, name: str = "failing", error: Optional[Exception] = None):
        self.name = name
        self.error = error
        self.call_count = 0

    def quote(self, pair: CurrencyPair) -> CurrencyPairQuote:
        self.call_count += 1
        if self.error is not None:
            raise self.error
        raise ProviderError(self.name, "network unavailable")


class SlowRateProvider(FixedRateProvider):
    """Rate provider that answers only after ``delay`` seconds."""

    def __init__(self, rates: dict[tuple[str, str], Decimal], delay: float, name: str = "slow"):
        super().__init__(rates, name=name)
        self.delay = delay

    def quote(self, pair: CurrencyPair) -> CurrencyPairQuote:
        time.sleep(self.delay)
        return super().quote(pair)


DEFAULT_RATES = {
    ("EUR", "USD"): Decimal("1.10"),
    ("GBP", "USD"): Decimal("1.25"),
    ("USD", "JPY"): Decimal("150"),
}


@pytest.fixture
def fixed_provider() -> FixedRateProvider:
    return FixedRateProvider(DEFAULT_RATES)


@pytest.fixture
def failing_provider() -> FailingRateProvider:
    return FailingRateProvider()


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def user_locks() -> UserLocks:
    return UserLocks()


@pytest.fixture
def make_rate_service(rate_cache, clock, user_repo, account_repo, holding_repo) -> Callable[..., ExchangeRateService]:
    """Factory for an ExchangeRateService over the given providers."""

    def _make(
        providers: list,
        policy: Optional[AggregationPolicy] = None,
        timeout: float = 2.0,
        cache=None,
        max_quote_age_seconds: Optional[int] = None,
    ) -> ExchangeRateService:
        return ExchangeRateService(
            rate_cache=cache or rate_cache,
            providers=providers,
            policy=policy,
            provider_timeout_seconds=timeout,
            max_quote_age_seconds=max_quote_age_seconds,
            account_repo=account_repo,
            holding_repo=holding_repo,
            user_repo=user_repo,
            clock=clock,
        )

    return _make


@pytest.fixture
def rate_service(make_rate_service, fixed_provider) -> ExchangeRateService:
    return make_rate_service([fixed_provider])


@pytest.fixture
def snapshot_service(
    user_repo, account_repo, holding_repo, snapshot_repo, rate_service, user_locks
) -> PerformanceSnapshotService:
    return PerformanceSnapshotService(
        user_repo=user_repo,
        account_repo=account_repo,
        holding_repo=holding_repo,
        snapshot_repo=snapshot_repo,
        rate_service=rate_service,
        locks=user_locks,
        today_fn=lambda: TODAY,
    )


@pytest.fixture
def ledger_service(user_repo, account_repo, holding_repo, rate_service, snapshot_service) -> LedgerService:
    return LedgerService(
        user_repo=user_repo,
        account_repo=account_repo,
        holding_repo=holding_repo,
        rate_service=rate_service,
        on_edit=snapshot_service.refresh_after_edit,
    )


# =============================================================================
# FACTORY FIXTURES
# =============================================================================


@pytest.fixture
def user_factory(user_repo) -> Callable[..., User]:
    """Factory for creating test users."""

    def _create_user(name: str = "Test User", base_currency: str = "USD") -> User:
        return user_repo.create(
            User(
                user_id=str(uuid.uuid4()),
                name=name,
                base_currency=base_currency,
                created_at=utc_datetime(2023, 12, 1),
            )
        )

    return _create_user


@pytest.fixture
def account_factory(account_repo) -> Callable[..., Account]:
    """Factory for creating accounts without any history entries."""

    def _create_account(
        user: User,
        currency: str = "USD",
        original_capital: Decimal = Decimal("0"),
        account_type: AccountType = AccountType.INVESTMENT,
        name: Optional[str] = None,
    ) -> Account:
        return account_repo.create(
            Account(
                account_id=str(uuid.uuid4()),
                user_id=user.user_id,
                name=name or f"{account_type.value.title()} {currency}",
                currency=currency,
                account_type=account_type,
                original_capital=original_capital,
                created_at=utc_datetime(2023, 12, 1),
            )
        )

    return _create_account


@pytest.fixture
def history_factory(account_repo) -> Callable[..., AccountHistoryEntry]:
    """Factory for appending balance history entries."""

    def _add_entry(
        account: Account,
        balance: Decimal,
        on_date: date,
        created_at: Optional[datetime] = None,
        note: Optional[str] = None,
    ) -> AccountHistoryEntry:
        return account_repo.add_history_entry(
            AccountHistoryEntry(
                entry_id=str(uuid.uuid4()),
                account_id=account.account_id,
                balance=balance,
                currency=account.currency,
                date=on_date,
                note=note,
                created_at=created_at or utc_datetime(on_date.year, on_date.month, on_date.day),
            )
        )

    return _add_entry


@pytest.fixture
def holding_factory(holding_repo) -> Callable[..., CurrencyHolding]:
    """Factory for creating currency holdings."""

    def _create_holding(
        user: User,
        pair: str = "EUR/USD",
        amount: Decimal = Decimal("1000"),
        avg_cost: Decimal = Decimal("1.05"),
        current_rate: Decimal = Decimal("1.10"),
    ) -> CurrencyHolding:
        return holding_repo.create(
            CurrencyHolding(
                holding_id=str(uuid.uuid4()),
                user_id=user.user_id,
                pair=CurrencyPair.parse(pair),
                amount=amount,
                avg_cost=avg_cost,
                current_rate=current_rate,
                updated_at=utc_datetime(2024, 1, 1),
            )
        )

    return _create_holding


# =============================================================================
# API CLIENT FIXTURE
# =============================================================================


@pytest.fixture
def api_providers() -> list:
    """Providers used behind the HTTP API in tests."""
    return [FixedRateProvider(DEFAULT_RATES)]


@pytest.fixture
def client(test_engine, api_providers) -> TestClient:
    """Provide FastAPI test client with test database and fake providers."""
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

    def override_get_db():
        db = TestSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_rate_providers] = lambda: api_providers
    yield TestClient(app)
    app.dependency_overrides.clear()


# =============================================================================
# ASSERTION HELPERS
# =============================================================================


def assert_decimal_equal(
    actual: Decimal,
    expected: Decimal,
    places: int = 2,
) -> None:
    """Assert two Decimals are equal to the given number of places."""
    quantum = Decimal(10) ** -places
    assert Decimal(actual).quantize(quantum) == Decimal(expected).quantize(quantum), (
        f"Expected {expected}, got {actual}"
    )
