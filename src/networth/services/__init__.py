"""Service layer - business logic orchestration."""

from networth.services.aggregation_policy import AggregationPolicy
from networth.services.exchange_rate_service import ExchangeRateService
from networth.services.balance_resolver import BalanceResolver
from networth.services.locks import UserLocks, get_user_locks
from networth.services.snapshot_service import PerformanceSnapshotService
from networth.services.scheduler_service import SchedulerService, next_run_after
from networth.services.ledger_service import (
    LedgerService,
    AccountCreate,
    HoldingCreate,
    HoldingUpdate,
    EditResult,
)

__all__ = [
    "AggregationPolicy",
    "ExchangeRateService",
    "BalanceResolver",
    "UserLocks",
    "get_user_locks",
    "PerformanceSnapshotService",
    "SchedulerService",
    "next_run_after",
    "LedgerService",
    "AccountCreate",
    "HoldingCreate",
    "HoldingUpdate",
    "EditResult",
]
