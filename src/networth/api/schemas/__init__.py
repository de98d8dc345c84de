"""Pydantic schemas for API request/response."""

from networth.api.schemas.rates import (
    RateResponse,
    RateRefreshResponse,
    PopularPairsResponse,
)
from networth.api.schemas.performance import (
    SnapshotResponse,
    SnapshotListResponse,
    BackfillRequest,
    BackfillResponse,
)
from networth.api.schemas.ledger import (
    UserCreateRequest,
    UserResponse,
    AccountCreateRequest,
    AccountResponse,
    AccountListResponse,
    BalanceEntryRequest,
    BalanceEntryResponse,
    HoldingCreateRequest,
    HoldingUpdateRequest,
    HoldingResponse,
)

__all__ = [
    "RateResponse",
    "RateRefreshResponse",
    "PopularPairsResponse",
    "SnapshotResponse",
    "SnapshotListResponse",
    "BackfillRequest",
    "BackfillResponse",
    "UserCreateRequest",
    "UserResponse",
    "AccountCreateRequest",
    "AccountResponse",
    "AccountListResponse",
    "BalanceEntryRequest",
    "BalanceEntryResponse",
    "HoldingCreateRequest",
    "HoldingUpdateRequest",
    "HoldingResponse",
]
