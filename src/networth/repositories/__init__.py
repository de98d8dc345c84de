"""Repository layer - data access abstractions and implementations."""

from networth.repositories.protocols import (
    AccountRepository,
    HoldingRepository,
    UserRepository,
    RateCacheRepository,
    SnapshotRepository,
)

__all__ = [
    "AccountRepository",
    "HoldingRepository",
    "UserRepository",
    "RateCacheRepository",
    "SnapshotRepository",
]
