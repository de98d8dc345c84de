"""Repository protocol definitions (interfaces)."""

from networth.repositories.protocols.account_repo import AccountRepository
from networth.repositories.protocols.holding_repo import HoldingRepository
from networth.repositories.protocols.user_repo import UserRepository
from networth.repositories.protocols.rate_cache_repo import RateCacheRepository
from networth.repositories.protocols.snapshot_repo import SnapshotRepository

__all__ = [
    "AccountRepository",
    "HoldingRepository",
    "UserRepository",
    "RateCacheRepository",
    "SnapshotRepository",
]
