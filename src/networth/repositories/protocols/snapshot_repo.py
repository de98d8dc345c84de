"""Performance snapshot repository protocol."""

from datetime import date
from typing import Protocol, Optional

from networth.domain.models import PerformanceSnapshot


class SnapshotRepository(Protocol):
    """Interface for the snapshot store keyed by (user_id, date)."""

    def get(self, user_id: str, on_date: date) -> Optional[PerformanceSnapshot]:
        """Snapshot for exactly this date."""
        ...

    def upsert(self, snapshot: PerformanceSnapshot) -> PerformanceSnapshot:
        """Insert or fully overwrite the row for (user_id, date)."""
        ...

    def find_previous(self, user_id: str, before: date) -> Optional[PerformanceSnapshot]:
        """Most recent snapshot with date strictly before ``before``."""
        ...

    def list_range(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[PerformanceSnapshot]:
        """Snapshots in the inclusive date range, ordered by date ascending."""
        ...

    def latest(self, user_id: str) -> Optional[PerformanceSnapshot]:
        """Most recent snapshot for a user."""
        ...
