"""Performance snapshot endpoints."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from networth.api.deps import get_snapshot_service
from networth.api.schemas.performance import (
    BackfillRequest,
    BackfillResponse,
    SnapshotListResponse,
    SnapshotResponse,
)
from networth.core.exceptions import NotFoundError, PartialBackfillError
from networth.domain.models import PerformanceSnapshot
from networth.services import PerformanceSnapshotService

router = APIRouter(prefix="/users/{user_id}/performance", tags=["performance"])


def _to_response(snapshot: PerformanceSnapshot) -> SnapshotResponse:
    return SnapshotResponse.model_validate(snapshot)


@router.get("", response_model=SnapshotListResponse)
def list_performance(
    user_id: str,
    start_date: Optional[date] = Query(default=None),
    end_date: Optional[date] = Query(default=None),
    service: PerformanceSnapshotService = Depends(get_snapshot_service),
):
    """Snapshots in the date range, oldest first."""
    snapshots = service.list_snapshots(user_id, start_date, end_date)
    return SnapshotListResponse(
        snapshots=[_to_response(s) for s in snapshots],
        count=len(snapshots),
    )


@router.get("/latest", response_model=SnapshotResponse)
def latest_performance(
    user_id: str,
    service: PerformanceSnapshotService = Depends(get_snapshot_service),
):
    """Most recent snapshot."""
    snapshot = service.latest_snapshot(user_id)
    if not snapshot:
        raise NotFoundError("Performance snapshot", user_id)
    return _to_response(snapshot)


@router.post("/today", response_model=SnapshotResponse)
def calculate_today(
    user_id: str,
    service: PerformanceSnapshotService = Depends(get_snapshot_service),
):
    """Compute (or overwrite) today's snapshot."""
    return _to_response(service.recompute_today(user_id))


@router.post("/backfill", response_model=BackfillResponse)
def backfill(
    user_id: str,
    request: BackfillRequest,
    service: PerformanceSnapshotService = Depends(get_snapshot_service),
):
    """Compute every date in the range; partial runs report where to resume."""
    try:
        result = service.backfill(user_id, request.start_date, request.end_date)
    except PartialBackfillError as e:
        return BackfillResponse(
            user_id=user_id,
            written=e.written,
            completed=False,
            last_successful_date=e.last_successful_date,
            failed_dates=e.failed_dates,
            cancelled=e.cancelled,
        )
    return BackfillResponse(
        user_id=user_id,
        written=result.written,
        completed=True,
        last_successful_date=result.end_date,
    )


@router.get("/{on_date}", response_model=SnapshotResponse)
def get_performance(
    user_id: str,
    on_date: date,
    service: PerformanceSnapshotService = Depends(get_snapshot_service),
):
    """Snapshot for one date."""
    snapshot = service.get_snapshot(user_id, on_date)
    if not snapshot:
        raise NotFoundError("Performance snapshot", f"{user_id} on {on_date.isoformat()}")
    return _to_response(snapshot)
