"""Pydantic schemas for performance snapshot endpoints."""

import datetime as dt
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class SnapshotResponse(BaseModel):
    """Response schema for one daily snapshot."""

    model_config = {"from_attributes": True}

    user_id: str
    date: dt.date
    total_pl: Decimal
    investment_pl: Decimal
    currency_pl: Decimal
    daily_pl: Decimal
    base_currency: Optional[str] = None


class SnapshotListResponse(BaseModel):
    """Response schema for a snapshot series."""

    snapshots: list[SnapshotResponse]
    count: int


class BackfillRequest(BaseModel):
    """Request schema for a backfill run."""

    start_date: dt.date = Field(..., description="First date to compute (inclusive)")
    end_date: dt.date = Field(..., description="Last date to compute (inclusive)")


class BackfillResponse(BaseModel):
    """Response schema for a backfill run."""

    user_id: str
    written: int
    completed: bool
    last_successful_date: Optional[dt.date] = None
    failed_dates: list[dt.date] = []
    cancelled: bool = False
