"""Pydantic schemas for exchange rate endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class RateResponse(BaseModel):
    """Response schema for a resolved rate."""

    from_currency: str
    to_currency: str
    rate: Decimal
    as_of: Optional[datetime] = None
    degraded: bool = False
    from_cache: bool = False
    sources: list[str] = []


class RateRefreshResponse(BaseModel):
    """Response schema for a user's rate refresh."""

    user_id: str
    resolved: dict[str, Decimal]
    degraded: list[str]
    unavailable: list[str]
    holdings_updated: int
    holdings_kept: int
    last_update_time: Optional[datetime] = None
    warning: Optional[str] = None


class PopularPairsResponse(BaseModel):
    """Response schema for suggested currency pairs."""

    base_currency: str
    pairs: list[str]
