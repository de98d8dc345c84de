"""Pydantic schemas for user, account and holding endpoints."""

import datetime as dt
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from networth.domain.models.enums import AccountType


class UserCreateRequest(BaseModel):
    """Request schema for creating a user."""

    name: str = Field(..., min_length=1, max_length=255)
    base_currency: Optional[str] = Field(default=None, min_length=3, max_length=3)


class UserResponse(BaseModel):
    """Response schema for a user."""

    model_config = {"from_attributes": True}

    user_id: str
    name: str
    base_currency: str
    created_at: Optional[dt.datetime] = None


class AccountCreateRequest(BaseModel):
    """Request schema for creating an account."""

    name: str = Field(..., min_length=1, max_length=255)
    currency: str = Field(..., min_length=3, max_length=3)
    account_type: AccountType = AccountType.INVESTMENT
    original_capital: Decimal = Field(default=Decimal("0"), ge=0)
    current_balance: Optional[Decimal] = Field(default=None, description="Defaults to original_capital")
    opened_on: Optional[dt.date] = Field(default=None, description="Date of the first balance entry")
    account_number: Optional[str] = Field(default=None, max_length=64)


class AccountResponse(BaseModel):
    """Response schema for an account."""

    model_config = {"from_attributes": True}

    account_id: str
    user_id: str
    name: str
    currency: str
    account_type: AccountType
    original_capital: Decimal
    account_number: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    warning: Optional[str] = None


class AccountListResponse(BaseModel):
    """Response schema for listing accounts."""

    accounts: list[AccountResponse]
    count: int


class BalanceEntryRequest(BaseModel):
    """Request schema for recording an account balance."""

    balance: Decimal
    date: Optional[dt.date] = Field(default=None, description="Defaults to today")
    note: Optional[str] = None


class BalanceEntryResponse(BaseModel):
    """Response schema for a balance history entry."""

    model_config = {"from_attributes": True}

    entry_id: str
    account_id: str
    balance: Decimal
    currency: str
    date: dt.date
    note: Optional[str] = None
    warning: Optional[str] = None


class HoldingCreateRequest(BaseModel):
    """Request schema for adding a currency holding."""

    pair: str = Field(..., description="Currency pair as BASE/QUOTE, e.g. EUR/USD")
    amount: Decimal = Field(..., ge=0)
    avg_cost: Decimal = Field(..., gt=0)
    current_rate: Optional[Decimal] = Field(default=None, gt=0)


class HoldingUpdateRequest(BaseModel):
    """Request schema for editing a currency holding (partial)."""

    amount: Optional[Decimal] = Field(default=None, ge=0)
    avg_cost: Optional[Decimal] = Field(default=None, gt=0)
    current_rate: Optional[Decimal] = Field(default=None, gt=0)


class HoldingResponse(BaseModel):
    """Response schema for a currency holding."""

    holding_id: str
    user_id: str
    pair: str
    amount: Decimal
    avg_cost: Decimal
    current_rate: Decimal
    profit_loss: Decimal
    profit_loss_percent: Optional[Decimal] = None
    updated_at: Optional[dt.datetime] = None
    warning: Optional[str] = None
