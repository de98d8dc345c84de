"""User, account and holding endpoints (ledger write side)."""

from typing import Optional

from fastapi import APIRouter, Depends

from networth.api.deps import get_ledger_service
from networth.api.schemas.ledger import (
    AccountCreateRequest,
    AccountListResponse,
    AccountResponse,
    BalanceEntryRequest,
    BalanceEntryResponse,
    HoldingCreateRequest,
    HoldingResponse,
    HoldingUpdateRequest,
    UserCreateRequest,
    UserResponse,
)
from networth.domain.models import Account, CurrencyHolding
from networth.services import AccountCreate, HoldingCreate, HoldingUpdate, LedgerService

router = APIRouter(tags=["ledger"])


def _account_response(account: Account, warning: Optional[str] = None) -> AccountResponse:
    return AccountResponse(
        account_id=account.account_id,
        user_id=account.user_id,
        name=account.name,
        currency=account.currency,
        account_type=account.account_type,
        original_capital=account.original_capital,
        account_number=account.account_number,
        created_at=account.created_at,
        warning=warning,
    )


def _holding_response(holding: CurrencyHolding, warning: Optional[str] = None) -> HoldingResponse:
    return HoldingResponse(
        holding_id=holding.holding_id,
        user_id=holding.user_id,
        pair=str(holding.pair),
        amount=holding.amount,
        avg_cost=holding.avg_cost,
        current_rate=holding.current_rate,
        profit_loss=holding.profit_loss,
        profit_loss_percent=holding.profit_loss_percent,
        updated_at=holding.updated_at,
        warning=warning,
    )


@router.post("/users", response_model=UserResponse, status_code=201)
def create_user(
    request: UserCreateRequest,
    service: LedgerService = Depends(get_ledger_service),
):
    user = service.create_user(request.name, request.base_currency)
    return UserResponse.model_validate(user)


@router.post("/users/{user_id}/accounts", response_model=AccountResponse, status_code=201)
def create_account(
    user_id: str,
    request: AccountCreateRequest,
    service: LedgerService = Depends(get_ledger_service),
):
    """Create an account with its opening balance entry."""
    result = service.create_account(
        user_id,
        AccountCreate(
            name=request.name,
            currency=request.currency,
            account_type=request.account_type,
            original_capital=request.original_capital,
            current_balance=request.current_balance,
            opened_on=request.opened_on,
            account_number=request.account_number,
        ),
    )
    return _account_response(result.entity, result.trigger.warning)


@router.get("/users/{user_id}/accounts", response_model=AccountListResponse)
def list_accounts(
    user_id: str,
    service: LedgerService = Depends(get_ledger_service),
):
    accounts = service.list_accounts(user_id)
    return AccountListResponse(
        accounts=[_account_response(a) for a in accounts],
        count=len(accounts),
    )


@router.post("/accounts/{account_id}/history", response_model=BalanceEntryResponse, status_code=201)
def record_balance(
    account_id: str,
    request: BalanceEntryRequest,
    service: LedgerService = Depends(get_ledger_service),
):
    """Append a balance entry; today's snapshot is recomputed afterwards."""
    result = service.record_balance(account_id, request.balance, request.date, request.note)
    entry = result.entity
    return BalanceEntryResponse(
        entry_id=entry.entry_id,
        account_id=entry.account_id,
        balance=entry.balance,
        currency=entry.currency,
        date=entry.date,
        note=entry.note,
        warning=result.trigger.warning,
    )


@router.post("/users/{user_id}/holdings", response_model=HoldingResponse, status_code=201)
def add_holding(
    user_id: str,
    request: HoldingCreateRequest,
    service: LedgerService = Depends(get_ledger_service),
):
    result = service.add_holding(
        user_id,
        HoldingCreate(
            pair=request.pair,
            amount=request.amount,
            avg_cost=request.avg_cost,
            current_rate=request.current_rate,
        ),
    )
    return _holding_response(result.entity, result.trigger.warning)


@router.patch("/holdings/{holding_id}", response_model=HoldingResponse)
def update_holding(
    holding_id: str,
    request: HoldingUpdateRequest,
    service: LedgerService = Depends(get_ledger_service),
):
    result = service.update_holding(
        holding_id,
        HoldingUpdate(
            amount=request.amount,
            avg_cost=request.avg_cost,
            current_rate=request.current_rate,
        ),
    )
    return _holding_response(result.entity, result.trigger.warning)
