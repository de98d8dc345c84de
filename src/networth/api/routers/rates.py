"""Exchange rate endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from networth.api.deps import get_exchange_rate_service, get_snapshot_service, get_user_repo
from networth.api.schemas.rates import PopularPairsResponse, RateRefreshResponse, RateResponse
from networth.config.settings import get_settings
from networth.core.exceptions import NotFoundError
from networth.repositories.sqlalchemy import SqlAlchemyUserRepository
from networth.services import ExchangeRateService, PerformanceSnapshotService

router = APIRouter(prefix="/rates", tags=["rates"])


@router.get("/popular", response_model=PopularPairsResponse)
def popular_pairs(
    user_id: Optional[str] = Query(default=None),
    base_currency: Optional[str] = Query(default=None, min_length=3, max_length=3),
    service: ExchangeRateService = Depends(get_exchange_rate_service),
    user_repo: SqlAlchemyUserRepository = Depends(get_user_repo),
):
    """Suggested pairs: the user's most used, then common currencies against the base."""
    base = base_currency
    if base is None and user_id:
        user = user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User", user_id)
        base = user.base_currency
    base = (base or get_settings().default_base_currency).upper()

    pairs = service.popular_pairs(user_id, base)
    return PopularPairsResponse(base_currency=base, pairs=[str(p) for p in pairs])


@router.post("/refresh", response_model=RateRefreshResponse)
def refresh_rates(
    user_id: str = Query(...),
    service: ExchangeRateService = Depends(get_exchange_rate_service),
    snapshot_service: PerformanceSnapshotService = Depends(get_snapshot_service),
):
    """Force-refresh every pair the user needs, update holding rates, then recompute today."""
    summary = service.refresh_user_rates(user_id, force_refresh=True)
    trigger = snapshot_service.refresh_after_edit(user_id, refresh_rates=False)
    return RateRefreshResponse(
        user_id=summary.user_id,
        resolved=summary.resolved,
        degraded=summary.degraded,
        unavailable=summary.unavailable,
        holdings_updated=summary.holdings_updated,
        holdings_kept=summary.holdings_kept,
        last_update_time=service.last_update_time(),
        warning=trigger.warning,
    )


@router.get("/{from_currency}/{to_currency}", response_model=RateResponse)
def get_rate(
    from_currency: str,
    to_currency: str,
    force_refresh: bool = Query(default=False),
    service: ExchangeRateService = Depends(get_exchange_rate_service),
):
    """Resolve one rate. Responds 503 when no rate was ever available."""
    result = service.resolve_detailed(from_currency, to_currency, force_refresh=force_refresh)
    return RateResponse(
        from_currency=result.pair.base,
        to_currency=result.pair.quote,
        rate=result.rate,
        as_of=result.as_of,
        degraded=result.degraded,
        from_cache=result.from_cache,
        sources=result.sources,
    )
