"""API routers package."""

from networth.api.routers.rates import router as rates_router
from networth.api.routers.performance import router as performance_router
from networth.api.routers.ledger import router as ledger_router

__all__ = [
    "rates_router",
    "performance_router",
    "ledger_router",
]
