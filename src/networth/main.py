"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from networth import __version__
from networth.config.settings import get_settings
from networth.config.logging_config import setup_logging
from networth.repositories.sqlalchemy.database import init_db
from networth.api.routers import rates_router, performance_router, ledger_router
from networth.app_context import calculate_today_if_missing, run_daily_snapshots
from networth.core.exceptions import AppError
from networth.services import SchedulerService

logger = logging.getLogger(__name__)

# AppError.code -> HTTP status; anything else is a client error
ERROR_STATUS_CODES = {
    "NOT_FOUND": 404,
    "RATE_UNAVAILABLE": 503,
    "RECONCILIATION_VIOLATION": 500,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    setup_logging()
    init_db()

    settings = get_settings()
    scheduler = None
    if settings.scheduler_enabled:
        hour, minute = settings.schedule_hour_minute()
        scheduler = SchedulerService(
            job=run_daily_snapshots,
            hour=hour,
            minute=minute,
            tz_name=settings.snapshot_schedule_timezone,
            startup_job=calculate_today_if_missing,
        )
        scheduler.start()
    app.state.scheduler = scheduler

    yield

    # Shutdown
    if scheduler is not None:
        scheduler.stop()


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Multi-currency net worth tracking with daily performance snapshots",
    version=__version__,
    lifespan=lifespan,
)

# Include routers
app.include_router(rates_router)
app.include_router(performance_router)
app.include_router(ledger_router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Global handler for application errors."""
    status_code = ERROR_STATUS_CODES.get(exc.code, 400)
    if status_code >= 500:
        logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.code, "message": exc.message},
    )


@app.get("/health")
def health_check() -> dict:
    """Health check endpoint."""
    scheduler = getattr(app.state, "scheduler", None)
    return {
        "status": "healthy",
        "scheduler": scheduler.status() if scheduler is not None else None,
    }


@app.get("/")
def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {
        "app": settings.app_name,
        "version": __version__,
        "docs": "/docs",
    }
