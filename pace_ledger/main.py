"""
Pace Ledger — FastAPI Application.

This is the entry point for the application.
All routers are registered here.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from pace_ledger.config import get_settings
from pace_ledger.errors import StoreFailure
from pace_ledger.logging_config import configure_logging
from pace_ledger.api.health import router as health_router
from pace_ledger.api.accounts import router as accounts_router
from pace_ledger.api.categories import router as categories_router
from pace_ledger.api.transactions import router as transactions_router
from pace_ledger.api.reports import router as reports_router

settings = get_settings()

configure_logging()

logger = structlog.get_logger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Personal finance ledger with transactional balance maintenance",
)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    """
    Database errors raised outside a unit of work (plain reads, the
    router's commit) are answered like StoreFailure: 503, retryable.
    The request's session is closed, and so rolled back, by get_db().
    """
    logger.error(
        "database_error",
        method=request.method,
        path=request.url.path,
        error=str(exc),
    )
    return JSONResponse(
        status_code=StoreFailure.status_code,
        content={"detail": "Ledger store failure, retry the request"},
    )


# Register routers
app.include_router(health_router)
app.include_router(accounts_router)
app.include_router(categories_router)
app.include_router(transactions_router)
app.include_router(reports_router)
