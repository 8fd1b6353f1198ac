"""
FastAPI Application Entry Point.

Bakery back-office ledger engine: customer receivables and
supplier/party payables with running balances and CSV statements.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException, Depends
from fastapi.exceptions import RequestValidationError
from bakery_ledger.app.core.config import settings
from bakery_ledger.app.core.logging_config import configure_logging
from bakery_ledger.app.core.observability import ObservabilityMiddleware
from bakery_ledger.app.api.v1.router import router as api_v1_router
from bakery_ledger.app.db.session import engine, Base
from bakery_ledger.app.services.summary_cache import get_redis, ping_redis
from bakery_ledger.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)

# Import models to ensure they are registered with Base
from bakery_ledger.app.models.customer import Customer
from bakery_ledger.app.models.party import Party
from bakery_ledger.app.models.ledger_transaction import LedgerTransaction

configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.

    Creates database tables on startup.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield


# Initialize FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Customer and supplier ledgers for the bakery back office",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)

# Register global exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/health", tags=["Health"])
async def health_check(redis_client=Depends(get_redis)):
    """
    Health check endpoint.

    The ledger keeps working without Redis, so an unreachable summary cache
    is reported but does not make the service unhealthy.

    Returns:
        dict: Status, summary cache reachability and application information
    """
    return {
        "status": "healthy",
        "summary_cache": "ok" if await ping_redis(redis_client) else "unavailable",
        "app_name": settings.app_name,
        "version": settings.api_version,
    }


# Include API v1 router
app.include_router(api_v1_router, prefix=f"/{settings.api_version}")


@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint.

    Returns:
        dict: Welcome message and API documentation links
    """
    return {
        "message": "Welcome to the Bakery Ledger API",
        "docs": "/docs",
        "health": "/health",
    }
