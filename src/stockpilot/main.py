"""FastAPI application factory."""

import os
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

from stockpilot.core.logging import configure_logging, get_logger

configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan context manager for startup and shutdown events."""
    start_time = datetime.now()
    logger.info("app.startup", message="StockPilot starting up", timestamp=start_time.isoformat())

    from stockpilot.api.health import set_app_start_time

    set_app_start_time(start_time)

    yield

    logger.info("app.shutdown", message="StockPilot shutting down gracefully")


def _setup_middleware(app: FastAPI, environment: str, session_secret_key: str) -> None:
    """Configure all middleware in correct order."""
    # Add middleware in reverse order (last added = first executed)
    # RequestIDMiddleware LAST so it runs FIRST
    from stockpilot.middleware.logging import RequestIDMiddleware
    from stockpilot.middleware.sentry import SentryContextMiddleware

    app.add_middleware(SentryContextMiddleware)
    app.add_middleware(
        SessionMiddleware,
        secret_key=session_secret_key,
        max_age=14 * 24 * 60 * 60,
        https_only=environment == "production",
        same_site="lax",
    )
    app.add_middleware(RequestIDMiddleware)


def _register_routers(app: FastAPI) -> None:
    """Register all API routers."""
    from stockpilot.api.auth import router as auth_router
    from stockpilot.api.catalog import router as catalog_router
    from stockpilot.api.checkout import router as checkout_router
    from stockpilot.api.dashboard import router as dashboard_router
    from stockpilot.api.deliveries import router as deliveries_router
    from stockpilot.api.expenses import router as expenses_router
    from stockpilot.api.health import router as health_router
    from stockpilot.api.inventory import router as inventory_router
    from stockpilot.api.ledger import router as ledger_router
    from stockpilot.api.orders import router as orders_router
    from stockpilot.api.summary import router as summary_router

    # Core/Health
    app.include_router(health_router)
    app.include_router(auth_router)

    # Reconciliation
    app.include_router(checkout_router)
    app.include_router(orders_router)
    app.include_router(deliveries_router)
    app.include_router(inventory_router)
    app.include_router(ledger_router)

    # Money
    app.include_router(expenses_router)
    app.include_router(summary_router)
    app.include_router(dashboard_router)

    # Catalog after /inventory/usage so the static paths win
    app.include_router(catalog_router)


def create_app() -> FastAPI:
    """Application factory for StockPilot."""
    from stockpilot.core.sentry import init_sentry

    init_sentry()

    app = FastAPI(
        title="StockPilot API",
        description="Restaurant POS daily stock reconciliation",
        version="0.1.0",
        lifespan=lifespan,
    )

    from stockpilot.core.exception_handlers import register_exception_handlers

    register_exception_handlers(app)

    session_secret_key = os.getenv("SESSION_SECRET_KEY", "dev-secret-key-change-in-production")
    environment = os.getenv("ENVIRONMENT", "development")

    _setup_middleware(app, environment, session_secret_key)
    _register_routers(app)

    logger.info("app.configured", message="FastAPI application created successfully")

    return app


def run() -> None:
    """Development server entrypoint."""
    uvicorn.run(
        "stockpilot.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
