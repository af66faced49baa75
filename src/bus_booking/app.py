"""FastAPI application factory for the booking service."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from bus_booking.api import router
from bus_booking.api.dependencies import get_cache_service
from bus_booking.config import get_settings
from bus_booking.logging_config import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Share one vendor HTTP client between requests while the app runs."""
    settings = get_settings()
    async with httpx.AsyncClient(timeout=settings.vendor_timeout) as client:
        app.state.http_client = client
        logger.info("vendor client opened", extra={"base_url": settings.vendor_base_url})
        try:
            yield
        finally:
            app.state.http_client = None
            get_cache_service().clear()


def create_app() -> FastAPI:
    """Create and configure FastAPI application instance."""
    configure_logging()
    app = FastAPI(
        title="Bus Booking API",
        description="Route search, seat maps, discounts, baggage and orders",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.http_client = None
    app.include_router(router)

    @app.get("/health", tags=["health"])
    async def healthcheck() -> dict[str, str]:
        """Report liveness and whether the shared vendor client is open."""
        client = app.state.http_client
        return {
            "status": "ok",
            "vendor_client": "shared" if client is not None else "per_request",
        }

    return app


app = create_app()
