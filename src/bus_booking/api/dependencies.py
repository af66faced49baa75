"""Dependency wiring for FastAPI endpoints."""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, Request

from bus_booking.config import Settings, get_settings
from bus_booking.domain.ports.vendor_api import VendorApiProtocol
from bus_booking.domain.services.booking import BookingService
from bus_booking.infrastructure.cache_service import CacheService
from bus_booking.infrastructure.vendor_api_adapter import BussystemApiAdapter


def get_vendor_api(request: Request) -> VendorApiProtocol:
    """Return adapter conforming to the vendor protocol."""
    return BussystemApiAdapter(client=getattr(request.app.state, "http_client", None))


@lru_cache(maxsize=1)
def get_cache_service() -> CacheService:
    """Return cache service instance (singleton)."""
    return CacheService()


def get_booking_service(
    vendor_api: VendorApiProtocol = Depends(get_vendor_api),
    cache: CacheService = Depends(get_cache_service),
    settings: Settings = Depends(get_settings),
) -> BookingService:
    """Assemble the domain service."""
    return BookingService(
        vendor_api=vendor_api,
        cache=cache,
        login=settings.vendor_login,
        password=settings.vendor_password.get_secret_value(),
        default_currency=settings.default_currency,
        default_lang=settings.default_lang,
    )
