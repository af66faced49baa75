"""Fixtures for API tests."""

from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from bus_booking.api.dependencies import get_cache_service, get_vendor_api
from bus_booking.app import create_app


class FakeVendorApi:
    """Vendor stub answering every method from a prepared mapping."""

    def __init__(self, responses: dict[str, Any]) -> None:
        self.responses = responses
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def __getattr__(self, method: str):
        if method not in {
            "get_routes",
            "get_free_seats",
            "get_discount",
            "get_baggage",
            "get_all_routes",
            "new_order",
            "get_order",
            "get_points",
            "get_plan",
            "reserve_validation",
            "buy_ticket",
            "cancel_ticket",
        }:
            raise AttributeError(method)

        async def _call(params: dict[str, Any]) -> Any:
            self.calls.append((method, params))
            answer = self.responses[method]
            if isinstance(answer, Exception):
                raise answer
            return answer

        return _call


@pytest.fixture
def app():
    app = create_app()
    yield app
    app.dependency_overrides.clear()
    get_cache_service().clear()


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def override_vendor(app):
    """Install a FakeVendorApi answering with the given responses."""

    def _override(**responses: Any) -> FakeVendorApi:
        vendor = FakeVendorApi(responses)
        app.dependency_overrides[get_vendor_api] = lambda: vendor
        return vendor

    return _override
