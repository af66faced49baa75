"""Contracts for the external bus reservation API provider."""

from __future__ import annotations

from typing import Any, Protocol

# Decoded JSON body: usually an object, a bare list for some searches
VendorPayload = Any


class VendorApiProtocol(Protocol):
    """
    Port describing interactions with the vendor API.

    Every method returns the decoded response body untouched; shape handling
    belongs to the normalizers. Credentials are attached by the adapter.
    """

    async def get_routes(self, params: dict[str, Any]) -> VendorPayload:
        """Search bookable legs between two points on a date."""

    async def get_free_seats(self, params: dict[str, Any]) -> VendorPayload:
        """Return the seat map of an interval."""

    async def get_discount(self, params: dict[str, Any]) -> VendorPayload:
        """Return discounts available on an interval."""

    async def get_baggage(self, params: dict[str, Any]) -> VendorPayload:
        """Return baggage options of an interval."""

    async def get_all_routes(self, params: dict[str, Any]) -> VendorPayload:
        """Return the schedule of a timetable."""

    async def new_order(self, payload: dict[str, Any]) -> VendorPayload:
        """Submit a new_order payload and return the reservation."""

    async def get_order(self, params: dict[str, Any]) -> VendorPayload:
        """Return the current state of an order."""

    async def get_points(self, params: dict[str, Any]) -> VendorPayload:
        """Return the cities (points) matching a search."""

    async def get_plan(self, params: dict[str, Any]) -> VendorPayload:
        """Return the seat layout of a bus type."""

    async def reserve_validation(self, params: dict[str, Any]) -> VendorPayload:
        """Check whether a contact phone may reserve, and whether SMS is needed."""

    async def buy_ticket(self, params: dict[str, Any]) -> VendorPayload:
        """Pay for a reserved order from the dealer deposit."""

    async def cancel_ticket(self, params: dict[str, Any]) -> VendorPayload:
        """Cancel a whole order or a single ticket."""
