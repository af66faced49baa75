"""Adapter talking to the Bussystem-style reservation API over HTTP."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..config import get_settings
from ..domain.errors import MalformedResponse, VendorUnavailable
from ..domain.ports.vendor_api import VendorPayload
from ..domain.services.coercion import extract_xml_error

logger = logging.getLogger(__name__)


class BussystemApiAdapter:
    """
    Adapter POSTing JSON bodies to ``{base_url}/curl/{method}.php``.

    Login and password are attached to every request here so the domain
    never sees them. The vendor sometimes answers with an XML document even
    when JSON is requested; an ``<error>`` element in such a body is raised
    as VendorError, anything else unparseable as MalformedResponse.
    """

    def __init__(
        self,
        base_url: str | None = None,
        login: str | None = None,
        password: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize adapter with optional overrides of the configured values.

        Args:
            base_url: Vendor server URL
            login: Dealer login
            password: Dealer password
            timeout: HTTP timeout in seconds
            client: Shared client; a short-lived one is opened per call otherwise
        """
        settings = get_settings()
        self._base_url = (base_url or settings.vendor_base_url).rstrip("/")
        self._login = login if login is not None else settings.vendor_login
        self._password = (
            password if password is not None else settings.vendor_password.get_secret_value()
        )
        self._timeout = timeout if timeout is not None else settings.vendor_timeout
        self._client = client

    async def get_routes(self, params: dict[str, Any]) -> VendorPayload:
        return await self._call("get_routes", params)

    async def get_free_seats(self, params: dict[str, Any]) -> VendorPayload:
        return await self._call("get_free_seats", params)

    async def get_discount(self, params: dict[str, Any]) -> VendorPayload:
        return await self._call("get_discount", params)

    async def get_baggage(self, params: dict[str, Any]) -> VendorPayload:
        return await self._call("get_baggage", params)

    async def get_all_routes(self, params: dict[str, Any]) -> VendorPayload:
        return await self._call("get_all_routes", params)

    async def new_order(self, payload: dict[str, Any]) -> VendorPayload:
        # The builder already carries credentials; the configured ones win.
        return await self._call("new_order", payload)

    async def get_order(self, params: dict[str, Any]) -> VendorPayload:
        return await self._call("get_order", params)

    async def get_points(self, params: dict[str, Any]) -> VendorPayload:
        return await self._call("get_points", params)

    async def get_plan(self, params: dict[str, Any]) -> VendorPayload:
        return await self._call("get_plan", params)

    async def reserve_validation(self, params: dict[str, Any]) -> VendorPayload:
        return await self._call("reserve_validation", params)

    async def buy_ticket(self, params: dict[str, Any]) -> VendorPayload:
        return await self._call("buy_ticket", params)

    async def cancel_ticket(self, params: dict[str, Any]) -> VendorPayload:
        return await self._call("cancel_ticket", params)

    def _url(self, method: str) -> str:
        return f"{self._base_url}/curl/{method}.php"

    async def _call(self, method: str, params: dict[str, Any]) -> VendorPayload:
        body = {**params, "login": self._login, "password": self._password, "json": 1}
        url = self._url(method)
        logger.debug("vendor call", extra={"method": method, "url": url})

        try:
            if self._client is not None:
                response = await self._client.post(url, json=body, timeout=self._timeout)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(url, json=body)
        except httpx.HTTPError as e:
            logger.error(
                "vendor call failed",
                exc_info=True,
                extra={"method": method, "error": str(e)},
            )
            raise VendorUnavailable(f"{method}: {e}") from e

        return self._decode(method, response)

    @staticmethod
    def _decode(method: str, response: httpx.Response) -> VendorPayload:
        try:
            return response.json()
        except ValueError:
            pass

        text = response.text
        error = extract_xml_error(text)
        if error is not None:
            logger.warning(
                "vendor returned XML error",
                extra={"method": method, "vendor_code": error.vendor_code},
            )
            raise error
        if response.status_code >= 500:
            raise VendorUnavailable(f"{method}: HTTP {response.status_code}")

        logger.error(
            "vendor returned unparseable body",
            extra={"method": method, "status_code": response.status_code},
        )
        raise MalformedResponse(f"{method}: response is neither JSON nor a vendor error", raw=text)
