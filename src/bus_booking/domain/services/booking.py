"""Application service orchestrating communication with the vendor API."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from ..errors import IncompleteSelection, MissingContactPhone, ReservationExpired
from ..models import (
    BaggageList,
    BaggageRequest,
    BusPlan,
    BuyRequest,
    CancelRequest,
    CancelResult,
    DiscountList,
    DiscountRequest,
    FreeSeatsRequest,
    FreeSeatsResult,
    OrderResult,
    Passenger,
    PlanRequest,
    PointCity,
    PointsRequest,
    ReserveValidation,
    ReserveValidationRequest,
    RouteOption,
    RouteSchedule,
    RoutesRequest,
    TripMeta,
)
from ..ports.vendor_api import VendorApiProtocol
from .normalizers import (
    BaggageNormalizer,
    CancelNormalizer,
    DiscountNormalizer,
    FreeSeatsNormalizer,
    OrderNormalizer,
    PlanNormalizer,
    PointsNormalizer,
    ReserveValidationNormalizer,
    RoutesNormalizer,
    ScheduleNormalizer,
)
from .order_builder import build_new_order_payload
from .reservation import is_expired
from .session import BookingSession

if TYPE_CHECKING:
    from ...infrastructure.cache_service import CacheService

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"\D")
_MIN_PHONE_DIGITS = 10


class BookingService:
    """
    Fetch, cache and normalize vendor data; submit orders.

    Network calls for one leg are never composed concurrently: fetch, then
    normalize, then cache.
    """

    def __init__(
        self,
        vendor_api: VendorApiProtocol,
        cache: CacheService,
        login: str = "",
        password: str = "",
        default_currency: str = "EUR",
        default_lang: str = "ru",
    ) -> None:
        self._vendor_api = vendor_api
        self._cache = cache
        self._login = login
        self._password = password
        self._default_currency = default_currency
        self._default_lang = default_lang
        self._routes = RoutesNormalizer()
        self._seats = FreeSeatsNormalizer()
        self._discounts = DiscountNormalizer()
        self._baggage = BaggageNormalizer()
        self._schedule = ScheduleNormalizer()
        self._orders = OrderNormalizer()
        self._points = PointsNormalizer()
        self._plans = PlanNormalizer()
        self._cancellations = CancelNormalizer()
        self._reserve_validation = ReserveValidationNormalizer()

    async def search_routes(self, request: RoutesRequest) -> list[RouteOption]:
        params = self._with_defaults(request.model_dump(exclude_none=True))
        cache_key = self._cache.build_cache_key("routes", **params)
        cached = self._cache.get_response(cache_key)
        if cached is not None:
            logger.info("routes cache hit", extra={"event": "cache_hit", "cache_key": cache_key})
            return cached

        raw = await self._vendor_api.get_routes(params)
        routes = self._routes.normalize(raw)
        self._cache.set_response(cache_key, routes)
        logger.info(
            "routes fetched",
            extra={"id_from": request.id_from, "id_to": request.id_to, "routes_count": len(routes)},
        )
        return routes

    async def get_free_seats(
        self,
        request: FreeSeatsRequest,
        session: BookingSession | None = None,
        leg_key: str | None = None,
    ) -> FreeSeatsResult | None:
        """
        Return the seat map of an interval, from cache when still fresh.

        Args:
            request: Interval and station pair to look up
            session: Session the result is meant for
            leg_key: Seat manager key to load the result into

        Returns:
            Normalized seat map, or None when the session was restarted
            while the request was in flight
        """
        params = self._with_defaults(request.model_dump(exclude_none=True))
        cache_key = self._cache.build_seats_key(
            request.interval_id,
            request.station_from_id,
            request.station_to_id,
            params["currency"],
            params["lang"],
        )
        token = session.begin_request() if session is not None else 0

        result = self._cache.get_seats(cache_key)
        if result is not None:
            logger.info("free seats cache hit", extra={"event": "cache_hit", "cache_key": cache_key})
        else:
            raw = await self._vendor_api.get_free_seats(params)
            result = self._seats.normalize(raw, request)
            self._cache.set_seats(cache_key, result)
            logger.info(
                "free seats fetched",
                extra={
                    "interval_id": request.interval_id,
                    "free_seats": result.free_seats,
                    "ttl": self._cache.seats_ttl(result),
                },
            )

        if session is not None:
            if not session.is_current(token):
                logger.info(
                    "discarding stale free seats",
                    extra={"session": token, "interval_id": request.interval_id},
                )
                return None
            if leg_key is not None:
                session.seats.load(leg_key, result.seats)
        return result

    async def get_discounts(self, request: DiscountRequest) -> DiscountList:
        params = self._with_defaults(request.model_dump(exclude_none=True))
        cache_key = self._cache.build_cache_key("discounts", **params)
        cached = self._cache.get_response(cache_key)
        if cached is not None:
            return cached

        raw = await self._vendor_api.get_discount(params)
        discounts = self._discounts.normalize(raw, request.interval_id)
        self._cache.set_response(cache_key, discounts)
        logger.info(
            "discounts fetched",
            extra={"interval_id": request.interval_id, "discounts_count": len(discounts.discounts)},
        )
        return discounts

    async def get_baggage(self, request: BaggageRequest) -> BaggageList:
        params = self._with_defaults(request.model_dump(exclude_none=True))
        cache_key = self._cache.build_cache_key("baggage", **params)
        cached = self._cache.get_response(cache_key)
        if cached is not None:
            return cached

        raw = await self._vendor_api.get_baggage(params)
        baggage = self._baggage.normalize(raw, request.interval_id)
        self._cache.set_response(cache_key, baggage)
        logger.info(
            "baggage fetched",
            extra={"interval_id": request.interval_id, "items_count": len(baggage.items)},
        )
        return baggage

    async def get_schedule(self, timetable_id: str, lang: str | None = None) -> RouteSchedule:
        params = {"timetable_id": timetable_id, "lang": lang or self._default_lang}
        cache_key = self._cache.build_cache_key("schedule", **params)
        cached = self._cache.get_response(cache_key)
        if cached is not None:
            return cached

        raw = await self._vendor_api.get_all_routes(params)
        schedule = self._schedule.normalize(raw)
        self._cache.set_response(cache_key, schedule)
        return schedule

    async def create_order(
        self,
        passengers: Sequence[Passenger],
        trips: Sequence[TripMeta],
        phone: str | None = None,
        email: str | None = None,
        promocode: str | None = None,
        currency: str | None = None,
        lang: str | None = None,
    ) -> OrderResult:
        """
        Build, validate and submit a new order.

        Raises:
            OrderValidationError: When the payload cannot be built; nothing
                is sent to the vendor in that case
        """
        payload = build_new_order_payload(
            login=self._login,
            password=self._password,
            passengers=passengers,
            trips=trips,
            phone=phone,
            email=email,
            promocode=promocode,
            currency=currency or self._default_currency,
            lang=lang or self._default_lang,
        )
        logger.info(
            "submitting new order",
            extra={"legs": len(payload.date), "passengers": len(passengers)},
        )
        raw = await self._vendor_api.new_order(payload.to_request())
        order = self._orders.normalize(raw)
        logger.info(
            "new order finished",
            extra={"status": order.status, "order_id": getattr(order, "order_id", None)},
        )
        return order

    async def create_order_from_session(
        self,
        session: BookingSession,
        passengers: Sequence[Passenger],
        **kwargs: Any,
    ) -> OrderResult:
        """
        Submit the current selections of a session.

        Raises:
            IncompleteSelection: When a leg or segment still lacks a seat for
                some passenger; nothing is sent to the vendor in that case
        """
        missing = session.missing_seat()
        if missing is not None:
            leg_index, passenger_index = missing
            raise IncompleteSelection(
                f"Leg {leg_index}: no seat selected for passenger {passenger_index}",
                leg_index=leg_index,
                passenger_index=passenger_index,
            )
        return await self.create_order(
            passengers,
            session.trip_metas(),
            currency=kwargs.pop("currency", None) or session.currency,
            **kwargs,
        )

    async def get_order(
        self,
        order_id: int,
        security: str | None = None,
        lang: str | None = None,
    ) -> OrderResult:
        params: dict[str, Any] = {"order_id": order_id, "lang": lang or self._default_lang}
        if security:
            params["security"] = security
        raw = await self._vendor_api.get_order(params)
        return self._orders.normalize(raw)

    async def search_points(self, request: PointsRequest) -> list[PointCity]:
        params = request.model_dump(exclude_none=True)
        params.setdefault("lang", self._default_lang)
        cache_key = self._cache.build_cache_key("points", **params)
        cached = self._cache.get_response(cache_key)
        if cached is not None:
            return cached

        raw = await self._vendor_api.get_points(params)
        cities = self._points.normalize(raw, params["lang"])
        self._cache.set_response(cache_key, cities)
        logger.info(
            "points fetched",
            extra={"autocomplete": request.autocomplete, "points_count": len(cities)},
        )
        return cities

    async def get_plan(self, request: PlanRequest) -> BusPlan:
        """Return the seat layout of a bus type; layouts are cached for long."""
        cache_key = self._cache.build_plan_key(request.bustype_id, request.position, request.v)
        plan = self._cache.get_plan(cache_key)
        if plan is not None:
            logger.info("plan cache hit", extra={"event": "cache_hit", "cache_key": cache_key})
            return plan

        params = {
            "bustype_id": request.bustype_id,
            "position": request.position,
            "v": request.v,
            "lang": request.lang or self._default_lang,
        }
        raw = await self._vendor_api.get_plan(params)
        plan = self._plans.normalize(raw, request)
        self._cache.set_plan(cache_key, plan)
        logger.info(
            "plan fetched",
            extra={
                "bustype_id": request.bustype_id,
                "seats": plan.seat_count,
                "ttl": self._cache.plan_ttl(plan),
            },
        )
        return plan

    async def validate_reservation(self, request: ReserveValidationRequest) -> ReserveValidation:
        """
        Ask the vendor whether a contact phone may hold reservations.

        Raises:
            MissingContactPhone: When the phone has fewer than ten digits;
                the vendor is not called in that case
        """
        if len(_NON_DIGITS.sub("", request.phone)) < _MIN_PHONE_DIGITS:
            raise MissingContactPhone(f"Phone {request.phone!r} is not a valid contact number")
        params = {"phone": request.phone, "lang": request.lang or self._default_lang, "v": "1.1"}
        raw = await self._vendor_api.reserve_validation(params)
        return self._reserve_validation.normalize(raw, request.phone)

    async def buy(self, request: BuyRequest) -> OrderResult:
        """
        Pay for a reserved order.

        Raises:
            ReservationExpired: When `reservation_until` is given and already
                past; nothing is sent to the vendor in that case
        """
        if request.reservation_until and is_expired(request.reservation_until):
            raise ReservationExpired(request.order_id, request.reservation_until)
        params = {
            "order_id": request.order_id,
            "lang": request.lang or self._default_lang,
            "v": "1.1",
        }
        raw = await self._vendor_api.buy_ticket(params)
        order = self._orders.normalize_purchase(raw)
        logger.info(
            "buy finished",
            extra={"order_id": request.order_id, "status": order.status},
        )
        return order

    async def cancel(self, request: CancelRequest) -> CancelResult:
        """Cancel a whole order or one ticket; partial refusals are reported per ticket."""
        params = request.model_dump(exclude_none=True)
        params.setdefault("lang", self._default_lang)
        raw = await self._vendor_api.cancel_ticket(params)
        result = self._cancellations.normalize(raw)
        logger.info(
            "cancel finished",
            extra={
                "order_id": request.order_id,
                "ticket_id": request.ticket_id,
                "money_back_total": result.money_back_total,
                "refused": len(result.refused),
            },
        )
        return result

    def _with_defaults(self, params: dict[str, Any]) -> dict[str, Any]:
        params.setdefault("currency", self._default_currency)
        params.setdefault("lang", self._default_lang)
        return params
