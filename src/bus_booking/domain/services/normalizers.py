"""Normalizers turning raw vendor responses into domain records."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from ..errors import MalformedResponse
from ..models import (
    BaggageCategory,
    BaggageItem,
    BaggageList,
    BusPlan,
    CancelledTicket,
    CancelResult,
    CancelRule,
    DiscountCategory,
    DiscountItem,
    DiscountList,
    DiscountType,
    ExpiredOrder,
    FailedOrder,
    FreeSeat,
    FreeSeatsRequest,
    FreeSeatsResult,
    OrderResult,
    OrderTicket,
    PaidOrder,
    PlanFloor,
    PlanRequest,
    PlanRow,
    PlanSeat,
    PointAirport,
    PointCity,
    PointStation,
    ReservedOrder,
    ReserveValidation,
    RouteInterval,
    RouteOption,
    RouteSchedule,
    ScheduleStation,
    TransportMode,
    Vehicle,
    VehicleType,
    Wagon,
)
from .coercion import (
    RawMapping,
    coerce_enum,
    ensure_list,
    first_present,
    normalize_seat_number,
    raise_for_vendor_error,
    to_csv_list,
    to_flag,
    to_float,
    to_int,
    to_optional_float,
    to_optional_int,
    to_optional_str,
    to_str,
    unwrap_root,
)


def _require_any(data: RawMapping, keys: Iterable[str], what: str) -> None:
    if not any(key in data for key in keys):
        raise MalformedResponse(f"{what} response has none of the expected keys", raw=data)


def _body(raw: Any, expected: tuple[str, ...], what: str) -> tuple[RawMapping, list[Any] | None]:
    """
    Split a raw response into its body and, for bare arrays, the items.

    Raises:
        VendorError: If the vendor reported an error
        MalformedResponse: If the shape is unrecognized
    """
    if isinstance(raw, list):
        return {}, raw
    data = raise_for_vendor_error(raw)
    if data and all(key.isdigit() for key in data):
        return data, ensure_list(data)
    _require_any(data, expected, what)
    return data, None


def _mappings(items: Iterable[Any]) -> list[RawMapping]:
    return [item for item in items if isinstance(item, Mapping)]


@dataclass(slots=True)
class RoutesNormalizer:
    """Normalize `get_routes` search results into bookable legs."""

    def normalize(self, raw: Any) -> list[RouteOption]:
        data, items = _body(raw, ("routes", "item", "items"), "get_routes")
        if items is None:
            items = ensure_list(first_present(data, "routes", "item", "items"))
        routes = [self._build_route(item) for item in _mappings(items)]
        return [route for route in routes if route.interval_id]

    @staticmethod
    def _build_route(raw: RawMapping) -> RouteOption:
        trips = _mappings(ensure_list(raw.get("trips")))
        free_seats = raw.get("free_seats")
        if isinstance(free_seats, list | Mapping):
            free_count = len(ensure_list(free_seats))
        else:
            free_count = to_int(free_seats)
        return RouteOption(
            interval_id=to_str(raw.get("interval_id")),
            route_id=to_str(raw.get("route_id")),
            trans=coerce_enum(TransportMode, raw.get("trans"), TransportMode.BUS),
            carrier=to_str(raw.get("carrier")),
            date_from=to_str(raw.get("date_from")),
            time_from=to_str(raw.get("time_from")),
            date_to=to_str(raw.get("date_to")),
            time_to=to_str(raw.get("time_to")),
            point_from_id=to_str(raw.get("point_from_id")),
            point_to_id=to_str(raw.get("point_to_id")),
            station_from_id=to_str(raw.get("station_from_id")),
            station_to_id=to_str(raw.get("station_to_id")),
            currency=to_str(raw.get("currency")) or "EUR",
            price=to_float(first_present(raw, "price_one_way", "price")),
            free_seats=free_count,
            request_get_free_seats=to_flag(raw.get("request_get_free_seats")),
            request_get_discount=to_flag(raw.get("request_get_discount")),
            request_get_baggage=to_flag(raw.get("request_get_baggage")),
            need_orderdata=to_flag(raw.get("need_orderdata")),
            need_birth=to_flag(raw.get("need_birth")),
            need_doc=to_flag(raw.get("need_doc")),
            max_seats=to_int(raw.get("max_seats")),
            timetable_id=to_str(raw.get("timetable_id")),
            segments=max(1, len(trips)),
        )


@dataclass(slots=True)
class FreeSeatsNormalizer:
    """Normalize `get_free_seats` responses for buses and trains with wagons."""

    def normalize(self, raw: Any, request: FreeSeatsRequest | None = None) -> FreeSeatsResult:
        data, items = _body(
            raw,
            ("trains", "trenuri", "buses", "autobuze", "seats", "locuri", "places", "free_seat"),
            "get_free_seats",
        )
        vehicle_type = VehicleType.BUS
        if items is not None:
            vehicles = [self._build_single_vehicle(data, items)]
        elif first_present(data, "trains", "trenuri") is not None:
            vehicle_type = VehicleType.TRAIN
            vehicles = [
                self._build_train(train)
                for train in _mappings(ensure_list(first_present(data, "trains", "trenuri")))
            ]
        elif first_present(data, "buses", "autobuze") is not None:
            vehicles = [
                self._build_bus(bus)
                for bus in _mappings(ensure_list(first_present(data, "buses", "autobuze")))
            ]
        else:
            seats_data = ensure_list(first_present(data, "seats", "locuri", "places", "free_seat"))
            vehicles = [self._build_single_vehicle(data, seats_data)]

        seats = [seat for vehicle in vehicles for seat in self._vehicle_seats(vehicle)]
        free = sum(1 for seat in seats if seat.is_free)
        return FreeSeatsResult(
            interval_id=to_str(data.get("interval_id")) or (request.interval_id if request else ""),
            currency=(
                to_str(first_present(data, "currency", "moneda"))
                or (request.currency if request and request.currency else "EUR")
            ),
            lang=(
                to_str(first_present(data, "lang", "limba"))
                or (request.lang if request and request.lang else "en")
            ),
            vehicle_type=vehicle_type,
            vehicles=vehicles,
            seats=seats,
            total_seats=len(seats),
            free_seats=free,
        )

    def _build_train(self, raw: RawMapping) -> Vehicle:
        wagons = [
            self._build_wagon(wagon)
            for wagon in _mappings(ensure_list(first_present(raw, "wagons", "vagons", "vagoane", "cars")))
        ]
        vehicle_id = to_str(first_present(raw, "train_id", "id", "nummer"))
        return Vehicle(
            vehicle_id=vehicle_id,
            number=to_str(first_present(raw, "train_number", "number", "numar")) or vehicle_id,
            name=to_optional_str(first_present(raw, "name", "nume")),
            wagons=wagons,
            total_seats=sum(wagon.total_seats for wagon in wagons),
            free_seats=sum(wagon.free_seats for wagon in wagons),
        )

    def _build_wagon(self, raw: RawMapping) -> Wagon:
        wagon_id = to_str(first_present(raw, "vagon_id", "wagon_id", "id", "nummer"))
        wagon_type = to_str(first_present(raw, "vagon_type", "wagon_type", "type", "tip")) or "standard"
        seats = self._build_seats(
            ensure_list(first_present(raw, "seats", "locuri", "places", "free_seat")),
            wagon_id=wagon_id,
            wagon_type=wagon_type,
        )
        return Wagon(
            wagon_id=wagon_id,
            wagon_type=wagon_type,
            seats=seats,
            total_seats=len(seats),
            free_seats=sum(1 for seat in seats if seat.is_free),
        )

    def _build_bus(self, raw: RawMapping) -> Vehicle:
        vehicle_id = to_str(first_present(raw, "bus_id", "id", "autobuz_id"))
        seats = self._build_seats(ensure_list(first_present(raw, "seats", "locuri", "places", "free_seat")))
        return Vehicle(
            vehicle_id=vehicle_id,
            number=to_str(first_present(raw, "bus_number", "number", "numar")) or vehicle_id,
            name=to_optional_str(first_present(raw, "name", "nume")),
            seats=seats,
            total_seats=len(seats),
            free_seats=sum(1 for seat in seats if seat.is_free),
        )

    def _build_single_vehicle(self, data: RawMapping, seats_data: list[Any]) -> Vehicle:
        seats = self._build_seats(seats_data)
        return Vehicle(
            vehicle_id=to_str(first_present(data, "bus_id", "vehicle_id")) or "default",
            number=to_str(first_present(data, "bus_number", "vehicle_number")),
            seats=seats,
            total_seats=len(seats),
            free_seats=sum(1 for seat in seats if seat.is_free),
        )

    def _build_seats(
        self,
        items: list[Any],
        wagon_id: str | None = None,
        wagon_type: str | None = None,
    ) -> list[FreeSeat]:
        seats: dict[str, FreeSeat] = {}
        for item in items:
            seat = self._build_seat(item, wagon_id, wagon_type)
            if seat.seat_number and seat.seat_number not in seats:
                seats[seat.seat_number] = seat
        return list(seats.values())

    @staticmethod
    def _build_seat(raw: Any, wagon_id: str | None, wagon_type: str | None) -> FreeSeat:
        if not isinstance(raw, Mapping):
            return FreeSeat(
                seat_number=normalize_seat_number(raw),
                is_free=True,
                wagon_id=wagon_id,
                wagon_type=wagon_type,
            )
        return FreeSeat(
            seat_number=normalize_seat_number(first_present(raw, "seat_number", "number", "nr")),
            is_free=to_flag(first_present(raw, "seat_free", "is_free", "free", "available")),
            price=to_float(first_present(raw, "seat_price", "price", "pret")),
            wagon_id=wagon_id,
            wagon_type=wagon_type,
            floor=to_optional_int(raw.get("floor")),
            seat_type=to_optional_str(first_present(raw, "seat_type", "type", "tip", "category")),
        )

    @staticmethod
    def _vehicle_seats(vehicle: Vehicle) -> list[FreeSeat]:
        if vehicle.wagons:
            return [seat for wagon in vehicle.wagons for seat in wagon.seats]
        return list(vehicle.seats)


@dataclass(slots=True)
class DiscountNormalizer:
    """Normalize `get_discount` responses."""

    def normalize(self, raw: Any, interval_id: str = "") -> DiscountList:
        data, items = _body(
            raw,
            ("discounts", "item", "items", "data", "interval_id", "route_id"),
            "get_discount",
        )
        if items is None:
            items = self._extract_items(data)
        discounts = [self.build_item(item) for item in _mappings(items)]
        return DiscountList(
            interval_id=to_str(data.get("interval_id")) or interval_id,
            discounts=[item for item in discounts if item.discount_id and item.name],
        )

    @staticmethod
    def _extract_items(data: RawMapping) -> list[Any]:
        item = data.get("item")
        if isinstance(item, Mapping) and "discounts" in item:
            return ensure_list(item["discounts"])
        nested = data.get("data")
        if isinstance(nested, Mapping) and "discounts" in nested:
            return ensure_list(nested["discounts"])
        return ensure_list(first_present(data, "discounts", "items", "item"))

    def build_item(self, raw: RawMapping) -> DiscountItem:
        name = to_str(first_present(raw, "discount_name", "name"))
        age_min = to_optional_int(raw.get("age_min"))
        age_max = to_optional_int(raw.get("age_max"))
        min_passengers = to_optional_int(raw.get("min_passengers"))
        return DiscountItem(
            discount_id=to_str(first_present(raw, "discount_id", "id")),
            name=name,
            price=to_float(first_present(raw, "discount_price", "price")),
            currency=to_optional_str(first_present(raw, "discount_currency", "currency")),
            price_max=to_optional_float(first_present(raw, "discount_price_max", "price_max")),
            age_min=age_min,
            age_max=age_max,
            min_passengers=min_passengers,
            note=to_optional_str(first_present(raw, "description", "rules", "note")),
            type=self._resolve_type(raw, name, age_min, age_max, min_passengers),
            category=self._resolve_category(raw, name, age_min, age_max),
        )

    @staticmethod
    def _resolve_type(
        raw: RawMapping,
        name: str,
        age_min: int | None,
        age_max: int | None,
        min_passengers: int | None,
    ) -> DiscountType:
        if raw.get("type"):
            return coerce_enum(DiscountType, raw.get("type"), DiscountType.GENERAL)
        lowered = name.lower()
        if any(word in lowered for word in ("child", "copil", "kid", "senior", "pension", "elderly")):
            return DiscountType.AGE_BASED
        if any(word in lowered for word in ("student", "school", "university")):
            return DiscountType.STUDENT
        if any(word in lowered for word in ("group", "grup", "family")):
            return DiscountType.GROUP
        if age_min is not None or age_max is not None:
            return DiscountType.AGE_BASED
        if min_passengers is not None:
            return DiscountType.GROUP
        return DiscountType.GENERAL

    @staticmethod
    def _resolve_category(
        raw: RawMapping,
        name: str,
        age_min: int | None,
        age_max: int | None,
    ) -> DiscountCategory:
        if raw.get("category"):
            return coerce_enum(DiscountCategory, raw.get("category"), DiscountCategory.ADULT)
        if age_max is not None and age_max <= 18:
            return DiscountCategory.CHILD
        if age_min is not None and age_min >= 65:
            return DiscountCategory.SENIOR
        lowered = name.lower()
        for words, category in (
            (("child", "copil"), DiscountCategory.CHILD),
            (("student", "school"), DiscountCategory.STUDENT),
            (("senior", "pension"), DiscountCategory.SENIOR),
            (("group", "family"), DiscountCategory.GROUP),
            (("special", "disabled"), DiscountCategory.SPECIAL),
        ):
            if any(word in lowered for word in words):
                return category
        return DiscountCategory.ADULT


@dataclass(slots=True)
class BaggageNormalizer:
    """Normalize `get_baggage` responses; free allowances sort first."""

    def normalize(self, raw: Any, interval_id: str = "") -> BaggageList:
        data, items = _body(raw, ("item", "baggage", "items", "interval_id"), "get_baggage")
        if items is None:
            items = ensure_list(first_present(data, "item", "baggage", "items"))
        baggage = [self.build_item(item) for item in _mappings(items)]
        baggage = [item for item in baggage if item.baggage_id]
        baggage.sort(key=lambda item: (not item.is_included, item.price))
        return BaggageList(
            interval_id=to_str(data.get("interval_id")) or interval_id,
            items=baggage,
        )

    def build_item(self, raw: RawMapping) -> BaggageItem:
        return BaggageItem(
            baggage_id=to_str(raw.get("baggage_id")),
            title=to_str(raw.get("baggage_title")),
            type=to_str(raw.get("baggage_type")),
            length=to_optional_float(raw.get("length")),
            width=to_optional_float(raw.get("width")),
            height=to_optional_float(raw.get("height")),
            kg=to_optional_float(raw.get("kg")),
            price=round(to_float(raw.get("price")), 2),
            currency=to_optional_str(raw.get("currency")),
            max_per_person=to_optional_int(raw.get("max_per_person")),
            max_in_bus=to_optional_int(raw.get("max_in_bus")),
            category=self._categorize(raw),
        )

    @staticmethod
    def _categorize(raw: RawMapping) -> BaggageCategory:
        title = to_str(raw.get("baggage_title")).lower()
        if any(word in title for word in ("cabin", "cabină", "carry", "hand")):
            return BaggageCategory.CARRY_ON
        if any(word in title for word in ("ski", "bicicl", "bike", "instrument", "surf", "special")):
            return BaggageCategory.SPECIAL
        if (
            to_float(raw.get("length")) > 100
            or to_float(raw.get("width")) > 80
            or to_float(raw.get("height")) > 80
        ):
            return BaggageCategory.OVERSIZED
        return BaggageCategory.CHECKED


@dataclass(slots=True)
class ScheduleNormalizer:
    """Normalize `get_all_routes` timetables."""

    baggage: BaggageNormalizer = field(default_factory=BaggageNormalizer)
    discounts: DiscountNormalizer = field(default_factory=DiscountNormalizer)

    def normalize(self, raw: Any) -> RouteSchedule:
        data = raise_for_vendor_error(raw)
        _require_any(data, ("route_id", "timetable_id"), "get_all_routes")
        return RouteSchedule(
            route_id=to_str(data.get("route_id")),
            timetable_id=to_str(data.get("timetable_id")),
            route_name=to_optional_str(data.get("route_name")),
            carrier=to_optional_str(data.get("carrier")),
            bustype=to_optional_str(data.get("bustype")),
            comfort=to_csv_list(data.get("comfort")),
            max_seats=to_optional_int(data.get("max_seats")),
            stations=[self._build_station(item) for item in _mappings(ensure_list(data.get("stations")))],
            intervals=[
                self._build_interval(item) for item in _mappings(ensure_list(data.get("intervals")))
            ],
            baggage=[self.baggage.build_item(item) for item in _mappings(ensure_list(data.get("baggage")))],
            discounts=[
                self.discounts.build_item(item) for item in _mappings(ensure_list(data.get("discounts")))
            ],
            cancel_free_min=to_optional_int(data.get("cancel_free_min")),
            cancel_rules=[
                self._build_cancel_rule(item)
                for item in _mappings(ensure_list(data.get("cancel_hours_info")))
            ],
        )

    @staticmethod
    def _build_station(raw: RawMapping) -> ScheduleStation:
        return ScheduleStation(
            point_id=to_str(raw.get("point_id")),
            point_name=to_str(raw.get("point_name")),
            station_name=to_optional_str(raw.get("station_name")),
            date_arrival=to_optional_str(raw.get("date_arrival")),
            arrival=to_optional_str(raw.get("arrival")),
            date_departure=to_optional_str(raw.get("date_departure")),
            departure=to_optional_str(raw.get("departure")),
            day_in_way=to_int(raw.get("day_in_way")),
            point_change=to_flag(raw.get("point_change")),
        )

    @staticmethod
    def _build_interval(raw: RawMapping) -> RouteInterval:
        return RouteInterval(
            interval_id=to_str(raw.get("interval_id")),
            from_point_id=to_str(raw.get("from_point_id")),
            to_point_id=to_str(raw.get("to_point_id")),
            departure_time=to_optional_str(raw.get("departure_time")),
            arrival_time=to_optional_str(raw.get("arrival_time")),
            price=to_optional_float(raw.get("price")),
            currency=to_optional_str(raw.get("currency")),
        )

    @staticmethod
    def _build_cancel_rule(raw: RawMapping) -> CancelRule:
        return CancelRule(
            cancel_rate=to_float(raw.get("cancel_rate")),
            hours_before_depar=to_optional_float(raw.get("hours_before_depar")),
            hours_after_depar=to_optional_float(raw.get("hours_after_depar")),
            money_back=to_optional_float(raw.get("money_back")),
        )


_RESERVED_STATUSES = frozenset({"reserve", "reserve_ok", "reserved", "confirmation"})
_PAID_STATUSES = frozenset({"buy", "buy_ok", "paid"})
_EXPIRED_STATUSES = frozenset({"reserve_expired", "expired"})
_FAILED_STATUSES = frozenset({"cancel", "reserve_cancelled", "cancelled", "error"})


@dataclass(slots=True)
class OrderNormalizer:
    """
    Normalize `new_order` / `get_order` responses into tagged order variants.

    Vendor errors become `FailedOrder` so callers match on `status` instead
    of probing optional fields.
    """

    def normalize(self, raw: Any) -> OrderResult:
        data = unwrap_root(raw)
        error = first_present(data, "error", "error_code")
        if error is not None and to_str(error) not in ("", "0"):
            return FailedOrder(
                error=to_str(error),
                detail=to_str(first_present(data, "detal", "detail", "error_message")),
                order_id=to_optional_int(data.get("order_id")),
            )
        _require_any(data, ("order_id", "status"), "order")

        status = to_str(data.get("status")).lower()
        order_id = to_int(data.get("order_id"))
        if status in _PAID_STATUSES:
            return PaidOrder(
                order_id=order_id,
                price_total=to_float(data.get("price_total")),
                currency=to_str(data.get("currency")) or "EUR",
                tickets=self._collect_tickets(data),
            )
        if status in _EXPIRED_STATUSES:
            return ExpiredOrder(
                order_id=order_id,
                reservation_until=to_str(data.get("reservation_until")),
            )
        if status in _FAILED_STATUSES:
            return FailedOrder(error=status, order_id=order_id)
        if status in _RESERVED_STATUSES or (not status and order_id):
            promocode = data.get("promocode_info")
            return ReservedOrder(
                order_id=order_id,
                security=to_str(data.get("security")),
                reservation_until=to_str(data.get("reservation_until")),
                reservation_until_min=to_int(data.get("reservation_until_min")),
                price_total=to_float(data.get("price_total")),
                currency=to_str(data.get("currency")) or "EUR",
                promocode_valid=(
                    to_flag(promocode.get("promocode_valid"))
                    if isinstance(promocode, Mapping)
                    else None
                ),
            )
        return FailedOrder(error="unknown_status", detail=status, order_id=order_id or None)

    @staticmethod
    def _collect_tickets(data: RawMapping) -> list[OrderTicket]:
        entries: list[RawMapping] = _mappings(ensure_list(data.get("tickets")))
        for key in sorted((key for key in data if key.isdigit()), key=int):
            trip = data[key]
            if isinstance(trip, Mapping):
                entries.extend(_mappings(ensure_list(trip.get("passengers"))))
        tickets = []
        for index, entry in enumerate(entries):
            ticket_id = to_str(entry.get("ticket_id"))
            if not ticket_id:
                continue
            tickets.append(
                OrderTicket(
                    ticket_id=ticket_id,
                    passenger_index=to_int(entry.get("passenger_index"), index),
                    seat=normalize_seat_number(entry.get("seat")),
                    price=to_float(entry.get("price")),
                    link=to_str(entry.get("link")),
                )
            )
        return tickets

    def normalize_purchase(self, raw: Any) -> OrderResult:
        """
        Normalize a `buy_ticket` answer.

        The vendor sends no status here: a body with an order id is a paid
        order whose tickets sit under index keys, one per passenger.
        """
        data = unwrap_root(raw)
        error = first_present(data, "error", "error_code")
        if error is not None and to_str(error) not in ("", "0"):
            return FailedOrder(
                error=to_str(error),
                detail=to_str(first_present(data, "detal", "detail", "error_message")),
                order_id=to_optional_int(data.get("order_id")),
            )
        _require_any(data, ("order_id",), "buy_ticket")
        entries = [
            data[key]
            for key in sorted((key for key in data if key.isdigit()), key=int)
            if isinstance(data[key], Mapping)
        ]
        tickets = [
            OrderTicket(
                ticket_id=to_str(entry.get("ticket_id")),
                passenger_index=index,
                seat=normalize_seat_number(entry.get("seat")),
                price=to_float(entry.get("price")),
                link=to_str(entry.get("link")),
                security=to_str(entry.get("security")),
            )
            for index, entry in enumerate(entries)
            if to_str(entry.get("ticket_id"))
        ]
        return PaidOrder(
            order_id=to_int(data.get("order_id")),
            price_total=to_float(data.get("price_total")),
            currency=to_str(data.get("currency")) or "EUR",
            tickets=tickets,
            link=to_str(data.get("link")),
        )


@dataclass(slots=True)
class PointsNormalizer:
    """Normalize `get_points` city lists; duplicates of a point id are dropped."""

    def normalize(self, raw: Any, lang: str = "en") -> list[PointCity]:
        data, items = _body(raw, ("item", "items", "points"), "get_points")
        if items is None:
            items = ensure_list(first_present(data, "item", "items", "points"))
        cities: dict[str, PointCity] = {}
        for item in _mappings(items):
            city = self._build_city(item, lang)
            if city.point_id and city.point_id not in cities:
                cities[city.point_id] = city
        return list(cities.values())

    def _build_city(self, raw: RawMapping, lang: str) -> PointCity:
        return PointCity(
            point_id=to_str(first_present(raw, "point_id", "pointId", "id")),
            name=self._localized_name(raw, lang),
            latin_name=to_str(raw.get("point_latin_name")),
            country_id=to_str(raw.get("country_id")),
            country_name=to_str(first_present(raw, "country_name", "country")),
            country_iso2=to_str(raw.get("country_kod_two")),
            country_iso3=to_str(raw.get("country_kod")),
            latitude=to_optional_float(raw.get("latitude")),
            longitude=to_optional_float(raw.get("longitude")),
            population=to_optional_int(raw.get("population")),
            currency=to_str(raw.get("currency")),
            time_zone=to_optional_str(raw.get("time_zone")),
            stations=[
                PointStation(
                    station_id=to_str(station.get("station_id")),
                    station_name=to_str(station.get("station_name")),
                    station_address=to_str(station.get("station_address")),
                    latitude=to_optional_float(station.get("latitude")),
                    longitude=to_optional_float(station.get("longitude")),
                )
                for station in _mappings(ensure_list(raw.get("stations")))
            ],
            airports=[
                PointAirport(
                    iata=to_str(airport.get("iata")),
                    icao=to_str(airport.get("icao")),
                    airport_name=to_str(airport.get("airport_name")),
                    latitude=to_optional_float(airport.get("latitude")),
                    longitude=to_optional_float(airport.get("longitude")),
                )
                for airport in _mappings(ensure_list(raw.get("airports")))
            ],
        )

    @staticmethod
    def _localized_name(raw: RawMapping, lang: str) -> str:
        keys = ["point_name", "point_latin_name"]
        if lang and lang != "en":
            keys.insert(0, f"point_{lang}_name")
        return to_str(first_present(raw, *keys))


@dataclass(slots=True)
class PlanNormalizer:
    """
    Normalize `get_plan` seat layouts.

    Version 2.0 plans group rows into floors; 1.1 plans carry the rows at the
    top level and are returned as a single floor.
    """

    def normalize(self, raw: Any, request: PlanRequest) -> BusPlan:
        data = raise_for_vendor_error(raw)
        _require_any(data, ("floors", "floor", "row", "rows"), "get_plan")

        floors: list[PlanFloor] = []
        floors_data = first_present(data, "floors", "floor")
        if floors_data is not None:
            if isinstance(floors_data, Mapping) and "floor" in floors_data:
                floors_data = floors_data["floor"]
            floors = [self._build_floor(item) for item in _mappings(ensure_list(floors_data))]
        if not floors:
            rows = self._build_rows(first_present(data, "row", "rows"))
            if rows:
                floors = [PlanFloor(number=1, rows=rows)]

        return BusPlan(
            bustype_id=request.bustype_id,
            plan_type=to_str(data.get("plan_type")) or "standard",
            version="2.0" if floors_data is not None else "1.1",
            orientation=request.position,
            floors=floors,
        )

    def _build_floor(self, raw: RawMapping) -> PlanFloor:
        return PlanFloor(
            number=to_int(first_present(raw, "number", "floor"), 1),
            rows=self._build_rows(first_present(raw, "row", "rows")),
        )

    def _build_rows(self, raw: Any) -> list[PlanRow]:
        rows = []
        for index, item in enumerate(ensure_list(raw)):
            if isinstance(item, Mapping):
                cells = ensure_list(first_present(item, "seat", "seats"))
            elif isinstance(item, list):
                cells = item
            else:
                cells = []
            rows.append(PlanRow(index=index, seats=[self._build_seat(cell) for cell in cells]))
        return rows

    @staticmethod
    def _build_seat(raw: Any) -> PlanSeat:
        if isinstance(raw, Mapping):
            number = normalize_seat_number(first_present(raw, "#text", "content", "number"))
            icon = to_str(first_present(raw, "@icon", "icon")).strip()
            return PlanSeat(number=number or None, icon=icon or None)
        if isinstance(raw, str | int):
            return PlanSeat(number=normalize_seat_number(raw) or None)
        return PlanSeat()


@dataclass(slots=True)
class CancelNormalizer:
    """
    Normalize `cancel_ticket` answers.

    A whole-request refusal raises VendorError; a ticket the vendor refused
    to cancel (e.g. ``rate_100`` close to departure) is kept with its error.
    """

    def normalize(self, raw: Any) -> CancelResult:
        data = raise_for_vendor_error(raw)
        tickets = [
            self._build_ticket(data[key])
            for key in sorted((key for key in data if key.isdigit()), key=int)
            if isinstance(data[key], Mapping)
        ]
        if not tickets:
            _require_any(data, ("order_id", "cancel_order", "money_back_total"), "cancel_ticket")
        return CancelResult(
            order_id=to_optional_int(data.get("order_id")),
            order_cancelled=to_flag(data.get("cancel_order")),
            price_total=to_float(data.get("price_total")),
            money_back_total=to_float(data.get("money_back_total")),
            currency=to_str(data.get("currency")) or "EUR",
            tickets=tickets,
        )

    @staticmethod
    def _build_ticket(raw: RawMapping) -> CancelledTicket:
        error = to_str(raw.get("error"))
        return CancelledTicket(
            transaction_id=to_str(raw.get("transaction_id")),
            ticket_id=to_str(raw.get("ticket_id")),
            cancelled=to_flag(raw.get("cancel_ticket")) and not error,
            price=to_optional_float(raw.get("price")),
            money_back=to_float(raw.get("money_back")),
            provision=to_float(raw.get("provision")),
            currency=to_optional_str(raw.get("currency")),
            hours_after_buy=to_optional_float(raw.get("hours_after_buy")),
            hours_before_depar=to_optional_float(raw.get("hours_before_depar")),
            rate=to_optional_float(raw.get("rate")),
            error=error or None,
        )


@dataclass(slots=True)
class ReserveValidationNormalizer:
    """Normalize `reserve_validation` answers for a contact phone."""

    def normalize(self, raw: Any, phone: str) -> ReserveValidation:
        data = raise_for_vendor_error(raw)
        _require_any(data, ("reserve_validation", "need_sms_validation"), "reserve_validation")
        return ReserveValidation(
            phone=phone,
            can_reserve=to_flag(data.get("reserve_validation")),
            needs_sms=to_flag(data.get("need_sms_validation")),
        )
