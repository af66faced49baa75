"""Domain models for normalized vendor data, selections and orders."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TransportMode(str, Enum):
    BUS = "bus"
    TRAIN = "train"
    AIR = "air"
    UNKNOWN = "unknown"


class VehicleType(str, Enum):
    BUS = "bus"
    TRAIN = "train"
    UNKNOWN = "unknown"


class DiscountType(str, Enum):
    AGE_BASED = "age_based"
    GROUP = "group"
    STUDENT = "student"
    SENIOR = "senior"
    GENERAL = "general"
    UNKNOWN = "unknown"


class DiscountCategory(str, Enum):
    CHILD = "child"
    ADULT = "adult"
    SENIOR = "senior"
    STUDENT = "student"
    GROUP = "group"
    SPECIAL = "special"
    UNKNOWN = "unknown"


class BaggageCategory(str, Enum):
    CARRY_ON = "carry_on"
    CHECKED = "checked"
    SPECIAL = "special"
    OVERSIZED = "oversized"
    UNKNOWN = "unknown"


class _Record(BaseModel):
    """Normalized records are immutable once produced."""

    model_config = ConfigDict(frozen=True)


# Routes


class RouteOption(_Record):
    """One bookable trip leg; `interval_id` is opaque and passed through as-is."""

    interval_id: str
    route_id: str = ""
    trans: TransportMode = TransportMode.BUS
    carrier: str = ""
    date_from: str = ""
    time_from: str = ""
    date_to: str = ""
    time_to: str = ""
    point_from_id: str = ""
    point_to_id: str = ""
    station_from_id: str = ""
    station_to_id: str = ""
    currency: str = "EUR"
    price: float = 0
    free_seats: int = 0
    request_get_free_seats: bool = False
    request_get_discount: bool = False
    request_get_baggage: bool = False
    need_orderdata: bool = False
    need_birth: bool = False
    need_doc: bool = False
    max_seats: int = 0
    timetable_id: str = ""
    segments: int = 1


# Seats


class FreeSeat(_Record):
    seat_number: str
    is_free: bool
    price: float = 0
    wagon_id: str | None = None
    wagon_type: str | None = None
    floor: int | None = None
    seat_type: str | None = None


class Wagon(_Record):
    wagon_id: str
    wagon_type: str = "standard"
    seats: list[FreeSeat] = Field(default_factory=list)
    total_seats: int = 0
    free_seats: int = 0


class Vehicle(_Record):
    vehicle_id: str
    number: str = ""
    name: str | None = None
    wagons: list[Wagon] = Field(default_factory=list)
    seats: list[FreeSeat] = Field(default_factory=list)
    total_seats: int = 0
    free_seats: int = 0


class FreeSeatsResult(_Record):
    interval_id: str = ""
    currency: str = "EUR"
    lang: str = "en"
    vehicle_type: VehicleType = VehicleType.BUS
    vehicles: list[Vehicle] = Field(default_factory=list)
    seats: list[FreeSeat] = Field(default_factory=list)
    total_seats: int = 0
    free_seats: int = 0

    @property
    def occupancy_rate(self) -> float:
        if not self.total_seats:
            return 0.0
        return (self.total_seats - self.free_seats) / self.total_seats


# Discounts


class DiscountItem(_Record):
    discount_id: str
    name: str
    price: float = 0
    currency: str | None = None
    price_max: float | None = None
    age_min: int | None = None
    age_max: int | None = None
    min_passengers: int | None = None
    note: str | None = None
    type: DiscountType = DiscountType.GENERAL
    category: DiscountCategory = DiscountCategory.ADULT

    @property
    def requires_birth_date(self) -> bool:
        return (
            self.type == DiscountType.AGE_BASED
            or self.age_min is not None
            or self.age_max is not None
        )


class DiscountList(_Record):
    interval_id: str = ""
    discounts: list[DiscountItem] = Field(default_factory=list)


# Baggage


class BaggageItem(_Record):
    baggage_id: str
    title: str = ""
    type: str = ""
    length: float | None = None
    width: float | None = None
    height: float | None = None
    kg: float | None = None
    price: float = 0
    currency: str | None = None
    max_per_person: int | None = None
    max_in_bus: int | None = None
    category: BaggageCategory = BaggageCategory.CHECKED

    @property
    def is_included(self) -> bool:
        return self.price == 0


class BaggageList(_Record):
    interval_id: str = ""
    items: list[BaggageItem] = Field(default_factory=list)

    @property
    def has_free(self) -> bool:
        return any(item.is_included for item in self.items)

    @property
    def has_paid(self) -> bool:
        return any(not item.is_included for item in self.items)


# Schedules


class ScheduleStation(_Record):
    point_id: str
    point_name: str = ""
    station_name: str | None = None
    date_arrival: str | None = None
    arrival: str | None = None
    date_departure: str | None = None
    departure: str | None = None
    day_in_way: int = 0
    point_change: bool = False


class RouteInterval(_Record):
    interval_id: str
    from_point_id: str = ""
    to_point_id: str = ""
    departure_time: str | None = None
    arrival_time: str | None = None
    price: float | None = None
    currency: str | None = None


class CancelRule(_Record):
    cancel_rate: float = 0
    hours_before_depar: float | None = None
    hours_after_depar: float | None = None
    money_back: float | None = None


class RouteSchedule(_Record):
    route_id: str
    timetable_id: str = ""
    route_name: str | None = None
    carrier: str | None = None
    bustype: str | None = None
    comfort: list[str] = Field(default_factory=list)
    max_seats: int | None = None
    stations: list[ScheduleStation] = Field(default_factory=list)
    intervals: list[RouteInterval] = Field(default_factory=list)
    baggage: list[BaggageItem] = Field(default_factory=list)
    discounts: list[DiscountItem] = Field(default_factory=list)
    cancel_free_min: int | None = None
    cancel_rules: list[CancelRule] = Field(default_factory=list)


# Orders


class Passenger(BaseModel):
    name: str = ""
    surname: str = ""
    birth_date: str | None = None


class TripMeta(BaseModel):
    """Everything the order builder needs to know about one leg."""

    date: str
    interval_id: str
    seats_per_passenger: list[str]
    discounts: dict[int, str] | None = None
    baggage_paid_ids_per_passenger: list[str | None] | None = None
    segments: int = 1
    need_order_data: bool = False
    need_birth: bool = False


class NewOrderPayload(BaseModel):
    """Body of the vendor `new_order` call."""

    login: str
    password: str
    promocode_name: str | None = None
    date: list[str]
    interval_id: list[str]
    seat: list[list[str]]
    name: list[str] | None = None
    surname: list[str] | None = None
    birth_date: list[str] | None = None
    discount_id: list[dict[str, str]] | None = None
    baggage: dict[str, list[str]] | None = None
    phone: str | None = None
    email: str | None = None
    currency: str = "EUR"
    lang: str = "ru"

    def to_request(self) -> dict[str, Any]:
        """Wire representation; optional fields are omitted, never null."""
        return self.model_dump(exclude_none=True)


class OrderTicket(_Record):
    ticket_id: str
    passenger_index: int = 0
    seat: str = ""
    price: float = 0
    link: str = ""
    security: str = ""


class ReservedOrder(_Record):
    status: Literal["reserved"] = "reserved"
    order_id: int
    security: str = ""
    reservation_until: str = ""
    reservation_until_min: int = 0
    price_total: float = 0
    currency: str = "EUR"
    promocode_valid: bool | None = None


class PaidOrder(_Record):
    status: Literal["paid"] = "paid"
    order_id: int
    price_total: float = 0
    currency: str = "EUR"
    tickets: list[OrderTicket] = Field(default_factory=list)
    link: str = ""


class FailedOrder(_Record):
    status: Literal["failed"] = "failed"
    error: str
    detail: str = ""
    order_id: int | None = None


class ExpiredOrder(_Record):
    status: Literal["expired"] = "expired"
    order_id: int
    reservation_until: str = ""


OrderResult = Annotated[
    ReservedOrder | PaidOrder | FailedOrder | ExpiredOrder,
    Field(discriminator="status"),
]


# Points


class PointStation(_Record):
    station_id: str
    station_name: str = ""
    station_address: str = ""
    latitude: float | None = None
    longitude: float | None = None


class PointAirport(_Record):
    iata: str = ""
    icao: str = ""
    airport_name: str = ""
    latitude: float | None = None
    longitude: float | None = None


class PointCity(_Record):
    """A city the vendor serves; `name` is already localized."""

    point_id: str
    name: str = ""
    latin_name: str = ""
    country_id: str = ""
    country_name: str = ""
    country_iso2: str = ""
    country_iso3: str = ""
    latitude: float | None = None
    longitude: float | None = None
    population: int | None = None
    currency: str = ""
    time_zone: str | None = None
    stations: list[PointStation] = Field(default_factory=list)
    airports: list[PointAirport] = Field(default_factory=list)


# Bus plans


class PlanSeat(_Record):
    """One cell of a plan row; a cell without a number is an aisle or gap."""

    number: str | None = None
    icon: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.number


class PlanRow(_Record):
    index: int
    seats: list[PlanSeat] = Field(default_factory=list)


class PlanFloor(_Record):
    number: int = 1
    rows: list[PlanRow] = Field(default_factory=list)


class BusPlan(_Record):
    bustype_id: str
    plan_type: str = "standard"
    version: str = "2.0"
    orientation: Literal["h", "v"] = "h"
    floors: list[PlanFloor] = Field(default_factory=list)

    @property
    def seat_count(self) -> int:
        return sum(
            1
            for floor in self.floors
            for row in floor.rows
            for seat in row.seats
            if not seat.is_empty
        )


# Cancellation


class CancelledTicket(_Record):
    transaction_id: str = ""
    ticket_id: str = ""
    cancelled: bool = False
    price: float | None = None
    money_back: float = 0
    provision: float = 0
    currency: str | None = None
    hours_after_buy: float | None = None
    hours_before_depar: float | None = None
    rate: float | None = None
    error: str | None = None


class CancelResult(_Record):
    """Outcome of `cancel_ticket`; tickets refused by the vendor carry `error`."""

    order_id: int | None = None
    order_cancelled: bool = False
    price_total: float = 0
    money_back_total: float = 0
    currency: str = "EUR"
    tickets: list[CancelledTicket] = Field(default_factory=list)

    @property
    def refused(self) -> list[CancelledTicket]:
        return [ticket for ticket in self.tickets if ticket.error]


# Reserve validation


class ReserveValidation(_Record):
    phone: str
    can_reserve: bool = False
    needs_sms: bool = False


# Requests accepted by the HTTP API


class RoutesRequest(BaseModel):
    id_from: str
    id_to: str
    date: str
    currency: str | None = None
    lang: str | None = None
    trans: str | None = None


class FreeSeatsRequest(BaseModel):
    interval_id: str
    station_from_id: str = ""
    station_to_id: str = ""
    train_id: str | None = None
    vagon_id: str | None = None
    currency: str | None = None
    lang: str | None = None


class DiscountRequest(BaseModel):
    interval_id: str
    currency: str | None = None
    lang: str | None = None


class BaggageRequest(BaseModel):
    interval_id: str
    station_from_id: str = ""
    station_to_id: str = ""
    currency: str | None = None
    lang: str | None = None


class NewOrderRequest(BaseModel):
    passengers: list[Passenger]
    trips: list[TripMeta]
    phone: str | None = None
    email: str | None = None
    promocode: str | None = None
    currency: str | None = None
    lang: str | None = None


class PointsRequest(BaseModel):
    autocomplete: str | None = None
    country_id: str | None = None
    point_id_from: str | None = None
    point_id_to: str | None = None
    trans: str | None = None
    lang: str | None = None


class PlanRequest(BaseModel):
    bustype_id: str
    position: Literal["h", "v"] = "h"
    v: Literal["1.1", "2.0"] = "2.0"
    lang: str | None = None


class CancelRequest(BaseModel):
    """Cancel a whole order or a single ticket; exactly one id is given."""

    order_id: int | None = None
    ticket_id: int | None = None
    lang: str | None = None

    @model_validator(mode="after")
    def _one_target(self) -> CancelRequest:
        if (self.order_id is None) == (self.ticket_id is None):
            raise ValueError("exactly one of order_id and ticket_id is required")
        return self


class BuyRequest(BaseModel):
    order_id: int
    reservation_until: str | None = None
    lang: str | None = None


class ReserveValidationRequest(BaseModel):
    phone: str
    lang: str | None = None
