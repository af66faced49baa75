"""Assembly and validation of the vendor `new_order` payload.

The payload is a set of parallel arrays: one entry per trip leg in `date`,
`interval_id`, `seat` and `discount_id`, one entry per passenger inside each
leg and in `name` / `surname` / `birth_date`. Every violation raises a
dedicated OrderValidationError subclass carrying the leg and passenger index.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from ..errors import (
    ArrayLengthMismatch,
    EmptyInput,
    MissingBirthDate,
    MissingContactPhone,
    MissingPassengerData,
    SegmentCountMismatch,
)
from ..models import NewOrderPayload, Passenger, TripMeta


def build_new_order_payload(
    login: str,
    password: str,
    passengers: Sequence[Passenger],
    trips: Sequence[TripMeta],
    phone: str | None = None,
    email: str | None = None,
    promocode: str | None = None,
    currency: str = "EUR",
    lang: str = "ru",
) -> NewOrderPayload:
    """
    Build a validated new_order payload.

    Args:
        login: Vendor login, passed through untouched
        password: Vendor password, passed through untouched
        passengers: Passengers in seat order
        trips: Outbound leg and optional return leg
        phone: Contact phone, required when any leg needs order data
        email: Contact email, sent only together with order data
        promocode: Optional promo code name
        currency: Payment currency
        lang: Vendor response language

    Returns:
        Payload whose parallel arrays are consistent

    Raises:
        OrderValidationError: One of its subclasses for each kind of violation
    """
    if not trips:
        raise EmptyInput("Order has no trip legs")
    if not passengers:
        raise EmptyInput("Order has no passengers")

    passenger_count = len(passengers)
    seat = [_leg_seats(trip, leg_index, passenger_count) for leg_index, trip in enumerate(trips)]

    discount_id = [
        {str(index): str(value) for index, value in (trip.discounts or {}).items()}
        for trip in trips
    ]

    baggage: dict[str, list[str]] = {}
    for leg_index, trip in enumerate(trips):
        per_passenger = trip.baggage_paid_ids_per_passenger
        if not per_passenger:
            continue
        if len(per_passenger) != passenger_count:
            raise ArrayLengthMismatch(
                f"Leg {leg_index}: baggage for {len(per_passenger)} passengers, "
                f"expected {passenger_count}",
                leg_index=leg_index,
            )
        padded = [ids or "" for ids in per_passenger]
        if any(padded):
            baggage[str(leg_index)] = padded

    need_order_data = any(trip.need_order_data for trip in trips)
    need_birth = any(trip.need_birth for trip in trips)

    if need_order_data:
        for index, passenger in enumerate(passengers):
            if not passenger.name or not passenger.surname:
                raise MissingPassengerData(
                    f"Passenger {index}: name and surname are required",
                    passenger_index=index,
                )
        if not phone:
            raise MissingContactPhone("A contact phone is required for this order")
    if need_birth:
        for index, passenger in enumerate(passengers):
            if not passenger.birth_date:
                raise MissingBirthDate(
                    f"Passenger {index}: birth date is required",
                    passenger_index=index,
                )

    payload = NewOrderPayload(
        login=login,
        password=password,
        promocode_name=promocode or None,
        date=[trip.date for trip in trips],
        interval_id=[trip.interval_id for trip in trips],
        seat=seat,
        currency=currency,
        lang=lang,
    )
    if need_order_data:
        payload.name = [passenger.name for passenger in passengers]
        payload.surname = [passenger.surname for passenger in passengers]
        payload.phone = phone
        payload.email = email or None
    if need_birth:
        payload.birth_date = [passenger.birth_date or "" for passenger in passengers]
    if any(discount_id):
        payload.discount_id = discount_id
    if baggage:
        payload.baggage = baggage

    validate_new_order_payload(payload)
    return payload


def validate_new_order_payload(payload: NewOrderPayload) -> None:
    """Re-check array parity of an assembled payload before submission."""
    legs = len(payload.date)
    if legs != len(payload.interval_id) or legs != len(payload.seat):
        raise ArrayLengthMismatch(
            f"Leg arrays disagree: date={legs}, interval_id={len(payload.interval_id)}, "
            f"seat={len(payload.seat)}"
        )

    passenger_count = len(payload.seat[0]) if payload.seat else 0
    for leg_index, leg_seats in enumerate(payload.seat):
        if len(leg_seats) != passenger_count:
            raise ArrayLengthMismatch(
                f"Leg {leg_index}: {len(leg_seats)} seats, first leg has {passenger_count}",
                leg_index=leg_index,
            )

    for name, values in (
        ("name", payload.name),
        ("surname", payload.surname),
        ("birth_date", payload.birth_date),
    ):
        if values is not None and len(values) != passenger_count:
            raise ArrayLengthMismatch(
                f"{name} has {len(values)} entries, expected {passenger_count}"
            )

    if payload.discount_id is not None and len(payload.discount_id) != legs:
        raise ArrayLengthMismatch(
            f"discount_id has {len(payload.discount_id)} legs, expected {legs}"
        )

    for key, per_passenger in (payload.baggage or {}).items():
        if not key.isdigit() or int(key) >= legs:
            raise ArrayLengthMismatch(f"Baggage leg index {key} is out of range")
        if len(per_passenger) != passenger_count:
            raise ArrayLengthMismatch(
                f"Leg {key}: baggage for {len(per_passenger)} passengers, "
                f"expected {passenger_count}",
                leg_index=int(key),
            )


def format_seat_for_segments(selections: Mapping[int, str], total_segments: int) -> str:
    """
    Join one passenger's per-segment seats into the vendor's comma form.

    Segments without a selection stay empty, so the result always has
    `total_segments` parts.
    """
    seats = [""] * total_segments
    for segment_index, seat_number in selections.items():
        if 0 <= segment_index < total_segments:
            seats[segment_index] = seat_number
    return ",".join(seats)


def format_baggage_ids(selections: Iterable[tuple[str, int]]) -> str:
    """Repeat each baggage id by its quantity: ``[("b1", 2)]`` -> ``"b1,b1"``."""
    ids: list[str] = []
    for baggage_id, quantity in selections:
        ids.extend([baggage_id] * max(quantity, 0))
    return ",".join(ids)


def _leg_seats(trip: TripMeta, leg_index: int, passenger_count: int) -> list[str]:
    if len(trip.seats_per_passenger) != passenger_count:
        raise ArrayLengthMismatch(
            f"Leg {leg_index}: {len(trip.seats_per_passenger)} seats selected "
            f"for {passenger_count} passengers",
            leg_index=leg_index,
        )
    for passenger_index, seat_string in enumerate(trip.seats_per_passenger):
        parts = seat_string.split(",") if trip.segments > 1 else [seat_string]
        if len(parts) != max(trip.segments, 1):
            raise SegmentCountMismatch(
                f"Leg {leg_index}, passenger {passenger_index}: {len(parts)} segment "
                f"seats, expected {trip.segments}",
                leg_index=leg_index,
                passenger_index=passenger_index,
            )
        # a blank part is a segment nobody picked a seat on
        if not all(part.strip() for part in parts):
            raise SegmentCountMismatch(
                f"Leg {leg_index}, passenger {passenger_index}: no seat selected "
                f"in {seat_string!r}",
                leg_index=leg_index,
                passenger_index=passenger_index,
            )
    return list(trip.seats_per_passenger)
