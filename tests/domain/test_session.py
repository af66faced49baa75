"""Tests for BookingSession."""

from __future__ import annotations

import pytest

from bus_booking.domain.errors import SegmentCountMismatch
from bus_booking.domain.models import (
    BaggageItem,
    DiscountItem,
    FreeSeat,
    Passenger,
    RouteOption,
)
from bus_booking.domain.services.order_builder import build_new_order_payload
from bus_booking.domain.services.session import BookingSession

OUTBOUND = RouteOption(interval_id="OUT", date_from="2024-01-24", price=40, need_orderdata=True)
TRANSFER = RouteOption(interval_id="BACK", date_from="2024-01-30", price=60, segments=2)
SEATS = [FreeSeat(seat_number=str(number), is_free=True, price=10) for number in range(1, 7)]


@pytest.fixture
def session() -> BookingSession:
    session = BookingSession(passengers=2, legs=[OUTBOUND, TRANSFER])
    for key in ("0:0", "1:0", "1:1"):
        session.seats.load(key, SEATS)
    return session


def _select_all(session: BookingSession) -> None:
    session.seats.select("0:0", "1")
    session.seats.select("0:0", "2")
    session.seats.select("1:0", "3")
    session.seats.select("1:0", "4")
    session.seats.select("1:1", "5")
    session.seats.select("1:1", "6")


def test_generation_token_goes_stale_after_restart(session) -> None:
    token = session.begin_request()
    assert session.is_current(token) is True

    session.restart()

    assert session.is_current(token) is False
    assert session.is_current(session.begin_request()) is True


def test_restart_clears_selections(session) -> None:
    session.seats.select("0:0", "1")
    session.baggage_for(0).add(BaggageItem(baggage_id="b", price=5), 1)

    session.restart(passengers=3)

    assert session.seats.selected("0:0") == []
    assert session.baggage_for(0).total_items() == 0
    assert session.passengers == 3


def test_trip_metas_join_segments_per_passenger(session) -> None:
    _select_all(session)

    outbound, transfer = session.trip_metas()

    assert session.is_complete() is True
    assert outbound.seats_per_passenger == ["1", "2"]
    assert outbound.need_order_data is True
    assert transfer.segments == 2
    assert transfer.seats_per_passenger == ["3,5", "4,6"]
    assert transfer.date == "2024-01-30"


def test_incomplete_segment_cannot_be_ordered(session) -> None:
    session.seats.select("0:0", "1")
    session.seats.select("0:0", "2")
    session.seats.select("1:0", "3")
    session.seats.select("1:1", "5")
    session.seats.select("1:1", "6")

    assert session.is_complete() is False
    assert session.missing_seat() == (1, 1)
    with pytest.raises(SegmentCountMismatch) as exc_info:
        build_new_order_payload(
            login="dealer",
            password="secret",
            passengers=[Passenger(name="A", surname="B"), Passenger(name="C", surname="D")],
            trips=session.trip_metas(),
            phone="+373",
        )

    assert exc_info.value.leg_index == 1
    assert exc_info.value.passenger_index == 1


def test_missing_seat_on_empty_session(session) -> None:
    assert session.missing_seat() == (0, 0)
    _select_all(session)
    assert session.missing_seat() is None


def test_trip_metas_carry_discounts_and_baggage(session) -> None:
    _select_all(session)
    child = DiscountItem(discount_id="d-child", name="Child", price=5, age_max=12)
    session.discounts.select(session.leg_key(1), child)
    session.baggage_for(0).add(BaggageItem(baggage_id="b1", price=5), 1)

    outbound, transfer = session.trip_metas()

    assert outbound.discounts is None
    assert outbound.baggage_paid_ids_per_passenger == ["b1", ""]
    assert transfer.discounts == {0: "d-child", 1: "d-child"}
    assert transfer.baggage_paid_ids_per_passenger is None
    assert transfer.need_birth is True


def test_session_feeds_order_builder(session) -> None:
    _select_all(session)
    session.baggage_for(0).add(BaggageItem(baggage_id="b1", price=5), 1)

    payload = build_new_order_payload(
        login="l",
        password="p",
        passengers=[Passenger(name="A", surname="B"), Passenger(name="C", surname="D")],
        trips=session.trip_metas(),
        phone="+373",
    )

    assert payload.seat == [["1", "2"], ["3,5", "4,6"]]
    assert payload.baggage == {"0": ["b1", ""]}


def test_total_price(session) -> None:
    _select_all(session)
    session.discounts.select("0", DiscountItem(discount_id="d", name="Promo", price=5))
    session.baggage_for(1).add(BaggageItem(baggage_id="b", price=7), 2)

    assert session.base_price == 100
    assert session.total_price() == 60 - 10 + 14
