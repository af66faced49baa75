"""Tests for new_order payload building and validation."""

from __future__ import annotations

import pytest

from bus_booking.domain.errors import (
    ArrayLengthMismatch,
    EmptyInput,
    MissingBirthDate,
    MissingContactPhone,
    MissingPassengerData,
    SegmentCountMismatch,
)
from bus_booking.domain.models import NewOrderPayload, Passenger, TripMeta
from bus_booking.domain.services.order_builder import (
    build_new_order_payload,
    format_baggage_ids,
    format_seat_for_segments,
    validate_new_order_payload,
)


def _trip(**overrides) -> TripMeta:
    data = {"date": "2024-01-24", "interval_id": "X", "seats_per_passenger": ["1", "2"]}
    data.update(overrides)
    return TripMeta(**data)


def _passengers(count: int = 2) -> list[Passenger]:
    return [Passenger(name=f"Name{i}", surname=f"Surname{i}") for i in range(count)]


def _build(passengers=None, trips=None, **kwargs) -> NewOrderPayload:
    return build_new_order_payload(
        login="dealer",
        password="secret",
        passengers=passengers if passengers is not None else _passengers(),
        trips=trips if trips is not None else [_trip()],
        **kwargs,
    )


def test_single_leg_payload_has_no_optional_keys() -> None:
    payload = _build()

    assert payload.to_request() == {
        "login": "dealer",
        "password": "secret",
        "date": ["2024-01-24"],
        "interval_id": ["X"],
        "seat": [["1", "2"]],
        "currency": "EUR",
        "lang": "ru",
    }


def test_round_trip_parallel_arrays() -> None:
    trips = [_trip(), _trip(date="2024-01-30", interval_id="Y", seats_per_passenger=["7", "8"])]

    payload = _build(trips=trips)

    assert len(payload.date) == len(payload.interval_id) == len(payload.seat) == 2
    assert all(len(leg) == 2 for leg in payload.seat)
    assert payload.interval_id == ["X", "Y"]


def test_empty_trips_or_passengers() -> None:
    with pytest.raises(EmptyInput):
        _build(trips=[])
    with pytest.raises(EmptyInput):
        _build(passengers=[])


def test_seat_count_must_match_passengers() -> None:
    with pytest.raises(ArrayLengthMismatch) as exc_info:
        _build(trips=[_trip(), _trip(seats_per_passenger=["1"])])

    assert exc_info.value.leg_index == 1


def test_segment_count_mismatch_names_leg_and_passenger() -> None:
    trip = _trip(segments=2, seats_per_passenger=["1,2", "3"])

    with pytest.raises(SegmentCountMismatch) as exc_info:
        _build(trips=[trip])

    assert exc_info.value.leg_index == 0
    assert exc_info.value.passenger_index == 1


def test_multi_segment_seats_pass_through() -> None:
    trip = _trip(segments=2, seats_per_passenger=["1,5", "2,6"])

    assert _build(trips=[trip]).seat == [["1,5", "2,6"]]


def test_blank_seat_is_rejected() -> None:
    with pytest.raises(SegmentCountMismatch) as exc_info:
        _build(trips=[_trip(seats_per_passenger=["1", ""])])

    assert exc_info.value.leg_index == 0
    assert exc_info.value.passenger_index == 1


def test_blank_segment_part_is_rejected() -> None:
    trip = _trip(segments=2, seats_per_passenger=["3,5", ",6"])

    with pytest.raises(SegmentCountMismatch) as exc_info:
        _build(trips=[_trip(), trip])

    assert exc_info.value.leg_index == 1
    assert exc_info.value.passenger_index == 1
    assert exc_info.value.to_dict()["code"] == "segment_count_mismatch"


def test_missing_passenger_data_names_index() -> None:
    passengers = [Passenger(name="Ion", surname="Popescu"), Passenger(name="", surname="Ionescu")]

    with pytest.raises(MissingPassengerData) as exc_info:
        _build(passengers=passengers, trips=[_trip(need_order_data=True)], phone="+37360000000")

    assert exc_info.value.passenger_index == 1
    assert exc_info.value.to_dict()["code"] == "missing_passenger_data"


def test_missing_phone() -> None:
    with pytest.raises(MissingContactPhone):
        _build(trips=[_trip(need_order_data=True)])


def test_order_data_included_when_required() -> None:
    payload = _build(trips=[_trip(need_order_data=True)], phone="+373", email="a@b.c")
    request = payload.to_request()

    assert request["name"] == ["Name0", "Name1"]
    assert request["surname"] == ["Surname0", "Surname1"]
    assert request["phone"] == "+373"
    assert request["email"] == "a@b.c"
    assert "birth_date" not in request


def test_missing_birth_date() -> None:
    passengers = [Passenger(name="A", surname="B", birth_date="1990-01-01"), Passenger()]

    with pytest.raises(MissingBirthDate) as exc_info:
        _build(passengers=passengers, trips=[_trip(need_birth=True)])

    assert exc_info.value.passenger_index == 1


def test_discounts_only_when_some_leg_has_them() -> None:
    trips = [_trip(), _trip(interval_id="Y", discounts={1: "d-child"})]

    payload = _build(trips=trips)

    assert payload.discount_id == [{}, {"1": "d-child"}]


def test_baggage_padding_keeps_positions() -> None:
    trip = _trip(
        seats_per_passenger=["1", "2", "3"],
        baggage_paid_ids_per_passenger=[None, "b1", None],
    )

    payload = _build(passengers=_passengers(3), trips=[trip])

    assert payload.baggage == {"0": ["", "b1", ""]}


def test_baggage_omitted_when_all_empty() -> None:
    trip = _trip(baggage_paid_ids_per_passenger=["", None])

    assert "baggage" not in _build(trips=[trip]).to_request()


def test_baggage_length_mismatch() -> None:
    with pytest.raises(ArrayLengthMismatch):
        _build(trips=[_trip(baggage_paid_ids_per_passenger=["b1"])])


def test_promocode_is_sent_as_name() -> None:
    assert _build(promocode="SPRING").to_request()["promocode_name"] == "SPRING"


def _payload(**overrides) -> NewOrderPayload:
    data = {
        "login": "l",
        "password": "p",
        "date": ["2024-01-24"],
        "interval_id": ["X"],
        "seat": [["1", "2"]],
    }
    data.update(overrides)
    return NewOrderPayload(**data)


@pytest.mark.parametrize(
    "overrides",
    [
        {"interval_id": ["X", "Y"]},
        {"date": ["a", "b"], "interval_id": ["X", "Y"], "seat": [["1", "2"], ["3"]]},
        {"name": ["only one"]},
        {"birth_date": ["1990-01-01", "1990-01-01", "1990-01-01"]},
        {"discount_id": [{}, {}]},
        {"baggage": {"1": ["", "b1"]}},
        {"baggage": {"0": ["b1"]}},
    ],
)
def test_validate_rejects_inconsistent_payloads(overrides) -> None:
    with pytest.raises(ArrayLengthMismatch):
        validate_new_order_payload(_payload(**overrides))


def test_validate_accepts_consistent_payload() -> None:
    validate_new_order_payload(_payload(name=["a", "b"], baggage={"0": ["", "b1"]}))


def test_format_seat_for_segments() -> None:
    assert format_seat_for_segments({0: "3", 2: "7"}, 3) == "3,,7"
    assert format_seat_for_segments({5: "1"}, 2) == ","
    assert format_seat_for_segments({0: "4A"}, 1) == "4A"


def test_format_baggage_ids() -> None:
    assert format_baggage_ids([("b1", 2), ("b2", 1), ("b3", 0)]) == "b1,b1,b2"
