"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Callable
from copy import deepcopy
from typing import Any

import pytest

from bus_booking.config import get_settings

BASE_ROUTES: list[dict[str, Any]] = [
    {
        "interval_id": "LOCAL|100|1000|2024-01-24|08:00|EUR",
        "route_id": "100",
        "trans": "bus",
        "carrier": "Eurolines",
        "date_from": "2024-01-24",
        "time_from": "08:00:00",
        "date_to": "2024-01-24",
        "time_to": "18:30:00",
        "point_from_id": "3",
        "point_to_id": "6",
        "currency": "EUR",
        "price_one_way": "45.50",
        "free_seats": ["1", "2", "3", "4"],
        "request_get_free_seats": "1",
        "request_get_discount": 1,
        "request_get_baggage": "0",
        "need_orderdata": "1",
        "need_birth": "0",
        "max_seats": "10",
        "timetable_id": "TT-100",
    },
    {
        "interval_id": "TRANSFER|200",
        "route_id": "200",
        "trans": "bus",
        "date_from": "2024-01-24",
        "price_one_way": 60,
        "free_seats": "12",
        "trips": {
            "0": {"interval_id": "A"},
            "1": {"interval_id": "B"},
        },
    },
]

BASE_BUS_SEATS: dict[str, Any] = {
    "interval_id": "LOCAL|100",
    "currency": "EUR",
    "buses": {
        "0": {
            "bus_id": "bus-1",
            "bus_number": "B 101",
            "seats": {
                "0": {"seat_number": "01", "seat_free": "1", "seat_price": "10.5"},
                "1": {"seat_number": "2", "seat_free": "1", "seat_price": "11"},
                "2": {"seat_number": "3", "seat_free": "0", "seat_price": "12"},
                "3": {"seat_number": "4A", "seat_free": "1", "seat_price": 13},
            },
        }
    },
}

BASE_TRAIN_SEATS: dict[str, Any] = {
    "root": {
        "trains": [
            {
                "train_id": "T-7",
                "train_number": "007",
                "wagons": {
                    "item": [
                        {
                            "vagon_id": "W1",
                            "vagon_type": "coupe",
                            "seats": ["1", "02", {"seat_number": "3", "seat_free": 0}],
                        },
                        {
                            "vagon_id": "W2",
                            "seats": [{"seat_number": "1", "seat_free": "1", "seat_price": "20"}],
                        },
                    ]
                },
            }
        ]
    }
}

BASE_DISCOUNTS: dict[str, Any] = {
    "interval_id": "LOCAL|100",
    "discounts": {
        "0": {
            "discount_id": "d-child",
            "discount_name": "Child 0-12",
            "discount_price": "20",
            "discount_price_max": "15",
            "age_max": "12",
        },
        "1": {"discount_id": "d-student", "discount_name": "Student", "discount_price": 5},
        "2": {"discount_id": "", "discount_name": "Broken"},
    },
}

BASE_BAGGAGE: dict[str, Any] = {
    "interval_id": "LOCAL|100",
    "item": [
        {
            "baggage_id": "b-big",
            "baggage_title": "Suitcase",
            "baggage_type": "large_baggage",
            "length": "120",
            "width": "50",
            "height": "30",
            "kg": "30",
            "price": "15",
            "max_per_person": "1",
            "max_in_bus": "3",
        },
        {
            "baggage_id": "b-hand",
            "baggage_title": "Hand luggage",
            "baggage_type": "small_baggage",
            "price": "0",
            "max_per_person": "1",
        },
        {
            "baggage_id": "b-med",
            "baggage_title": "Bag",
            "price": "5.50",
            "max_per_person": "2",
        },
        {"baggage_title": "No id"},
    ],
}

BASE_SCHEDULE: dict[str, Any] = {
    "route_id": "100",
    "timetable_id": "TT-100",
    "route_name": "Chisinau - Bucharest",
    "carrier": "Eurolines",
    "comfort": "wifi, wc,,220v",
    "max_seats": "50",
    "stations": {
        "0": {"point_id": "3", "point_name": "Chisinau", "departure": "08:00", "day_in_way": "0"},
        "1": {"point_id": "6", "point_name": "Bucharest", "arrival": "18:30", "point_change": "1"},
    },
    "intervals": [{"interval_id": "LOCAL|100", "from_point_id": "3", "to_point_id": "6", "price": "45.5"}],
    "baggage": {"item": {"baggage_id": "b-hand", "baggage_title": "Hand luggage", "price": "0"}},
    "discounts": [],
    "cancel_free_min": "15",
    "cancel_hours_info": [{"hours_before_depar": "24", "cancel_rate": "10", "money_back": "40.5"}],
}

BASE_RESERVED_ORDER: dict[str, Any] = {
    "order_id": "1024",
    "security": "s3cr3t",
    "status": "reserve_ok",
    "reservation_until": "2024-01-20 12:00:00",
    "reservation_until_min": "20",
    "price_total": "91.00",
    "currency": "EUR",
}

BASE_PAID_ORDER: dict[str, Any] = {
    "order_id": 2048,
    "status": "buy",
    "price_total": "45.5",
    "currency": "EUR",
    "0": {
        "passengers": {
            "0": {"ticket_id": "T1", "seat": "05", "price": "45.5", "link": "https://example/t1"},
        }
    },
}

BASE_POINTS: dict[str, Any] = {
    "root": {
        "item": [
            {
                "point_id": "3",
                "point_name": "Chisinau",
                "point_latin_name": "Chisinau",
                "point_ru_name": "Кишинёв",
                "country_id": "5",
                "country_name": "Moldova",
                "country_kod": "MDA",
                "country_kod_two": "MD",
                "latitude": "47.0105",
                "longitude": "28.8638",
                "population": "640000",
                "currency": "MDL",
                "stations": {
                    "item": [
                        {
                            "station_id": "31",
                            "station_name": "Gara Centrala",
                            "station_address": "str. Mitropolit Varlaam 58",
                            "latitude": "47.0148",
                            "longitude": "28.8424",
                        }
                    ]
                },
            },
            {"point_id": "3", "point_name": "Chisinau duplicate"},
            {
                "point_id": "6",
                "point_latin_name": "Praha",
                "country_name": "Czech Republic",
                "airports": [{"iata": "PRG", "icao": "LKPR", "airport_name": "Vaclav Havel"}],
            },
            {"point_name": "no id"},
        ]
    }
}

BASE_PLAN_V2: dict[str, Any] = {
    "plan_type": "double_decker",
    "floors": [
        {
            "number": "1",
            "row": [
                {"seat": ["1", "2", "", "3"]},
                {"seat": [{"#text": "04", "@icon": "wc"}, "5", "", ""]},
            ],
        },
        {"number": "2", "row": {"seat": ["10", "11"]}},
    ],
}

BASE_PLAN_V1: dict[str, Any] = {
    "root": {
        "plan_type": "standard",
        "row": [{"seat": ["1", "", "2"]}, {"seat": "3"}],
    }
}

BASE_BUY: dict[str, Any] = {
    "order_id": 2048,
    "price_total": "91.00",
    "currency": "EUR",
    "link": "https://example.test/print/2048",
    "0": {
        "passenger_id": "7001",
        "transaction_id": "T-1",
        "ticket_id": "555",
        "security": "s-555",
        "price": "45.50",
        "link": "https://example.test/print/555",
    },
    "1": {
        "passenger_id": "7002",
        "transaction_id": "T-2",
        "ticket_id": "556",
        "security": "s-556",
        "price": "45.50",
    },
}

BASE_CANCEL: dict[str, Any] = {
    "order_id": "2048",
    "cancel_order": "1",
    "price_total": "91.00",
    "money_back_total": "68.25",
    "currency": "EUR",
    "0": {
        "transaction_id": "T-1",
        "ticket_id": "555",
        "cancel_ticket": "1",
        "price": "45.50",
        "money_back": "45.50",
        "provision": "0",
        "hours_before_depar": "72",
        "rate": "0",
    },
    "1": {
        "transaction_id": "T-2",
        "ticket_id": "556",
        "cancel_ticket": "0",
        "price": "45.50",
        "money_back": "0",
        "error": "rate_100",
    },
}


def _factory(payload: Any) -> Callable[[], Any]:
    def _builder() -> Any:
        return deepcopy(payload)

    return _builder


@pytest.fixture
def routes_builder() -> Callable[[], list[dict[str, Any]]]:
    """Return a factory that produces independent copies of a route search answer."""
    return _factory(BASE_ROUTES)


@pytest.fixture
def bus_seats_builder() -> Callable[[], dict[str, Any]]:
    return _factory(BASE_BUS_SEATS)


@pytest.fixture
def train_seats_builder() -> Callable[[], dict[str, Any]]:
    return _factory(BASE_TRAIN_SEATS)


@pytest.fixture
def discounts_builder() -> Callable[[], dict[str, Any]]:
    return _factory(BASE_DISCOUNTS)


@pytest.fixture
def baggage_builder() -> Callable[[], dict[str, Any]]:
    return _factory(BASE_BAGGAGE)


@pytest.fixture
def schedule_builder() -> Callable[[], dict[str, Any]]:
    return _factory(BASE_SCHEDULE)


@pytest.fixture
def reserved_order_builder() -> Callable[[], dict[str, Any]]:
    return _factory(BASE_RESERVED_ORDER)


@pytest.fixture
def paid_order_builder() -> Callable[[], dict[str, Any]]:
    return _factory(BASE_PAID_ORDER)


@pytest.fixture
def points_builder() -> Callable[[], dict[str, Any]]:
    return _factory(BASE_POINTS)


@pytest.fixture
def plan_builder() -> Callable[[], dict[str, Any]]:
    """Return a factory for a two-floor (v2.0) bus plan."""
    return _factory(BASE_PLAN_V2)


@pytest.fixture
def legacy_plan_builder() -> Callable[[], dict[str, Any]]:
    return _factory(BASE_PLAN_V1)


@pytest.fixture
def buy_builder() -> Callable[[], dict[str, Any]]:
    return _factory(BASE_BUY)


@pytest.fixture
def cancel_builder() -> Callable[[], dict[str, Any]]:
    return _factory(BASE_CANCEL)


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
