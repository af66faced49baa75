"""Tests for vendor shape and scalar coercion helpers."""

from __future__ import annotations

import pytest

from bus_booking.domain.errors import MalformedResponse, VendorError
from bus_booking.domain.models import TransportMode
from bus_booking.domain.services.coercion import (
    coerce_enum,
    ensure_list,
    extract_xml_error,
    normalize_seat_number,
    raise_for_vendor_error,
    to_csv_list,
    to_flag,
    to_float,
    to_int,
    to_str,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, []),
        ("", []),
        ([1, None, 2], [1, 2]),
        ({"1": "b", "0": "a", "10": "c"}, ["a", "b", "c"]),
        ({"item": [{"id": 1}]}, [{"id": 1}]),
        ({"item": {"id": 1}}, [{"id": 1}]),
        ({"id": 1}, [{"id": 1}]),
        ("single", ["single"]),
    ],
)
def test_ensure_list_accepts_every_wire_shape(value, expected) -> None:
    assert ensure_list(value) == expected


@pytest.mark.parametrize("raw", [" 05a", "5A", "005A", "5 a", "5a"])
def test_seat_number_variants_share_canonical_form(raw) -> None:
    assert normalize_seat_number(raw) == "5A"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("0", "0"), ("000", "0"), ("A01", "A1"), ("10", "10"), (7, "7"), (12.0, "12"), ("01B02", "1B2")],
)
def test_seat_number_keeps_order_and_single_zero(raw, expected) -> None:
    assert normalize_seat_number(raw) == expected


def test_distinct_seats_stay_distinct() -> None:
    assert normalize_seat_number("1A") != normalize_seat_number("A1")
    assert normalize_seat_number("10") != normalize_seat_number("1")


def test_scalar_coercion() -> None:
    assert to_float("12,5") == 12.5
    assert to_float("abc") == 0.0
    assert to_float("nan", default=1.0) == 1.0
    assert to_float(None) == 0.0
    assert to_int("3.0") == 3
    assert to_str(3.0) == "3"
    assert to_str(None) == ""
    assert to_str(True) == "1"
    assert to_flag("yes") is True
    assert to_flag("1") is True
    assert to_flag("0") is False
    assert to_flag(None) is False
    assert to_csv_list("wifi, wc,,220v") == ["wifi", "wc", "220v"]


def test_coerce_enum_maps_unknown_values() -> None:
    assert coerce_enum(TransportMode, "TRAIN", TransportMode.BUS) is TransportMode.TRAIN
    assert coerce_enum(TransportMode, "plane", TransportMode.BUS) is TransportMode.UNKNOWN
    assert coerce_enum(TransportMode, None, TransportMode.BUS) is TransportMode.BUS


def test_raise_for_vendor_error_unwraps_root() -> None:
    with pytest.raises(VendorError) as exc_info:
        raise_for_vendor_error({"root": {"error": "dealer_no_activ", "detal": "Dealer is off"}})

    assert exc_info.value.vendor_code == "dealer_no_activ"
    assert exc_info.value.detail == "Dealer is off"


def test_raise_for_vendor_error_passes_clean_body() -> None:
    body = {"error": "0", "routes": []}

    assert raise_for_vendor_error(body) == body
    assert raise_for_vendor_error({"root": {"routes": []}}) == {"routes": []}


def test_non_mapping_payload_is_malformed() -> None:
    with pytest.raises(MalformedResponse):
        raise_for_vendor_error("<html>")


def test_extract_xml_error() -> None:
    error = extract_xml_error("<root><error>dealer_no_activ</error><detal>off</detal></root>")

    assert error is not None
    assert error.vendor_code == "dealer_no_activ"
    assert error.detail == "off"
    assert extract_xml_error("<html><body>Bad gateway</body></html>") is None
