"""Tests for logging configuration."""

from __future__ import annotations

import logging

from bus_booking.logging_config import (
    REDACTED,
    CredentialsFilter,
    SessionFilter,
    get_logging_config,
)


def _record(msg: str, *args) -> logging.LogRecord:
    return logging.LogRecord("bus_booking.test", logging.INFO, __file__, 1, msg, args, None)


def test_session_defaults_to_dash() -> None:
    record = _record("hello")

    assert SessionFilter().filter(record) is True
    assert record.session == "-"


def test_credentials_are_masked_in_rendered_message() -> None:
    record = _record("POST login=%s password=%s", "dealer", "s3cret")

    CredentialsFilter(secrets=["s3cret"]).filter(record)

    assert record.getMessage() == f"POST login=dealer password={REDACTED}"


def test_empty_secret_leaves_record_alone() -> None:
    record = _record("value %s", "")

    CredentialsFilter(secrets=[""]).filter(record)

    assert record.args == ("",)


def test_config_reads_password_and_level_from_settings(monkeypatch) -> None:
    monkeypatch.setenv("BUS_BOOKING_VENDOR_PASSWORD", "from-env")
    monkeypatch.setenv("BUS_BOOKING_LOG_LEVEL", "DEBUG")

    config = get_logging_config()

    assert config["filters"]["credentials"]["secrets"] == ["from-env"]
    assert config["loggers"]["bus_booking"] == {"level": "DEBUG"}
    assert config["handlers"]["console"]["filters"] == ["session", "credentials"]
