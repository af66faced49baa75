"""Logging configuration helpers."""

from __future__ import annotations

import logging
import logging.config
from collections.abc import Iterable
from typing import Any

from bus_booking.config import get_settings

REDACTED = "***"


def get_logging_config() -> dict[str, Any]:
    """
    Get logging configuration based on settings.

    Records carry the booking session generation (``session``) when a
    service logs on behalf of a session. The dealer password never reaches
    a handler in clear text.

    Returns:
        Logging configuration dictionary
    """
    settings = get_settings()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": (
                    "%(asctime)s | %(levelname)s | %(name)s | "
                    "session=%(session)s | %(message)s"
                ),
            },
        },
        "filters": {
            "session": {
                "()": "bus_booking.logging_config.SessionFilter",
            },
            "credentials": {
                "()": "bus_booking.logging_config.CredentialsFilter",
                "secrets": [settings.vendor_password.get_secret_value()],
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "filters": ["session", "credentials"],
            },
        },
        "loggers": {
            "bus_booking": {"level": settings.log_level},
            "uvicorn": {"level": settings.log_level},
            # request lines would repeat every vendor URL
            "httpx": {"level": "WARNING"},
        },
        "root": {
            "level": "WARNING",
            "handlers": ["console"],
        },
    }


class SessionFilter(logging.Filter):
    """Ensure `session` key is always available in log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "session"):
            record.session = "-"
        return True


class CredentialsFilter(logging.Filter):
    """Mask configured secrets in the rendered message of every record."""

    def __init__(self, secrets: Iterable[str] = ()) -> None:
        super().__init__()
        self._secrets = [secret for secret in secrets if secret]

    def filter(self, record: logging.LogRecord) -> bool:
        if not self._secrets:
            return True
        message = record.getMessage()
        masked = message
        for secret in self._secrets:
            masked = masked.replace(secret, REDACTED)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


def configure_logging(config: dict[str, Any] | None = None) -> None:
    """
    Apply logging configuration once.

    Args:
        config: Optional logging configuration dict. If None, uses config from settings.
    """
    if config is None:
        config = get_logging_config()
    logging.config.dictConfig(config)
