"""Application configuration using Pydantic Settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="BUS_BOOKING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server settings
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port", gt=0, le=65535)
    reload: bool = Field(default=True, description="Enable auto-reload in development")

    # Vendor API settings
    vendor_base_url: str = Field(
        default="https://test-api.bussystem.eu/server",
        description="Base URL of the reservation API (curl/*.php endpoints live below it)",
    )
    vendor_login: str = Field(default="", description="Dealer login sent with every request")
    vendor_password: SecretStr = Field(
        default=SecretStr(""),
        description="Dealer password sent with every request",
    )
    vendor_timeout: float = Field(
        default=15.0,
        description="HTTP timeout for vendor calls (seconds)",
        gt=0,
        le=120,
    )
    default_currency: str = Field(
        default="EUR",
        description="Currency used when a request does not specify one",
        pattern="^[A-Z]{3}$",
    )
    default_lang: str = Field(default="ru", description="Language used when none is given")

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )

    # Cache settings
    cache_seats_min_ttl: int = Field(
        default=120,
        description="Lower bound for free seats TTL in seconds (2 minutes)",
        gt=0,
        le=3600,
    )
    cache_seats_default_ttl: int = Field(
        default=300,
        description="Free seats TTL when occupancy is unknown (5 minutes)",
        gt=0,
        le=3600,
    )
    cache_seats_max_ttl: int = Field(
        default=600,
        description="Upper bound for free seats TTL in seconds (10 minutes)",
        gt=0,
        le=3600,
    )
    cache_seats_size: int = Field(
        default=500,
        description="Maximum number of cached seat maps",
        gt=0,
        le=10000,
    )
    cache_response_ttl: int = Field(
        default=300,
        description="TTL for routes, schedules, discounts and baggage (5 minutes)",
        gt=0,
        le=3600,
    )
    cache_response_size: int = Field(
        default=200,
        description="Maximum number of cached responses",
        gt=0,
        le=10000,
    )
    cache_plan_ttl: int = Field(
        default=1800,
        description="Base TTL for bus plans in seconds (30 minutes)",
        gt=0,
        le=86400,
    )
    cache_plan_max_ttl: int = Field(
        default=7200,
        description="Upper bound for bus plan TTL in seconds (2 hours)",
        gt=0,
        le=86400,
    )
    cache_plan_size: int = Field(
        default=100,
        description="Maximum number of cached bus plans",
        gt=0,
        le=10000,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get application settings (singleton).

    Returns:
        Settings instance
    """
    return Settings()
