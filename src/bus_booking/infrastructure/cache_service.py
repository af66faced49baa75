"""Cache service for seat maps and other vendor responses."""

from __future__ import annotations

import hashlib
import time
from collections.abc import Callable
from typing import Any

from cachetools import TLRUCache, TTLCache

from ..config import get_settings
from ..domain.models import BusPlan, FreeSeatsResult

# Occupancy thresholds and the share of the max TTL used above each one
_SEATS_TTL_STEPS = ((0.3, 1.0), (0.7, 0.7))
_SEATS_TTL_BUSY_FACTOR = 0.4
# Each 100 plan seats add one base TTL, up to twice the base
_PLAN_SEATS_PER_STEP = 100
_PLAN_TTL_MAX_FACTOR = 2.0


class CacheService:
    """
    Service for managing TTL-based caches.

    Seat maps live in a TLRU cache whose per-entry TTL shrinks as a vehicle
    fills up. Bus plans rarely change and get a longer per-entry TTL that
    grows with the seat count. Every other response uses a flat TTL. One
    instance is created per application (see api.dependencies) and passed
    explicitly.
    """

    def __init__(
        self,
        response_cache_ttl: int | None = None,
        response_cache_size: int | None = None,
        seats_min_ttl: int | None = None,
        seats_default_ttl: int | None = None,
        seats_max_ttl: int | None = None,
        seats_cache_size: int | None = None,
        plan_ttl: int | None = None,
        plan_max_ttl: int | None = None,
        plan_cache_size: int | None = None,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize cache service with configurable TTL and size.

        Args:
            response_cache_ttl: TTL for response cache in seconds (default from config)
            response_cache_size: Max size for response cache (default from config)
            seats_min_ttl: Shortest seat map TTL in seconds
            seats_default_ttl: Seat map TTL when the seat list is empty
            seats_max_ttl: Longest seat map TTL in seconds
            seats_cache_size: Max number of cached seat maps
            plan_ttl: Base TTL of a bus plan in seconds
            plan_max_ttl: Longest bus plan TTL in seconds
            plan_cache_size: Max number of cached bus plans
            timer: Clock used for expiry, replaceable in tests
        """
        settings = get_settings()

        self._seats_min_ttl = seats_min_ttl or settings.cache_seats_min_ttl
        self._seats_default_ttl = seats_default_ttl or settings.cache_seats_default_ttl
        self._seats_max_ttl = seats_max_ttl or settings.cache_seats_max_ttl
        self._plan_ttl = plan_ttl or settings.cache_plan_ttl
        self._plan_max_ttl = plan_max_ttl or settings.cache_plan_max_ttl

        self._response_cache: TTLCache[str, Any] = TTLCache(
            maxsize=response_cache_size or settings.cache_response_size,
            ttl=response_cache_ttl or settings.cache_response_ttl,
            timer=timer,
        )
        self._seats_cache: TLRUCache[str, FreeSeatsResult] = TLRUCache(
            maxsize=seats_cache_size or settings.cache_seats_size,
            ttu=self._seats_expiry,
            timer=timer,
        )
        self._plan_cache: TLRUCache[str, BusPlan] = TLRUCache(
            maxsize=plan_cache_size or settings.cache_plan_size,
            ttu=self._plan_expiry,
            timer=timer,
        )

    def seats_ttl(self, result: FreeSeatsResult) -> float:
        """
        TTL for a seat map based on how full the vehicle is.

        Args:
            result: Normalized seat map

        Returns:
            TTL in seconds, within [min, max]
        """
        if not result.seats or not result.total_seats:
            return float(self._seats_default_ttl)

        occupancy = result.occupancy_rate
        factor = _SEATS_TTL_BUSY_FACTOR
        for threshold, step_factor in _SEATS_TTL_STEPS:
            if occupancy <= threshold:
                factor = step_factor
                break
        ttl = round(self._seats_max_ttl * factor)
        return float(min(max(ttl, self._seats_min_ttl), self._seats_max_ttl))

    def _seats_expiry(self, key: str, value: FreeSeatsResult, now: float) -> float:
        return now + self.seats_ttl(value)

    def get_seats(self, key: str) -> FreeSeatsResult | None:
        return self._seats_cache.get(key)

    def set_seats(self, key: str, value: FreeSeatsResult) -> None:
        self._seats_cache[key] = value

    def plan_ttl(self, plan: BusPlan) -> float:
        """
        TTL for a bus plan; layouts with more seats are kept longer.

        Args:
            plan: Normalized bus plan

        Returns:
            TTL in seconds, between the base and the max plan TTL
        """
        factor = min(_PLAN_TTL_MAX_FACTOR, 1 + plan.seat_count / _PLAN_SEATS_PER_STEP)
        return float(min(self._plan_ttl * factor, self._plan_max_ttl))

    def _plan_expiry(self, key: str, value: BusPlan, now: float) -> float:
        return now + self.plan_ttl(value)

    def get_plan(self, key: str) -> BusPlan | None:
        return self._plan_cache.get(key)

    def set_plan(self, key: str, value: BusPlan) -> None:
        self._plan_cache[key] = value

    def get_response(self, key: str) -> Any | None:
        """
        Get cached response by key.

        Args:
            key: Cache key

        Returns:
            Cached value or None if not found/expired
        """
        return self._response_cache.get(key)

    def set_response(self, key: str, value: Any) -> None:
        """
        Store response in cache.

        Args:
            key: Cache key
            value: Value to cache
        """
        self._response_cache[key] = value

    @staticmethod
    def build_cache_key(prefix: str, *args: Any, **kwargs: Any) -> str:
        """
        Build cache key from prefix and parameters.

        Args:
            prefix: Key prefix (e.g., 'routes')
            *args: Positional arguments to include in key
            **kwargs: Keyword arguments to include in key

        Returns:
            Cache key string
        """
        key_parts = [prefix]
        if args:
            key_parts.append(str(args))
        if kwargs:
            # Sorted so that argument order does not change the key
            key_parts.append(str(sorted(kwargs.items())))

        key_string = ":".join(key_parts)
        key_hash = hashlib.md5(key_string.encode()).hexdigest()
        return f"{prefix}:{key_hash}"

    @staticmethod
    def build_seats_key(
        interval_id: str,
        station_from_id: str = "",
        station_to_id: str = "",
        currency: str = "",
        lang: str = "",
    ) -> str:
        """Readable composite key; `interval_id` is kept verbatim."""
        return "|".join(
            ["seats", interval_id, station_from_id or "", station_to_id or "", currency, lang]
        )

    @staticmethod
    def build_plan_key(bustype_id: str, position: str = "h", version: str = "2.0") -> str:
        return f"plan:{bustype_id}:{position}:{version}"

    def clear_seats_cache(self) -> None:
        """Clear all entries from seats cache."""
        self._seats_cache.clear()

    def clear_response_cache(self) -> None:
        """Clear all entries from response cache."""
        self._response_cache.clear()

    def clear_plan_cache(self) -> None:
        self._plan_cache.clear()

    def clear(self) -> None:
        self.clear_seats_cache()
        self.clear_plan_cache()
        self.clear_response_cache()
