"""Per-user booking state tying the selection managers to the chosen legs."""

from __future__ import annotations

from collections.abc import Sequence

from ..models import RouteOption, TripMeta
from .order_builder import format_seat_for_segments
from .selection import (
    BaggageSelectionManager,
    DiscountSelectionManager,
    SeatSelectionManager,
)


class BookingSession:
    """
    Selections for one search: seats, discounts and baggage per chosen leg.

    Every fetch started on behalf of the session takes a generation token
    from `begin_request()`. `restart()` bumps the generation, so results of
    requests issued before it no longer pass `is_current()` and must be
    dropped instead of applied.
    """

    def __init__(
        self,
        passengers: int,
        legs: Sequence[RouteOption],
        currency: str = "EUR",
    ) -> None:
        self._generation = 0
        self._currency = currency
        self._reset(passengers, legs)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def passengers(self) -> int:
        return self._passengers

    @property
    def currency(self) -> str:
        return self._currency

    @property
    def legs(self) -> list[RouteOption]:
        return list(self._legs)

    def begin_request(self) -> int:
        return self._generation

    def is_current(self, token: int) -> bool:
        return token == self._generation

    def restart(
        self,
        legs: Sequence[RouteOption] | None = None,
        passengers: int | None = None,
    ) -> None:
        """Drop every selection and invalidate requests already in flight."""
        self._generation += 1
        self._reset(
            passengers if passengers is not None else self._passengers,
            legs if legs is not None else self._legs,
        )

    @staticmethod
    def leg_key(leg_index: int) -> str:
        return str(leg_index)

    @staticmethod
    def segment_key(leg_index: int, segment_index: int = 0) -> str:
        return f"{leg_index}:{segment_index}"

    def baggage_for(self, leg_index: int) -> BaggageSelectionManager:
        return self.baggage[self.leg_key(leg_index)]

    @property
    def base_price(self) -> float:
        """Per-passenger price of all legs before discounts."""
        return sum(leg.price for leg in self._legs)

    def total_price(self) -> float:
        """Seats net of discounts plus paid baggage, for all passengers."""
        seats_total = self.seats.summary().total_price
        if self.discounts.has_selection:
            seats_total = max(0.0, seats_total - self.discounts.total_discount())
        return seats_total + sum(manager.total_price() for manager in self.baggage.values())

    def is_complete(self) -> bool:
        """Every segment of every leg holds one seat per passenger."""
        return self.missing_seat() is None

    def missing_seat(self) -> tuple[int, int] | None:
        """Leg and passenger index of the first seat not picked yet."""
        for leg_index, leg in enumerate(self._legs):
            for segment in range(max(leg.segments, 1)):
                picked = len(self.seats.selected(self.segment_key(leg_index, segment)))
                if picked < self._passengers:
                    return leg_index, picked
        return None

    def trip_metas(self) -> list[TripMeta]:
        """Describe the current selections as order builder input."""
        metas = []
        for leg_index, leg in enumerate(self._legs):
            leg_key = self.leg_key(leg_index)
            segments = max(leg.segments, 1)
            seats_by_segment = [
                self.seats.selected(self.segment_key(leg_index, segment))
                for segment in range(segments)
            ]
            seats_per_passenger = [
                format_seat_for_segments(
                    {
                        segment: seats[passenger]
                        for segment, seats in enumerate(seats_by_segment)
                        if passenger < len(seats)
                    },
                    segments,
                )
                for passenger in range(self._passengers)
            ]

            paid_ids = self.baggage[leg_key].paid_ids_per_passenger()
            discount = self.discounts.get(leg_key)
            metas.append(
                TripMeta(
                    date=leg.date_from,
                    interval_id=leg.interval_id,
                    seats_per_passenger=seats_per_passenger,
                    discounts=self.discounts.discounts_for_leg(leg_key),
                    baggage_paid_ids_per_passenger=paid_ids if any(paid_ids) else None,
                    segments=segments,
                    need_order_data=leg.need_orderdata,
                    need_birth=leg.need_birth
                    or (discount is not None and discount.discount.requires_birth_date),
                )
            )
        return metas

    def _reset(self, passengers: int, legs: Sequence[RouteOption]) -> None:
        self._passengers = passengers
        self._legs = list(legs)
        self.seats = SeatSelectionManager(passengers)
        self.discounts = DiscountSelectionManager(passengers, self.base_price, self._currency)
        self.baggage = {
            self.leg_key(leg_index): BaggageSelectionManager(passengers)
            for leg_index in range(len(self._legs))
        }
