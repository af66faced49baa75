"""In-memory selection state for seats, discounts and baggage.

Each manager is keyed by a trip-leg key (an interval id, or an interval id
plus segment index for legs with transfers). All mutations are synchronous;
one user action produces one recomputation.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from ..errors import BaggageLimitExceeded
from ..models import BaggageItem, DiscountItem, FreeSeat
from .coercion import normalize_seat_number


@dataclass(slots=True)
class LegSeats:
    """Selected seats of one leg, oldest first, and their summed price."""

    leg: str
    seats: list[str] = field(default_factory=list)
    price: float = 0.0


@dataclass(frozen=True, slots=True)
class SelectionSummary:
    legs: dict[str, LegSeats]
    total_seats: int
    total_price: float
    is_valid: bool


class SeatSelectionManager:
    """
    Track seat choices per leg for a fixed number of passengers.

    A leg never holds more than `passengers` seats. Selecting a free seat on
    a full leg evicts the seat that was selected first.
    """

    def __init__(self, passengers: int) -> None:
        if passengers < 1:
            raise ValueError("passengers must be positive")
        self._passengers = passengers
        self._seat_maps: dict[str, dict[str, FreeSeat]] = {}
        self._selected: dict[str, LegSeats] = {}

    @property
    def passengers(self) -> int:
        return self._passengers

    def load(self, leg: str, seats: Iterable[FreeSeat]) -> None:
        """Register (or refresh) the seat list of a leg."""
        self._seat_maps[leg] = {normalize_seat_number(seat.seat_number): seat for seat in seats}
        if leg in self._selected:
            self._recompute(leg)

    def legs(self) -> list[str]:
        return list(dict.fromkeys([*self._seat_maps, *self._selected]))

    def selected(self, leg: str) -> list[str]:
        selection = self._selected.get(leg)
        return list(selection.seats) if selection else []

    def price(self, leg: str) -> float:
        selection = self._selected.get(leg)
        return selection.price if selection else 0.0

    def is_available(self, leg: str, seat_number: str) -> bool:
        seat = self._seat_maps.get(leg, {}).get(normalize_seat_number(seat_number))
        return seat is not None and seat.is_free

    def can_select(self, leg: str, seat_number: str) -> bool:
        """True for an already selected seat, or a free seat on a leg below capacity."""
        key = normalize_seat_number(seat_number)
        current = self.selected(leg)
        if key in current:
            return True
        return self.is_available(leg, key) and len(current) < self._passengers

    def select(self, leg: str, seat_number: str) -> None:
        key = normalize_seat_number(seat_number)
        selection = self._selected.setdefault(leg, LegSeats(leg=leg))
        if key in selection.seats or not self.is_available(leg, key):
            return
        if len(selection.seats) >= self._passengers:
            selection.seats.pop(0)
        selection.seats.append(key)
        self._recompute(leg)

    def deselect(self, leg: str, seat_number: str) -> None:
        selection = self._selected.get(leg)
        key = normalize_seat_number(seat_number)
        if selection is None or key not in selection.seats:
            return
        selection.seats.remove(key)
        self._recompute(leg)

    def clear(self, leg: str | None = None) -> None:
        if leg is None:
            self._selected.clear()
        else:
            self._selected.pop(leg, None)

    def summary(self) -> SelectionSummary:
        legs = {
            leg: LegSeats(leg=leg, seats=self.selected(leg), price=self.price(leg))
            for leg in self.legs()
        }
        return SelectionSummary(
            legs=legs,
            total_seats=sum(len(item.seats) for item in legs.values()),
            total_price=sum(item.price for item in legs.values()),
            is_valid=bool(legs)
            and all(len(item.seats) == self._passengers for item in legs.values()),
        )

    def _recompute(self, leg: str) -> None:
        seat_map = self._seat_maps.get(leg, {})
        selection = self._selected[leg]
        selection.price = sum(
            seat_map[seat].price for seat in selection.seats if seat in seat_map
        )


@dataclass(frozen=True, slots=True)
class DiscountSelection:
    discount: DiscountItem
    passengers: int

    @property
    def amount(self) -> float:
        """Leg-wide reduction: per-passenger price capped by `price_max`."""
        cap = self.discount.price_max if self.discount.price_max is not None else self.discount.price
        return min(self.discount.price, cap) * self.passengers


class DiscountSelectionManager:
    """At most one discount per leg, applied to every passenger of that leg."""

    def __init__(self, passengers: int, base_price: float, currency: str = "EUR") -> None:
        self._passengers = passengers
        self._base_price = base_price
        self._currency = currency
        self._selected: dict[str, DiscountSelection] = {}

    @property
    def currency(self) -> str:
        return self._currency

    @property
    def has_selection(self) -> bool:
        return bool(self._selected)

    def select(self, leg: str, discount: DiscountItem) -> None:
        self._selected[leg] = DiscountSelection(discount=discount, passengers=self._passengers)

    def deselect(self, leg: str) -> None:
        self._selected.pop(leg, None)

    def clear(self) -> None:
        self._selected.clear()

    def get(self, leg: str) -> DiscountSelection | None:
        return self._selected.get(leg)

    def total_discount(self) -> float:
        return sum(selection.amount for selection in self._selected.values())

    def final_price(self) -> float:
        return max(0.0, self._base_price * self._passengers - self.total_discount())

    def discounts_for_leg(self, leg: str) -> dict[int, str] | None:
        """Passenger index to discount id map for the order payload."""
        selection = self._selected.get(leg)
        if selection is None:
            return None
        return {index: selection.discount.discount_id for index in range(self._passengers)}


@dataclass(slots=True)
class BaggageSelection:
    item: BaggageItem
    quantity: int

    @property
    def total_price(self) -> float:
        return self.item.price * self.quantity


class BaggageSelectionManager:
    """
    Baggage quantities of one leg, aggregated across passengers.

    Quantities are checked against `max_in_bus` and `max_per_person` on every
    mutation; an over-limit request raises BaggageLimitExceeded and leaves the
    selection unchanged.
    """

    def __init__(self, passengers: int) -> None:
        self._passengers = passengers
        self._selected: dict[str, BaggageSelection] = {}

    def add(self, item: BaggageItem, quantity: int) -> None:
        if quantity <= 0:
            return
        existing = self._selected.get(item.baggage_id)
        new_quantity = quantity + (existing.quantity if existing else 0)
        self._check_limits(item, new_quantity)
        self._selected[item.baggage_id] = BaggageSelection(item=item, quantity=new_quantity)

    def remove(self, item: BaggageItem | str) -> None:
        self._selected.pop(_baggage_id(item), None)

    def update_quantity(self, item: BaggageItem | str, quantity: int) -> None:
        """
        Set the quantity of an item that is already selected.

        A quantity of zero or less removes the item.

        Raises:
            KeyError: When a positive quantity is set on an item that was
                never added; use `add` for that
            BaggageLimitExceeded: When the quantity breaks the item limits
        """
        baggage_id = _baggage_id(item)
        if quantity <= 0:
            self.remove(baggage_id)
            return
        existing = self._selected.get(baggage_id)
        if existing is None:
            raise KeyError(baggage_id)
        self._check_limits(existing.item, quantity)
        existing.quantity = quantity

    def clear(self) -> None:
        self._selected.clear()

    def quantity(self, item: BaggageItem | str) -> int:
        selection = self._selected.get(_baggage_id(item))
        return selection.quantity if selection else 0

    def selections(self) -> list[BaggageSelection]:
        return list(self._selected.values())

    def total_price(self) -> float:
        return sum(selection.total_price for selection in self._selected.values())

    def total_items(self) -> int:
        return sum(selection.quantity for selection in self._selected.values())

    def total_for_type(self, baggage_type: str) -> int:
        return sum(
            selection.quantity
            for selection in self._selected.values()
            if selection.item.type == baggage_type
        )

    def validate(self) -> None:
        for selection in self._selected.values():
            self._check_limits(selection.item, selection.quantity)

    def paid_ids_per_passenger(self) -> list[str]:
        """
        Comma-joined paid baggage ids per passenger.

        Units of each item are dealt round-robin starting from the first
        passenger; free allowances are not sent to the vendor.
        """
        per_passenger: list[list[str]] = [[] for _ in range(self._passengers)]
        for selection in self._selected.values():
            if selection.item.is_included:
                continue
            for unit in range(selection.quantity):
                per_passenger[unit % self._passengers].append(selection.item.baggage_id)
        return [",".join(ids) for ids in per_passenger]

    def _check_limits(self, item: BaggageItem, quantity: int) -> None:
        if item.max_in_bus is not None and quantity > item.max_in_bus:
            raise BaggageLimitExceeded(item.baggage_id, quantity, item.max_in_bus, "max_in_bus")
        if item.max_per_person is not None:
            allowed = item.max_per_person * self._passengers
            if quantity > allowed:
                raise BaggageLimitExceeded(item.baggage_id, quantity, allowed, "max_per_person")


def _baggage_id(item: BaggageItem | str) -> str:
    return item if isinstance(item, str) else item.baggage_id
