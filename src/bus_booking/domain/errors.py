"""Exceptions raised by normalizers, selection managers and the order builder."""

from __future__ import annotations

from typing import Any


class BookingError(Exception):
    """Base class for every error raised by the booking core."""

    code = "booking_error"


class MalformedResponse(BookingError):
    """Raised when a vendor payload does not have a recognizable shape."""

    code = "malformed_response"

    def __init__(self, message: str, raw: Any = None) -> None:
        """
        Initialize malformed response error.

        Args:
            message: What was wrong with the payload
            raw: Offending payload (kept for debugging, never rendered)
        """
        self.raw = raw
        super().__init__(message)


class VendorError(BookingError):
    """Raised when the vendor reports a business condition."""

    code = "vendor_error"

    def __init__(self, vendor_code: str, detail: str = "") -> None:
        """
        Initialize vendor error.

        Args:
            vendor_code: Raw vendor token, e.g. ``dealer_no_activ``
            detail: Optional vendor-provided detail text
        """
        self.vendor_code = vendor_code
        self.detail = detail
        message = f"Vendor error: {vendor_code}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class VendorUnavailable(BookingError):
    """Raised when the vendor could not be reached at all."""

    code = "vendor_unavailable"


class ReservationExpired(BookingError):
    """Raised when paying for a reservation whose deadline has passed."""

    code = "reservation_expired"

    def __init__(self, order_id: int, reservation_until: str) -> None:
        self.order_id = order_id
        self.reservation_until = reservation_until
        super().__init__(f"Reservation of order {order_id} expired at {reservation_until}")


class BaggageLimitExceeded(BookingError):
    """Raised when a baggage quantity exceeds the item's limits."""

    code = "baggage_limit_exceeded"

    def __init__(self, baggage_id: str, requested: int, allowed: int, limit: str) -> None:
        self.baggage_id = baggage_id
        self.requested = requested
        self.allowed = allowed
        self.limit = limit
        super().__init__(
            f"Baggage {baggage_id}: {requested} requested, {limit} allows {allowed}"
        )


class OrderValidationError(BookingError):
    """Base class for new_order payload violations."""

    code = "order_validation"

    def __init__(
        self,
        message: str,
        leg_index: int | None = None,
        passenger_index: int | None = None,
    ) -> None:
        self.leg_index = leg_index
        self.passenger_index = passenger_index
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Serializable description for API responses."""
        return {
            "code": self.code,
            "message": str(self),
            "leg_index": self.leg_index,
            "passenger_index": self.passenger_index,
        }


class EmptyInput(OrderValidationError):
    """Raised when an order has no trip legs or no passengers."""

    code = "empty_input"


class SegmentCountMismatch(OrderValidationError):
    """Raised when a seat string does not carry one seat per segment."""

    code = "segment_count_mismatch"


class ArrayLengthMismatch(OrderValidationError):
    """Raised when parallel payload arrays disagree in length."""

    code = "array_length_mismatch"


class MissingPassengerData(OrderValidationError):
    """Raised when a passenger lacks name or surname."""

    code = "missing_passenger_data"


class MissingContactPhone(OrderValidationError):
    """Raised when the order requires a contact phone and none was given."""

    code = "missing_contact_phone"


class MissingBirthDate(OrderValidationError):
    """Raised when a passenger lacks a required birth date."""

    code = "missing_birth_date"


class IncompleteSelection(OrderValidationError):
    """Raised when a session is submitted before every seat was picked."""

    code = "incomplete_selection"
