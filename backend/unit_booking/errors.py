"""Errors raised by the booking core.

Business-rule outcomes only. Storage faults (pymongo errors) are never
wrapped in these; they reach the caller unchanged.
"""


class BookingError(Exception):
    """Base class for booking failures the caller can act on."""


class AdmissionRefused(BookingError):
    """The requested stay conflicts with an existing booking."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class BookingNotFound(BookingError):
    def __init__(self, booking_id: int) -> None:
        self.booking_id = booking_id
        super().__init__("Booking not found")


class InvalidBookingInput(BookingError):
    """A malformed candidate made it past request validation."""
