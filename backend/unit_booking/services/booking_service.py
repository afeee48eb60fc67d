from datetime import date
import logging

from unit_booking.db.booking_store import BookingStore
from unit_booking.errors import AdmissionRefused, BookingNotFound, InvalidBookingInput
from unit_booking.models import Booking, BookingCandidate
from unit_booking.services import clock
from unit_booking.services.booking_validation import validate_booking_extension, validate_new_booking
from unit_booking.services.stays import fits_calendar

logger = logging.getLogger(__name__)


def _lock_keys(guest_name: str, unit_id: str) -> tuple[str, str]:
    return f"guest:{guest_name}", f"unit:{unit_id}"

def _ensure_well_formed(candidate: BookingCandidate) -> None:
    if not candidate.guest_name or not candidate.guest_name.strip():
        raise InvalidBookingInput("Guest name cannot be empty")
    if not candidate.unit_id or not candidate.unit_id.strip():
        raise InvalidBookingInput("Unit ID cannot be empty")
    if candidate.number_of_nights < 1:
        raise InvalidBookingInput("Number of nights must be at least 1")
    if not fits_calendar(candidate.check_in_date, candidate.number_of_nights):
        raise InvalidBookingInput("Check-out date is out of range")


def create_booking(store: BookingStore, candidate: BookingCandidate) -> Booking:
    """Validate a new stay and persist it.

    Raises AdmissionRefused with the first failing rule's reason. Storage
    errors are not caught.
    """
    _ensure_well_formed(candidate)
    with store.reservation_lock(*_lock_keys(candidate.guest_name, candidate.unit_id)):
        verdict = validate_new_booking(store, candidate)
        if not verdict.admissible:
            logger.warning("booking refused for unit %s: %s", candidate.unit_id, verdict.reason)
            raise AdmissionRefused(verdict.reason)
        booking = store.insert(candidate)
    logger.info(
        "booking %s created: unit %s from %s for %d nights",
        booking.id, booking.unit_id, booking.check_in_date, booking.number_of_nights,
    )
    return booking


def extend_booking(
    store: BookingStore, booking_id: int, additional_nights: int, today: date | None = None
) -> Booking:
    """Add nights to an existing booking, keeping its check-in, guest and unit."""
    if additional_nights < 1:
        raise InvalidBookingInput("Additional nights must be at least 1")
    today = today or clock.today()

    existing = store.find_by_id(booking_id)
    if existing is None:
        raise BookingNotFound(booking_id)

    with store.reservation_lock(*_lock_keys(existing.guest_name, existing.unit_id)):
        # re-read under the lock so the night count we add to is current
        existing = store.find_by_id(booking_id)
        if existing is None:
            raise BookingNotFound(booking_id)
        if not fits_calendar(existing.check_in_date, existing.number_of_nights + additional_nights):
            raise InvalidBookingInput("Check-out date is out of range")
        verdict = validate_booking_extension(store, existing, additional_nights, today)
        if not verdict.admissible:
            logger.warning("extension of booking %s refused: %s", booking_id, verdict.reason)
            raise AdmissionRefused(verdict.reason)
        updated = store.update_nights(booking_id, existing.number_of_nights + additional_nights)
    logger.info("booking %s extended to %d nights", updated.id, updated.number_of_nights)
    return updated
