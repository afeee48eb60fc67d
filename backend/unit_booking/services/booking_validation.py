"""Admission rules for new and extended stays.

New booking:  guest check, then unit check.
Extension:    past-checkout check, then unit check (excluding the booking itself).

The first failing rule decides the reason. Checks only read from the store.
"""
from datetime import date

from unit_booking.db.booking_store import BookingStore
from unit_booking.models import Booking, BookingCandidate, ValidationVerdict
from unit_booking.services.conflicts import by_guest, by_unit

GUEST_OVERLAP = "Guest already has a booking during these dates"
UNIT_UNAVAILABLE = "The unit is already booked for one or more of the selected nights"
PAST_CHECKOUT = "Cannot extend booking after checkout date"


def check_guest_overlap(store: BookingStore, candidate: BookingCandidate) -> ValidationVerdict:
    if store.find_conflicting(by_guest(candidate.guest_name), candidate.stay):
        return ValidationVerdict.refuse(GUEST_OVERLAP)
    return ValidationVerdict.ok()


def check_unit_availability(
    store: BookingStore, candidate: BookingCandidate, exclude_booking_id: int | None = None
) -> ValidationVerdict:
    if store.find_conflicting(by_unit(candidate.unit_id), candidate.stay, exclude_booking_id):
        return ValidationVerdict.refuse(UNIT_UNAVAILABLE)
    return ValidationVerdict.ok()


def check_not_past_checkout(existing: Booking, today: date) -> ValidationVerdict:
    # extending on the checkout day itself is still allowed
    if today > existing.check_out_date:
        return ValidationVerdict.refuse(PAST_CHECKOUT)
    return ValidationVerdict.ok()


def validate_new_booking(store: BookingStore, candidate: BookingCandidate) -> ValidationVerdict:
    verdict = check_guest_overlap(store, candidate)
    if not verdict.admissible:
        return verdict
    return check_unit_availability(store, candidate)


def validate_booking_extension(
    store: BookingStore, existing: Booking, additional_nights: int, today: date
) -> ValidationVerdict:
    verdict = check_not_past_checkout(existing, today)
    if not verdict.admissible:
        return verdict
    return check_unit_availability(store, existing.extended_by(additional_nights), existing.id)
