"""
Tests for creating and extending bookings.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date, timedelta
from unittest.mock import MagicMock

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from unit_booking.errors import AdmissionRefused, BookingNotFound, InvalidBookingInput
from unit_booking.models import BookingCandidate
from unit_booking.services import booking_service, clock
from unit_booking.services.booking_validation import GUEST_OVERLAP, PAST_CHECKOUT, UNIT_UNAVAILABLE


class TestCreateBooking:
    def test_fresh_booking(self, store, make_candidate):
        booking = booking_service.create_booking(store, make_candidate(nights=5))

        assert booking.id == 1
        assert booking.guest_name == "GuestA"
        assert booking.unit_id == "1"
        assert booking.number_of_nights == 5
        assert store.find_by_id(booking.id) == booking

    def test_same_stay_twice_is_refused_for_guest(self, store, make_candidate):
        booking_service.create_booking(store, make_candidate())

        with pytest.raises(AdmissionRefused) as exc_info:
            booking_service.create_booking(store, make_candidate())

        assert exc_info.value.reason == GUEST_OVERLAP

    def test_other_guest_same_unit_is_refused(self, store, make_candidate):
        booking_service.create_booking(store, make_candidate(guest="GuestA"))

        with pytest.raises(AdmissionRefused) as exc_info:
            booking_service.create_booking(store, make_candidate(guest="GuestB"))

        assert exc_info.value.reason == UNIT_UNAVAILABLE

    def test_back_to_back_stay_is_accepted(self, store, make_candidate, today):
        booking_service.create_booking(store, make_candidate(guest="GuestA"))
        booking = booking_service.create_booking(
            store, make_candidate(guest="GuestB", check_in=today + timedelta(days=5), nights=3)
        )
        assert booking.id == 2

    def test_refusal_does_not_persist(self, store, make_candidate):
        booking_service.create_booking(store, make_candidate(guest="GuestA"))
        with pytest.raises(AdmissionRefused):
            booking_service.create_booking(store, make_candidate(guest="GuestB"))
        assert store.find_by_id(2) is None

    @pytest.mark.parametrize(
        "guest, unit, nights",
        [("", "1", 3), ("   ", "1", 3), ("GuestA", "", 3), ("GuestA", "1", 0), ("GuestA", "1", -2)],
    )
    def test_malformed_candidate_is_rejected(self, store, today, guest, unit, nights):
        candidate = BookingCandidate(guest_name=guest, unit_id=unit, check_in_date=today, number_of_nights=nights)
        with pytest.raises(InvalidBookingInput):
            booking_service.create_booking(store, candidate)

    def test_stay_past_last_calendar_date_is_rejected(self, store):
        candidate = BookingCandidate(
            guest_name="GuestA", unit_id="1", check_in_date=date(9999, 12, 30), number_of_nights=5
        )
        with pytest.raises(InvalidBookingInput):
            booking_service.create_booking(store, candidate)
        assert store.find_by_id(1) is None

    def test_storage_faults_propagate(self, make_candidate):
        store = MagicMock()
        store.find_conflicting.side_effect = ServerSelectionTimeoutError("no servers")

        with pytest.raises(ServerSelectionTimeoutError):
            booking_service.create_booking(store, make_candidate())
        store.insert.assert_not_called()

    def test_refusal_is_logged(self, store, make_candidate, caplog):
        booking_service.create_booking(store, make_candidate(guest="GuestA"))
        with caplog.at_level(logging.WARNING, logger="unit_booking.services.booking_service"):
            with pytest.raises(AdmissionRefused):
                booking_service.create_booking(store, make_candidate(guest="GuestB"))
        assert UNIT_UNAVAILABLE in caplog.text

    def test_concurrent_requests_for_one_unit(self, store, make_candidate):
        candidates = [make_candidate(guest=f"Guest{i}") for i in range(8)]

        def attempt(candidate):
            try:
                return booking_service.create_booking(store, candidate)
            except AdmissionRefused:
                return None

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(attempt, candidates))

        assert len([r for r in results if r is not None]) == 1


class TestExtendBooking:
    def test_extend_without_neighbours(self, store, make_candidate, today):
        booking = booking_service.create_booking(store, make_candidate(nights=5))

        extended = booking_service.extend_booking(store, booking.id, 3, today=today)

        assert extended.id == booking.id
        assert extended.number_of_nights == 8
        assert extended.check_in_date == booking.check_in_date
        assert extended.guest_name == booking.guest_name
        assert extended.unit_id == booking.unit_id

    def test_extend_into_next_booking_is_refused(self, store, make_candidate, today):
        booking = booking_service.create_booking(store, make_candidate(guest="GuestA", nights=5))
        booking_service.create_booking(
            store, make_candidate(guest="GuestB", check_in=today + timedelta(days=5), nights=3)
        )

        with pytest.raises(AdmissionRefused) as exc_info:
            booking_service.extend_booking(store, booking.id, 5, today=today)

        assert exc_info.value.reason == UNIT_UNAVAILABLE
        assert store.find_by_id(booking.id).number_of_nights == 5

    def test_missing_booking(self, store, today):
        with pytest.raises(BookingNotFound) as exc_info:
            booking_service.extend_booking(store, 999, 2, today=today)
        assert str(exc_info.value) == "Booking not found"

    def test_after_checkout_is_refused(self, store, make_candidate, today):
        booking = store.insert(make_candidate(check_in=today - timedelta(days=2), nights=1))

        with pytest.raises(AdmissionRefused) as exc_info:
            booking_service.extend_booking(store, booking.id, 2, today=today)

        assert exc_info.value.reason == PAST_CHECKOUT

    @pytest.mark.parametrize("additional", [0, -1])
    def test_non_positive_extension_is_rejected(self, store, make_candidate, today, additional):
        booking = store.insert(make_candidate())
        with pytest.raises(InvalidBookingInput):
            booking_service.extend_booking(store, booking.id, additional, today=today)

    def test_extension_past_last_calendar_date_is_rejected(self, store, make_candidate):
        booking = store.insert(make_candidate(check_in=date.max - timedelta(days=3), nights=2))

        with pytest.raises(InvalidBookingInput):
            booking_service.extend_booking(store, booking.id, 5, today=date.max - timedelta(days=3))

        assert store.find_by_id(booking.id).number_of_nights == 2

    def test_today_defaults_to_clock(self, store, make_candidate, today, monkeypatch):
        booking = store.insert(make_candidate(check_in=today, nights=2))
        monkeypatch.setattr(clock, "today", lambda tz_name=None: today + timedelta(days=10))

        with pytest.raises(AdmissionRefused) as exc_info:
            booking_service.extend_booking(store, booking.id, 1)

        assert exc_info.value.reason == PAST_CHECKOUT

    def test_repeated_extensions_accumulate(self, store, make_candidate, today):
        booking = booking_service.create_booking(store, make_candidate(nights=2))
        booking_service.extend_booking(store, booking.id, 1, today=today)
        extended = booking_service.extend_booking(store, booking.id, 4, today=today)
        assert extended.number_of_nights == 7
