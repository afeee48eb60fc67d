"""
Shared pytest fixtures.
Puts the backend directory on sys.path and runs everything against the in-memory store.
"""
import os
import sys
from datetime import date
from pathlib import Path

os.environ.setdefault("BOOKING_STORE", "memory")

backend_dir = str(Path(__file__).parent.parent)
if backend_dir not in sys.path:
    sys.path.insert(0, backend_dir)

import pytest

from unit_booking.db.booking_store import InMemoryBookingStore
from unit_booking.models import BookingCandidate


@pytest.fixture
def store():
    return InMemoryBookingStore()


@pytest.fixture
def today():
    return date(2026, 3, 10)


@pytest.fixture
def make_candidate(today):
    def _make(guest="GuestA", unit="1", check_in=None, nights=5):
        return BookingCandidate(
            guest_name=guest,
            unit_id=unit,
            check_in_date=check_in or today,
            number_of_nights=nights,
        )

    return _make
