"""Booking persistence.

Two stores share one contract: a MongoDB-backed store for deployments and an
in-memory store for tests and local runs (``BOOKING_STORE=memory``).
"""
from contextlib import AbstractContextManager
from datetime import date, datetime
from typing import Any, Dict, Protocol
import logging
import threading

from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.database import Database

from unit_booking.config import settings
from unit_booking.db.locks import KeyedLocks
from unit_booking.db.mongo_client import get_db
from unit_booking.errors import BookingNotFound
from unit_booking.models import Booking, BookingCandidate
from unit_booking.services.conflicts import ConflictFilter, first_conflict
from unit_booking.services.stays import StayInterval

logger = logging.getLogger(__name__)

FILTER_FIELDS = {"guest": "guest_name", "unit": "unit_id"}


class BookingStore(Protocol):
    def find_conflicting(
        self, conflict_filter: ConflictFilter, stay: StayInterval, exclude_id: int | None = None
    ) -> bool: ...
    def insert(self, candidate: BookingCandidate) -> Booking: ...
    def find_by_id(self, booking_id: int) -> Booking | None: ...
    def update_nights(self, booking_id: int, number_of_nights: int) -> Booking: ...
    def reservation_lock(self, *keys: str) -> AbstractContextManager[None]: ...


def _to_mongo_date(d: date) -> datetime:
    # pymongo has no date type; midnight of the day stands in for it
    return datetime(d.year, d.month, d.day)

def _from_doc(doc: Dict[str, Any]) -> Booking:
    return Booking(
        id=doc["_id"],
        guest_name=doc["guest_name"],
        unit_id=doc["unit_id"],
        check_in_date=doc["check_in"],
        number_of_nights=doc["number_of_nights"],
    )


class MongoBookingStore:
    def __init__(self, db: Database | None = None) -> None:
        self._db = db if db is not None else get_db()
        self._locks = KeyedLocks()

    def _next_id(self) -> int:
        counter = self._db.counters.find_one_and_update(
            {"_id": "bookings"},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return int(counter["seq"])

    def find_conflicting(
        self, conflict_filter: ConflictFilter, stay: StayInterval, exclude_id: int | None = None
    ) -> bool:
        # Stored bookings under one filter never overlap each other, so only the
        # nearest one starting on/before check-in and the nearest one starting
        # after it can reach the candidate. Both are re-checked exactly.
        base: Dict[str, Any] = {FILTER_FIELDS[conflict_filter.field]: conflict_filter.value}
        if exclude_id is not None:
            base["_id"] = {"$ne": exclude_id}
        check_in = _to_mongo_date(stay.check_in)
        earlier = (
            self._db.bookings.find({**base, "check_in": {"$lte": check_in}})
            .sort("check_in", DESCENDING)
            .limit(1)
        )
        later = (
            self._db.bookings.find({**base, "check_in": {"$gt": check_in, "$lt": _to_mongo_date(stay.check_out)}})
            .sort("check_in", ASCENDING)
            .limit(1)
        )
        neighbours = [_from_doc(d) for d in earlier] + [_from_doc(d) for d in later]
        hit = first_conflict(neighbours, conflict_filter, stay, exclude_id)
        if hit is not None:
            logger.debug("booking %s conflicts on %s=%s", hit.id, conflict_filter.field, conflict_filter.value)
        return hit is not None

    def insert(self, candidate: BookingCandidate) -> Booking:
        booking_id = self._next_id()
        doc = {
            "_id": booking_id,
            "guest_name": candidate.guest_name,
            "unit_id": candidate.unit_id,
            "check_in": _to_mongo_date(candidate.check_in_date),
            "number_of_nights": candidate.number_of_nights,
        }
        self._db.bookings.insert_one(doc)
        return _from_doc(doc)

    def find_by_id(self, booking_id: int) -> Booking | None:
        doc = self._db.bookings.find_one({"_id": booking_id})
        return _from_doc(doc) if doc else None

    def update_nights(self, booking_id: int, number_of_nights: int) -> Booking:
        doc = self._db.bookings.find_one_and_update(
            {"_id": booking_id},
            {"$set": {"number_of_nights": number_of_nights}},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise BookingNotFound(booking_id)
        return _from_doc(doc)

    def reservation_lock(self, *keys: str) -> AbstractContextManager[None]:
        return self._locks.hold(*keys)


class InMemoryBookingStore:
    def __init__(self) -> None:
        self._bookings: Dict[int, Booking] = {}
        self._next_id = 1
        self._guard = threading.Lock()
        self._locks = KeyedLocks()

    def find_conflicting(
        self, conflict_filter: ConflictFilter, stay: StayInterval, exclude_id: int | None = None
    ) -> bool:
        with self._guard:
            bookings = list(self._bookings.values())
        return first_conflict(bookings, conflict_filter, stay, exclude_id) is not None

    def insert(self, candidate: BookingCandidate) -> Booking:
        with self._guard:
            booking = Booking(id=self._next_id, **candidate.model_dump())
            self._bookings[booking.id] = booking
            self._next_id += 1
        return booking

    def find_by_id(self, booking_id: int) -> Booking | None:
        return self._bookings.get(booking_id)

    def update_nights(self, booking_id: int, number_of_nights: int) -> Booking:
        with self._guard:
            if booking_id not in self._bookings:
                raise BookingNotFound(booking_id)
            booking = self._bookings[booking_id].model_copy(update={"number_of_nights": number_of_nights})
            self._bookings[booking_id] = booking
        return booking

    def reservation_lock(self, *keys: str) -> AbstractContextManager[None]:
        return self._locks.hold(*keys)


_store: BookingStore | None = None

def get_booking_store() -> BookingStore:
    global _store
    if _store is None:
        if settings.BOOKING_STORE == "memory":
            _store = InMemoryBookingStore()
        else:
            _store = MongoBookingStore()
    return _store
