"""Conflict queries: does a stored booking matching a filter intersect a stay?

Stores narrow candidates however they can, then confirm each one here so the
overlap rule stays exact whatever the backing query did.
"""
from dataclasses import dataclass
from typing import Iterable, Literal

from unit_booking.models import Booking
from unit_booking.services.stays import StayInterval, overlaps


@dataclass(frozen=True)
class ConflictFilter:
    field: Literal["guest", "unit"]
    value: str

    def matches(self, booking: Booking) -> bool:
        if self.field == "guest":
            return booking.guest_name == self.value
        return booking.unit_id == self.value


def by_guest(guest_name: str) -> ConflictFilter:
    return ConflictFilter("guest", guest_name)


def by_unit(unit_id: str) -> ConflictFilter:
    return ConflictFilter("unit", unit_id)


def first_conflict(
    bookings: Iterable[Booking],
    conflict_filter: ConflictFilter,
    stay: StayInterval,
    exclude_id: int | None = None,
) -> Booking | None:
    for booking in bookings:
        if exclude_id is not None and booking.id == exclude_id:
            continue
        if not conflict_filter.matches(booking):
            continue
        if overlaps(booking.stay, stay):
            return booking
    return None
