"""Half-open stay intervals.

A stay occupies ``[check_in, check_out)``: the check-out day is free for the
next guest. Every overlap decision in the service goes through ``overlaps``.
"""
from datetime import date, datetime, timedelta

from pydantic import BaseModel, ConfigDict, field_validator

from unit_booking.services.clock import booking_zone


def to_day(value: date | datetime) -> date:
    """Drop the time-of-day part. Aware datetimes are read in the booking timezone."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(booking_zone())
        return value.date()
    return value


def checkout_date(check_in: date | datetime, nights: int) -> date:
    return to_day(check_in) + timedelta(days=nights)


def fits_calendar(check_in: date | datetime, nights: int) -> bool:
    """False when the stay would end past the last representable date."""
    return nights <= (date.max - to_day(check_in)).days


class StayInterval(BaseModel):
    model_config = ConfigDict(frozen=True)

    check_in: date
    check_out: date

    @field_validator("check_in", "check_out", mode="before")
    @classmethod
    def _truncate(cls, v):
        if isinstance(v, datetime):
            return to_day(v)
        return v

    @classmethod
    def from_nights(cls, check_in: date | datetime, nights: int) -> "StayInterval":
        return cls(check_in=check_in, check_out=checkout_date(check_in, nights))

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days


def overlaps(a: StayInterval, b: StayInterval) -> bool:
    """True when the two stays share at least one night."""
    return a.check_in < b.check_out and b.check_in < a.check_out
