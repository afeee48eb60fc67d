from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from unit_booking.services.stays import StayInterval, checkout_date, to_day


class BookingCandidate(BaseModel):
    """A stay under evaluation: a new booking, or an existing one with more nights."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    guest_name: str = Field(alias="guestName")
    unit_id: str = Field(alias="unitID")
    check_in_date: date = Field(alias="checkInDate")
    number_of_nights: int = Field(alias="numberOfNights")

    @field_validator("check_in_date", mode="before")
    @classmethod
    def _truncate_check_in(cls, v):
        if isinstance(v, datetime):
            return to_day(v)
        return v

    @property
    def check_out_date(self) -> date:
        return checkout_date(self.check_in_date, self.number_of_nights)

    @property
    def stay(self) -> StayInterval:
        return StayInterval(check_in=self.check_in_date, check_out=self.check_out_date)


class Booking(BookingCandidate):
    id: int

    def extended_by(self, additional_nights: int) -> BookingCandidate:
        return BookingCandidate(
            guest_name=self.guest_name,
            unit_id=self.unit_id,
            check_in_date=self.check_in_date,
            number_of_nights=self.number_of_nights + additional_nights,
        )


class ValidationVerdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    admissible: bool
    reason: str = ""

    @classmethod
    def ok(cls) -> "ValidationVerdict":
        return cls(admissible=True)

    @classmethod
    def refuse(cls, reason: str) -> "ValidationVerdict":
        return cls(admissible=False, reason=reason)
