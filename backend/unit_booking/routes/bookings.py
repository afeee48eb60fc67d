from fastapi import APIRouter, Depends, HTTPException, Path, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationInfo, field_validator
from datetime import date
from typing import Any, Dict, List
import re
from unit_booking.config import settings
from unit_booking.db.booking_store import BookingStore, get_booking_store
from unit_booking.errors import AdmissionRefused, BookingNotFound, InvalidBookingInput
from unit_booking.models import Booking, BookingCandidate
from unit_booking.services import booking_service, clock
from unit_booking.services.stays import fits_calendar

router = APIRouter(prefix="/api/v1/booking", tags=["bookings"])

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
# ids are stored as BSON int64
MAX_BOOKING_ID = 2**63 - 1

_FIELD_LABELS = {
    "guestName": "Guest name",
    "unitID": "Unit ID",
    "checkInDate": "Check-in date",
    "numberOfNights": "Number of nights",
    "additionalNights": "Additional nights",
}

def _check_nights(v: int, label: str) -> int:
    if v < 1:
        raise ValueError(f"{label} must be at least 1")
    if v > settings.MAX_NIGHTS:
        raise ValueError(f"{label} cannot exceed {settings.MAX_NIGHTS}")
    return v

class BookingIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    guest_name: str = Field(alias="guestName", strict=True)
    unit_id: str = Field(alias="unitID", strict=True)
    check_in_date: date = Field(alias="checkInDate")
    number_of_nights: StrictInt = Field(alias="numberOfNights")

    @field_validator("guest_name")
    @classmethod
    def _guest_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Guest name cannot be empty")
        if len(v) > settings.GUEST_NAME_MAX_LENGTH:
            raise ValueError(f"Guest name cannot exceed {settings.GUEST_NAME_MAX_LENGTH} characters")
        return v

    @field_validator("unit_id")
    @classmethod
    def _unit_id(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Unit ID cannot be empty")
        return v

    @field_validator("check_in_date", mode="before")
    @classmethod
    def _check_in_date(cls, v: Any) -> date:
        if not isinstance(v, str):
            raise ValueError("Check-in date must be a string")
        if not _DATE_RE.match(v):
            raise ValueError("Check-in date must be in YYYY-MM-DD format")
        try:
            parsed = date.fromisoformat(v)
        except ValueError:
            raise ValueError("Check-in date is not a valid calendar date")
        if parsed < clock.today():
            raise ValueError("Check-in date cannot be in the past")
        return parsed

    @field_validator("number_of_nights")
    @classmethod
    def _number_of_nights(cls, v: int, info: ValidationInfo) -> int:
        _check_nights(v, "Number of nights")
        check_in = info.data.get("check_in_date")
        if check_in is not None and not fits_calendar(check_in, v):
            raise ValueError("Check-out date is out of range")
        return v

    def to_candidate(self) -> BookingCandidate:
        return BookingCandidate(
            guest_name=self.guest_name,
            unit_id=self.unit_id,
            check_in_date=self.check_in_date,
            number_of_nights=self.number_of_nights,
        )

class ExtendIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    additional_nights: StrictInt = Field(alias="additionalNights")

    @field_validator("additional_nights")
    @classmethod
    def _additional_nights(cls, v: int) -> int:
        return _check_nights(v, "Additional nights")

def _serialize_booking(booking: Booking) -> Dict[str, Any]:
    return booking.model_dump(by_alias=True, mode="json")

def _validation_details(errors: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    details: List[Dict[str, str]] = []
    for err in errors:
        raw_loc = err.get("loc", ())
        kind = err.get("type")
        if raw_loc and raw_loc[0] == "path":
            details.append({"field": "id", "message": "Booking ID must be a positive integer"})
            continue
        loc = [str(part) for part in raw_loc if part != "body"]
        if not loc:
            details.append({"field": "body", "message": "Request body is required"})
            continue
        field = loc[-1]
        label = _FIELD_LABELS.get(field, field)
        if kind == "extra_forbidden":
            message = f"Unexpected field: {field}"
        elif kind == "missing":
            message = f"{label} is required"
        elif kind == "string_type":
            message = f"{label} must be a string"
        elif kind in ("int_type", "int_parsing"):
            message = f"{label} must be an integer"
        elif kind == "value_error" and "error" in err.get("ctx", {}):
            message = str(err["ctx"]["error"])
        else:
            message = err.get("msg", "Invalid value")
        details.append({"field": field, "message": message})
    return details

async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "Validation failed", "details": _validation_details(exc.errors())},
    )

@router.post("")
@router.post("/", include_in_schema=False)
def create_booking(in_: BookingIn, store: BookingStore = Depends(get_booking_store)):
    try:
        booking = booking_service.create_booking(store, in_.to_candidate())
    except (AdmissionRefused, InvalidBookingInput) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _serialize_booking(booking)

@router.post("/{booking_id}/extend")
def extend_booking(
    in_: ExtendIn,
    booking_id: int = Path(..., ge=1, le=MAX_BOOKING_ID),
    store: BookingStore = Depends(get_booking_store),
):
    try:
        booking = booking_service.extend_booking(store, booking_id, in_.additional_nights)
    except BookingNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (AdmissionRefused, InvalidBookingInput) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _serialize_booking(booking)
