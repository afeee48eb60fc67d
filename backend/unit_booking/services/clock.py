from datetime import date, datetime
from zoneinfo import ZoneInfo

from unit_booking.config import settings


def booking_zone(tz_name: str | None = None) -> ZoneInfo:
    return ZoneInfo(tz_name or settings.BOOKING_TIMEZONE)


def today(tz_name: str | None = None) -> date:
    """Current calendar date in the booking timezone (UTC unless configured)."""
    return datetime.now(booking_zone(tz_name)).date()
