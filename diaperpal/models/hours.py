"""Weekly operating hours models for venues."""
from typing import Literal, Optional

from pydantic import BaseModel

DayName = Literal[
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
]

# Monday first, matches datetime.weekday()
DAY_NAMES: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


class DayHours(BaseModel):
    """Open/close pair for a single day.

    Both values are 24-hour "HH:MM" strings. A close time at or before the
    open time means the venue stays open past midnight (18:00 - 02:00).
    """
    open: str
    close: str


# Missing day = closed that day. None for the whole mapping = no hours data.
HoursJson = dict[DayName, DayHours]


class SpecialHours(BaseModel):
    """Holiday or one-off hours override (stored, displayed, not evaluated)."""
    date: str  # "2025-12-25"
    closed: Optional[bool] = None
    open: Optional[str] = None
    close: Optional[str] = None


class OpenStatus(BaseModel):
    """Derived open/closed state for a venue, computed per request."""
    is_open: bool = False
    hours_today: Optional[DayHours] = None


class WeeklyHoursEntry(BaseModel):
    """One display row of the weekly hours table."""
    day: str  # "Monday"
    hours: str  # "9:00 AM - 5:00 PM" or "Closed"
    is_today: bool = False
