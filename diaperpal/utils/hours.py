"""Venue operating hours: parsing, open/closed evaluation and display.

Hours are kept as ``HoursJson`` (day name -> {open, close} in 24h "HH:MM").
Everything here is a pure function of its inputs. Callers supply "now" as a
wall-clock datetime in the venue's local frame; no timezone conversion
happens in this module.
"""
import logging
import re
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional, Union

from diaperpal.models.hours import (
    DAY_NAMES,
    DayHours,
    HoursJson,
    OpenStatus,
    WeeklyHoursEntry,
)

logger = logging.getLogger(__name__)

# "6:00 AM – 8:00 PM" or "6:00 AM - 8:00 PM" (en dash or hyphen)
TIME_RANGE_PATTERN = re.compile(
    r"(\d{1,2}):(\d{2})\s*(AM|PM)\s*[–-]\s*(\d{1,2}):(\d{2})\s*(AM|PM)",
    re.IGNORECASE,
)

# Canonical stored format
HHMM_PATTERN = re.compile(r"^(\d{2}):(\d{2})$")

DayHoursLike = Union[DayHours, Mapping[str, Any]]


def _to_24h(hour: int, period: str) -> int:
    """Convert a 12-hour clock hour with AM/PM marker to 0-23."""
    period = period.upper()
    if period == "AM":
        return 0 if hour == 12 else hour
    return hour if hour == 12 else hour + 12


def parse_weekday_text(lines: Optional[Iterable[str]]) -> Optional[HoursJson]:
    """Parse provider weekday text lines into HoursJson.

    Format per line: "Monday: 6:00 AM – 8:00 PM" or "Monday: Closed".
    Lines with an unknown day, a "Closed" marker or an unrecognized time
    range add nothing. A day listed twice keeps its last parse.

    Args:
        lines: Weekday text lines, one per day, in any order

    Returns:
        HoursJson with the days that parsed, or None when no day parsed
    """
    hours: dict[str, DayHours] = {}

    for text in lines or []:
        if not isinstance(text, str):
            continue

        day_part, sep, remainder = text.partition(":")
        if not sep:
            continue

        day_name = day_part.strip().lower()
        time_str = remainder.strip()

        if time_str.lower() == "closed":
            continue

        match = TIME_RANGE_PATTERN.search(time_str)
        if match is None:
            logger.debug(f"[HoursParser] Unrecognized hours line dropped: {text!r}")
            continue

        if day_name not in DAY_NAMES:
            logger.debug(f"[HoursParser] Unknown day name dropped: {day_name!r}")
            continue

        open_hour = _to_24h(int(match.group(1)), match.group(3))
        close_hour = _to_24h(int(match.group(4)), match.group(6))

        hours[day_name] = DayHours(
            open=f"{open_hour:02d}:{match.group(2)}",
            close=f"{close_hour:02d}:{match.group(5)}",
        )

    return hours or None


def parse_time_to_minutes(value: Any) -> Optional[int]:
    """Parse "HH:MM" into minutes since midnight, None if malformed."""
    if not isinstance(value, str):
        return None
    match = HHMM_PATTERN.match(value.strip())
    if match is None:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return hour * 60 + minute


def _coerce_day_hours(entry: Any) -> Optional[DayHours]:
    if isinstance(entry, DayHours):
        return entry
    if isinstance(entry, Mapping):
        open_value = entry.get("open")
        close_value = entry.get("close")
        if isinstance(open_value, str) and isinstance(close_value, str):
            return DayHours(open=open_value, close=close_value)
    return None


def day_name_for(now: datetime) -> str:
    """Lowercase weekday name for a datetime (weekday() is Monday=0)."""
    return DAY_NAMES[now.weekday()]


def get_today_hours(
    hours: Optional[Mapping[str, DayHoursLike]], now: datetime
) -> Optional[DayHours]:
    """Today's DayHours entry, or None when absent."""
    if not hours:
        return None
    try:
        entry = hours.get(day_name_for(now))
    except AttributeError:
        return None
    return _coerce_day_hours(entry)


def is_within_window(current_minutes: int, open_minutes: int, close_minutes: int) -> bool:
    """Check a time of day against a [open, close) window.

    A close at or before open is an overnight window that wraps midnight.
    """
    if close_minutes <= open_minutes:
        return current_minutes >= open_minutes or current_minutes < close_minutes
    return open_minutes <= current_minutes < close_minutes


def evaluate_open_status(
    hours: Optional[Mapping[str, DayHoursLike]], now: datetime
) -> OpenStatus:
    """Decide whether a venue is open at ``now`` and report today's hours.

    Only today's entry is consulted. A window that began the previous day
    and runs past midnight (Monday 22:00 - 03:00 at 01:00 Tuesday) is not
    seen, so the venue reports closed until Tuesday's own window opens.

    Args:
        hours: HoursJson mapping, or None when the venue has no hours data
        now: Reference wall-clock time in the venue's local frame

    Returns:
        OpenStatus; never raises on missing or malformed data
    """
    hours_today = get_today_hours(hours, now)
    if hours_today is None:
        return OpenStatus(is_open=False, hours_today=None)

    open_minutes = parse_time_to_minutes(hours_today.open)
    close_minutes = parse_time_to_minutes(hours_today.close)
    if open_minutes is None or close_minutes is None:
        logger.warning(
            f"[HoursEvaluator] Malformed hours entry {hours_today.open!r}-{hours_today.close!r}, "
            "treating as closed"
        )
        return OpenStatus(is_open=False, hours_today=hours_today)

    current_minutes = now.hour * 60 + now.minute
    return OpenStatus(
        is_open=is_within_window(current_minutes, open_minutes, close_minutes),
        hours_today=hours_today,
    )


def format_time(value: str) -> str:
    """Format "HH:MM" (24h) as "h:MM AM/PM". Malformed input is returned as-is."""
    total = parse_time_to_minutes(value)
    if total is None:
        return value
    hour, minute = divmod(total, 60)
    period = "PM" if hour >= 12 else "AM"
    display_hour = hour % 12 or 12
    return f"{display_hour}:{minute:02d} {period}"


def format_weekly_hours(
    hours: Optional[Mapping[str, DayHoursLike]], now: datetime
) -> list[WeeklyHoursEntry]:
    """Seven display rows, Monday first, with today's row flagged."""
    today = day_name_for(now)
    rows: list[WeeklyHoursEntry] = []

    for day in DAY_NAMES:
        entry = None
        if hours:
            try:
                entry = _coerce_day_hours(hours.get(day))
            except AttributeError:
                entry = None

        if entry is None:
            display = "Closed"
        else:
            display = f"{format_time(entry.open)} - {format_time(entry.close)}"

        rows.append(
            WeeklyHoursEntry(day=day.capitalize(), hours=display, is_today=(day == today))
        )

    return rows
