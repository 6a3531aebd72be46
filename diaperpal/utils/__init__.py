"""Pure helpers shared by handlers and services."""
from diaperpal.utils.distance import format_distance, meters_to_miles
from diaperpal.utils.hours import (
    evaluate_open_status,
    format_time,
    format_weekly_hours,
    get_today_hours,
    parse_weekday_text,
)

__all__ = [
    "format_distance",
    "meters_to_miles",
    "evaluate_open_status",
    "format_time",
    "format_weekly_hours",
    "get_today_hours",
    "parse_weekday_text",
]
