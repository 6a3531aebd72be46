"""Data models package for diaperpal."""
from diaperpal.models.hours import (
    DAY_NAMES,
    DayHours,
    DayName,
    HoursJson,
    OpenStatus,
    SpecialHours,
    WeeklyHoursEntry,
)
from diaperpal.models.restroom import (
    Gender,
    ModerationStatus,
    Restroom,
    RestroomPhoto,
    RestroomWithPhotos,
    StationLocation,
    VerificationStatus,
)
from diaperpal.models.venue import (
    NearbyVenue,
    Venue,
    VenueDetail,
    VenueSummary,
    VenueType,
)
from diaperpal.models.places import PlaceDetails
from diaperpal.models.fetch_result import FetchResult

__all__ = [
    # Hours models
    "DAY_NAMES",
    "DayHours",
    "DayName",
    "HoursJson",
    "OpenStatus",
    "SpecialHours",
    "WeeklyHoursEntry",
    # Restroom models
    "Gender",
    "ModerationStatus",
    "Restroom",
    "RestroomPhoto",
    "RestroomWithPhotos",
    "StationLocation",
    "VerificationStatus",
    # Venue models
    "NearbyVenue",
    "Venue",
    "VenueDetail",
    "VenueSummary",
    "VenueType",
    # Provider models
    "PlaceDetails",
    "FetchResult",
]
