"""Venue data models using Pydantic."""
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from diaperpal.models.hours import DayHours, HoursJson, SpecialHours, WeeklyHoursEntry
from diaperpal.models.restroom import RestroomWithPhotos, utc_now


class VenueType(str, Enum):
    FOOD_DRINK = "food_drink"
    PARKS_OUTDOORS = "parks_outdoors"
    INDOOR_ACTIVITIES = "indoor_activities"
    ERRANDS = "errands"


class Venue(BaseModel):
    """Venue with location, provider metadata and weekly hours."""

    id: str
    place_id: Optional[str] = None  # Google Place ID
    name: str = ""
    address: str = ""
    lat: float
    lng: float
    venue_type: VenueType

    # Parsed from provider weekday text; None means no hours data
    hours_json: Optional[HoursJson] = None
    special_hours: Optional[list[SpecialHours]] = None

    rating: Optional[float] = None
    review_count: Optional[int] = None
    photo_urls: list[str] = Field(default_factory=list)
    family_amenities: dict[str, Any] = Field(default_factory=dict)

    submitted_by: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    google_data_refreshed_at: Optional[datetime] = None

    def __str__(self) -> str:
        return (
            f"Venue(name={self.name}, address={self.address}, "
            f"lat={self.lat}, lng={self.lng})"
        )


class NearbyVenue(BaseModel):
    """Venue row returned by the nearby search."""

    id: str
    name: str
    address: str
    lat: float
    lng: float
    venue_type: VenueType
    distance: float  # miles
    distance_display: str
    is_open: bool
    hours_today: Optional[DayHours] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None
    restrooms: list[RestroomWithPhotos] = Field(default_factory=list)


class VenueDetail(Venue):
    """Full venue payload for the detail page."""

    restrooms: list[RestroomWithPhotos] = Field(default_factory=list)
    is_open: bool = False
    hours_today: Optional[DayHours] = None
    weekly_hours: list[WeeklyHoursEntry] = Field(default_factory=list)


class VenueSummary(BaseModel):
    """Admin list row."""
    id: str
    name: str
    address: str
    venue_type: VenueType
    restroom_count: int = 0
