"""Google Places API response models."""
from typing import Optional

from pydantic import BaseModel, Field


class PlaceDetails(BaseModel):
    """Subset of a Google Place Details result used by DiaperPal.

    ``weekday_text`` keeps the provider's pre-formatted lines, e.g.
    ["Monday: 6:00 AM – 8:00 PM", "Tuesday: Closed", ...]. They are parsed
    into ``hours_json`` when a venue is created or refreshed.
    """

    place_id: str
    name: str = ""
    formatted_address: str = ""
    lat: Optional[float] = None
    lng: Optional[float] = None

    weekday_text: list[str] = Field(default_factory=list)
    open_now: Optional[bool] = None

    rating: Optional[float] = None
    user_ratings_total: Optional[int] = None
    price_level: Optional[int] = None
    business_status: Optional[str] = None  # OPERATIONAL, CLOSED_TEMPORARILY, ...
    types: list[str] = Field(default_factory=list)
    website: Optional[str] = None
    formatted_phone_number: Optional[str] = None
    wheelchair_accessible_entrance: Optional[bool] = None

    photo_references: list[str] = Field(default_factory=list)

    def has_location(self) -> bool:
        return self.lat is not None and self.lng is not None

    def is_permanently_closed(self) -> bool:
        return self.business_status == "CLOSED_PERMANENTLY"
