"""Request/response schemas for the HTTP API.

All route bodies are declared here so FastAPI validates them in one place.
"""
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from diaperpal.models.restroom import (
    Gender,
    RestroomPhoto,
    StationLocation,
    VerificationStatus,
)
from diaperpal.models.venue import VenueType


class NearbySearchParams(BaseModel):
    """Query parameters of the nearby venue search."""

    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    radius_km: float = Field(gt=0)
    venue_types: list[VenueType] = Field(default_factory=list)
    genders: list[Gender] = Field(default_factory=list)
    open_now: bool = False

    @field_validator("venue_types", "genders", mode="before")
    @classmethod
    def split_comma_list(cls, v: Any) -> Any:
        """Accept "a,b" query strings as well as lists."""
        if v is None:
            return []
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v


# =============================================================================
# PUBLIC SUBMISSIONS
# =============================================================================


class VoteType(str, Enum):
    UP = "up"
    DOWN = "down"


class VoteRequest(BaseModel):
    venue_id: str = Field(min_length=1)
    vote_type: VoteType


class ReportRequest(BaseModel):
    venue_id: str = Field(min_length=1)
    issue_type: str = Field(min_length=1, max_length=500)


class IssueType(str, Enum):
    SAFETY = "safety"
    CLEANLINESS = "cleanliness"
    NOT_FOUND = "not_found"
    OTHER = "other"


class ReportIssueRequest(BaseModel):
    restroom_id: str = Field(min_length=1)
    issue_type: IssueType
    notes: Optional[str] = Field(default=None, max_length=1000)


class DirectionClickRequest(BaseModel):
    venue_id: str = Field(min_length=1)
    source: Optional[str] = "list"


class StationSubmissionRequest(BaseModel):
    """User-submitted changing station, held for moderation."""

    venue_id: str = Field(min_length=1)
    gender: Gender
    station_status: VerificationStatus
    station_location: Optional[StationLocation] = None
    location_in_venue: Optional[str] = None
    safety_concern: bool = False
    cleanliness_issue: bool = False
    issue_notes: Optional[str] = None
    additional_notes: Optional[str] = None


class Vote(BaseModel):
    id: str
    venue_id: str
    user_id: str
    vote_type: VoteType
    created_at: str


class Report(BaseModel):
    id: str
    venue_id: str
    user_id: str
    issue_type: str
    created_at: str


class DirectionClick(BaseModel):
    id: str
    venue_id: str
    clicked_at: str
    user_agent: Optional[str] = None
    ip_hash: Optional[str] = None
    source: str = "list"


# =============================================================================
# ADMIN
# =============================================================================


class CreateVenueRequest(BaseModel):
    place_id: str = Field(min_length=1)
    venue_type: VenueType


class UpdateVenueRequest(BaseModel):
    venue_type: VenueType


class CreateRestroomRequest(BaseModel):
    venue_id: str = Field(min_length=1)
    gender: Gender
    station_location: StationLocation
    restroom_location_text: Optional[str] = None
    status: VerificationStatus = VerificationStatus.VERIFIED_PRESENT
    safety_notes: Optional[str] = None
    admin_notes: Optional[str] = None


class UpdateRestroomRequest(BaseModel):
    """Partial update; only fields present in the body are applied."""

    gender: Optional[Gender] = None
    station_location: Optional[StationLocation] = None
    restroom_location_text: Optional[str] = None
    status: Optional[VerificationStatus] = None
    safety_notes: Optional[str] = None
    admin_notes: Optional[str] = None
    has_safety_concern: Optional[bool] = None
    has_cleanliness_issue: Optional[bool] = None

    @field_validator("gender", "status", "has_safety_concern", "has_cleanliness_issue")
    @classmethod
    def reject_null(cls, v: Any, info: ValidationInfo) -> Any:
        """These fields may be omitted but never cleared."""
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


# =============================================================================
# RESPONSES
# =============================================================================


class SuccessResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None


class VoteResponse(BaseModel):
    success: bool = True
    vote: Vote


class ReportResponse(BaseModel):
    success: bool = True
    report: Report


class DirectionClickResponse(BaseModel):
    success: bool = True
    click_count: int = 0


class FacilityCreatedResponse(BaseModel):
    success: bool = True
    facility_id: str


class VenueCreatedResponse(BaseModel):
    success: bool = True
    venue_id: str
    name: str
    address: str
    google_data_cached: bool = True


class RestroomCreatedResponse(BaseModel):
    success: bool = True
    restroom_id: str
    gender: Gender
    station_location: Optional[StationLocation] = None
    status: VerificationStatus


class PhotoUploadResponse(BaseModel):
    success: bool = True
    photo: RestroomPhoto


class RecentVenue(BaseModel):
    id: str
    name: str
    venue_type: VenueType


class AdminStats(BaseModel):
    total_venues: int = 0
    total_restrooms: int = 0
    total_direction_clicks: int = 0
    recent_venues: list[RecentVenue] = Field(default_factory=list)


class AdminHealth(BaseModel):
    status: str  # "healthy" | "misconfigured"
    checks: dict[str, bool]
    message: str
    missing: list[str] = Field(default_factory=list)
