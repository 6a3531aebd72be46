"""Restroom (changing station) data models."""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Gender(str, Enum):
    MENS = "mens"
    WOMENS = "womens"
    ALL_GENDER = "all_gender"


class StationLocation(str, Enum):
    SINGLE_RESTROOM = "single_restroom"  # Entire lockable room
    INSIDE_STALL = "inside_stall"  # Enclosed stall in shared restroom
    NEAR_SINKS = "near_sinks"  # Wall-mounted in open area


class VerificationStatus(str, Enum):
    VERIFIED_PRESENT = "verified_present"
    VERIFIED_ABSENT = "verified_absent"  # Never exposed on public reads
    UNVERIFIED = "unverified"


class ModerationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RestroomPhoto(BaseModel):
    """Photo of a changing station stored in S3."""
    id: str
    restroom_id: str
    image_url: str
    is_primary: bool = False
    uploaded_by_user_id: Optional[str] = None
    moderation_status: ModerationStatus = ModerationStatus.APPROVED
    created_at: datetime = Field(default_factory=utc_now)


class Restroom(BaseModel):
    """A single changing station at a venue.

    Older records call the status field ``verification_status``; both names
    are accepted on input.
    """

    id: str
    venue_id: str
    gender: Gender
    station_location: Optional[StationLocation] = None
    restroom_location_text: Optional[str] = None
    status: VerificationStatus = Field(
        default=VerificationStatus.UNVERIFIED,
        validation_alias=AliasChoices("status", "verification_status"),
    )
    verified_by_user_id: Optional[str] = None
    verified_at: Optional[datetime] = None
    moderation_status: ModerationStatus = ModerationStatus.APPROVED

    # Safety and cleanliness issue tracking
    has_safety_concern: bool = False
    safety_concern_notes: Optional[str] = None
    has_cleanliness_issue: bool = False
    cleanliness_issue_notes: Optional[str] = None

    additional_notes: Optional[str] = None  # "ask for key" style tips
    safety_notes: Optional[str] = None
    admin_notes: Optional[str] = None
    photo_url: Optional[str] = None

    times_directions_clicked: int = 0
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    created_by_user_id: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)

    def is_visible(self) -> bool:
        """Whether this station may appear on public-facing reads.

        Verified-absent stations and submissions awaiting moderation stay hidden.
        """
        return (
            self.status != VerificationStatus.VERIFIED_ABSENT
            and self.moderation_status == ModerationStatus.APPROVED
        )


class RestroomWithPhotos(Restroom):
    """Restroom with its photos attached (API response shape)."""
    photos: list[RestroomPhoto] = Field(default_factory=list)
