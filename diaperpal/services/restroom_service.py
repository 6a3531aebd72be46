"""Restroom (changing station) management, user issue reports and photos."""
import logging
import uuid
from datetime import date
from typing import Optional

from diaperpal.api.s3_client import S3Client
from diaperpal.dao.redis_venue_dao import RedisVenueDAO
from diaperpal.models import (
    ModerationStatus,
    Restroom,
    RestroomPhoto,
    VerificationStatus,
)
from diaperpal.models.requests import (
    CreateRestroomRequest,
    IssueType,
    ReportIssueRequest,
    StationSubmissionRequest,
    UpdateRestroomRequest,
)
from diaperpal.models.restroom import utc_now

logger = logging.getLogger(__name__)

MAX_NOTES_LENGTH = 2000


class PhotoStorageUnavailableError(Exception):
    """S3 photo storage is not configured."""


def append_note(existing: Optional[str], note: str, max_length: int = MAX_NOTES_LENGTH) -> str:
    """Append a line to a notes log, keeping only the most recent characters."""
    if not existing:
        return note
    combined = f"{existing}\n{note}"
    if len(combined) > max_length:
        return combined[-max_length:]
    return combined


class RestroomService:
    """Service for restroom CRUD, station submissions and issue reports."""

    def __init__(
        self,
        venue_dao: RedisVenueDAO,
        s3_client: Optional[S3Client] = None,
        photo_max_bytes: int = 5 * 1024 * 1024,
    ):
        """Initialize RestroomService.

        Args:
            venue_dao: Redis DAO for persistence
            s3_client: S3 client for photo uploads, None when storage is not configured
            photo_max_bytes: Largest accepted photo upload
        """
        self.venue_dao = venue_dao
        self.s3_client = s3_client
        self.photo_max_bytes = photo_max_bytes

    def list_restrooms(self, venue_id: str) -> list[Restroom]:
        """All restrooms of a venue, any status (admin view)."""
        return self.venue_dao.list_restrooms(venue_id)

    def get_restroom(self, restroom_id: str) -> Optional[Restroom]:
        return self.venue_dao.get_restroom(restroom_id)

    def create_restroom(self, request: CreateRestroomRequest) -> Optional[Restroom]:
        """Create a restroom for an existing venue.

        Returns:
            The stored restroom, or None if the venue doesn't exist
        """
        if self.venue_dao.get_venue(request.venue_id) is None:
            logger.warning(f"[RestroomService] Venue {request.venue_id} not found")
            return None

        now = utc_now()
        restroom = Restroom(
            id=str(uuid.uuid4()),
            venue_id=request.venue_id,
            gender=request.gender,
            station_location=request.station_location,
            restroom_location_text=request.restroom_location_text,
            status=request.status,
            verified_at=now if request.status == VerificationStatus.VERIFIED_PRESENT else None,
            safety_notes=request.safety_notes,
            admin_notes=request.admin_notes,
            created_at=now,
            updated_at=now,
        )
        self.venue_dao.upsert_restroom(restroom)
        logger.info(
            f"[RestroomService] Created restroom {restroom.id} for venue {restroom.venue_id}"
        )
        return restroom

    def update_restroom(
        self, restroom_id: str, request: UpdateRestroomRequest
    ) -> Optional[Restroom]:
        """Apply a partial update.

        Returns:
            Updated restroom, or None if it doesn't exist

        Raises:
            ValueError: if the update has no fields or leaves the record invalid
        """
        changes = request.model_dump(exclude_unset=True)
        if not changes:
            raise ValueError("No fields to update")

        restroom = self.venue_dao.get_restroom(restroom_id)
        if restroom is None:
            return None

        now = utc_now()
        updated = Restroom.model_validate(
            {**restroom.model_dump(), **changes, "updated_at": now}
        )
        if (
            "status" in changes
            and changes["status"] == VerificationStatus.VERIFIED_PRESENT
        ):
            updated.verified_at = now

        self.venue_dao.upsert_restroom(updated)
        logger.info(f"[RestroomService] Updated restroom {restroom_id}: {sorted(changes)}")
        return updated

    def delete_restroom(self, restroom_id: str) -> bool:
        return self.venue_dao.delete_restroom(restroom_id)

    def submit_station(
        self, request: StationSubmissionRequest, user_id: Optional[str] = None
    ) -> Optional[Restroom]:
        """Store a user-submitted station, held for moderation.

        Returns:
            The pending restroom, or None if the venue doesn't exist
        """
        if self.venue_dao.get_venue(request.venue_id) is None:
            logger.warning(f"[RestroomService] Submission for unknown venue {request.venue_id}")
            return None

        now = utc_now()
        restroom = Restroom(
            id=str(uuid.uuid4()),
            venue_id=request.venue_id,
            gender=request.gender,
            station_location=request.station_location,
            restroom_location_text=request.location_in_venue,
            status=request.station_status,
            verified_at=(
                now if request.station_status == VerificationStatus.VERIFIED_PRESENT else None
            ),
            verified_by_user_id=user_id,
            moderation_status=ModerationStatus.PENDING,
            has_safety_concern=request.safety_concern,
            safety_concern_notes=request.issue_notes if request.safety_concern else None,
            has_cleanliness_issue=request.cleanliness_issue,
            cleanliness_issue_notes=request.issue_notes if request.cleanliness_issue else None,
            additional_notes=request.additional_notes,
            created_by_user_id=user_id,
            created_at=now,
            updated_at=now,
        )
        self.venue_dao.upsert_restroom(restroom)
        logger.info(
            f"[RestroomService] Station submission {restroom.id} for venue "
            f"{restroom.venue_id} pending moderation"
        )
        return restroom

    def report_issue(
        self, request: ReportIssueRequest, today: Optional[date] = None
    ) -> Optional[Restroom]:
        """Flag a restroom and append a dated note to the matching log.

        Returns:
            Updated restroom, or None if it doesn't exist
        """
        restroom = self.venue_dao.get_restroom(request.restroom_id)
        if restroom is None:
            return None

        today = today or utc_now().date()
        prefix = f"[{today.isoformat()}] "
        notes = request.notes or ""

        if request.issue_type == IssueType.CLEANLINESS:
            restroom.has_cleanliness_issue = True
            restroom.cleanliness_issue_notes = append_note(
                restroom.cleanliness_issue_notes,
                prefix + (notes or request.issue_type.value),
            )
        else:
            if request.issue_type == IssueType.SAFETY:
                note = prefix + (notes or request.issue_type.value)
            elif request.issue_type == IssueType.NOT_FOUND:
                note = f"{prefix}USER REPORT: Station not found / may have been removed. {notes}"
            else:
                note = f"{prefix}OTHER: {notes or 'No details provided'}"
            restroom.has_safety_concern = True
            restroom.safety_concern_notes = append_note(restroom.safety_concern_notes, note)

        restroom.updated_at = utc_now()
        self.venue_dao.upsert_restroom(restroom)
        logger.info(
            f"[RestroomService] {request.issue_type.value} issue reported for "
            f"restroom {restroom.id}"
        )
        return restroom

    def list_photos(self, restroom_id: str) -> list[RestroomPhoto]:
        return self.venue_dao.list_photos(restroom_id)

    async def upload_photo(
        self,
        restroom_id: str,
        photo_bytes: bytes,
        content_type: str,
        user_id: Optional[str] = None,
    ) -> Optional[RestroomPhoto]:
        """Upload a station photo to S3 and attach it to the restroom.

        The first photo of a restroom becomes its primary photo.

        Returns:
            The stored photo, or None if the restroom doesn't exist

        Raises:
            PhotoStorageUnavailableError: if S3 is not configured
            ValueError: if the file type or size is not accepted
        """
        if self.s3_client is None:
            raise PhotoStorageUnavailableError("Photo storage not configured")

        if not S3Client.is_supported_content_type(content_type):
            raise ValueError("Invalid file type. Allowed: JPEG, PNG, WebP")
        if len(photo_bytes) > self.photo_max_bytes:
            raise ValueError(
                f"File too large. Maximum size is {self.photo_max_bytes // (1024 * 1024)}MB"
            )

        restroom = self.venue_dao.get_restroom(restroom_id)
        if restroom is None:
            return None

        photo_id, _, url = await self.s3_client.upload_photo_bytes(
            restroom_id, photo_bytes, content_type
        )
        is_primary = not self.venue_dao.list_photos(restroom_id)

        photo = RestroomPhoto(
            id=photo_id,
            restroom_id=restroom_id,
            image_url=url,
            is_primary=is_primary,
            uploaded_by_user_id=user_id,
        )
        self.venue_dao.add_photo(photo)

        if is_primary:
            restroom.photo_url = url
            restroom.updated_at = utc_now()
            self.venue_dao.upsert_restroom(restroom)

        logger.info(f"[RestroomService] Uploaded photo {photo_id} for restroom {restroom_id}")
        return photo
