"""Admin handler for venue and restroom management requests."""
import logging
from typing import Optional

from diaperpal.config import Settings
from diaperpal.dao.redis_venue_dao import RedisVenueDAO
from diaperpal.models import Restroom, RestroomPhoto, Venue, VenueDetail, VenueSummary
from diaperpal.models.requests import (
    AdminHealth,
    AdminStats,
    CreateRestroomRequest,
    CreateVenueRequest,
    RecentVenue,
    UpdateRestroomRequest,
    UpdateVenueRequest,
)
from diaperpal.models.restroom import RestroomWithPhotos
from diaperpal.services import RestroomService, VenueService

logger = logging.getLogger(__name__)

RECENT_VENUES_LIMIT = 5


class AdminHandler:
    """Handler for the password-protected admin API."""

    def __init__(
        self,
        settings: Settings,
        venue_dao: RedisVenueDAO,
        venue_service: VenueService,
        restroom_service: RestroomService,
    ):
        self.settings = settings
        self.venue_dao = venue_dao
        self.venue_service = venue_service
        self.restroom_service = restroom_service

    def health(self) -> AdminHealth:
        """Configuration checks and store connectivity. Never exposes secret values."""
        checks = {
            "admin_password": self.settings.admin_enabled,
            "google_places_key": self.settings.google_places_enabled,
            "photo_storage": self.settings.photo_storage_enabled,
            "database_connection": self.venue_dao.ping(),
        }
        healthy = all(checks.values())
        return AdminHealth(
            status="healthy" if healthy else "misconfigured",
            checks=checks,
            message=(
                "All configuration present"
                if healthy
                else "Some configuration is missing. Check environment variables."
            ),
            missing=[name for name, ok in checks.items() if not ok],
        )

    def stats(self) -> AdminStats:
        """Totals and the most recently added venues."""
        recent = self.venue_dao.list_venues(limit=RECENT_VENUES_LIMIT)
        return AdminStats(
            total_venues=self.venue_dao.count_venues(),
            total_restrooms=self.venue_dao.count_restrooms(),
            total_direction_clicks=self.venue_dao.count_all_direction_clicks(),
            recent_venues=[
                RecentVenue(id=v.id, name=v.name, venue_type=v.venue_type) for v in recent
            ],
        )

    # =========================================================================
    # VENUES
    # =========================================================================

    async def create_venue(self, request: CreateVenueRequest) -> Venue:
        """Raises DuplicateVenueError, PlacesUnavailableError, PlaceLookupError."""
        return await self.venue_service.create_from_place(request.place_id, request.venue_type)

    def list_venues(self) -> list[VenueSummary]:
        return self.venue_service.list_venue_summaries()

    def get_venue(self, venue_id: str) -> Optional[VenueDetail]:
        """Venue with every restroom, whatever its status or moderation state."""
        venue = self.venue_service.get_venue(venue_id)
        if venue is None:
            return None

        restrooms = [
            RestroomWithPhotos(
                **r.model_dump(), photos=self.restroom_service.list_photos(r.id)
            )
            for r in self.restroom_service.list_restrooms(venue_id)
        ]
        return VenueDetail(**venue.model_dump(), restrooms=restrooms)

    def update_venue(self, venue_id: str, request: UpdateVenueRequest) -> Optional[Venue]:
        return self.venue_service.update_venue_type(venue_id, request.venue_type)

    def delete_venue(self, venue_id: str) -> bool:
        return self.venue_service.delete_venue(venue_id)

    async def refresh_venue(self, venue_id: str) -> Optional[Venue]:
        """Raises PlacesUnavailableError, PlaceLookupError."""
        return await self.venue_service.refresh_venue_details(venue_id)

    # =========================================================================
    # RESTROOMS
    # =========================================================================

    def list_restrooms(self, venue_id: str) -> list[Restroom]:
        return self.restroom_service.list_restrooms(venue_id)

    def create_restroom(self, request: CreateRestroomRequest) -> Optional[Restroom]:
        return self.restroom_service.create_restroom(request)

    def update_restroom(
        self, restroom_id: str, request: UpdateRestroomRequest
    ) -> Optional[Restroom]:
        """Raises ValueError on an empty update."""
        return self.restroom_service.update_restroom(restroom_id, request)

    def delete_restroom(self, restroom_id: str) -> bool:
        return self.restroom_service.delete_restroom(restroom_id)

    async def upload_photo(
        self, restroom_id: str, photo_bytes: bytes, content_type: str
    ) -> Optional[RestroomPhoto]:
        """Raises PhotoStorageUnavailableError, ValueError."""
        return await self.restroom_service.upload_photo(restroom_id, photo_bytes, content_type)
