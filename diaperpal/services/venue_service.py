"""Venue management: creation from Google Places, edits and details refresh."""
import asyncio
import logging
import uuid
from datetime import datetime, timedelta
from typing import Optional

from diaperpal.api.google_places_client import GooglePlacesAPIClient
from diaperpal.dao.redis_venue_dao import RedisVenueDAO
from diaperpal.metrics import VENUE_DETAILS_REFRESH_RESULTS, VENUES_TOTAL
from diaperpal.models import PlaceDetails, Venue, VenueSummary, VenueType
from diaperpal.models.restroom import utc_now
from diaperpal.utils.hours import parse_weekday_text

logger = logging.getLogger(__name__)

# Google Places quota: keep refresh requests spaced out
REQUESTS_PER_SECOND = 5
REQUEST_DELAY = 1.0 / REQUESTS_PER_SECOND


class PlacesUnavailableError(Exception):
    """No Google Places API key is configured."""


class PlaceLookupError(Exception):
    """Google Places returned no usable details for a place id."""


class DuplicateVenueError(Exception):
    """A venue already exists for the given place id."""

    def __init__(self, place_id: str, venue_id: str):
        super().__init__(f"Venue with place_id {place_id} already exists ({venue_id})")
        self.place_id = place_id
        self.venue_id = venue_id


class VenueService:
    """Service for creating, editing and refreshing venues."""

    def __init__(
        self,
        venue_dao: RedisVenueDAO,
        google_places_client: Optional[GooglePlacesAPIClient] = None,
        venue_photos_limit: int = 5,
        details_max_age_days: int = 30,
    ):
        """Initialize venue service.

        Args:
            venue_dao: Redis DAO for venue persistence
            google_places_client: Google Places client, None when no API key is set
            venue_photos_limit: Number of photo URLs cached per venue
            details_max_age_days: Age after which provider data is re-fetched
        """
        self.venue_dao = venue_dao
        self.google_places_client = google_places_client
        self.venue_photos_limit = venue_photos_limit
        self.details_max_age_days = details_max_age_days

    async def fetch_place_details(self, place_id: str) -> PlaceDetails:
        """Fetch details for a place id.

        Raises:
            PlacesUnavailableError: if no Google Places client is configured
            PlaceLookupError: if the provider call fails or has no location
        """
        if self.google_places_client is None:
            raise PlacesUnavailableError("Google Places API key not configured")

        details = await self.google_places_client.get_place_details(place_id)
        if details is None:
            raise PlaceLookupError(f"Google Places lookup failed for {place_id}")
        return details

    def _apply_place_details(self, venue: Venue, details: PlaceDetails) -> None:
        venue.name = details.name
        venue.address = details.formatted_address
        if details.has_location():
            venue.lat = details.lat
            venue.lng = details.lng
        venue.hours_json = parse_weekday_text(details.weekday_text)
        venue.rating = details.rating
        venue.review_count = details.user_ratings_total
        venue.photo_urls = self.google_places_client.build_photo_urls(
            details, self.venue_photos_limit
        )
        now = utc_now()
        venue.google_data_refreshed_at = now
        venue.updated_at = now

    async def create_from_place(
        self,
        place_id: str,
        venue_type: VenueType,
        submitted_by: Optional[str] = None,
    ) -> Venue:
        """Create a venue from Google Place details.

        Args:
            place_id: Google Place ID
            venue_type: Category chosen by the admin
            submitted_by: Identifier of the submitting admin, if known

        Returns:
            The stored Venue

        Raises:
            DuplicateVenueError: if a venue already exists for the place id
            PlacesUnavailableError: if no Google Places client is configured
            PlaceLookupError: if the place could not be fetched or has no location
        """
        if self.google_places_client is None:
            raise PlacesUnavailableError("Google Places API key not configured")

        venue_id = str(uuid.uuid4())
        if not self.venue_dao.reserve_place_id(place_id, venue_id):
            existing_id = self.venue_dao.get_venue_id_by_place_id(place_id) or ""
            raise DuplicateVenueError(place_id, existing_id)

        try:
            details = await self.fetch_place_details(place_id)
            if not details.has_location():
                raise PlaceLookupError(f"Place {place_id} has no location")

            venue = Venue(
                id=venue_id,
                place_id=place_id,
                lat=details.lat,
                lng=details.lng,
                venue_type=venue_type,
                submitted_by=submitted_by,
            )
            self._apply_place_details(venue, details)

            self.venue_dao.upsert_venue(venue)
        except Exception:
            self.venue_dao.release_place_id(place_id)
            raise
        logger.info(f"[VenueService] Created venue {venue.id} ({venue.name}) from {place_id}")
        return venue

    def get_venue(self, venue_id: str) -> Optional[Venue]:
        return self.venue_dao.get_venue(venue_id)

    def update_venue_type(self, venue_id: str, venue_type: VenueType) -> Optional[Venue]:
        """Change a venue's category, the only admin-editable venue field.

        Returns:
            Updated venue, or None if it doesn't exist
        """
        venue = self.venue_dao.get_venue(venue_id)
        if venue is None:
            return None

        venue.venue_type = venue_type
        venue.updated_at = utc_now()
        self.venue_dao.upsert_venue(venue)
        logger.info(f"[VenueService] Venue {venue_id} type set to {venue_type.value}")
        return venue

    def delete_venue(self, venue_id: str) -> bool:
        return self.venue_dao.delete_venue(venue_id)

    def list_venue_summaries(self) -> list[VenueSummary]:
        """Admin venue list with restroom counts, newest first."""
        return [
            VenueSummary(
                id=venue.id,
                name=venue.name,
                address=venue.address,
                venue_type=venue.venue_type,
                restroom_count=self.venue_dao.count_venue_restrooms(venue.id),
            )
            for venue in self.venue_dao.list_venues()
        ]

    def is_stale(self, venue: Venue, now: Optional[datetime] = None) -> bool:
        """Whether provider data is missing or older than the max age."""
        if venue.google_data_refreshed_at is None:
            return True
        now = now or utc_now()
        return now - venue.google_data_refreshed_at > timedelta(days=self.details_max_age_days)

    async def refresh_venue_details(self, venue_id: str) -> Optional[Venue]:
        """Re-fetch provider data for one venue and re-parse its hours.

        Returns:
            Refreshed venue, or None if the venue doesn't exist

        Raises:
            PlacesUnavailableError: if no Google Places client is configured
            PlaceLookupError: if the venue has no place id or the fetch fails
        """
        venue = self.venue_dao.get_venue(venue_id)
        if venue is None:
            return None

        if not venue.place_id:
            VENUE_DETAILS_REFRESH_RESULTS.labels(result="skipped_no_place_id").inc()
            raise PlaceLookupError(f"Venue {venue_id} has no place id")

        try:
            details = await self.fetch_place_details(venue.place_id)
        except PlaceLookupError:
            VENUE_DETAILS_REFRESH_RESULTS.labels(result="error").inc()
            raise

        if details.is_permanently_closed():
            logger.warning(
                f"[VenueService] Venue {venue_id} is PERMANENTLY CLOSED according to Google"
            )

        self._apply_place_details(venue, details)
        self.venue_dao.upsert_venue(venue)
        VENUE_DETAILS_REFRESH_RESULTS.labels(result="refreshed").inc()
        logger.info(f"[VenueService] Refreshed details for venue {venue_id}")
        return venue

    async def refresh_stale_venues(self) -> int:
        """Refresh every venue whose provider data is missing or too old.

        Returns:
            Number of venues refreshed
        """
        if self.google_places_client is None:
            logger.warning("[VenueService] Google Places not configured, skipping refresh")
            return 0

        venues = self.venue_dao.list_venues()
        VENUES_TOTAL.set(len(venues))

        now = utc_now()
        stale = [v for v in venues if self.is_stale(v, now)]
        VENUE_DETAILS_REFRESH_RESULTS.labels(result="skipped_fresh").inc(len(venues) - len(stale))

        logger.info(
            f"[VenueService] Refreshing {len(stale)} of {len(venues)} venues "
            f"older than {self.details_max_age_days} days"
        )

        refreshed = 0
        for venue in stale:
            try:
                if await self.refresh_venue_details(venue.id) is not None:
                    refreshed += 1
            except PlaceLookupError as e:
                logger.warning(f"[VenueService] Could not refresh venue {venue.id}: {e}")
            await asyncio.sleep(REQUEST_DELAY)

        logger.info(f"[VenueService] Venue details refresh done: {refreshed}/{len(stale)}")
        return refreshed
