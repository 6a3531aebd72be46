"""Redis-based Data Access Object for venues, restrooms and user feedback."""
import logging
from typing import Optional

import redis
from pydantic import ValidationError

from diaperpal.db.geo_redis_client import GeoRedisClient
from diaperpal.models import Restroom, RestroomPhoto, Venue
from diaperpal.models.requests import DirectionClick, Report, Vote

logger = logging.getLogger(__name__)

# Key formats. Bump the version suffix when a stored shape changes incompatibly.
VENUES_GEO_KEY_V1 = "venues_geo_v1"
VENUE_KEY_FORMAT_V1 = "venue_v1:{}"
VENUE_PLACE_INDEX_KEY_FORMAT_V1 = "venue_place_v1:{}"
VENUES_CREATED_KEY_V1 = "venues_created_v1"

RESTROOM_KEY_FORMAT_V1 = "restroom_v1:{}"
RESTROOMS_ALL_KEY_V1 = "restrooms_all_v1"
VENUE_RESTROOMS_KEY_FORMAT_V1 = "venue_restrooms_v1:{}"
RESTROOM_PHOTOS_KEY_FORMAT_V1 = "restroom_photos_v1:{}"

VOTES_KEY_FORMAT_V1 = "votes_v1:{}"
REPORTS_KEY_FORMAT_V1 = "reports_v1:{}"
DIRECTION_CLICKS_KEY_FORMAT_V1 = "direction_clicks_v1:{}"
DIRECTION_CLICKS_TOTAL_KEY_V1 = "direction_clicks_total_v1"


class RedisVenueDAO:
    """Data Access Object for venue, restroom and feedback records in Redis."""

    def __init__(self, client: GeoRedisClient):
        """Initialize RedisVenueDAO.

        Args:
            client: GeoRedisClient instance
        """
        self.client = client

    # =========================================================================
    # VENUES
    # =========================================================================

    def upsert_venue(self, venue: Venue) -> None:
        """Store venue as a geolocation with JSON data and index it.

        Args:
            venue: Venue object to store
        """
        venue_key = VENUE_KEY_FORMAT_V1.format(venue.id)
        self.client.add_location_with_json(
            geo_key=VENUES_GEO_KEY_V1,
            member_key=venue_key,
            lat=venue.lat,
            lon=venue.lng,
            data=venue,
        )
        if venue.place_id:
            self.client.set(VENUE_PLACE_INDEX_KEY_FORMAT_V1.format(venue.place_id), venue.id)
        self.client.zadd(VENUES_CREATED_KEY_V1, {venue.id: venue.created_at.timestamp()})

    def get_venue(self, venue_id: str) -> Optional[Venue]:
        """Retrieve a venue by its ID.

        Args:
            venue_id: Venue identifier

        Returns:
            Venue object or None if not found

        Raises:
            redis.RedisError: if the store cannot be reached
        """
        json_str = self.client.get(VENUE_KEY_FORMAT_V1.format(venue_id))
        if json_str is None:
            return None
        try:
            return Venue.model_validate_json(json_str)
        except ValidationError as e:
            logger.error(f"[RedisVenueDAO] Failed to get venue {venue_id}: {e}")
            return None

    def get_venue_id_by_place_id(self, place_id: str) -> Optional[str]:
        """Look up the venue created from a Google Place ID, if any."""
        return self.client.get(VENUE_PLACE_INDEX_KEY_FORMAT_V1.format(place_id))

    def reserve_place_id(self, place_id: str, venue_id: str) -> bool:
        """Claim a Google Place ID for a venue being created.

        Returns:
            True if claimed, False if another venue already holds the place id
        """
        return self.client.set(
            VENUE_PLACE_INDEX_KEY_FORMAT_V1.format(place_id), venue_id, nx=True
        )

    def release_place_id(self, place_id: str) -> None:
        self.client.del_(VENUE_PLACE_INDEX_KEY_FORMAT_V1.format(place_id))

    def list_venues(self, limit: Optional[int] = None) -> list[Venue]:
        """List venues newest first.

        Args:
            limit: Maximum number of venues, None for all

        Returns:
            List of Venue objects ordered by created_at descending
        """
        end = -1 if limit is None else limit - 1
        venue_ids = self.client.zrevrange(VENUES_CREATED_KEY_V1, 0, end)
        if not venue_ids:
            return []

        payloads = self.client.mget([VENUE_KEY_FORMAT_V1.format(v) for v in venue_ids])

        venues = []
        for venue_id, json_str in zip(venue_ids, payloads):
            if json_str is None:
                logger.warning(f"[RedisVenueDAO] Venue {venue_id} indexed but missing")
                continue
            try:
                venues.append(Venue.model_validate_json(json_str))
            except ValidationError as e:
                logger.error(f"[RedisVenueDAO] Skipping malformed venue {venue_id}: {e}")
        return venues

    def count_venues(self) -> int:
        return self.client.zcard(VENUES_CREATED_KEY_V1)

    def find_nearby_venues(
        self, lat: float, lon: float, radius_km: float
    ) -> list[tuple[Venue, float]]:
        """Retrieve venues within a radius, nearest first.

        Store errors propagate to the caller.

        Args:
            lat: Center latitude
            lon: Center longitude
            radius_km: Radius in kilometers

        Returns:
            List of (Venue, distance_in_meters) sorted by distance ascending
        """
        results = self.client.get_locations_within_radius_with_distance(
            VENUES_GEO_KEY_V1, lat, lon, radius_km
        )

        venues = []
        for json_str, distance in results:
            try:
                venues.append((Venue.model_validate_json(json_str), distance))
            except ValidationError as e:
                logger.error(f"[RedisVenueDAO] Skipping malformed venue in geo search: {e}")

        logger.debug(
            f"[RedisVenueDAO] Found {len(venues)} venues within {radius_km}km of ({lat}, {lon})"
        )
        return venues

    def delete_venue(self, venue_id: str) -> bool:
        """Delete a venue and all its associated data from Redis.

        This removes:
        - The venue from the geo index and the creation index
        - The venue JSON data and its place id index entry
        - Every restroom of the venue, with their photos
        - Votes, reports and direction clicks recorded for the venue

        Args:
            venue_id: Venue identifier

        Returns:
            True if venue was deleted, False if not found
        """
        venue = self.get_venue(venue_id)
        if venue is None:
            logger.warning(f"[RedisVenueDAO] Venue {venue_id} not found, nothing to delete")
            return False

        venue_key = VENUE_KEY_FORMAT_V1.format(venue_id)

        for restroom_id in self.client.smembers(VENUE_RESTROOMS_KEY_FORMAT_V1.format(venue_id)):
            self.delete_restroom(restroom_id)

        self.client.zrem(VENUES_GEO_KEY_V1, venue_key)
        self.client.zrem(VENUES_CREATED_KEY_V1, venue_id)

        keys = [
            venue_key,
            VENUE_RESTROOMS_KEY_FORMAT_V1.format(venue_id),
            VOTES_KEY_FORMAT_V1.format(venue_id),
            REPORTS_KEY_FORMAT_V1.format(venue_id),
            DIRECTION_CLICKS_KEY_FORMAT_V1.format(venue_id),
        ]
        if venue.place_id:
            keys.append(VENUE_PLACE_INDEX_KEY_FORMAT_V1.format(venue.place_id))
        self.client.del_(*keys)

        logger.info(f"[RedisVenueDAO] Deleted venue {venue_id} and all associated data")
        return True

    # =========================================================================
    # RESTROOMS
    # =========================================================================

    def upsert_restroom(self, restroom: Restroom) -> None:
        """Store a restroom and attach it to its venue."""
        self.client.set(
            RESTROOM_KEY_FORMAT_V1.format(restroom.id),
            restroom.model_dump_json(),
        )
        self.client.sadd(VENUE_RESTROOMS_KEY_FORMAT_V1.format(restroom.venue_id), restroom.id)
        self.client.sadd(RESTROOMS_ALL_KEY_V1, restroom.id)

    def get_restroom(self, restroom_id: str) -> Optional[Restroom]:
        """Retrieve a restroom by its ID, None if missing or unreadable.

        Store errors propagate to the caller.
        """
        json_str = self.client.get(RESTROOM_KEY_FORMAT_V1.format(restroom_id))
        if json_str is None:
            return None
        try:
            return Restroom.model_validate_json(json_str)
        except ValidationError as e:
            logger.error(f"[RedisVenueDAO] Failed to get restroom {restroom_id}: {e}")
            return None

    def list_restrooms(self, venue_id: str) -> list[Restroom]:
        """List every restroom of a venue regardless of status, oldest first.

        Store errors and malformed records propagate to the caller.
        """
        restroom_ids = self.client.smembers(VENUE_RESTROOMS_KEY_FORMAT_V1.format(venue_id))
        if not restroom_ids:
            return []

        keys = [RESTROOM_KEY_FORMAT_V1.format(r) for r in restroom_ids]
        restrooms = [
            Restroom.model_validate_json(json_str)
            for json_str in self.client.mget(keys)
            if json_str is not None
        ]
        restrooms.sort(key=lambda r: r.created_at)
        return restrooms

    def list_visible_restrooms(self, venue_id: str) -> list[Restroom]:
        """List restrooms that may be shown publicly.

        Excludes verified-absent stations and unmoderated submissions.
        """
        return [r for r in self.list_restrooms(venue_id) if r.is_visible()]

    def count_restrooms(self) -> int:
        return self.client.scard(RESTROOMS_ALL_KEY_V1)

    def count_venue_restrooms(self, venue_id: str) -> int:
        return self.client.scard(VENUE_RESTROOMS_KEY_FORMAT_V1.format(venue_id))

    def delete_restroom(self, restroom_id: str) -> bool:
        """Delete a restroom and its photos.

        Returns:
            True if deleted, False if not found
        """
        restroom = self.get_restroom(restroom_id)
        if restroom is None:
            logger.warning(f"[RedisVenueDAO] Restroom {restroom_id} not found, nothing to delete")
            return False

        self.client.srem(VENUE_RESTROOMS_KEY_FORMAT_V1.format(restroom.venue_id), restroom_id)
        self.client.srem(RESTROOMS_ALL_KEY_V1, restroom_id)
        self.client.del_(
            RESTROOM_KEY_FORMAT_V1.format(restroom_id),
            RESTROOM_PHOTOS_KEY_FORMAT_V1.format(restroom_id),
        )
        logger.info(f"[RedisVenueDAO] Deleted restroom {restroom_id} and its photos")
        return True

    # =========================================================================
    # PHOTOS
    # =========================================================================

    def add_photo(self, photo: RestroomPhoto) -> None:
        self.client.rpush(
            RESTROOM_PHOTOS_KEY_FORMAT_V1.format(photo.restroom_id),
            photo.model_dump_json(),
        )

    def list_photos(self, restroom_id: str) -> list[RestroomPhoto]:
        """Photos of a restroom in upload order. Store errors propagate."""
        items = self.client.lrange(RESTROOM_PHOTOS_KEY_FORMAT_V1.format(restroom_id), 0, -1)
        return [RestroomPhoto.model_validate_json(item) for item in items]

    # =========================================================================
    # VOTES, REPORTS, DIRECTION CLICKS
    # =========================================================================

    def add_vote(self, vote: Vote) -> None:
        self.client.rpush(VOTES_KEY_FORMAT_V1.format(vote.venue_id), vote.model_dump_json())

    def list_votes(self, venue_id: str) -> list[Vote]:
        items = self.client.lrange(VOTES_KEY_FORMAT_V1.format(venue_id), 0, -1)
        return [Vote.model_validate_json(item) for item in items]

    def add_report(self, report: Report) -> None:
        self.client.rpush(REPORTS_KEY_FORMAT_V1.format(report.venue_id), report.model_dump_json())

    def list_reports(self, venue_id: str) -> list[Report]:
        items = self.client.lrange(REPORTS_KEY_FORMAT_V1.format(venue_id), 0, -1)
        return [Report.model_validate_json(item) for item in items]

    def add_direction_click(self, click: DirectionClick) -> int:
        """Record a directions click.

        Returns:
            Number of clicks recorded for the venue, including this one
        """
        count = self.client.rpush(
            DIRECTION_CLICKS_KEY_FORMAT_V1.format(click.venue_id),
            click.model_dump_json(),
        )
        self.client.incr(DIRECTION_CLICKS_TOTAL_KEY_V1)
        return count

    def count_direction_clicks(self, venue_id: str) -> int:
        return self.client.llen(DIRECTION_CLICKS_KEY_FORMAT_V1.format(venue_id))

    def count_all_direction_clicks(self) -> int:
        value = self.client.get(DIRECTION_CLICKS_TOTAL_KEY_V1)
        return int(value) if value else 0

    def ping(self) -> bool:
        """Check store connectivity, False if Redis cannot be reached."""
        try:
            return bool(self.client.ping())
        except redis.RedisError as e:
            logger.error(f"[RedisVenueDAO] Redis ping failed: {e}")
            return False
