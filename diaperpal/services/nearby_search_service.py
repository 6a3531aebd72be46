"""Nearby venue search: geo lookup, restroom join, open status and filters."""
import logging
from collections.abc import Collection
from datetime import datetime

import redis
from pydantic import ValidationError

from diaperpal.dao.redis_venue_dao import RedisVenueDAO
from diaperpal.metrics import (
    NEARBY_SEARCH_RESULTS,
    NEARBY_SEARCHES_TOTAL,
    RESTROOM_FETCH_DEGRADED_TOTAL,
)
from diaperpal.models import (
    FetchResult,
    Gender,
    NearbyVenue,
    RestroomWithPhotos,
    Venue,
    VenueType,
)
from diaperpal.models.requests import NearbySearchParams
from diaperpal.utils.distance import format_distance, meters_to_miles
from diaperpal.utils.hours import evaluate_open_status

logger = logging.getLogger(__name__)


def filter_nearby_venues(
    venues: list[NearbyVenue],
    venue_types: Collection[VenueType] = (),
    genders: Collection[Gender] = (),
    open_now: bool = False,
) -> list[NearbyVenue]:
    """Apply the nearby search filters, preserving input order.

    All filters are AND-combined:
    1. venues without any visible restroom are dropped
    2. non-empty ``venue_types`` keeps only matching venue types
    3. ``open_now`` keeps only venues open at evaluation time
    4. non-empty ``genders`` keeps venues with a restroom of a selected
       gender or an all-gender restroom

    Args:
        venues: Search rows with restrooms and open status already attached
        venue_types: Venue types to keep, empty for all
        genders: Restroom genders to require, empty for any
        open_now: Keep only open venues

    Returns:
        Filtered list in the same order as ``venues``
    """
    result = []
    for venue in venues:
        if not venue.restrooms:
            continue
        if venue_types and venue.venue_type not in venue_types:
            continue
        if open_now and not venue.is_open:
            continue
        if genders and not any(
            r.gender in genders or r.gender == Gender.ALL_GENDER
            for r in venue.restrooms
        ):
            continue
        result.append(venue)
    return result


class NearbySearchService:
    """Service answering the map/list nearby search."""

    def __init__(self, venue_dao: RedisVenueDAO):
        """Initialize NearbySearchService.

        Args:
            venue_dao: Redis DAO for venue and restroom reads
        """
        self.venue_dao = venue_dao

    def fetch_visible_restrooms(self, venue_id: str) -> FetchResult[list[RestroomWithPhotos]]:
        """Visible restrooms of a venue with their photos.

        Returns:
            FetchResult.ok with the restrooms, or FetchResult.degraded if the
            store could not answer
        """
        try:
            restrooms = [
                RestroomWithPhotos(
                    **restroom.model_dump(),
                    photos=self.venue_dao.list_photos(restroom.id),
                )
                for restroom in self.venue_dao.list_visible_restrooms(venue_id)
            ]
            return FetchResult.ok(restrooms)
        except (redis.RedisError, ValidationError) as e:
            logger.warning(
                f"[NearbySearchService] Restroom lookup failed for venue {venue_id}, "
                f"treating as no restrooms: {e}"
            )
            RESTROOM_FETCH_DEGRADED_TOTAL.inc()
            return FetchResult.degraded()

    def _to_nearby_venue(
        self, venue: Venue, distance_m: float, now: datetime
    ) -> NearbyVenue:
        restrooms = self.fetch_visible_restrooms(venue.id).value_or([])
        status = evaluate_open_status(venue.hours_json, now)
        return NearbyVenue(
            id=venue.id,
            name=venue.name,
            address=venue.address,
            lat=venue.lat,
            lng=venue.lng,
            venue_type=venue.venue_type,
            distance=meters_to_miles(distance_m),
            distance_display=format_distance(distance_m),
            is_open=status.is_open,
            hours_today=status.hours_today,
            rating=venue.rating,
            review_count=venue.review_count,
            restrooms=restrooms,
        )

    def search(self, params: NearbySearchParams, now: datetime) -> list[NearbyVenue]:
        """Run a nearby search.

        Args:
            params: Validated search parameters
            now: Current time in the venues' local timezone

        Returns:
            Matching venues ordered by distance ascending

        Raises:
            redis.RedisError: if the geo lookup fails
        """
        try:
            located = self.venue_dao.find_nearby_venues(params.lat, params.lng, params.radius_km)
        except redis.RedisError:
            NEARBY_SEARCHES_TOTAL.labels(status="error").inc()
            raise

        rows = [self._to_nearby_venue(venue, distance, now) for venue, distance in located]

        result = filter_nearby_venues(
            rows,
            venue_types=set(params.venue_types),
            genders=set(params.genders),
            open_now=params.open_now,
        )

        NEARBY_SEARCHES_TOTAL.labels(status="success").inc()
        NEARBY_SEARCH_RESULTS.observe(len(result))
        logger.debug(
            f"[NearbySearchService] {len(located)} venues in radius, {len(result)} after filters"
        )
        return result
