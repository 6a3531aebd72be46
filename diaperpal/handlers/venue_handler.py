"""Venue handler for public HTTP requests."""
import logging
from datetime import datetime
from typing import Optional

import pytz

from diaperpal.models import PlaceDetails, RestroomPhoto, Restroom, VenueDetail, NearbyVenue
from diaperpal.models.requests import (
    DirectionClickRequest,
    NearbySearchParams,
    ReportIssueRequest,
    ReportRequest,
    StationSubmissionRequest,
    Report,
    Vote,
    VoteRequest,
)
from diaperpal.services import (
    FeedbackService,
    NearbySearchService,
    RestroomService,
    VenueService,
)
from diaperpal.utils.hours import evaluate_open_status, format_weekly_hours

logger = logging.getLogger(__name__)


class VenueHandler:
    """Handler for public venue, station and feedback requests."""

    def __init__(
        self,
        nearby_search_service: NearbySearchService,
        venue_service: VenueService,
        restroom_service: RestroomService,
        feedback_service: FeedbackService,
        venue_timezone: str = "America/Los_Angeles",
    ):
        """Initialize venue handler.

        Args:
            nearby_search_service: Nearby search pipeline
            venue_service: Venue reads and provider lookups
            restroom_service: Restroom reads, submissions and issue reports
            feedback_service: Votes, reports and direction clicks
            venue_timezone: IANA timezone used to decide whether venues are open
        """
        self.nearby_search_service = nearby_search_service
        self.venue_service = venue_service
        self.restroom_service = restroom_service
        self.feedback_service = feedback_service

        try:
            self.tz = pytz.timezone(venue_timezone)
        except pytz.UnknownTimeZoneError:
            logger.error(
                f"[VenueHandler] Unknown timezone {venue_timezone}. Falling back to UTC."
            )
            self.tz = pytz.UTC

    def now(self) -> datetime:
        """Current wall-clock time in the venues' timezone."""
        return datetime.now(self.tz)

    def get_venues_nearby(self, params: NearbySearchParams) -> list[NearbyVenue]:
        """Venues with visible changing stations near a point, nearest first."""
        now = self.now()
        logger.info(
            f"[VenueHandler] GetVenuesNearby: lat={params.lat:.6f}, lng={params.lng:.6f}, "
            f"radius={params.radius_km:.2f}km, types={[t.value for t in params.venue_types]}, "
            f"genders={[g.value for g in params.genders]}, open_now={params.open_now}"
        )
        venues = self.nearby_search_service.search(params, now)
        logger.info(f"[VenueHandler] Returning {len(venues)} venues")
        return venues

    def get_venue_detail(self, venue_id: str) -> Optional[VenueDetail]:
        """Venue with visible restrooms, open status and the weekly hours table.

        Returns:
            VenueDetail, or None if the venue doesn't exist
        """
        venue = self.venue_service.get_venue(venue_id)
        if venue is None:
            return None

        now = self.now()
        restrooms = self.nearby_search_service.fetch_visible_restrooms(venue_id).value_or([])
        status = evaluate_open_status(venue.hours_json, now)

        return VenueDetail(
            **venue.model_dump(),
            restrooms=restrooms,
            is_open=status.is_open,
            hours_today=status.hours_today,
            weekly_hours=format_weekly_hours(venue.hours_json, now),
        )

    async def get_place_details(self, place_id: str) -> PlaceDetails:
        """Provider details for a place id.

        Raises:
            PlacesUnavailableError, PlaceLookupError
        """
        return await self.venue_service.fetch_place_details(place_id)

    def list_photos(self, restroom_id: str) -> list[RestroomPhoto]:
        return self.restroom_service.list_photos(restroom_id)

    def submit_station(self, request: StationSubmissionRequest) -> Optional[Restroom]:
        return self.restroom_service.submit_station(request)

    def add_vote(self, request: VoteRequest) -> Optional[Vote]:
        """Record a vote, None if the venue doesn't exist."""
        if not self.feedback_service.venue_exists(request.venue_id):
            return None
        return self.feedback_service.add_vote(request)

    def add_report(self, request: ReportRequest) -> Optional[Report]:
        """Record a venue report, None if the venue doesn't exist."""
        if not self.feedback_service.venue_exists(request.venue_id):
            return None
        return self.feedback_service.add_report(request)

    def report_issue(self, request: ReportIssueRequest) -> Optional[Restroom]:
        return self.restroom_service.report_issue(request, today=self.now().date())

    def record_direction_click(
        self,
        request: DirectionClickRequest,
        ip: Optional[str],
        user_agent: Optional[str],
    ) -> Optional[int]:
        """Record a directions click, None if the venue doesn't exist."""
        if not self.feedback_service.venue_exists(request.venue_id):
            return None
        return self.feedback_service.record_direction_click(request, ip, user_agent)

    def ping(self) -> dict[str, str]:
        """Health check endpoint.

        Returns:
            {"status": "pong"}
        """
        logger.debug("[VenueHandler] Ping")
        return {"status": "pong"}
