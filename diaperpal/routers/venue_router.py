"""FastAPI routes for public venue, station and feedback endpoints."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import ValidationError

from diaperpal.handlers import VenueHandler
from diaperpal.models import NearbyVenue, PlaceDetails, RestroomPhoto, VenueDetail
from diaperpal.models.requests import (
    DirectionClickRequest,
    DirectionClickResponse,
    FacilityCreatedResponse,
    NearbySearchParams,
    ReportIssueRequest,
    ReportRequest,
    ReportResponse,
    StationSubmissionRequest,
    SuccessResponse,
    VoteRequest,
    VoteResponse,
)
from diaperpal.routers.dependencies import get_container, get_venue_handler
from diaperpal.services.venue_service import PlaceLookupError, PlacesUnavailableError

logger = logging.getLogger(__name__)

# Create router at module level
router = APIRouter()


def client_ip(request: Request) -> Optional[str]:
    """Client IP from proxy headers, falling back to the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return request.client.host if request.client else None


@router.get(
    "/api/venues/nearby",
    response_model=list[NearbyVenue],
    summary="Get nearby venues",
    description="Venues with visible changing stations within a radius, nearest first",
)
def get_venues_nearby(
    lat: Optional[float] = Query(None, description="Latitude"),
    lng: Optional[float] = Query(None, description="Longitude"),
    radius: Optional[float] = Query(None, description="Radius in kilometers"),
    venue_type: Optional[str] = Query(None, description="Comma-separated venue types"),
    gender: Optional[str] = Query(None, description="Comma-separated restroom genders"),
    open_now: bool = Query(False, description="Only venues open right now"),
    container=Depends(get_container),
) -> list[NearbyVenue]:
    """Get nearby venues with their visible changing stations."""
    settings = container.settings
    try:
        params = NearbySearchParams(
            lat=settings.default_search_lat if lat is None else lat,
            lng=settings.default_search_lng if lng is None else lng,
            radius_km=settings.default_search_radius_km if radius is None else radius,
            venue_types=venue_type,
            genders=gender,
            open_now=open_now,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid search parameters: {e.errors()}")

    try:
        return container.venue_handler.get_venues_nearby(params)
    except Exception as e:
        logger.error(f"[VenueRouter] Error in get_venues_nearby: {e}")
        raise HTTPException(status_code=500, detail="Failed to find nearby venues")


@router.get(
    "/api/venues/{venue_id}",
    response_model=VenueDetail,
    summary="Get venue details",
)
def get_venue(venue_id: str, handler: VenueHandler = Depends(get_venue_handler)) -> VenueDetail:
    """Venue with visible restrooms, open status and weekly hours."""
    try:
        venue = handler.get_venue_detail(venue_id)
    except Exception as e:
        logger.error(f"[VenueRouter] Error in get_venue {venue_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

    if venue is None:
        raise HTTPException(status_code=404, detail="Venue not found")
    return venue


@router.get(
    "/api/places/{place_id}",
    response_model=PlaceDetails,
    summary="Get Google place details",
)
async def get_place(
    place_id: str, handler: VenueHandler = Depends(get_venue_handler)
) -> PlaceDetails:
    """Place details straight from the provider."""
    try:
        return await handler.get_place_details(place_id)
    except PlacesUnavailableError:
        raise HTTPException(status_code=503, detail="Google Places API key not configured")
    except PlaceLookupError:
        raise HTTPException(status_code=502, detail="Failed to fetch place details")


@router.get(
    "/api/photos/{restroom_id}",
    response_model=list[RestroomPhoto],
    summary="Get station photos",
)
def get_photos(
    restroom_id: str, handler: VenueHandler = Depends(get_venue_handler)
) -> list[RestroomPhoto]:
    try:
        return handler.list_photos(restroom_id)
    except Exception as e:
        logger.error(f"[VenueRouter] Error listing photos for {restroom_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post(
    "/api/facilities",
    response_model=FacilityCreatedResponse,
    status_code=201,
    summary="Submit a changing station",
)
def submit_facility(
    body: StationSubmissionRequest, handler: VenueHandler = Depends(get_venue_handler)
) -> FacilityCreatedResponse:
    """User-submitted station, stored pending moderation."""
    try:
        restroom = handler.submit_station(body)
    except Exception as e:
        logger.error(f"[VenueRouter] Error in submit_facility: {e}")
        raise HTTPException(status_code=500, detail="Failed to create facility")

    if restroom is None:
        raise HTTPException(status_code=404, detail="Venue not found")
    return FacilityCreatedResponse(facility_id=restroom.id)


@router.post("/api/votes", response_model=VoteResponse, summary="Vote on a venue")
def add_vote(
    body: VoteRequest, handler: VenueHandler = Depends(get_venue_handler)
) -> VoteResponse:
    try:
        vote = handler.add_vote(body)
    except Exception as e:
        logger.error(f"[VenueRouter] Error in add_vote: {e}")
        raise HTTPException(status_code=500, detail="Failed to record vote")

    if vote is None:
        raise HTTPException(status_code=404, detail="Venue not found")
    return VoteResponse(vote=vote)


@router.post("/api/reports", response_model=ReportResponse, summary="Report a venue")
def add_report(
    body: ReportRequest, handler: VenueHandler = Depends(get_venue_handler)
) -> ReportResponse:
    try:
        report = handler.add_report(body)
    except Exception as e:
        logger.error(f"[VenueRouter] Error in add_report: {e}")
        raise HTTPException(status_code=500, detail="Failed to submit report")

    if report is None:
        raise HTTPException(status_code=404, detail="Venue not found")
    return ReportResponse(report=report)


@router.post(
    "/api/report-issue",
    response_model=SuccessResponse,
    summary="Report an issue with a changing station",
)
def report_issue(
    body: ReportIssueRequest, handler: VenueHandler = Depends(get_venue_handler)
) -> SuccessResponse:
    """Flag a station for safety, cleanliness, removal or other issues."""
    try:
        restroom = handler.report_issue(body)
    except Exception as e:
        logger.error(f"[VenueRouter] Error in report_issue: {e}")
        raise HTTPException(status_code=500, detail="Failed to submit report")

    if restroom is None:
        raise HTTPException(status_code=404, detail="Restroom not found")
    return SuccessResponse(message="Report submitted successfully")


@router.post(
    "/api/direction-click",
    response_model=DirectionClickResponse,
    summary="Track a directions click",
)
def direction_click(
    body: DirectionClickRequest,
    request: Request,
    handler: VenueHandler = Depends(get_venue_handler),
) -> DirectionClickResponse:
    try:
        count = handler.record_direction_click(
            body,
            ip=client_ip(request),
            user_agent=request.headers.get("user-agent"),
        )
    except Exception as e:
        logger.error(f"[VenueRouter] Error in direction_click: {e}")
        raise HTTPException(status_code=500, detail="Failed to record click")

    if count is None:
        raise HTTPException(status_code=404, detail="Venue not found")
    return DirectionClickResponse(click_count=count)


@router.get(
    "/ping",
    summary="Health check",
    description="Health check endpoint",
)
def ping(handler: VenueHandler = Depends(get_venue_handler)) -> dict[str, str]:
    """Health check endpoint."""
    return handler.ping()
