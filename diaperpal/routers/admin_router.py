"""FastAPI routes for the password-protected admin API."""
import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile

from diaperpal.handlers import AdminHandler
from diaperpal.models import Restroom, Venue, VenueDetail, VenueSummary
from diaperpal.models.requests import (
    AdminHealth,
    AdminStats,
    CreateRestroomRequest,
    CreateVenueRequest,
    PhotoUploadResponse,
    RestroomCreatedResponse,
    SuccessResponse,
    UpdateRestroomRequest,
    UpdateVenueRequest,
    VenueCreatedResponse,
)
from diaperpal.routers.dependencies import get_admin_handler, require_admin
from diaperpal.services.restroom_service import PhotoStorageUnavailableError
from diaperpal.services.venue_service import (
    DuplicateVenueError,
    PlaceLookupError,
    PlacesUnavailableError,
)

logger = logging.getLogger(__name__)

# Health stays reachable without a token so a missing password can be diagnosed
router = APIRouter(prefix="/api/admin")
protected = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/health", response_model=AdminHealth, summary="Admin configuration check")
def admin_health(handler: AdminHandler = Depends(get_admin_handler)) -> AdminHealth:
    return handler.health()


@protected.get("/stats", response_model=AdminStats, summary="Dashboard totals")
def admin_stats(handler: AdminHandler = Depends(get_admin_handler)) -> AdminStats:
    try:
        return handler.stats()
    except Exception as e:
        logger.error(f"[AdminRouter] Error in stats: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


# =============================================================================
# VENUES
# =============================================================================


@protected.post("/venues", response_model=VenueCreatedResponse, summary="Add a venue by place id")
async def create_venue(
    body: CreateVenueRequest, handler: AdminHandler = Depends(get_admin_handler)
) -> VenueCreatedResponse:
    """Fetch Google place details and create the venue."""
    try:
        venue = await handler.create_venue(body)
    except DuplicateVenueError:
        raise HTTPException(status_code=409, detail="Venue with this place_id already exists")
    except PlacesUnavailableError:
        raise HTTPException(status_code=503, detail="Google Places API key not configured")
    except PlaceLookupError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return VenueCreatedResponse(venue_id=venue.id, name=venue.name, address=venue.address)


@protected.get("/venues/list", response_model=list[VenueSummary], summary="List venues")
def list_venues(handler: AdminHandler = Depends(get_admin_handler)) -> list[VenueSummary]:
    try:
        return handler.list_venues()
    except Exception as e:
        logger.error(f"[AdminRouter] Error listing venues: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@protected.get("/venues/{venue_id}", response_model=VenueDetail, summary="Get venue with all restrooms")
def get_venue(venue_id: str, handler: AdminHandler = Depends(get_admin_handler)) -> VenueDetail:
    venue = handler.get_venue(venue_id)
    if venue is None:
        raise HTTPException(status_code=404, detail="Venue not found")
    return venue


@protected.put("/venues/{venue_id}", response_model=Venue, summary="Change venue type")
def update_venue(
    venue_id: str,
    body: UpdateVenueRequest,
    handler: AdminHandler = Depends(get_admin_handler),
) -> Venue:
    venue = handler.update_venue(venue_id, body)
    if venue is None:
        raise HTTPException(status_code=404, detail="Venue not found")
    return venue


@protected.delete("/venues/{venue_id}", response_model=SuccessResponse, summary="Delete a venue")
def delete_venue(
    venue_id: str, handler: AdminHandler = Depends(get_admin_handler)
) -> SuccessResponse:
    """Delete a venue with its restrooms, photos and feedback."""
    if not handler.delete_venue(venue_id):
        raise HTTPException(status_code=404, detail="Venue not found")
    return SuccessResponse(message="Venue deleted")


@protected.post(
    "/venues/{venue_id}/refresh",
    response_model=Venue,
    summary="Re-fetch Google place details",
)
async def refresh_venue(
    venue_id: str, handler: AdminHandler = Depends(get_admin_handler)
) -> Venue:
    try:
        venue = await handler.refresh_venue(venue_id)
    except PlacesUnavailableError:
        raise HTTPException(status_code=503, detail="Google Places API key not configured")
    except PlaceLookupError as e:
        raise HTTPException(status_code=502, detail=str(e))

    if venue is None:
        raise HTTPException(status_code=404, detail="Venue not found")
    return venue


# =============================================================================
# RESTROOMS
# =============================================================================


@protected.get("/restrooms", response_model=list[Restroom], summary="List restrooms of a venue")
def list_restrooms(
    venue_id: str = Query(..., min_length=1),
    handler: AdminHandler = Depends(get_admin_handler),
) -> list[Restroom]:
    try:
        return handler.list_restrooms(venue_id)
    except Exception as e:
        logger.error(f"[AdminRouter] Error listing restrooms for {venue_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@protected.post(
    "/restrooms",
    response_model=RestroomCreatedResponse,
    summary="Add a restroom to a venue",
)
def create_restroom(
    body: CreateRestroomRequest, handler: AdminHandler = Depends(get_admin_handler)
) -> RestroomCreatedResponse:
    restroom = handler.create_restroom(body)
    if restroom is None:
        raise HTTPException(status_code=404, detail="Venue not found")
    return RestroomCreatedResponse(
        restroom_id=restroom.id,
        gender=restroom.gender,
        station_location=restroom.station_location,
        status=restroom.status,
    )


@protected.put("/restrooms/{restroom_id}", response_model=Restroom, summary="Update a restroom")
def update_restroom(
    restroom_id: str,
    body: UpdateRestroomRequest,
    handler: AdminHandler = Depends(get_admin_handler),
) -> Restroom:
    try:
        restroom = handler.update_restroom(restroom_id, body)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if restroom is None:
        raise HTTPException(status_code=404, detail="Restroom not found")
    return restroom


@protected.delete(
    "/restrooms/{restroom_id}",
    response_model=SuccessResponse,
    summary="Delete a restroom",
)
def delete_restroom(
    restroom_id: str, handler: AdminHandler = Depends(get_admin_handler)
) -> SuccessResponse:
    if not handler.delete_restroom(restroom_id):
        raise HTTPException(status_code=404, detail="Restroom not found")
    return SuccessResponse(message="Restroom deleted")


@protected.post(
    "/restrooms/{restroom_id}/photos",
    response_model=PhotoUploadResponse,
    summary="Upload a station photo",
)
async def upload_photo(
    restroom_id: str,
    file: UploadFile = File(...),
    handler: AdminHandler = Depends(get_admin_handler),
) -> PhotoUploadResponse:
    photo_bytes = await file.read()
    try:
        photo = await handler.upload_photo(
            restroom_id, photo_bytes, file.content_type or ""
        )
    except PhotoStorageUnavailableError:
        raise HTTPException(status_code=503, detail="Photo storage not configured")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"[AdminRouter] Photo upload failed for {restroom_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to upload photo")

    if photo is None:
        raise HTTPException(status_code=404, detail="Restroom not found")
    return PhotoUploadResponse(photo=photo)


router.include_router(protected)
