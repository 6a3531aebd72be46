"""Services package."""
from diaperpal.services.feedback_service import FeedbackService
from diaperpal.services.nearby_search_service import NearbySearchService
from diaperpal.services.restroom_service import RestroomService
from diaperpal.services.venue_service import VenueService

__all__ = ["FeedbackService", "NearbySearchService", "RestroomService", "VenueService"]
