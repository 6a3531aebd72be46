"""HTTP request handlers package."""
from diaperpal.handlers.admin_handler import AdminHandler
from diaperpal.handlers.venue_handler import VenueHandler

__all__ = ["AdminHandler", "VenueHandler"]
