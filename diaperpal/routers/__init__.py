"""Routers package."""
from diaperpal.routers.admin_router import router as admin_router
from diaperpal.routers.venue_router import router as venue_router

__all__ = ["admin_router", "venue_router"]
