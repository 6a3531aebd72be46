"""Data access objects package."""
from diaperpal.dao.redis_venue_dao import RedisVenueDAO

__all__ = ["RedisVenueDAO"]
