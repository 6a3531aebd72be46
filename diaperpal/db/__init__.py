"""Database clients package."""
from diaperpal.db.geo_redis_client import GeoRedisClient

__all__ = ["GeoRedisClient"]
