"""Redis client with geospatial operations."""
import json
import logging
from typing import Any, Optional, Set

import redis

logger = logging.getLogger(__name__)


class GeoRedisClient:
    """Redis client wrapper with geospatial indexing support."""

    def __init__(self, client: redis.Redis):
        """Initialize with an existing Redis client.

        Args:
            client: redis.Redis created with decode_responses=True
        """
        self.client = client

        try:
            self.ping()
            logger.info("Connected to Redis")
        except redis.ConnectionError as e:
            logger.error(f"Could not connect to Redis: {e}")
            raise

    # =========================================================================
    # KEY/VALUE
    # =========================================================================

    def set(self, key: str, value: str, nx: bool = False) -> bool:
        """Set a key-value pair in Redis.

        Args:
            key: Redis key
            value: String value to store
            nx: Only set the key if it does not already exist

        Returns:
            True if the value was written
        """
        return bool(self.client.set(key, value, nx=nx))

    def get(self, key: str) -> Optional[str]:
        """Get value for a given key, None if the key doesn't exist."""
        return self.client.get(key)

    def mget(self, keys: list[str]) -> list[Optional[str]]:
        """Get values for several keys in one round trip."""
        if not keys:
            return []
        return self.client.mget(keys)

    def keys(self, pattern: str) -> list[str]:
        """Return all keys matching the given pattern (e.g. "prefix:*")."""
        return self.client.keys(pattern)

    def del_(self, *keys: str) -> int:
        """Delete one or more keys from Redis."""
        if not keys:
            return 0
        return self.client.delete(*keys)

    def incr(self, key: str, amount: int = 1) -> int:
        """Increment an integer counter and return the new value."""
        return self.client.incr(key, amount)

    # =========================================================================
    # SETS / SORTED SETS / LISTS
    # =========================================================================

    def sadd(self, name: str, *values: str) -> int:
        return self.client.sadd(name, *values)

    def srem(self, name: str, *values: str) -> int:
        return self.client.srem(name, *values)

    def smembers(self, name: str) -> Set[str]:
        return self.client.smembers(name)

    def scard(self, name: str) -> int:
        return self.client.scard(name)

    def zadd(self, name: str, mapping: dict[str, float]) -> int:
        return self.client.zadd(name, mapping)

    def zrem(self, name: str, *values: str) -> int:
        """Remove members from a sorted set (including geo sets)."""
        return self.client.zrem(name, *values)

    def zcard(self, name: str) -> int:
        return self.client.zcard(name)

    def zrevrange(self, name: str, start: int, end: int) -> list[str]:
        """Members ordered by score, highest first."""
        return self.client.zrevrange(name, start, end)

    def rpush(self, name: str, *values: str) -> int:
        return self.client.rpush(name, *values)

    def lrange(self, name: str, start: int, end: int) -> list[str]:
        return self.client.lrange(name, start, end)

    def llen(self, name: str) -> int:
        return self.client.llen(name)

    # =========================================================================
    # GEO
    # =========================================================================

    def add_location_with_json(
        self,
        geo_key: str,
        member_key: str,
        lat: float,
        lon: float,
        data: Any,
    ) -> None:
        """Store geolocation with associated JSON data.

        This method:
        1. Adds the location to a geospatial index using GEOADD
        2. Stores the JSON data separately using SET

        Args:
            geo_key: Redis geo set key (e.g., "venues_geo_v1")
            member_key: Member identifier in the geo set (e.g., "venue_v1:<id>")
            lat: Latitude
            lon: Longitude
            data: Pydantic model or JSON-serializable object
        """
        if hasattr(data, "model_dump_json"):
            json_data = data.model_dump_json(by_alias=True)
        else:
            json_data = json.dumps(data)

        # Redis GEOADD expects (longitude, latitude) order
        self.client.geoadd(geo_key, (lon, lat, member_key))
        self.client.set(member_key, json_data)

        logger.debug(f"Added geolocation and JSON for member: {member_key}")

    def get_locations_within_radius_with_distance(
        self,
        key: str,
        lat: float,
        lon: float,
        radius_km: float,
    ) -> list[tuple[str, float]]:
        """Find locations within a radius, nearest first, with their JSON data.

        Args:
            key: Redis geo set key
            lat: Center latitude
            lon: Center longitude
            radius_km: Radius in kilometers

        Returns:
            List of (json_string, distance_in_meters) sorted by distance ascending
        """
        logger.debug(f"Reading from radius with key: {key}")

        results = self.client.geosearch(
            key,
            longitude=lon,
            latitude=lat,
            radius=radius_km * 1000.0,
            unit="m",
            sort="ASC",
            withdist=True,
        )

        if not results:
            return []

        members = [member for member, _ in results]
        payloads = self.client.mget(members)

        objects = []
        for (member, distance), data in zip(results, payloads):
            if data is None:
                logger.warning(f"Skipping geo member {member} with no JSON data")
                continue
            objects.append((data, float(distance)))

        return objects

    def ping(self) -> bool:
        """Check connectivity to Redis.

        Raises:
            redis.ConnectionError if connection fails
        """
        return self.client.ping()
