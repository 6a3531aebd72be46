"""Dependency injection container for application components."""
import logging

import redis

from diaperpal.config import Settings
from diaperpal.db import GeoRedisClient
from diaperpal.dao import RedisVenueDAO
from diaperpal.api import GooglePlacesAPIClient, S3Client
from diaperpal.services import (
    FeedbackService,
    NearbySearchService,
    RestroomService,
    VenueService,
)
from diaperpal.handlers import AdminHandler, VenueHandler

logger = logging.getLogger(__name__)


class Container:
    """Dependency injection container.

    Initializes and wires up all application dependencies. Optional
    integrations (Google Places, S3) are None when not configured.
    """

    def __init__(self, settings: Settings, redis_internal_client: redis.Redis = None):
        """Initialize container with all dependencies.

        Args:
            settings: Application settings
            redis_internal_client: Pre-built Redis client, created from settings if None
        """
        logger.info("[Container] Initializing container")
        self.settings = settings

        if redis_internal_client is None:
            logger.info(
                f"[Container] Connecting to Redis at {settings.redis_host}:{settings.redis_port}"
            )
            redis_internal_client = redis.Redis(
                host=settings.redis_host,
                port=settings.redis_port,
                password=settings.redis_password or None,
                db=settings.redis_db,
                decode_responses=True,
            )

        # Initialize Redis client wrapper (pings on construction)
        self.redis_client = GeoRedisClient(redis_internal_client)

        # Initialize Redis Venue DAO
        self.redis_venue_dao = RedisVenueDAO(self.redis_client)

        # Initialize Google Places API client (admin venue creation and refresh)
        self.google_places_api = None
        if settings.google_places_enabled:
            self.google_places_api = GooglePlacesAPIClient(
                api_key=settings.google_places_api_key,
                endpoint_base=settings.google_places_endpoint_base,
                photo_max_width=settings.venue_photo_max_width,
            )
            logger.info("[Container] Google Places API client initialized")
        else:
            logger.warning(
                "[Container] Google Places API key not configured. "
                "Venue creation, place lookups and details refresh will be disabled."
            )

        # Initialize S3 client (station photo uploads)
        self.s3_client = None
        if settings.photo_storage_enabled:
            self.s3_client = S3Client(
                bucket=settings.s3_bucket,
                region=settings.s3_region,
                access_key_id=settings.s3_access_key_id,
                secret_access_key=settings.s3_secret_access_key,
            )
            logger.info("[Container] S3 client initialized")
        else:
            logger.info(
                "[Container] Photo uploads disabled (missing S3 bucket or S3 credentials)"
            )

        # Initialize services
        self.nearby_search_service = NearbySearchService(self.redis_venue_dao)
        self.venue_service = VenueService(
            self.redis_venue_dao,
            self.google_places_api,
            venue_photos_limit=settings.venue_photos_limit,
            details_max_age_days=settings.venue_details_max_age_days,
        )
        self.restroom_service = RestroomService(
            self.redis_venue_dao,
            self.s3_client,
            photo_max_bytes=settings.photo_max_bytes,
        )
        self.feedback_service = FeedbackService(self.redis_venue_dao)
        logger.info("[Container] Services initialized")

        # Initialize handlers
        self.venue_handler = VenueHandler(
            nearby_search_service=self.nearby_search_service,
            venue_service=self.venue_service,
            restroom_service=self.restroom_service,
            feedback_service=self.feedback_service,
            venue_timezone=settings.venue_timezone,
        )
        self.admin_handler = AdminHandler(
            settings=settings,
            venue_dao=self.redis_venue_dao,
            venue_service=self.venue_service,
            restroom_service=self.restroom_service,
        )
        logger.info("[Container] Container initialized successfully")

    async def shutdown(self):
        """Cleanup resources on shutdown."""
        logger.info("[Container] Shutting down")

        if self.google_places_api:
            try:
                await self.google_places_api.close()
                logger.info("[Container] Google Places API client closed")
            except Exception as e:
                logger.error(f"[Container] Error closing Google Places API client: {e}")

        try:
            self.redis_client.client.close()
            logger.info("[Container] Redis connection closed")
        except redis.RedisError as e:
            logger.error(f"[Container] Error closing Redis connection: {e}")
