"""Google Places API client for fetching venue details."""
import logging
import time
from typing import Optional
from urllib.parse import urlencode

import httpx

from diaperpal.models.places import PlaceDetails
from diaperpal.metrics import (
    GOOGLE_PLACES_API_CALLS_TOTAL,
    GOOGLE_PLACES_API_CALL_DURATION_SECONDS,
    GOOGLE_PLACES_API_ERRORS_TOTAL,
)

logger = logging.getLogger(__name__)

DEFAULT_PLACES_API_BASE = "https://maps.googleapis.com/maps/api/place"

# See: https://developers.google.com/maps/documentation/places/web-service/details
PLACE_DETAILS_FIELDS = ",".join([
    "name",
    "formatted_address",
    "geometry",
    "opening_hours",
    "rating",
    "user_ratings_total",
    "photos",
    "website",
    "formatted_phone_number",
    "business_status",
    "types",
    "price_level",
    "wheelchair_accessible_entrance",
])


class GooglePlacesAPIClient:
    """Async HTTP client for the Google Place Details endpoint.

    Used when an admin adds a venue by place id and by the periodic venue
    details refresh. Failures are logged, counted and reported as None.
    """

    def __init__(
        self,
        api_key: str,
        endpoint_base: str = DEFAULT_PLACES_API_BASE,
        photo_max_width: int = 800,
        timeout: float = 15.0,
    ):
        """Initialize Google Places API client.

        Args:
            api_key: Google Maps/Places API key
            endpoint_base: Places API base URL
            photo_max_width: Max width requested for photo URLs
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.endpoint_base = endpoint_base.rstrip("/")
        self.photo_max_width = photo_max_width
        self.timeout = timeout

        # Create async HTTP client with connection pooling
        self.client = httpx.AsyncClient(
            timeout=timeout,
            limits=httpx.Limits(max_keepalive_connections=10, max_connections=20),
        )

    async def close(self):
        """Close the HTTP client and clean up resources."""
        await self.client.aclose()

    def _record_error(self, start_time: float, error_type: str) -> None:
        duration = time.perf_counter() - start_time
        GOOGLE_PLACES_API_CALL_DURATION_SECONDS.labels(endpoint="place_details").observe(duration)
        GOOGLE_PLACES_API_CALLS_TOTAL.labels(endpoint="place_details", status="error").inc()
        GOOGLE_PLACES_API_ERRORS_TOTAL.labels(endpoint="place_details", error_type=error_type).inc()

    async def get_place_details(self, place_id: str) -> Optional[PlaceDetails]:
        """Fetch place details (name, address, location, hours, rating, photos).

        Args:
            place_id: Google Place ID

        Returns:
            PlaceDetails, or None on HTTP failure or a non-OK API status
        """
        url = f"{self.endpoint_base}/details/json"
        params = {
            "place_id": place_id,
            "fields": PLACE_DETAILS_FIELDS,
            "key": self.api_key,
        }

        logger.debug(f"[GooglePlacesAPIClient] GET details for {place_id}")

        start_time = time.perf_counter()

        try:
            response = await self.client.get(url, params=params)

            logger.debug(f"[GooglePlacesAPIClient] Response status: {response.status_code}")

            response.raise_for_status()

            data = response.json()

        except httpx.HTTPStatusError as e:
            self._record_error(start_time, "http_error")
            if e.response.status_code == 403:
                logger.error(f"[GooglePlacesAPIClient] API key issue or quota exceeded: {e}")
            else:
                logger.error(f"[GooglePlacesAPIClient] HTTP error for {place_id}: {e}")
            return None

        except httpx.TimeoutException as e:
            self._record_error(start_time, "timeout")
            logger.error(f"[GooglePlacesAPIClient] Timeout for {place_id}: {e}")
            return None

        except httpx.RequestError as e:
            self._record_error(start_time, "connection_error")
            logger.error(f"[GooglePlacesAPIClient] Request error for {place_id}: {e}")
            return None

        except ValueError as e:
            self._record_error(start_time, "invalid_response")
            logger.error(f"[GooglePlacesAPIClient] Invalid JSON for {place_id}: {e}")
            return None

        status = data.get("status")
        if status != "OK":
            self._record_error(start_time, "api_status")
            logger.warning(
                f"[GooglePlacesAPIClient] Place details status {status} for {place_id}: "
                f"{data.get('error_message', '')}"
            )
            return None

        duration = time.perf_counter() - start_time
        GOOGLE_PLACES_API_CALL_DURATION_SECONDS.labels(endpoint="place_details").observe(duration)
        GOOGLE_PLACES_API_CALLS_TOTAL.labels(endpoint="place_details", status="success").inc()

        return self._parse_place_details(place_id, data.get("result") or {})

    def _parse_place_details(self, place_id: str, result: dict) -> PlaceDetails:
        """Parse a Place Details ``result`` object into our model.

        Args:
            place_id: The place ID that was requested
            result: The ``result`` object of the API response

        Returns:
            PlaceDetails with the fields DiaperPal stores
        """
        location = (result.get("geometry") or {}).get("location") or {}
        opening_hours = result.get("opening_hours") or {}

        photo_references = [
            photo["photo_reference"]
            for photo in result.get("photos") or []
            if isinstance(photo, dict) and photo.get("photo_reference")
        ]

        return PlaceDetails(
            place_id=place_id,
            name=result.get("name") or "",
            formatted_address=result.get("formatted_address") or "",
            lat=location.get("lat"),
            lng=location.get("lng"),
            weekday_text=opening_hours.get("weekday_text") or [],
            open_now=opening_hours.get("open_now"),
            rating=result.get("rating"),
            user_ratings_total=result.get("user_ratings_total"),
            price_level=result.get("price_level"),
            business_status=result.get("business_status"),
            types=result.get("types") or [],
            website=result.get("website"),
            formatted_phone_number=result.get("formatted_phone_number"),
            wheelchair_accessible_entrance=result.get("wheelchair_accessible_entrance"),
            photo_references=photo_references,
        )

    def build_photo_url(self, photo_reference: str) -> str:
        """Build a Place Photo URL for a photo reference."""
        query = urlencode({
            "maxwidth": self.photo_max_width,
            "photo_reference": photo_reference,
            "key": self.api_key,
        })
        return f"{self.endpoint_base}/photo?{query}"

    def build_photo_urls(self, details: PlaceDetails, limit: int) -> list[str]:
        """Photo URLs for the first ``limit`` photos of a place."""
        return [self.build_photo_url(ref) for ref in details.photo_references[:limit]]
