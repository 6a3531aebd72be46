"""External API clients package."""
from diaperpal.api.google_places_client import GooglePlacesAPIClient
from diaperpal.api.s3_client import S3Client

__all__ = ["GooglePlacesAPIClient", "S3Client"]
