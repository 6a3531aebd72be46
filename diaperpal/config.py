"""Configuration management using Pydantic BaseSettings with JSON file support."""
import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


def flatten_json_config(config: dict[str, Any]) -> dict[str, Any]:
    """Flatten nested JSON config into flat key-value pairs.

    Supports nested structures like:
    {
        "redis": {"redis_host": "localhost", "redis_port": 6379},
        "search": {"default_search_radius_km": 8}
    }

    Becomes:
    {"redis_host": "localhost", "redis_port": 6379, "default_search_radius_km": 8}

    Keys starting with "_" (like "_comment") are skipped.
    """
    result = {}

    for key, value in config.items():
        if key.startswith("_"):
            continue

        if isinstance(value, dict):
            result.update(flatten_json_config(value))
        else:
            result[key] = value

    return result


def load_json_config(config_file: Optional[str] = None) -> dict[str, Any]:
    """Load configuration from a JSON file.

    Args:
        config_file: Path to JSON config file. If None, checks CONFIG_FILE env var.

    Returns:
        Dictionary of configuration values (flattened), or empty dict if no file found.
    """
    file_path = config_file or os.getenv("CONFIG_FILE")

    if not file_path:
        return {}

    path = Path(file_path)
    if not path.exists():
        logger.warning(f"Config file not found: {file_path}")
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            config = json.load(f)
            logger.info(f"Loaded configuration from: {file_path}")
            return flatten_json_config(config)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in config file {file_path}: {e}")
        return {}
    except OSError as e:
        logger.error(f"Error reading config file {file_path}: {e}")
        return {}


class Settings(BaseSettings):
    """Application configuration with JSON file and environment variable support.

    Configuration priority (highest to lowest):
    1. Environment variables
    2. JSON config file (specified via CONFIG_FILE env var)
    3. Default values
    """

    # Redis Configuration
    redis_host: str = "redis"
    redis_port: int = 6379
    redis_password: str = ""
    redis_db: int = 0

    # Server Configuration
    server_port: int = 8080
    log_level: str = "INFO"

    # Admin API: bearer token required on /api/admin/*. Empty = admin disabled.
    admin_password: str = ""

    # Open/closed evaluation happens in this local frame
    venue_timezone: str = "America/Los_Angeles"

    # Nearby search defaults (Manhattan Beach, CA; 8 km ~ 5 miles)
    default_search_lat: float = 33.8845
    default_search_lng: float = -118.3976
    default_search_radius_km: float = 8.0

    # Google Places API Configuration
    google_places_api_key: str = ""
    google_places_endpoint_base: str = "https://maps.googleapis.com/maps/api/place"
    venue_photos_limit: int = 5  # Photo URLs cached per venue
    venue_photo_max_width: int = 800

    # Venue details refresh (re-fetches hours/rating/photos from Google Places)
    venue_details_refresh_enabled: bool = False
    venue_details_refresh_cron: str = "0 3 * * 1"  # Mondays at 03:00
    venue_details_max_age_days: int = 30
    refresh_on_startup: bool = False

    # S3 photo storage
    s3_bucket: str = ""
    s3_region: str = "us-west-2"
    s3_access_key_id: str = ""
    s3_secret_access_key: str = ""
    photo_max_bytes: int = 5 * 1024 * 1024

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    def __init__(self, **kwargs):
        """Initialize settings from JSON file and environment variables.

        Priority: env vars > JSON config > defaults
        """
        json_config = load_json_config()

        # Init kwargs outrank env vars in BaseSettings, so leave out JSON keys
        # the environment already sets.
        json_config = {
            key: value
            for key, value in json_config.items()
            if os.getenv(key.upper()) is None
        }

        merged_kwargs = {**json_config, **kwargs}

        super().__init__(**merged_kwargs)

    @property
    def redis_address(self) -> str:
        """Get Redis connection address in host:port format."""
        return f"{self.redis_host}:{self.redis_port}"

    @property
    def admin_enabled(self) -> bool:
        return bool(self.admin_password)

    @property
    def google_places_enabled(self) -> bool:
        return bool(self.google_places_api_key)

    @property
    def photo_storage_enabled(self) -> bool:
        return bool(self.s3_bucket and self.s3_access_key_id)
