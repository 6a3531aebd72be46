"""HTTP-level tests for the public and admin routers."""
import pytest
import redis
from unittest.mock import AsyncMock, Mock

from fastapi.testclient import TestClient

from diaperpal.config import Settings
from diaperpal.models import (
    Gender,
    PlaceDetails,
    Restroom,
    RestroomPhoto,
    Venue,
    VenueDetail,
    VenueType,
)
from diaperpal.services.restroom_service import PhotoStorageUnavailableError
from diaperpal.services.venue_service import (
    DuplicateVenueError,
    PlaceLookupError,
    PlacesUnavailableError,
)
from main import create_app

AUTH = {"Authorization": "Bearer secret"}


def make_venue(**kwargs):
    defaults = dict(id="v1", name="Test Cafe", address="1 Main St", lat=33.88, lng=-118.39,
                    venue_type=VenueType.FOOD_DRINK)
    defaults.update(kwargs)
    return Venue(**defaults)


@pytest.fixture
def container():
    """Mock DI container with real settings and mocked handlers."""
    mock = Mock()
    mock.settings = Settings(admin_password="secret")
    mock.venue_handler = Mock()
    mock.admin_handler = Mock()
    return mock


@pytest.fixture
def client(container):
    app = create_app(use_lifespan=False)
    app.state.container = container
    return TestClient(app)


class TestPublicRoutes:
    """Public venue and feedback endpoints."""

    def test_ping(self, client, container):
        container.venue_handler.ping.return_value = {"status": "pong"}
        response = client.get("/ping")
        assert response.status_code == 200
        assert response.json() == {"status": "pong"}

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_service_not_ready(self):
        app = create_app(use_lifespan=False)
        response = TestClient(app).get("/api/venues/v1")
        assert response.status_code == 503

    def test_nearby_uses_defaults(self, client, container):
        """Test missing coordinates fall back to configured defaults."""
        container.venue_handler.get_venues_nearby.return_value = []

        response = client.get("/api/venues/nearby")

        assert response.status_code == 200
        assert response.json() == []
        params = container.venue_handler.get_venues_nearby.call_args[0][0]
        assert params.lat == container.settings.default_search_lat
        assert params.lng == container.settings.default_search_lng
        assert params.radius_km == container.settings.default_search_radius_km

    def test_nearby_parses_filters(self, client, container):
        container.venue_handler.get_venues_nearby.return_value = []

        response = client.get(
            "/api/venues/nearby",
            params={"lat": 34.0, "lng": -118.0, "radius": 3, "venue_type": "errands,food_drink",
                    "gender": "mens", "open_now": "true"},
        )

        assert response.status_code == 200
        params = container.venue_handler.get_venues_nearby.call_args[0][0]
        assert params.venue_types == [VenueType.ERRANDS, VenueType.FOOD_DRINK]
        assert params.genders == [Gender.MENS]
        assert params.open_now is True

    @pytest.mark.parametrize(
        "query",
        [{"venue_type": "nightclub"}, {"gender": "family"}, {"lat": 100}, {"radius": 0}],
    )
    def test_nearby_invalid_params(self, client, container, query):
        response = client.get("/api/venues/nearby", params=query)
        assert response.status_code == 400
        container.venue_handler.get_venues_nearby.assert_not_called()

    def test_nearby_store_failure(self, client, container):
        container.venue_handler.get_venues_nearby.side_effect = ConnectionError("redis down")
        response = client.get("/api/venues/nearby")
        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to find nearby venues"

    def test_get_venue(self, client, container):
        container.venue_handler.get_venue_detail.return_value = VenueDetail(
            **make_venue().model_dump(), is_open=True
        )

        response = client.get("/api/venues/v1")

        assert response.status_code == 200
        assert response.json()["id"] == "v1"
        assert response.json()["is_open"] is True

    def test_get_venue_not_found(self, client, container):
        container.venue_handler.get_venue_detail.return_value = None
        response = client.get("/api/venues/missing")
        assert response.status_code == 404
        assert response.json()["detail"] == "Venue not found"

    def test_get_place_without_key(self, client, container):
        container.venue_handler.get_place_details = AsyncMock(
            side_effect=PlacesUnavailableError("no key")
        )
        assert client.get("/api/places/ChIJ1").status_code == 503

    def test_get_place_lookup_failure(self, client, container):
        container.venue_handler.get_place_details = AsyncMock(
            side_effect=PlaceLookupError("failed")
        )
        assert client.get("/api/places/ChIJ1").status_code == 502

    def test_get_place(self, client, container):
        container.venue_handler.get_place_details = AsyncMock(
            return_value=PlaceDetails(place_id="ChIJ1", name="Park")
        )
        response = client.get("/api/places/ChIJ1")
        assert response.status_code == 200
        assert response.json()["name"] == "Park"

    def test_get_photos(self, client, container):
        container.venue_handler.list_photos.return_value = [
            RestroomPhoto(id="p1", restroom_id="r1", image_url="https://img/p1.jpg")
        ]
        response = client.get("/api/photos/r1")
        assert response.status_code == 200
        assert response.json()[0]["image_url"] == "https://img/p1.jpg"

    def test_submit_facility(self, client, container):
        container.venue_handler.submit_station.return_value = Restroom(
            id="r9", venue_id="v1", gender=Gender.WOMENS, moderation_status="pending"
        )

        response = client.post(
            "/api/facilities",
            json={"venue_id": "v1", "gender": "womens", "station_status": "verified_present"},
        )

        assert response.status_code == 201
        assert response.json() == {"success": True, "facility_id": "r9"}

    def test_submit_facility_invalid_body(self, client):
        response = client.post("/api/facilities", json={"venue_id": "v1", "gender": "family"})
        assert response.status_code == 422

    def test_vote_unknown_venue(self, client, container):
        container.venue_handler.add_vote.return_value = None
        response = client.post("/api/votes", json={"venue_id": "nope", "vote_type": "up"})
        assert response.status_code == 404

    def test_report_issue(self, client, container):
        container.venue_handler.report_issue.return_value = Restroom(
            id="r1", venue_id="v1", gender=Gender.MENS
        )

        response = client.post(
            "/api/report-issue",
            json={"restroom_id": "r1", "issue_type": "cleanliness", "notes": "Sticky"},
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Report submitted successfully"

    def test_report_issue_unknown_restroom(self, client, container):
        container.venue_handler.report_issue.return_value = None
        response = client.post(
            "/api/report-issue", json={"restroom_id": "nope", "issue_type": "safety"}
        )
        assert response.status_code == 404
        assert response.json()["detail"] == "Restroom not found"

    def test_direction_click_uses_forwarded_ip(self, client, container):
        container.venue_handler.record_direction_click.return_value = 7

        response = client.post(
            "/api/direction-click",
            json={"venue_id": "v1", "source": "detail"},
            headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1", "User-Agent": "test-agent"},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "click_count": 7}
        kwargs = container.venue_handler.record_direction_click.call_args.kwargs
        assert kwargs["ip"] == "203.0.113.7"
        assert kwargs["user_agent"] == "test-agent"

    def test_direction_click_unknown_venue(self, client, container):
        container.venue_handler.record_direction_click.return_value = None

        response = client.post("/api/direction-click", json={"venue_id": "nope"})

        assert response.status_code == 404
        assert response.json()["detail"] == "Venue not found"

    def test_direction_click_store_failure(self, client, container):
        container.venue_handler.record_direction_click.side_effect = redis.ConnectionError()
        response = client.post("/api/direction-click", json={"venue_id": "v1"})
        assert response.status_code == 500

    def test_get_venue_store_failure(self, client, container):
        container.venue_handler.get_venue_detail.side_effect = redis.ConnectionError("down")
        response = client.get("/api/venues/v1")
        assert response.status_code == 500
        assert response.json()["detail"] == "Internal server error"


class TestAdminAuth:
    """Bearer token checks on the admin API."""

    def test_missing_token(self, client):
        response = client.get("/api/admin/stats")
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_wrong_token(self, client):
        response = client.get("/api/admin/stats", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    def test_no_password_configured_denies_everything(self, client, container):
        container.settings = Settings(admin_password="")
        response = client.get("/api/admin/stats", headers={"Authorization": "Bearer "})
        assert response.status_code == 401
        assert "ADMIN_PASSWORD" in response.json()["detail"]

    def test_health_needs_no_token(self, client, container):
        container.admin_handler.health.return_value = {
            "status": "misconfigured",
            "checks": {"admin_password": True, "google_places_key": False},
            "message": "Some configuration is missing. Check environment variables.",
            "missing": ["google_places_key"],
        }
        response = client.get("/api/admin/health")
        assert response.status_code == 200
        assert response.json()["missing"] == ["google_places_key"]


class TestAdminRoutes:
    """Admin endpoints with a valid token."""

    def test_stats(self, client, container):
        container.admin_handler.stats.return_value = {
            "total_venues": 1, "total_restrooms": 2, "total_direction_clicks": 3,
            "recent_venues": [],
        }
        response = client.get("/api/admin/stats", headers=AUTH)
        assert response.status_code == 200
        assert response.json()["total_restrooms"] == 2

    def test_create_venue(self, client, container):
        container.admin_handler.create_venue = AsyncMock(return_value=make_venue())

        response = client.post(
            "/api/admin/venues",
            json={"place_id": "ChIJ1", "venue_type": "food_drink"},
            headers=AUTH,
        )

        assert response.status_code == 200
        assert response.json()["venue_id"] == "v1"
        assert response.json()["google_data_cached"] is True

    @pytest.mark.parametrize(
        "error,status",
        [
            (DuplicateVenueError("ChIJ1", "v1"), 409),
            (PlacesUnavailableError("no key"), 503),
            (PlaceLookupError("failed"), 502),
        ],
    )
    def test_create_venue_errors(self, client, container, error, status):
        container.admin_handler.create_venue = AsyncMock(side_effect=error)
        response = client.post(
            "/api/admin/venues",
            json={"place_id": "ChIJ1", "venue_type": "food_drink"},
            headers=AUTH,
        )
        assert response.status_code == status

    def test_create_venue_invalid_type(self, client):
        response = client.post(
            "/api/admin/venues", json={"place_id": "ChIJ1", "venue_type": "bars"}, headers=AUTH
        )
        assert response.status_code == 422

    def test_list_venues_route_not_shadowed(self, client, container):
        container.admin_handler.list_venues.return_value = []
        response = client.get("/api/admin/venues/list", headers=AUTH)
        assert response.status_code == 200
        container.admin_handler.get_venue.assert_not_called()

    def test_delete_missing_venue(self, client, container):
        container.admin_handler.delete_venue.return_value = False
        assert client.delete("/api/admin/venues/nope", headers=AUTH).status_code == 404

    def test_update_restroom_empty_body(self, client, container):
        container.admin_handler.update_restroom.side_effect = ValueError("No fields to update")
        response = client.put("/api/admin/restrooms/r1", json={}, headers=AUTH)
        assert response.status_code == 400
        assert response.json()["detail"] == "No fields to update"

    def test_update_restroom_null_gender(self, client, container):
        response = client.put("/api/admin/restrooms/r1", json={"gender": None}, headers=AUTH)
        assert response.status_code == 422
        container.admin_handler.update_restroom.assert_not_called()

    def test_update_restroom_null_status(self, client, container):
        response = client.put("/api/admin/restrooms/r1", json={"status": None}, headers=AUTH)
        assert response.status_code == 422
        container.admin_handler.update_restroom.assert_not_called()

    def test_create_restroom_missing_venue(self, client, container):
        container.admin_handler.create_restroom.return_value = None
        response = client.post(
            "/api/admin/restrooms",
            json={"venue_id": "nope", "gender": "mens", "station_location": "near_sinks"},
            headers=AUTH,
        )
        assert response.status_code == 404

    def test_list_restrooms_requires_venue_id(self, client):
        assert client.get("/api/admin/restrooms", headers=AUTH).status_code == 422

    def test_upload_photo(self, client, container):
        container.admin_handler.upload_photo = AsyncMock(
            return_value=RestroomPhoto(
                id="p1", restroom_id="r1", image_url="https://bucket/p1.jpg", is_primary=True
            )
        )

        response = client.post(
            "/api/admin/restrooms/r1/photos",
            files={"file": ("station.jpg", b"jpegbytes", "image/jpeg")},
            headers=AUTH,
        )

        assert response.status_code == 200
        assert response.json()["photo"]["is_primary"] is True
        container.admin_handler.upload_photo.assert_awaited_once_with(
            "r1", b"jpegbytes", "image/jpeg"
        )

    @pytest.mark.parametrize(
        "error,status",
        [
            (PhotoStorageUnavailableError("no s3"), 503),
            (ValueError("Invalid file type. Allowed: JPEG, PNG, WebP"), 400),
            (RuntimeError("s3 exploded"), 500),
        ],
    )
    def test_upload_photo_errors(self, client, container, error, status):
        container.admin_handler.upload_photo = AsyncMock(side_effect=error)
        response = client.post(
            "/api/admin/restrooms/r1/photos",
            files={"file": ("station.gif", b"gif", "image/gif")},
            headers=AUTH,
        )
        assert response.status_code == status
