"""Unit tests for the nearby search pipeline."""
from datetime import datetime
from unittest.mock import Mock

import pytest
import redis

from diaperpal.models import (
    Gender,
    NearbyVenue,
    Restroom,
    RestroomPhoto,
    RestroomWithPhotos,
    Venue,
    VenueType,
)
from diaperpal.models.requests import NearbySearchParams
from diaperpal.services.nearby_search_service import (
    NearbySearchService,
    filter_nearby_venues,
)

# Monday noon
NOW = datetime(2024, 1, 1, 12, 0)


def make_row(venue_id, venue_type=VenueType.FOOD_DRINK, genders=(Gender.WOMENS,), is_open=True):
    return NearbyVenue(
        id=venue_id,
        name=venue_id,
        address="",
        lat=0,
        lng=0,
        venue_type=venue_type,
        distance=0.5,
        distance_display="0.5 mi",
        is_open=is_open,
        restrooms=[
            RestroomWithPhotos(id=f"{venue_id}-{g.value}", venue_id=venue_id, gender=g)
            for g in genders
        ],
    )


def make_venue(venue_id, venue_type=VenueType.FOOD_DRINK, hours=None):
    return Venue(id=venue_id, name=venue_id, lat=33.88, lng=-118.39, venue_type=venue_type, hours_json=hours)


class TestFilterNearbyVenues:
    """Tests for the pure filter stage."""

    def test_drops_venues_without_restrooms(self):
        rows = [make_row("a"), make_row("b", genders=())]
        assert [v.id for v in filter_nearby_venues(rows)] == ["a"]

    def test_venue_type_filter(self):
        rows = [make_row("a"), make_row("b", venue_type=VenueType.ERRANDS)]
        result = filter_nearby_venues(rows, venue_types={VenueType.ERRANDS})
        assert [v.id for v in result] == ["b"]

    def test_open_now_filter(self):
        rows = [make_row("a", is_open=False), make_row("b")]
        assert [v.id for v in filter_nearby_venues(rows, open_now=True)] == ["b"]

    def test_all_gender_matches_any_gender_filter(self):
        rows = [
            make_row("mens", genders=(Gender.MENS,)),
            make_row("all", genders=(Gender.ALL_GENDER,)),
            make_row("womens", genders=(Gender.WOMENS,)),
        ]
        result = filter_nearby_venues(rows, genders={Gender.WOMENS})
        assert [v.id for v in result] == ["all", "womens"]

    def test_filters_are_and_combined_and_order_preserved(self):
        rows = [
            make_row("c", genders=(Gender.MENS, Gender.WOMENS)),
            make_row("a", venue_type=VenueType.PARKS_OUTDOORS),
            make_row("b", is_open=False),
            make_row("d"),
        ]
        result = filter_nearby_venues(
            rows,
            venue_types={VenueType.FOOD_DRINK},
            genders={Gender.WOMENS},
            open_now=True,
        )
        assert [v.id for v in result] == ["c", "d"]

    def test_empty_filters_keep_everything_with_restrooms(self):
        rows = [make_row("a"), make_row("b", venue_type=VenueType.ERRANDS, is_open=False)]
        assert len(filter_nearby_venues(rows)) == 2

    def test_repeat_filtering_is_stable_and_leaves_rows_untouched(self):
        rows = [
            make_row("a", genders=(Gender.MENS,)),
            make_row("b", genders=()),
            make_row("c", venue_type=VenueType.ERRANDS, genders=(Gender.ALL_GENDER,)),
            make_row("d", is_open=False),
        ]
        ids_before = [v.id for v in rows]
        dumps_before = [v.model_dump() for v in rows]
        kwargs = dict(genders={Gender.WOMENS}, open_now=True)

        first = filter_nearby_venues(rows, **kwargs)
        second = filter_nearby_venues(rows, **kwargs)

        assert [v.id for v in first] == ["c"]
        assert first == second
        assert [v.id for v in rows] == ids_before
        assert [v.model_dump() for v in rows] == dumps_before


class TestNearbySearchService:
    """Tests for NearbySearchService with a mocked DAO."""

    @pytest.fixture
    def mock_venue_dao(self):
        dao = Mock()
        dao.list_photos.return_value = []
        return dao

    @pytest.fixture
    def service(self, mock_venue_dao):
        return NearbySearchService(mock_venue_dao)

    def params(self, **kwargs):
        return NearbySearchParams(lat=33.88, lng=-118.39, radius_km=8, **kwargs)

    def test_search_builds_rows_in_distance_order(self, service, mock_venue_dao):
        hours = {"monday": {"open": "09:00", "close": "17:00"}}
        mock_venue_dao.find_nearby_venues.return_value = [
            (make_venue("near", hours=hours), 482.8032),
            (make_venue("far"), 3218.688),
        ]
        mock_venue_dao.list_visible_restrooms.side_effect = lambda venue_id: [
            Restroom(id=f"r-{venue_id}", venue_id=venue_id, gender=Gender.ALL_GENDER)
        ]

        result = service.search(self.params(), NOW)

        assert [v.id for v in result] == ["near", "far"]
        assert result[0].distance == pytest.approx(0.3)
        assert result[0].distance_display == "0.3 mi"
        assert result[0].is_open is True
        assert result[0].hours_today.open == "09:00"
        assert result[1].is_open is False
        assert result[1].distance_display == "2.0 mi"
        mock_venue_dao.find_nearby_venues.assert_called_once_with(33.88, -118.39, 8)

    def test_photos_attached_to_restrooms(self, service, mock_venue_dao):
        mock_venue_dao.find_nearby_venues.return_value = [(make_venue("v1"), 100.0)]
        mock_venue_dao.list_visible_restrooms.return_value = [
            Restroom(id="r1", venue_id="v1", gender=Gender.MENS)
        ]
        mock_venue_dao.list_photos.return_value = [
            RestroomPhoto(id="p1", restroom_id="r1", image_url="https://img/p1.jpg")
        ]

        result = service.search(self.params(), NOW)

        assert result[0].restrooms[0].photos[0].id == "p1"
        mock_venue_dao.list_photos.assert_called_once_with("r1")

    def test_degraded_restroom_lookup_treated_as_empty(self, service, mock_venue_dao):
        """Test a failed restroom lookup drops only that venue."""
        mock_venue_dao.find_nearby_venues.return_value = [
            (make_venue("broken"), 100.0),
            (make_venue("ok"), 200.0),
        ]

        def restrooms(venue_id):
            if venue_id == "broken":
                raise redis.ConnectionError("connection reset")
            return [Restroom(id="r1", venue_id=venue_id, gender=Gender.WOMENS)]

        mock_venue_dao.list_visible_restrooms.side_effect = restrooms

        result = service.search(self.params(), NOW)

        assert [v.id for v in result] == ["ok"]

    def test_fetch_visible_restrooms_reports_degraded(self, service, mock_venue_dao):
        mock_venue_dao.list_visible_restrooms.side_effect = redis.TimeoutError()

        result = service.fetch_visible_restrooms("v1")

        assert result.is_degraded is True
        assert result.value_or([]) == []

    def test_geo_lookup_failure_propagates(self, service, mock_venue_dao):
        mock_venue_dao.find_nearby_venues.side_effect = redis.ConnectionError("down")

        with pytest.raises(redis.ConnectionError):
            service.search(self.params(), NOW)

    def test_filters_applied(self, service, mock_venue_dao):
        mock_venue_dao.find_nearby_venues.return_value = [
            (make_venue("cafe"), 100.0),
            (make_venue("park", venue_type=VenueType.PARKS_OUTDOORS), 200.0),
        ]
        mock_venue_dao.list_visible_restrooms.side_effect = lambda venue_id: [
            Restroom(id=f"r-{venue_id}", venue_id=venue_id, gender=Gender.MENS)
        ]

        result = service.search(self.params(venue_types="parks_outdoors"), NOW)

        assert [v.id for v in result] == ["park"]

    def test_empty_radius(self, service, mock_venue_dao):
        mock_venue_dao.find_nearby_venues.return_value = []
        assert service.search(self.params(), NOW) == []
