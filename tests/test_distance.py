"""Unit tests for distance helpers."""
import pytest

from diaperpal.utils.distance import METERS_PER_MILE, format_distance, meters_to_miles


class TestDistance:
    """Tests for meters_to_miles and format_distance."""

    def test_meters_to_miles(self):
        assert meters_to_miles(METERS_PER_MILE) == pytest.approx(1.0)
        assert meters_to_miles(0) == 0

    @pytest.mark.parametrize(
        "meters,expected",
        [
            (0, "0.0 mi"),
            (400, "0.2 mi"),  # short distances stay in miles
            (1609.344, "1.0 mi"),
            (8046.72, "5.0 mi"),
            (2414.016, "1.5 mi"),
        ],
    )
    def test_format_distance(self, meters, expected):
        assert format_distance(meters) == expected
