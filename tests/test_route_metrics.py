"""
Tests for list-view distance and duration display.
"""

from fleetops.services.route_metrics import (
    DISTANCE_CALCULATED,
    DISTANCE_LEGACY,
    display_miles,
    format_duration,
)


class TestDisplayMiles:
    def test_calculated_miles_win(self):
        assert display_miles(234.9, 380.0) == (234.9, DISTANCE_CALCULATED)

    def test_legacy_km_converted(self):
        assert display_miles(None, 100.0) == (62.1, DISTANCE_LEGACY)

    def test_nothing_known(self):
        assert display_miles(None, None) == (None, None)

    def test_zero_miles_is_a_value(self):
        assert display_miles(0.0, 50.0) == (0.0, DISTANCE_CALCULATED)


class TestFormatDuration:
    def test_hours_and_minutes(self):
        assert format_duration(307) == "5h 7m"

    def test_under_an_hour(self):
        assert format_duration(45) == "0h 45m"

    def test_missing(self):
        assert format_duration(None) is None
