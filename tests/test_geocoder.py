"""
Tests for address geocoding and the fallback coordinate.
"""

import pytest

from fleetops.services.geocoder import FallbackUsed, Geocoder, Resolved
from fleetops.schemas.routing import Coordinate
from tests.fixtures.test_data import FALLBACK_LAT, FALLBACK_LNG, ORLANDO, search_result

FALLBACK = Coordinate(lat=FALLBACK_LAT, lng=FALLBACK_LNG)


class TestGeocoder:
    """Geocoding through the provider search endpoint."""

    @pytest.mark.asyncio
    async def test_resolves_known_address(self, geocoder, fake_tomtom):
        result = await geocoder.geocode("Orlando, FL")

        assert isinstance(result, Resolved)
        assert not result.is_fallback
        assert result.coordinate.lat == ORLANDO[0]
        assert result.coordinate.lng == ORLANDO[1]
        assert len(fake_tomtom.search_calls) == 1

    @pytest.mark.asyncio
    async def test_search_params(self, geocoder, fake_tomtom):
        await geocoder.geocode("Orlando, FL")

        params = fake_tomtom.search_calls[0].url.params
        assert params["countrySet"] == "US"
        assert params["limit"] == "1"
        assert params["key"] == "test-key"

    @pytest.mark.asyncio
    async def test_no_results_uses_fallback(self, geocoder):
        result = await geocoder.geocode("Nowhere Special, ZZ")

        assert isinstance(result, FallbackUsed)
        assert result.is_fallback
        assert result.coordinate.lat == 25.7617
        assert result.coordinate.lng == -80.1918
        assert "Nowhere Special, ZZ" in result.reason

    @pytest.mark.asyncio
    async def test_unconfigured_client_makes_no_request(self, unconfigured_client, fake_tomtom):
        geocoder = Geocoder(unconfigured_client, "US", FALLBACK)

        result = await geocoder.geocode("Orlando, FL")

        assert isinstance(result, FallbackUsed)
        assert result.coordinate == FALLBACK
        assert fake_tomtom.requests == []

    @pytest.mark.asyncio
    async def test_provider_error_uses_fallback(self, geocoder, fake_tomtom):
        fake_tomtom.search_status = 500

        result = await geocoder.geocode("Orlando, FL")

        assert isinstance(result, FallbackUsed)
        assert "500" in result.reason

    @pytest.mark.asyncio
    async def test_result_without_position_uses_fallback(self, geocoder, fake_tomtom):
        broken = search_result(*ORLANDO, address="Orlando, FL")
        del broken["position"]
        fake_tomtom.places["Orlando, FL"] = [broken]

        result = await geocoder.geocode("Orlando, FL")

        assert isinstance(result, FallbackUsed)
        assert result.coordinate == FALLBACK

    @pytest.mark.asyncio
    async def test_first_result_wins(self, geocoder, fake_tomtom):
        fake_tomtom.places["Springfield"] = [
            search_result(39.7817, -89.6501, address="Springfield, IL"),
            search_result(37.2090, -93.2923, address="Springfield, MO"),
        ]

        result = await geocoder.geocode("Springfield")

        assert isinstance(result, Resolved)
        assert result.coordinate.lat == 39.7817

    @pytest.mark.asyncio
    @pytest.mark.parametrize("results", [[None], ["Weird"], [{"position": None}], {"0": {}}])
    async def test_malformed_results_use_fallback(self, geocoder, fake_tomtom, results):
        fake_tomtom.places["Weird"] = results

        result = await geocoder.geocode("Weird")

        assert isinstance(result, FallbackUsed)
        assert result.coordinate == FALLBACK
        assert result.reason == "Geocoding response had no usable position"
