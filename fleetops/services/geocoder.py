"""
Address geocoding with a fixed fallback coordinate.

Geocoding never fails the caller: when the provider has nothing usable the
configured fallback is returned, tagged so callers can tell a real match from
a best guess.
"""

import logging
from dataclasses import dataclass
from typing import Union

from fleetops.schemas.routing import Coordinate
from fleetops.services.tomtom_client import TomTomClient, TomTomError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolved:
    """The provider matched the address."""
    coordinate: Coordinate

    is_fallback = False


@dataclass(frozen=True)
class FallbackUsed:
    """The provider could not match the address; coordinate is the default city."""
    coordinate: Coordinate
    reason: str

    is_fallback = True


GeocodeResult = Union[Resolved, FallbackUsed]


class Geocoder:
    """Resolves free-text addresses to coordinates through the provider's search endpoint."""

    def __init__(self, client: TomTomClient, country_set: str, fallback: Coordinate):
        self.client = client
        self.country_set = country_set
        self.fallback = fallback

    def _fallback(self, address: str, reason: str) -> FallbackUsed:
        logger.warning("Geocoding '%s' fell back to %s: %s", address, self.fallback, reason)
        return FallbackUsed(coordinate=self.fallback, reason=reason)

    async def geocode(self, address: str) -> GeocodeResult:
        if not self.client.configured:
            return self._fallback(address, "Mapping API key is not configured")

        try:
            data = await self.client.search(address, self.country_set, limit=1)
        except TomTomError as exc:
            return self._fallback(address, str(exc))

        results = data.get("results") or []
        if not results:
            return self._fallback(address, f"No location found for '{address}'")

        try:
            position = results[0]["position"]
            coordinate = Coordinate(lat=float(position["lat"]), lng=float(position["lon"]))
        except (IndexError, KeyError, TypeError, ValueError):
            return self._fallback(address, "Geocoding response had no usable position")

        return Resolved(coordinate=coordinate)
