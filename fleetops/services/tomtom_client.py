"""
HTTP client for the TomTom Search and Routing APIs.

This is the only transport used to reach the mapping provider; geocoding and
route calculation both go through it.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from fleetops.config import Settings
from fleetops.schemas.routing import Coordinate


logger = logging.getLogger(__name__)


class TomTomError(Exception):
    """Raised when the provider cannot be reached or answers with garbage."""


class RoutingNotConfiguredError(TomTomError):
    """Raised when no usable API key is configured."""


class TomTomClient:
    """Thin async wrapper over the provider's REST endpoints."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.tomtom.com",
        timeout: float = 30.0,
        configured: Optional[bool] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.configured = bool(api_key) if configured is None else configured
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings, http_client: Optional[httpx.AsyncClient] = None) -> "TomTomClient":
        return cls(
            api_key=settings.tomtom_api_key,
            base_url=settings.tomtom_base_url,
            timeout=settings.tomtom_timeout_seconds,
            configured=settings.routing_configured,
            http_client=http_client,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def _get_json(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        if not self.configured:
            raise RoutingNotConfiguredError("TomTom API key is not configured")

        url = f"{self.base_url}{path}"
        try:
            response = await self._http.get(url, params={**params, "key": self.api_key})
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            raise TomTomError(
                f"TomTom request to {path} failed with HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise TomTomError(f"TomTom request to {path} failed: {exc}") from exc
        except ValueError as exc:
            raise TomTomError(f"TomTom response from {path} is not valid JSON") from exc

        if not isinstance(data, dict):
            raise TomTomError(f"Unexpected TomTom payload from {path}")
        return data

    async def search(self, query: str, country_set: str, limit: int = 1) -> Dict[str, Any]:
        """Free-text search, used for geocoding an address."""
        path = f"/search/2/search/{quote(query, safe='')}.json"
        return await self._get_json(path, {"countrySet": country_set, "limit": limit})

    async def calculate_route(
        self,
        origin: Coordinate,
        destination: Coordinate,
        params: Dict[str, str],
    ) -> Dict[str, Any]:
        """Truck route between two points; params carry vehicle and routing options."""
        locations = f"{origin.lat},{origin.lng}:{destination.lat},{destination.lng}"
        logger.debug("Requesting truck route %s", locations)
        return await self._get_json(f"/routing/1/calculateRoute/{locations}/json", params)
