"""
Backend API Client for the Route Planning page.

Provides HTTP-based communication with the FastAPI backend.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import requests

from route_dashboard.models import Notice, RouteRecord


logger = logging.getLogger(__name__)

REQUIRED_ROUTE_FIELDS = ("name", "origin", "destination")


def missing_route_fields(name: str, origin: str, destination: str) -> List[str]:
    """Names of the create-form fields left empty."""
    values = {"name": name, "origin": origin, "destination": destination}
    return [f for f in REQUIRED_ROUTE_FIELDS if not (values[f] or "").strip()]


@dataclass
class ApiResult:
    """Outcome of a route-changing call."""
    ok: bool
    route: Optional[RouteRecord] = None
    notices: List[Notice] = field(default_factory=list)
    error: Optional[str] = None


class BackendClient:
    """Client for communicating with the Fleet Route Planner backend API."""

    def __init__(self, base_url: str = "http://localhost:8000", api_prefix: str = "/api/v1"):
        """
        Initialize the backend client.

        Args:
            base_url: Base URL of the backend API server
            api_prefix: Path prefix of the versioned API
        """
        self.base_url = base_url.rstrip('/')
        self.api_prefix = api_prefix
        self.timeout = 30  # seconds; route calculation waits on the provider

    def _url(self, endpoint: str) -> str:
        return f"{self.base_url}{self.api_prefix}{endpoint}"

    @staticmethod
    def _error_detail(error: requests.exceptions.RequestException) -> str:
        response = getattr(error, "response", None)
        if response is not None:
            try:
                detail = response.json().get("detail")
            except ValueError:
                detail = None
            if detail:
                return detail if isinstance(detail, str) else str(detail)
            return f"HTTP {response.status_code}"
        return str(error)

    def _request(self, method: str, endpoint: str, **kwargs) -> Tuple[Optional[Any], Optional[str]]:
        """Make a request; returns (json, None) on success or (None, error message)."""
        try:
            response = requests.request(method, self._url(endpoint), timeout=self.timeout, **kwargs)
            response.raise_for_status()
            if response.status_code == 204 or not response.content:
                return {}, None
            return response.json(), None
        except requests.exceptions.RequestException as e:
            message = self._error_detail(e)
            logger.warning("API request %s %s failed: %s", method, endpoint, message)
            return None, message

    def _plan_result(self, data: Optional[Dict], error: Optional[str]) -> ApiResult:
        if data is None:
            return ApiResult(ok=False, error=error)
        return ApiResult(
            ok=True,
            route=RouteRecord.from_dict(data["route"]),
            notices=[Notice.from_dict(n) for n in data.get("notices", [])],
        )

    def check_health(self) -> Tuple[bool, str]:
        """
        Check if the backend is healthy and whether routing is configured.

        Returns:
            Tuple of (is_connected, status_message)
        """
        try:
            response = requests.get(f"{self.base_url}/health", timeout=5)
            if response.status_code == 200:
                data = response.json()
                if not data.get("routing_configured", False):
                    return True, "Connected - routing API key not configured"
                return True, f"Connected - {data.get('status', 'OK')}"
            return False, f"Unhealthy: HTTP {response.status_code}"
        except requests.exceptions.ConnectionError:
            return False, "Cannot connect to backend"
        except requests.exceptions.Timeout:
            return False, "Connection timeout"
        except requests.exceptions.RequestException as e:
            return False, f"Error: {e}"

    def list_routes(self, driver_id: Optional[int] = None) -> List[RouteRecord]:
        """
        Get stored routes, newest first.

        Args:
            driver_id: Only return routes owned by this driver

        Returns:
            List of RouteRecord objects (empty when the backend is unreachable)
        """
        params = {"driver_id": driver_id} if driver_id is not None else None
        data, _ = self._request("GET", "/routes", params=params)
        if not data:
            return []
        return [RouteRecord.from_dict(item) for item in data]

    def create_route(
        self,
        name: str,
        origin: str,
        destination: str,
        driver_id: Optional[int] = None,
    ) -> ApiResult:
        """
        Plan a new truck route.

        Empty fields are rejected here, before anything is sent.
        """
        missing = missing_route_fields(name, origin, destination)
        if missing:
            return ApiResult(
                ok=False,
                error=f"Please fill in all required fields: {', '.join(missing)}",
            )

        payload = {
            "name": name.strip(),
            "origin": origin.strip(),
            "destination": destination.strip(),
            "driver_id": driver_id,
        }
        data, error = self._request("POST", "/routes", json=payload)
        return self._plan_result(data, error)

    def recalculate_route(self, route_id: int) -> ApiResult:
        data, error = self._request("POST", f"/routes/{route_id}/recalculate")
        return self._plan_result(data, error)

    def update_status(self, route_id: int, status: str) -> ApiResult:
        data, error = self._request("PATCH", f"/routes/{route_id}", json={"status": status})
        if data is None:
            return ApiResult(ok=False, error=error)
        return ApiResult(ok=True, route=RouteRecord.from_dict(data))

    def delete_route(self, route_id: int) -> bool:
        data, _ = self._request("DELETE", f"/routes/{route_id}")
        return data is not None
