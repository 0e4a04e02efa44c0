"""
Truck route calculation.

Builds a truck-aware routing request from the fleet's truck specification,
sends it through the provider client and turns the response into miles,
minutes, a drawable path and a per-state mileage breakdown.
"""

import logging
import math
from typing import Any, Dict, List, Optional

from fleetops.schemas.routing import Coordinate, JurisdictionMiles, PathPoint, RouteCalculation
from fleetops.services.tomtom_client import RoutingNotConfiguredError, TomTomClient, TomTomError
from fleetops.services.units import (
    TruckSpecification,
    haversine_meters,
    meters_to_miles,
    round_half_up,
    seconds_to_minutes,
)


logger = logging.getLogger(__name__)

MULTIPLE_STATES = "Multiple States"

# Section fields that may carry the state/province name, most descriptive first
JURISDICTION_KEYS = ("countrySubdivisionName", "countrySubdivision", "countrySubdivisionCode")

ROUTING_OPTIONS = {
    "travelMode": "truck",
    "traffic": "true",
    "routeType": "eco",
    "sectionType": "country",
}


class RouteCalculationError(Exception):
    """The provider could not produce a usable route."""


class RouteNotConfiguredError(RouteCalculationError):
    """Route calculation is unavailable because the provider key is missing."""


def _section_jurisdiction(section: Dict[str, Any]) -> Optional[str]:
    for key in JURISDICTION_KEYS:
        value = section.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _section_length_meters(section: Dict[str, Any], points: List[Coordinate]) -> float:
    """Length reported by the provider, or measured along the leg between the section's point indexes."""
    raw_length = section.get("lengthInMeters")
    if raw_length is not None:
        try:
            length = float(raw_length)
        except (TypeError, ValueError):
            length = None
        if length is None or not math.isfinite(length):
            logger.warning("Ignoring section with unusable length %r", raw_length)
            return 0.0
        return length

    start = section.get("startPointIndex")
    end = section.get("endPointIndex")
    if not isinstance(start, int) or not isinstance(end, int) or not 0 <= start < end < len(points):
        return 0.0
    return sum(haversine_meters(points[i], points[i + 1]) for i in range(start, end))


def build_jurisdiction_breakdown(
    sections: List[Dict[str, Any]],
    total_miles: float,
    points: Optional[List[Coordinate]] = None,
) -> List[JurisdictionMiles]:
    """
    Sum section lengths per state/province, first-seen state first.

    Falls back to a single "Multiple States" entry carrying the whole route
    distance when no section names a jurisdiction, so a successful
    calculation never yields an empty breakdown.
    """
    points = points or []
    miles_by_jurisdiction: Dict[str, float] = {}

    for section in sections:
        if not isinstance(section, dict):
            continue
        name = _section_jurisdiction(section)
        if name is None:
            continue
        length = _section_length_meters(section, points)
        if length <= 0:
            continue
        running = miles_by_jurisdiction.get(name, 0.0) + meters_to_miles(length)
        miles_by_jurisdiction[name] = round_half_up(running, 1)

    if not miles_by_jurisdiction:
        return [JurisdictionMiles(jurisdiction=MULTIPLE_STATES, miles=total_miles)]

    return [
        JurisdictionMiles(jurisdiction=name, miles=miles)
        for name, miles in miles_by_jurisdiction.items()
    ]


def parse_route_response(data: Dict[str, Any]) -> RouteCalculation:
    """Convert a calculateRoute payload into a RouteCalculation."""
    routes = data.get("routes") or []
    if not routes:
        raise RouteCalculationError("No truck route found between origin and destination")

    try:
        route = routes[0]
        summary = route["summary"]
        total_miles = meters_to_miles(float(summary["lengthInMeters"]))
        total_minutes = seconds_to_minutes(float(summary["travelTimeInSeconds"]))
        legs = route.get("legs") or []
        raw_points = legs[0].get("points", []) if legs else []
        points = [
            Coordinate(lat=float(point["latitude"]), lng=float(point["longitude"]))
            for point in raw_points
        ]
        sections = route.get("sections") or []
        if not isinstance(sections, list):
            raise TypeError(f"sections must be a list, got {type(sections).__name__}")
        breakdown = build_jurisdiction_breakdown(sections, total_miles, points)
        return RouteCalculation(
            path=[PathPoint(lng=point.lng, lat=point.lat) for point in points],
            total_miles=total_miles,
            total_minutes=total_minutes,
            jurisdiction_breakdown=breakdown,
        )
    except (ArithmeticError, AttributeError, IndexError, KeyError, TypeError, ValueError) as exc:
        raise RouteCalculationError(f"Malformed routing response: {exc!r}") from exc


class RouteCalculator:
    """Calculates truck routes for a fixed truck specification."""

    def __init__(self, client: TomTomClient, truck: TruckSpecification):
        self.client = client
        self.truck = truck

    @property
    def configured(self) -> bool:
        return self.client.configured

    def request_params(self) -> Dict[str, str]:
        return {**ROUTING_OPTIONS, **self.truck.to_routing_params()}

    async def calculate(self, origin: Coordinate, destination: Coordinate) -> RouteCalculation:
        try:
            data = await self.client.calculate_route(origin, destination, self.request_params())
        except RoutingNotConfiguredError as exc:
            raise RouteNotConfiguredError(str(exc)) from exc
        except TomTomError as exc:
            logger.error("Truck route calculation failed: %s", exc)
            raise RouteCalculationError(str(exc)) from exc

        calculation = parse_route_response(data)
        logger.info(
            "Calculated truck route: %.1f mi, %d min, %d jurisdiction(s)",
            calculation.total_miles,
            calculation.total_minutes,
            len(calculation.jurisdiction_breakdown),
        )
        return calculation
