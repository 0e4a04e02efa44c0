"""
Unit conversions between the fleet's imperial vehicle data and the metric
values the routing provider expects.
"""

import math
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Tuple

from fleetops.schemas.routing import Coordinate


POUNDS_TO_KILOGRAMS = 0.453592
FEET_TO_METERS = 0.3048
MPH_TO_KMH = 1.60934
METERS_TO_MILES = 0.000621371
KILOMETERS_TO_MILES = 0.621371
EARTH_RADIUS_METERS = 6371000.0


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like Math.round does: halves go up, not to the even neighbour."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def pounds_to_kilograms(pounds: float) -> int:
    return int(round_half_up(pounds * POUNDS_TO_KILOGRAMS))


def feet_to_meters(feet: float) -> float:
    return round_half_up(feet * FEET_TO_METERS, 1)


def mph_to_kmh(mph: float) -> int:
    return int(round_half_up(mph * MPH_TO_KMH))


def meters_to_miles(meters: float) -> float:
    return round_half_up(meters * METERS_TO_MILES, 1)


def kilometers_to_miles(kilometers: float) -> float:
    return round_half_up(kilometers * KILOMETERS_TO_MILES, 1)


def seconds_to_minutes(seconds: float) -> int:
    return int(round_half_up(seconds / 60))


def haversine_meters(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two coordinates in meters."""
    lat1, lat2 = math.radians(a.lat), math.radians(b.lat)
    d_lat = lat2 - lat1
    d_lng = math.radians(b.lng - a.lng)
    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    return 2 * EARTH_RADIUS_METERS * math.asin(math.sqrt(h))


@dataclass(frozen=True)
class TruckSpecification:
    """
    Physical and legal parameters of the fleet's trucks.

    Values are kept in the units dispatchers use (pounds, feet, mph) and
    converted only when a routing request is built.
    """
    max_speed_mph: float
    gross_weight_lb: float
    axle_weight_lb: float
    length_ft: float
    width_ft: float
    height_ft: float
    commercial: bool = True
    load_types: Tuple[str, ...] = ()

    def to_routing_params(self) -> Dict[str, str]:
        """Query parameters for a truck-aware routing request."""
        params = {
            "vehicleMaxSpeed": str(mph_to_kmh(self.max_speed_mph)),
            "vehicleWeight": str(pounds_to_kilograms(self.gross_weight_lb)),
            "vehicleAxleWeight": str(pounds_to_kilograms(self.axle_weight_lb)),
            "vehicleLength": str(feet_to_meters(self.length_ft)),
            "vehicleWidth": str(feet_to_meters(self.width_ft)),
            "vehicleHeight": str(feet_to_meters(self.height_ft)),
            "vehicleCommercial": "true" if self.commercial else "false",
        }
        if self.load_types:
            params["vehicleLoadType"] = ",".join(self.load_types)
        return params
