"""
FastAPI dependencies wiring the routing services together.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from fleetops.config import get_settings
from fleetops.database import get_db
from fleetops.services.geocoder import Geocoder
from fleetops.services.route_calculator import RouteCalculator
from fleetops.services.route_planner import InFlightGuard, RoutePlanner
from fleetops.services.route_store import RouteStore
from fleetops.services.tomtom_client import TomTomClient


# One guard per process so concurrent requests see each other
submission_guard = InFlightGuard()


def get_tomtom_client(request: Request) -> TomTomClient:
    """Provider client shared by the application; created on first use."""
    client = getattr(request.app.state, "tomtom_client", None)
    if client is None:
        client = TomTomClient.from_settings(get_settings())
        request.app.state.tomtom_client = client
    return client


def get_route_store(db: AsyncSession = Depends(get_db)) -> RouteStore:
    return RouteStore(db)


def get_geocoder(client: TomTomClient = Depends(get_tomtom_client)) -> Geocoder:
    settings = get_settings()
    return Geocoder(client, settings.geocode_country_set, settings.fallback_coordinate)


def get_route_calculator(client: TomTomClient = Depends(get_tomtom_client)) -> RouteCalculator:
    return RouteCalculator(client, get_settings().truck_specification())


def get_route_planner(
    store: RouteStore = Depends(get_route_store),
    geocoder: Geocoder = Depends(get_geocoder),
    calculator: RouteCalculator = Depends(get_route_calculator),
) -> RoutePlanner:
    return RoutePlanner(store, geocoder, calculator, guard=submission_guard)
