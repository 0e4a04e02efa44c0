"""
Route planning orchestration.

Create flow: validate -> geocode origin and destination -> calculate the
truck route -> create the route record -> write the calculated metrics back.
Recalculation reruns the last two steps for a stored route.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Hashable, List, Optional, Set

from fleetops.models import Route, RouteStatus
from fleetops.schemas.route import Notice, RouteCreate
from fleetops.schemas.routing import Coordinate
from fleetops.services.geocoder import Geocoder
from fleetops.services.route_calculator import RouteCalculationError, RouteCalculator
from fleetops.services.route_store import RoutePersistenceError, RouteStore


logger = logging.getLogger(__name__)


class RouteValidationError(ValueError):
    """Required route fields are missing."""

    def __init__(self, missing: List[str]):
        self.missing = missing
        super().__init__(f"Missing required fields: {', '.join(missing)}")


class RouteNotFoundError(LookupError):
    """No route with the requested id."""


class DuplicateSubmissionError(RuntimeError):
    """The same request is already being processed."""


class InFlightGuard:
    """
    Rejects a request while an identical one is still running.

    Shared by every request in the process; keys are released when the
    request finishes, whether it succeeded or not.
    """

    def __init__(self):
        self._active: Set[Hashable] = set()

    def is_active(self, key: Hashable) -> bool:
        return key in self._active

    @asynccontextmanager
    async def hold(self, key: Hashable):
        if key in self._active:
            raise DuplicateSubmissionError("An identical request is already in progress")
        self._active.add(key)
        try:
            yield
        finally:
            self._active.discard(key)


@dataclass
class PlanOutcome:
    route: Route
    notices: List[Notice] = field(default_factory=list)


class RoutePlanner:
    """Coordinates the geocoder, route calculator and route store."""

    def __init__(
        self,
        store: RouteStore,
        geocoder: Geocoder,
        calculator: RouteCalculator,
        guard: Optional[InFlightGuard] = None,
    ):
        self.store = store
        self.geocoder = geocoder
        self.calculator = calculator
        self.guard = guard or InFlightGuard()

    async def _resolve(self, label: str, address: str, notices: List[Notice]):
        result = await self.geocoder.geocode(address)
        if result.is_fallback:
            notices.append(Notice(
                level="warning",
                message=f"Could not locate {label} '{address}' ({result.reason}); using a default location.",
            ))
        return result

    async def _save_metrics(self, route: Route, calculation, notices: List[Notice]) -> Route:
        # The failed commit rolls back and expires the instance; keep the key around
        route_id = route.id
        try:
            return await self.store.apply_calculation(route, calculation)
        except RoutePersistenceError:
            logger.error("Route %s saved but its calculated metrics were not", route_id)
            notices.append(Notice(
                level="warning",
                message="Route saved but metrics unavailable; recalculate it to retry.",
            ))
            return await self.store.get(route_id) or route

    async def plan_route(self, request: RouteCreate) -> PlanOutcome:
        """
        Plan and store a new truck route.

        Raises:
            RouteValidationError: name, origin or destination is empty.
            DuplicateSubmissionError: the same route is already being planned.
            RouteCalculationError: the provider returned no usable route;
                nothing is stored in that case.
        """
        missing = request.missing_fields()
        if missing:
            raise RouteValidationError(missing)

        key = ("plan", request.name.lower(), request.origin.lower(), request.destination.lower())
        async with self.guard.hold(key):
            notices: List[Notice] = []
            origin = await self._resolve("origin", request.origin, notices)
            destination = await self._resolve("destination", request.destination, notices)

            calculation = await self.calculator.calculate(origin.coordinate, destination.coordinate)

            route = await self.store.create(
                name=request.name,
                origin=request.origin,
                destination=request.destination,
                origin_coordinate=origin.coordinate,
                destination_coordinate=destination.coordinate,
                status=RouteStatus.PENDING_CALCULATION,
                coordinates_approximate=origin.is_fallback or destination.is_fallback,
                driver_id=request.driver_id,
                shipment_id=request.shipment_id,
            )
            route = await self._save_metrics(route, calculation, notices)
            notices.insert(0, Notice(level="info", message="The truck route has been created successfully."))
            return PlanOutcome(route=route, notices=notices)

    async def recalculate(self, route_id: int) -> PlanOutcome:
        """Recalculate a stored route and refresh its distance, duration, breakdown and path."""
        route = await self.store.get(route_id)
        if route is None:
            raise RouteNotFoundError(f"Route with ID {route_id} not found")
        if not route.has_coordinates:
            raise RouteCalculationError(f"Route {route_id} has no stored coordinates to recalculate")

        async with self.guard.hold(("recalculate", route_id)):
            notices: List[Notice] = []
            calculation = await self.calculator.calculate(
                Coordinate(lat=route.origin_lat, lng=route.origin_lng),
                Coordinate(lat=route.destination_lat, lng=route.destination_lng),
            )
            route = await self._save_metrics(route, calculation, notices)
            if route.coordinates_approximate:
                notices.append(Notice(
                    level="warning",
                    message="This route uses approximate coordinates for at least one endpoint.",
                ))
            return PlanOutcome(route=route, notices=notices)
