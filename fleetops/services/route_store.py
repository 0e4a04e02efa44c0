"""
Persistence gateway for truck routes.

Every write is committed on its own. Route creation and the write-back of
calculated metrics are separate commits: a route whose metrics could not be
saved stays in PENDING_CALCULATION, where a later recalculation can pick it up.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fleetops.models import Route, RouteStatus
from fleetops.schemas.routing import Coordinate, RouteCalculation


logger = logging.getLogger(__name__)


class RoutePersistenceError(Exception):
    """A route could not be written to the database."""


class RouteStore:
    """CRUD operations on Route rows."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _commit(self, action: str) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as exc:
            logger.exception("Failed to %s", action)
            await self.db.rollback()
            raise RoutePersistenceError(f"Failed to {action}") from exc

    async def create(
        self,
        name: str,
        origin: str,
        destination: str,
        origin_coordinate: Coordinate,
        destination_coordinate: Coordinate,
        status: RouteStatus = RouteStatus.PLANNED,
        coordinates_approximate: bool = False,
        driver_id: Optional[int] = None,
        shipment_id: Optional[int] = None,
        distance_km: Optional[float] = None,
    ) -> Route:
        route = Route(
            name=name,
            origin=origin,
            destination=destination,
            origin_lat=origin_coordinate.lat,
            origin_lng=origin_coordinate.lng,
            destination_lat=destination_coordinate.lat,
            destination_lng=destination_coordinate.lng,
            status=status,
            coordinates_approximate=coordinates_approximate,
            driver_id=driver_id,
            shipment_id=shipment_id,
            distance_km=distance_km,
        )
        self.db.add(route)
        await self._commit(f"create route {name!r}")
        await self.db.refresh(route)
        logger.info("Created route %s (%s -> %s)", route.id, origin, destination)
        return route

    async def get(self, route_id: int) -> Optional[Route]:
        return await self.db.get(Route, route_id, populate_existing=True)

    async def list(self, driver_id: Optional[int] = None) -> List[Route]:
        query = select(Route).order_by(Route.created_at.desc(), Route.id.desc())
        if driver_id is not None:
            query = query.where(Route.driver_id == driver_id)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def update(self, route: Route, changes: Dict[str, Any]) -> Route:
        for field, value in changes.items():
            setattr(route, field, value)
        await self._commit(f"update route {route.id}")
        await self.db.refresh(route)
        return route

    async def apply_calculation(self, route: Route, calculation: RouteCalculation) -> Route:
        """Write calculated metrics back onto a stored route."""
        route.total_miles = calculation.total_miles
        route.estimated_duration_minutes = calculation.total_minutes
        route.state_breakdown = [entry.model_dump() for entry in calculation.jurisdiction_breakdown]
        route.path = [point.model_dump() for point in calculation.path]
        if route.status == RouteStatus.PENDING_CALCULATION:
            route.status = RouteStatus.PLANNED
        await self._commit(f"save calculated metrics for route {route.id}")
        await self.db.refresh(route)
        return route

    async def delete(self, route: Route) -> None:
        await self.db.delete(route)
        await self._commit(f"delete route {route.id}")
        logger.info("Deleted route %s", route.id)
