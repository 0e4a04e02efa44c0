"""
Tests for route persistence.
"""

import pytest
from sqlalchemy.exc import OperationalError

from fleetops.models import RouteStatus
from fleetops.schemas.routing import Coordinate, JurisdictionMiles, PathPoint, RouteCalculation
from fleetops.services.route_store import RoutePersistenceError
from tests.fixtures.test_data import MIAMI, ORLANDO, generate_route_rows

MIAMI_POINT = Coordinate(lat=MIAMI[0], lng=MIAMI[1])
ORLANDO_POINT = Coordinate(lat=ORLANDO[0], lng=ORLANDO[1])


def _calculation(miles: float = 234.9) -> RouteCalculation:
    return RouteCalculation(
        path=[PathPoint(lng=MIAMI[1], lat=MIAMI[0]), PathPoint(lng=ORLANDO[1], lat=ORLANDO[0])],
        total_miles=miles,
        total_minutes=210,
        jurisdiction_breakdown=[JurisdictionMiles(jurisdiction="Florida", miles=miles)],
    )


async def _create_from_row(route_store, row):
    return await route_store.create(
        name=row["name"],
        origin=row["origin"],
        destination=row["destination"],
        origin_coordinate=Coordinate(lat=row["origin_lat"], lng=row["origin_lng"]),
        destination_coordinate=Coordinate(lat=row["destination_lat"], lng=row["destination_lng"]),
        driver_id=row["driver_id"],
    )


class TestRouteStore:
    """CRUD and metric write-back."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, route_store):
        route = await route_store.create(
            name="Miami - Orlando Truck Route",
            origin="Miami, FL",
            destination="Orlando, FL",
            origin_coordinate=MIAMI_POINT,
            destination_coordinate=ORLANDO_POINT,
            status=RouteStatus.PENDING_CALCULATION,
        )

        assert route.id is not None
        assert route.status == RouteStatus.PENDING_CALCULATION
        assert route.total_miles is None
        assert route.created_at is not None

        fetched = await route_store.get(route.id)
        assert fetched.name == "Miami - Orlando Truck Route"
        assert fetched.origin_lat == MIAMI[0]
        assert fetched.has_coordinates

    @pytest.mark.asyncio
    async def test_get_missing(self, route_store):
        assert await route_store.get(9999) is None

    @pytest.mark.asyncio
    async def test_apply_calculation_moves_pending_to_planned(self, route_store):
        route = await route_store.create(
            name="R", origin="Miami, FL", destination="Orlando, FL",
            origin_coordinate=MIAMI_POINT, destination_coordinate=ORLANDO_POINT,
            status=RouteStatus.PENDING_CALCULATION,
        )

        route = await route_store.apply_calculation(route, _calculation())

        assert route.status == RouteStatus.PLANNED
        assert route.total_miles == 234.9
        assert route.estimated_duration_minutes == 210
        assert route.state_breakdown == [{"jurisdiction": "Florida", "miles": 234.9}]
        assert route.path[0] == {"lng": MIAMI[1], "lat": MIAMI[0]}

    @pytest.mark.asyncio
    async def test_apply_calculation_keeps_active_status(self, route_store):
        route = await route_store.create(
            name="R", origin="Miami, FL", destination="Orlando, FL",
            origin_coordinate=MIAMI_POINT, destination_coordinate=ORLANDO_POINT,
            status=RouteStatus.ACTIVE,
        )

        route = await route_store.apply_calculation(route, _calculation())

        assert route.status == RouteStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_list_filters_by_driver(self, route_store):
        for row in generate_route_rows(count=6, driver_ids=(1, 2)):
            await _create_from_row(route_store, row)

        everything = await route_store.list()
        driver_one = await route_store.list(driver_id=1)

        assert len(everything) == 6
        assert len(driver_one) == 3
        assert all(route.driver_id == 1 for route in driver_one)

    @pytest.mark.asyncio
    async def test_list_newest_first(self, route_store):
        rows = generate_route_rows(count=3)
        created = [await _create_from_row(route_store, row) for row in rows]

        listed = await route_store.list()

        assert [r.id for r in listed] == [r.id for r in reversed(created)]

    @pytest.mark.asyncio
    async def test_update(self, route_store):
        route = await route_store.create(
            name="Old", origin="Miami, FL", destination="Orlando, FL",
            origin_coordinate=MIAMI_POINT, destination_coordinate=ORLANDO_POINT,
        )

        route = await route_store.update(route, {"name": "New", "status": RouteStatus.COMPLETED})

        assert route.name == "New"
        assert route.status == RouteStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_delete(self, route_store):
        route = await route_store.create(
            name="Gone", origin="Miami, FL", destination="Orlando, FL",
            origin_coordinate=MIAMI_POINT, destination_coordinate=ORLANDO_POINT,
        )
        route_id = route.id

        await route_store.delete(route)

        assert await route_store.get(route_id) is None

    @pytest.mark.asyncio
    async def test_commit_failure_raises_persistence_error(self, route_store, monkeypatch):
        async def failing_commit():
            raise OperationalError("COMMIT", {}, Exception("database is locked"))

        monkeypatch.setattr(route_store.db, "commit", failing_commit)

        with pytest.raises(RoutePersistenceError):
            await route_store.create(
                name="R", origin="Miami, FL", destination="Orlando, FL",
                origin_coordinate=MIAMI_POINT, destination_coordinate=ORLANDO_POINT,
            )

    @pytest.mark.asyncio
    async def test_legacy_distance_kept(self, route_store):
        route = await route_store.create(
            name="Legacy", origin="Miami, FL", destination="Orlando, FL",
            origin_coordinate=MIAMI_POINT, destination_coordinate=ORLANDO_POINT,
            distance_km=380.0,
        )

        fetched = await route_store.get(route.id)

        assert fetched.distance_km == 380.0
        assert fetched.total_miles is None
