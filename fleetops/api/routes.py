"""
Truck routes API endpoints.
Handles planning, listing, editing, recalculating and deleting routes.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from fleetops.api.deps import get_geocoder, get_route_planner, get_route_store
from fleetops.models import Route
from fleetops.schemas.route import RoutePlanResponse, RouteCreate, RouteResponse, RouteUpdate
from fleetops.schemas.routing import GeocodeResponse
from fleetops.services.geocoder import Geocoder
from fleetops.services.route_calculator import RouteCalculationError, RouteNotConfiguredError
from fleetops.services.route_planner import (
    DuplicateSubmissionError,
    PlanOutcome,
    RouteNotFoundError,
    RoutePlanner,
    RouteValidationError,
)
from fleetops.services.route_store import RoutePersistenceError, RouteStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/routes", tags=["Routes"])
geocode_router = APIRouter(prefix="/geocode", tags=["Geocoding"])


async def _get_route_or_404(store: RouteStore, route_id: int) -> Route:
    route = await store.get(route_id)
    if route is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Route with ID {route_id} not found",
        )
    return route


def _plan_response(outcome: PlanOutcome) -> RoutePlanResponse:
    return RoutePlanResponse(
        route=RouteResponse.model_validate(outcome.route),
        notices=outcome.notices,
    )


def _calculation_failed(exc: RouteCalculationError) -> HTTPException:
    if isinstance(exc, RouteNotConfiguredError):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Truck routing is not configured. Set TOMTOM_API_KEY.",
        )
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=f"Could not calculate truck route: {exc}",
    )


def _persistence_failed(exc: RoutePersistenceError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=str(exc),
    )


@router.get(
    "",
    response_model=List[RouteResponse],
    summary="List truck routes",
    description="Returns stored routes, newest first, optionally for one driver.",
)
async def list_routes(
    driver_id: Optional[int] = Query(None, description="Only routes owned by this driver"),
    store: RouteStore = Depends(get_route_store),
) -> List[RouteResponse]:
    routes = await store.list(driver_id=driver_id)
    return [RouteResponse.model_validate(route) for route in routes]


@router.get(
    "/{route_id}",
    response_model=RouteResponse,
    summary="Get route details",
)
async def get_route(
    route_id: int,
    store: RouteStore = Depends(get_route_store),
) -> RouteResponse:
    route = await _get_route_or_404(store, route_id)
    return RouteResponse.model_validate(route)


@router.post(
    "",
    response_model=RoutePlanResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Plan a truck route",
    description=(
        "Geocodes origin and destination, calculates a truck route and stores it. "
        "Nothing is stored when the route cannot be calculated."
    ),
)
async def create_route(
    request: RouteCreate,
    planner: RoutePlanner = Depends(get_route_planner),
) -> RoutePlanResponse:
    try:
        outcome = await planner.plan_route(request)
    except RouteValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        )
    except DuplicateSubmissionError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    except RouteCalculationError as exc:
        raise _calculation_failed(exc)
    except RoutePersistenceError as exc:
        raise _persistence_failed(exc)
    return _plan_response(outcome)


@router.patch(
    "/{route_id}",
    response_model=RouteResponse,
    summary="Edit a route",
)
async def update_route(
    route_id: int,
    changes: RouteUpdate,
    store: RouteStore = Depends(get_route_store),
) -> RouteResponse:
    route = await _get_route_or_404(store, route_id)
    try:
        route = await store.update(route, changes.model_dump(exclude_unset=True))
    except RoutePersistenceError as exc:
        raise _persistence_failed(exc)
    return RouteResponse.model_validate(route)


@router.delete(
    "/{route_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a route",
)
async def delete_route(
    route_id: int,
    store: RouteStore = Depends(get_route_store),
) -> Response:
    route = await _get_route_or_404(store, route_id)
    try:
        await store.delete(route)
    except RoutePersistenceError as exc:
        raise _persistence_failed(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{route_id}/recalculate",
    response_model=RoutePlanResponse,
    summary="Recalculate a route",
    description="Refreshes distance, duration, state breakdown and path from the routing provider.",
)
async def recalculate_route(
    route_id: int,
    planner: RoutePlanner = Depends(get_route_planner),
) -> RoutePlanResponse:
    try:
        outcome = await planner.recalculate(route_id)
    except RouteNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except DuplicateSubmissionError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    except RouteCalculationError as exc:
        raise _calculation_failed(exc)
    return _plan_response(outcome)


@geocode_router.get(
    "",
    response_model=GeocodeResponse,
    summary="Geocode an address",
    description="Never fails; `fallback` is true when the default location was substituted.",
)
async def geocode_address(
    address: str = Query(..., min_length=1),
    geocoder: Geocoder = Depends(get_geocoder),
) -> GeocodeResponse:
    result = await geocoder.geocode(address)
    return GeocodeResponse(
        address=address,
        lat=result.coordinate.lat,
        lng=result.coordinate.lng,
        fallback=result.is_fallback,
        reason=getattr(result, "reason", None),
    )
