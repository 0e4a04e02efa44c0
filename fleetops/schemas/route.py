"""
Pydantic schemas for the truck route API.
Request and response models for /api/v1/routes.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, computed_field, field_validator

from fleetops.models.route import RouteStatus
from fleetops.schemas.routing import JurisdictionMiles, PathPoint
from fleetops.services import route_metrics


USER_SETTABLE_STATUSES = (RouteStatus.PLANNED, RouteStatus.ACTIVE, RouteStatus.COMPLETED)


class RouteCreate(BaseModel):
    """Request body for planning a new truck route."""
    name: str = Field(..., description="Route name, e.g. 'Miami - Orlando Truck Route'")
    origin: str = Field(..., description="Origin address")
    destination: str = Field(..., description="Destination address")
    driver_id: Optional[int] = None
    shipment_id: Optional[int] = None

    model_config = {"str_strip_whitespace": True}

    def missing_fields(self) -> List[str]:
        return [field for field in ("name", "origin", "destination") if not getattr(self, field)]


class RouteUpdate(BaseModel):
    """
    Editable fields of a stored route.

    `name` and `status` may be omitted but not cleared; `driver_id` and
    `shipment_id` accept null to unassign. Only the planner moves a route
    into pending_calculation.
    """
    name: Optional[str] = Field(None, min_length=1)
    status: Optional[RouteStatus] = None
    driver_id: Optional[int] = None
    shipment_id: Optional[int] = None

    model_config = {"str_strip_whitespace": True}

    @field_validator("name", "status")
    @classmethod
    def _not_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value

    @field_validator("status")
    @classmethod
    def _user_settable_status(cls, value):
        if value not in USER_SETTABLE_STATUSES:
            allowed = ", ".join(status.value for status in USER_SETTABLE_STATUSES)
            raise ValueError(f"status must be one of: {allowed}")
        return value


class RouteResponse(BaseModel):
    """Response schema for a stored route."""
    id: int
    name: str
    origin: str
    destination: str
    origin_lat: float
    origin_lng: float
    destination_lat: float
    destination_lng: float
    distance_km: Optional[float] = None
    total_miles: Optional[float] = None
    estimated_duration_minutes: Optional[int] = None
    state_breakdown: List[JurisdictionMiles] = []
    path: List[PathPoint] = []
    coordinates_approximate: bool = False
    status: RouteStatus
    driver_id: Optional[int] = None
    shipment_id: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @field_validator("state_breakdown", "path", mode="before")
    @classmethod
    def _empty_when_missing(cls, value):
        return value or []

    @computed_field
    @property
    def display_miles(self) -> Optional[float]:
        return route_metrics.display_miles(self.total_miles, self.distance_km)[0]

    @computed_field
    @property
    def distance_source(self) -> Optional[str]:
        return route_metrics.display_miles(self.total_miles, self.distance_km)[1]

    @computed_field
    @property
    def duration_label(self) -> Optional[str]:
        return route_metrics.format_duration(self.estimated_duration_minutes)


class Notice(BaseModel):
    """A non-fatal, user-visible message produced while handling a request."""
    level: str = "info"
    message: str


class RoutePlanResponse(BaseModel):
    """Response for route creation and recalculation."""
    route: RouteResponse
    notices: List[Notice] = []
