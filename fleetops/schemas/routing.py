"""
Pydantic schemas for geocoding and route calculation results.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class Coordinate(BaseModel):
    """A latitude/longitude pair."""
    lat: float
    lng: float

    model_config = {"frozen": True}


class PathPoint(BaseModel):
    """One polyline vertex, longitude first as map widgets expect."""
    lng: float
    lat: float


class JurisdictionMiles(BaseModel):
    """Distance driven inside one state or province."""
    jurisdiction: str
    miles: float


class RouteCalculation(BaseModel):
    """Parsed result of a truck route calculation."""
    path: List[PathPoint] = Field(default_factory=list)
    total_miles: float
    total_minutes: int
    jurisdiction_breakdown: List[JurisdictionMiles] = Field(min_length=1)


class GeocodeResponse(BaseModel):
    """Response schema for GET /geocode."""
    address: str
    lat: float
    lng: float
    fallback: bool
    reason: Optional[str] = None
