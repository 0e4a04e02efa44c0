from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Notice:
    """A user-visible, non-fatal message shown as a toast."""
    level: str
    message: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Notice":
        return cls(level=data.get("level", "info"), message=data.get("message", ""))


@dataclass
class JurisdictionEntry:
    """Miles driven in one state or province."""
    jurisdiction: str
    miles: float


@dataclass
class RouteRecord:
    """A stored truck route as returned by the backend."""
    id: int
    name: str
    origin: str
    destination: str
    origin_lat: Optional[float]
    origin_lng: Optional[float]
    destination_lat: Optional[float]
    destination_lng: Optional[float]
    status: str = "planned"
    display_miles: Optional[float] = None
    distance_source: Optional[str] = None
    duration_label: Optional[str] = None
    state_breakdown: List[JurisdictionEntry] = field(default_factory=list)

    # (lat, lng) pairs, ready for folium
    path: List[tuple] = field(default_factory=list)
    coordinates_approximate: bool = False
    driver_id: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RouteRecord":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            origin=data.get("origin", ""),
            destination=data.get("destination", ""),
            origin_lat=data.get("origin_lat"),
            origin_lng=data.get("origin_lng"),
            destination_lat=data.get("destination_lat"),
            destination_lng=data.get("destination_lng"),
            status=data.get("status", "planned"),
            display_miles=data.get("display_miles"),
            distance_source=data.get("distance_source"),
            duration_label=data.get("duration_label"),
            state_breakdown=[
                JurisdictionEntry(jurisdiction=e["jurisdiction"], miles=e["miles"])
                for e in data.get("state_breakdown") or []
            ],
            path=[(p["lat"], p["lng"]) for p in data.get("path") or []],
            coordinates_approximate=data.get("coordinates_approximate", False),
            driver_id=data.get("driver_id"),
        )

    @property
    def origin_point(self) -> Optional[tuple]:
        if self.origin_lat is None or self.origin_lng is None:
            return None
        return (self.origin_lat, self.origin_lng)

    @property
    def destination_point(self) -> Optional[tuple]:
        if self.destination_lat is None or self.destination_lng is None:
            return None
        return (self.destination_lat, self.destination_lng)
