"""
Truck route database model.
"""

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Enum, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from fleetops.database import Base, JSONText


class RouteStatus(str, enum.Enum):
    """Lifecycle of a planned truck trip."""
    PENDING_CALCULATION = "pending_calculation"
    PLANNED = "planned"
    ACTIVE = "active"
    COMPLETED = "completed"


class Route(Base):
    """
    A planned truck trip between two geocoded addresses.

    `distance_km` is the historical kilometre estimate kept for old records;
    `total_miles` is filled in by route calculation. They are never interchangeable.
    """
    __tablename__ = "truck_routes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    origin: Mapped[str] = mapped_column(Text, nullable=False)
    destination: Mapped[str] = mapped_column(Text, nullable=False)
    origin_lat: Mapped[float] = mapped_column(Float, nullable=False)
    origin_lng: Mapped[float] = mapped_column(Float, nullable=False)
    destination_lat: Mapped[float] = mapped_column(Float, nullable=False)
    destination_lng: Mapped[float] = mapped_column(Float, nullable=False)

    # Legacy kilometre distance from routes planned before truck routing
    distance_km: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # Filled in once the routing provider answers
    total_miles: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    estimated_duration_minutes: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    state_breakdown: Mapped[Optional[list]] = mapped_column(JSONText, nullable=True)
    path: Mapped[Optional[list]] = mapped_column(JSONText, nullable=True)

    coordinates_approximate: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    status: Mapped[RouteStatus] = mapped_column(
        Enum(RouteStatus, values_callable=lambda statuses: [s.value for s in statuses]),
        default=RouteStatus.PLANNED,
        nullable=False,
    )

    driver_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)
    shipment_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    @property
    def has_coordinates(self) -> bool:
        return None not in (self.origin_lat, self.origin_lng, self.destination_lat, self.destination_lng)

    def __repr__(self) -> str:
        return f"<Route(id={self.id}, name={self.name!r}, status={self.status})>"
