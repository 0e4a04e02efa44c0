"""Models package initialization - imports all models for easy access."""

from fleetops.models.route import Route, RouteStatus

__all__ = [
    "Route",
    "RouteStatus",
]
