"""API routers package initialization."""

from fleetops.api.routes import router as routes_router
from fleetops.api.routes import geocode_router

__all__ = [
    "routes_router",
    "geocode_router",
]
