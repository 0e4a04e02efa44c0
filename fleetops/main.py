"""
Fleet Route Planner - FastAPI Application
Main entry point for the API server.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fleetops.config import get_settings
from fleetops.api import routes_router, geocode_router


settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("fleetops")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    logger.info("Starting %s v%s", settings.app_title, settings.app_version)

    from fleetops.database import init_db
    await init_db()
    logger.info("Database tables initialized")

    if not settings.routing_configured:
        logger.warning("TomTom API key not configured; geocoding will use fallback coordinates")

    yield

    client = getattr(app.state, "tomtom_client", None)
    if client is not None:
        await client.aclose()
    logger.info("Shutting down...")


app = FastAPI(
    title=settings.app_title,
    version=settings.app_version,
    description="""
    ## Fleet Route Planner API

    Truck route planning for fleet drivers.

    ### Main Endpoints
    - `POST /api/v1/routes` - Geocode, calculate and store a truck route
    - `GET /api/v1/routes` - List stored routes (optionally per driver)
    - `POST /api/v1/routes/{id}/recalculate` - Refresh a route's metrics
    - `GET /api/v1/geocode?address=...` - Resolve an address
    """,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(routes_router, prefix=settings.api_prefix)
app.include_router(geocode_router, prefix=settings.api_prefix)


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - health check."""
    return {
        "status": "healthy",
        "service": settings.app_title,
        "version": settings.app_version,
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "routing_configured": settings.routing_configured,
    }
