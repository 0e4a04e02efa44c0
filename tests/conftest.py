import os

# Settings are cached on first import; point them at SQLite before anything loads them
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.pop("TOMTOM_API_KEY", None)

from typing import AsyncGenerator, Dict, List
from urllib.parse import unquote

import httpx
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from fleetops.api.deps import get_tomtom_client
from fleetops.database import Base, get_db
from fleetops.main import app
from fleetops.services.geocoder import Geocoder
from fleetops.services.route_calculator import RouteCalculator
from fleetops.services.route_planner import InFlightGuard, RoutePlanner
from fleetops.services.route_store import RouteStore
from fleetops.services.tomtom_client import TomTomClient
from fleetops.services.units import TruckSpecification
from fleetops.schemas.routing import Coordinate
from tests.fixtures.test_data import (
    FALLBACK_LAT,
    FALLBACK_LNG,
    MIAMI,
    ORLANDO,
    route_payload,
    search_result,
)

TEST_DB_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
TOMTOM_TEST_URL = "https://api.tomtom.test"
FALLBACK = Coordinate(lat=FALLBACK_LAT, lng=FALLBACK_LNG)

SEARCH_PREFIX = "/search/2/search/"
ROUTING_PREFIX = "/routing/1/calculateRoute/"


class FakeTomTom:
    """
    In-process stand-in for the TomTom REST API.
    Answers search and calculateRoute requests and records every call.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.places: Dict[str, List[Dict]] = {
            "Miami, FL": [search_result(*MIAMI, address="Miami, FL")],
            "Orlando, FL": [search_result(*ORLANDO, address="Orlando, FL")],
        }
        self.route_response = route_payload()
        self.search_status = 200
        self.route_status = 200

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = unquote(request.url.raw_path.decode().split("?")[0])
        if path.startswith(SEARCH_PREFIX):
            if self.search_status != 200:
                return httpx.Response(self.search_status, json={"error": "search failed"})
            query = path[len(SEARCH_PREFIX):-len(".json")]
            return httpx.Response(200, json={"results": self.places.get(query, [])})
        if path.startswith(ROUTING_PREFIX):
            if self.route_status != 200:
                return httpx.Response(self.route_status, json={"error": "routing failed"})
            return httpx.Response(200, json=self.route_response)
        return httpx.Response(404)

    @property
    def search_calls(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.startswith(SEARCH_PREFIX)]

    @property
    def route_calls(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.startswith(ROUTING_PREFIX)]


@pytest.fixture
def truck_spec() -> TruckSpecification:
    return TruckSpecification(
        max_speed_mph=65,
        gross_weight_lb=80000,
        axle_weight_lb=34000,
        length_ft=65,
        width_ft=8.5,
        height_ft=13.5,
        commercial=True,
        load_types=("USHazmatClass3",),
    )


@pytest.fixture
def fake_tomtom() -> FakeTomTom:
    return FakeTomTom()


@pytest.fixture
async def tomtom_client(fake_tomtom) -> AsyncGenerator[TomTomClient, None]:
    http = httpx.AsyncClient(transport=httpx.MockTransport(fake_tomtom.handler))
    client = TomTomClient(api_key="test-key", base_url=TOMTOM_TEST_URL, http_client=http)
    yield client
    await http.aclose()


@pytest.fixture
async def unconfigured_client(fake_tomtom) -> AsyncGenerator[TomTomClient, None]:
    http = httpx.AsyncClient(transport=httpx.MockTransport(fake_tomtom.handler))
    client = TomTomClient(api_key=None, base_url=TOMTOM_TEST_URL, http_client=http)
    yield client
    await http.aclose()


@pytest.fixture
async def test_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False} if "sqlite" in TEST_DB_URL else {},
        poolclass=StaticPool if "sqlite" in TEST_DB_URL else None,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    session_maker = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with session_maker() as session:
        yield session


@pytest.fixture
def route_store(db_session) -> RouteStore:
    return RouteStore(db_session)


@pytest.fixture
def geocoder(tomtom_client) -> Geocoder:
    return Geocoder(tomtom_client, "US", FALLBACK)


@pytest.fixture
def calculator(tomtom_client, truck_spec) -> RouteCalculator:
    return RouteCalculator(tomtom_client, truck_spec)


@pytest.fixture
def planner(route_store, geocoder, calculator) -> RoutePlanner:
    return RoutePlanner(route_store, geocoder, calculator, guard=InFlightGuard())


@pytest.fixture
async def client(db_session, tomtom_client) -> AsyncGenerator[AsyncClient, None]:
    """Test client with overrides for get_db and the TomTom client."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_tomtom_client] = lambda: tomtom_client

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
