"""
Tests for the alembic migration of the truck_routes table.
"""

import importlib.util
from pathlib import Path

import pytest
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect, text

from fleetops.database import Base
import fleetops.models  # noqa: F401  registers the tables on Base.metadata

MIGRATION = Path(__file__).resolve().parent.parent / "alembic" / "versions" / "001_truck_routes.py"


def _load_migration():
    spec = importlib.util.spec_from_file_location("migration_001_truck_routes", MIGRATION)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def connection():
    engine = create_engine("sqlite://")
    with engine.begin() as conn:
        yield conn
    engine.dispose()


def _run(connection, step):
    context = MigrationContext.configure(connection)
    with Operations.context(context):
        step()


class TestTruckRoutesMigration:
    def test_upgrade_matches_model(self, connection):
        migration = _load_migration()

        _run(connection, migration.upgrade)

        inspector = inspect(connection)
        migrated = {column["name"] for column in inspector.get_columns("truck_routes")}
        modelled = set(Base.metadata.tables["truck_routes"].columns.keys())
        assert migrated == modelled
        assert "ix_truck_routes_driver_id" in {ix["name"] for ix in inspector.get_indexes("truck_routes")}

    def test_defaults(self, connection):
        _run(connection, _load_migration().upgrade)

        connection.execute(text(
            "INSERT INTO truck_routes (name, origin, destination, origin_lat, origin_lng, "
            "destination_lat, destination_lng) VALUES ('R', 'A', 'B', 1.0, 2.0, 3.0, 4.0)"
        ))
        row = connection.execute(text("SELECT status, coordinates_approximate, total_miles FROM truck_routes")).one()

        assert row.status == "planned"
        assert not row.coordinates_approximate
        assert row.total_miles is None

    def test_downgrade(self, connection):
        migration = _load_migration()
        _run(connection, migration.upgrade)

        _run(connection, migration.downgrade)

        assert "truck_routes" not in inspect(connection).get_table_names()
