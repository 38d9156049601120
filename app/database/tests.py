"""
Tests for the database layer

The initial Alembic revision is applied to a fresh SQLite database and the
resulting schema is compared with the ORM models.
"""

import importlib.util
from pathlib import Path

import pytest
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect

from app.database.database import Base

REVISION = Path(__file__).resolve().parents[2] / "alembic" / "versions" / "0001_initial_schema.py"


@pytest.fixture
def revision():
    spec = importlib.util.spec_from_file_location("initial_schema", REVISION)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def connection():
    engine = create_engine("sqlite://")
    with engine.connect() as conn:
        yield conn
    engine.dispose()


def run(step, connection):
    with Operations.context(MigrationContext.configure(connection)):
        step()


class TestInitialMigration:

    def test_creates_every_model_table(self, revision, connection):
        run(revision.upgrade, connection)

        inspector = inspect(connection)
        assert set(inspector.get_table_names()) == set(Base.metadata.tables)
        for name, table in Base.metadata.tables.items():
            columns = {column["name"] for column in inspector.get_columns(name)}
            assert columns == set(table.columns.keys()), name

    def test_unique_and_indexed_columns(self, revision, connection):
        run(revision.upgrade, connection)

        inspector = inspect(connection)
        indexes = {index["name"]: index for index in inspector.get_indexes("users")}
        assert indexes["ix_users_email"]["unique"]
        assert "ix_payments_invoice_id" in {index["name"] for index in inspector.get_indexes("payments")}

    def test_downgrade_drops_everything(self, revision, connection):
        run(revision.upgrade, connection)
        run(revision.downgrade, connection)
        assert inspect(connection).get_table_names() == []

    def test_is_the_first_revision(self, revision):
        assert revision.down_revision is None
