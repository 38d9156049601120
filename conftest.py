"""
Shared pytest fixtures.

Tests run against an in-memory SQLite database; the schema is rebuilt for
every test so no state leaks between them.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.database.database import Base, SessionLocal, sync_engine
from app.modules.auth.dependencies import AuthDependencies
from app.modules.auth.schemas import AuthContext


# ===== DATABASE =====

@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.create_all(bind=sync_engine)
    yield
    Base.metadata.drop_all(bind=sync_engine)


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# ===== AUTH =====

def make_auth_override(role: str):
    def override():
        return AuthContext(user_id=1, email=f"{role}@test.shop", role=role)
    return override


@pytest.fixture
def client():
    """Client authenticated as the business owner"""
    app.dependency_overrides[AuthDependencies.get_auth_context] = make_auth_override("owner")
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def viewer_client():
    """Client authenticated with the read-only role"""
    app.dependency_overrides[AuthDependencies.get_auth_context] = make_auth_override("viewer")
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client():
    app.dependency_overrides.clear()
    with TestClient(app) as test_client:
        yield test_client


# ===== BILLING DATA =====

@pytest.fixture
def make_product(client):
    def _make(sku="WIDGET-1", unit_price=100, cost_price=60, gst_rate=18, stock_quantity=20, **extra):
        response = client.post("/products/", json={
            "name": extra.pop("name", f"Product {sku}"),
            "sku": sku,
            "unit_price": unit_price,
            "cost_price": cost_price,
            "gst_rate": gst_rate,
            "stock_quantity": stock_quantity,
            **extra
        })
        assert response.status_code == 201, response.text
        return response.json()
    return _make


@pytest.fixture
def customer(client):
    response = client.post("/customers/", json={"name": "Acme Traders", "email": "accounts@acmetraders.in"})
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def supplier(client):
    response = client.post("/suppliers/", json={"name": "Wholesale Depot", "contact_person": "R. Mehta"})
    assert response.status_code == 201, response.text
    return response.json()
