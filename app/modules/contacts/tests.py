"""
Tests for the contacts module

Customers and suppliers share the same CRUD rules; contacts that already
have invoices or purchases cannot be deleted.
"""

import pytest


# ===== FIXTURES =====

@pytest.fixture
def sample_customer_data():
    return {
        "name": "  Sharma Electricals ",
        "email": "billing@sharmaelectricals.in",
        "phone": "+91 98200 00000",
        "city": "Pune",
        "state": "Maharashtra",
        "gstin": "27aapfu0939f1zv"
    }


class TestCustomers:

    def test_create_normalizes_fields(self, client, sample_customer_data):
        response = client.post("/customers/", json=sample_customer_data)
        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Sharma Electricals"
        assert data["gstin"] == "27AAPFU0939F1ZV"
        assert data["country"] == "India"
        assert data["is_active"] is True

    def test_blank_name_is_rejected(self, client):
        assert client.post("/customers/", json={"name": "   "}).status_code == 422

    def test_invalid_email_is_rejected(self, client):
        assert client.post("/customers/", json={"name": "X", "email": "not-an-email"}).status_code == 422

    def test_search(self, client, sample_customer_data):
        client.post("/customers/", json=sample_customer_data)
        client.post("/customers/", json={"name": "Other Co"})
        result = client.get("/customers/", params={"search": "sharma"}).json()
        assert result["total"] == 1
        assert result["customers"][0]["city"] == "Pune"

    def test_update_and_deactivate(self, client, customer):
        response = client.put(f"/customers/{customer['id']}", json={"phone": "022-1234", "is_active": False})
        assert response.status_code == 200
        assert response.json()["phone"] == "022-1234"
        active = client.get("/customers/", params={"is_active": True}).json()
        assert active["total"] == 0

    def test_missing_customer(self, client):
        assert client.get("/customers/999").status_code == 404

    def test_delete(self, client, customer):
        assert client.delete(f"/customers/{customer['id']}").status_code == 200
        assert client.get(f"/customers/{customer['id']}").status_code == 404

    def test_delete_with_invoices_conflicts(self, client, customer, make_product):
        product = make_product(sku="PEN-01")
        client.post("/invoices/", json={
            "customer_id": customer["id"],
            "items": [{"product_id": product["id"], "quantity": 1}]
        })
        assert client.delete(f"/customers/{customer['id']}").status_code == 409


class TestSuppliers:

    def test_create(self, supplier):
        assert supplier["contact_person"] == "R. Mehta"

    def test_list(self, client, supplier):
        result = client.get("/suppliers/").json()
        assert result["total"] == 1
        assert result["suppliers"][0]["name"] == "Wholesale Depot"

    def test_no_pending_payments_without_purchases(self, client, supplier):
        assert client.get("/suppliers/pending-payments").json() == []

    def test_delete_with_purchases_conflicts(self, client, supplier, make_product):
        product = make_product(sku="PEN-01")
        client.post("/purchases/", json={
            "supplier_id": supplier["id"],
            "items": [{"product_id": product["id"], "quantity": 1}]
        })
        assert client.delete(f"/suppliers/{supplier['id']}").status_code == 409
