"""
Tests for the purchases module

Purchases mirror invoices on the supplier side: totals come from the
product cost price, received units are added to stock and payments to
suppliers follow the same balance rules.
"""

import pytest
from datetime import date, timedelta


# ===== FIXTURES =====

@pytest.fixture
def widget(make_product):
    return make_product(sku="WIDGET-1", unit_price=100, cost_price=60, gst_rate=18, stock_quantity=20)


@pytest.fixture
def purchase(client, supplier, widget):
    response = client.post("/purchases/", json={
        "supplier_id": supplier["id"],
        "supplier_reference": "WD/2025/118",
        "items": [{"product_id": widget["id"], "quantity": 10}]
    })
    assert response.status_code == 201, response.text
    return response.json()


def pay(client, purchase_id, amount, **extra):
    return client.post(f"/purchases/{purchase_id}/payments", json={"amount": amount, **extra})


class TestPurchaseCreation:

    def test_totals_use_cost_price(self, purchase):
        assert purchase["subtotal"] == 600.0
        assert purchase["tax_amount"] == 108.0
        assert purchase["total_amount"] == 708.0
        assert purchase["payment_status"] == "Unpaid"
        assert purchase["line_items"][0]["unit_price"] == 60.0

    def test_purchase_number_format(self, purchase):
        assert purchase["purchase_number"] == f"PUR-{date.today().strftime('%Y%m%d')}-0001"
        assert purchase["supplier_reference"] == "WD/2025/118"

    def test_stock_is_incremented(self, client, purchase, widget):
        assert client.get(f"/products/{widget['id']}").json()["stock_quantity"] == 30

    def test_unknown_supplier(self, client, widget):
        response = client.post("/purchases/", json={
            "supplier_id": 999,
            "items": [{"product_id": widget["id"], "quantity": 1}]
        })
        assert response.status_code == 404

    def test_explicit_price_and_discount(self, client, supplier, widget):
        response = client.post("/purchases/", json={
            "supplier_id": supplier["id"],
            "items": [{
                "product_id": widget["id"], "quantity": 4, "unit_price": 50,
                "discount_percentage": 25, "tax_rate": 5
            }]
        })
        data = response.json()
        assert data["subtotal"] == 150.0
        assert data["tax_amount"] == 7.5
        assert data["total_amount"] == 157.5


class TestPurchasePayments:

    def test_partial_then_full_payment(self, client, purchase):
        assert pay(client, purchase["id"], 300).status_code == 201
        data = client.get(f"/purchases/{purchase['id']}").json()
        assert data["payment_status"] == "Partially Paid"
        assert data["balance_due"] == 408.0

        assert pay(client, purchase["id"], 408).status_code == 201
        assert client.get(f"/purchases/{purchase['id']}").json()["payment_status"] == "Paid"

    def test_overpayment_is_rejected(self, client, purchase):
        response = pay(client, purchase["id"], 708.01)
        assert response.status_code == 400
        assert client.get(f"/purchases/{purchase['id']}").json()["amount_paid"] == 0

    def test_payment_before_purchase_date(self, client, purchase):
        earlier = (date.fromisoformat(purchase["purchase_date"]) - timedelta(days=1)).isoformat()
        response = pay(client, purchase["id"], 100, payment_date=earlier)
        assert response.status_code == 422
        assert response.json()["field"] == "payment_date"

    def test_sub_cent_payment_is_rejected(self, client, purchase):
        response = pay(client, purchase["id"], "0.004")
        assert response.status_code == 422
        assert client.get(f"/purchases/{purchase['id']}").json()["amount_paid"] == 0

    def test_history(self, client, supplier, widget):
        purchase = client.post("/purchases/", json={
            "supplier_id": supplier["id"],
            "purchase_date": "2025-02-25",
            "items": [{"product_id": widget["id"], "quantity": 10}]
        }).json()
        pay(client, purchase["id"], 200, payment_method="Bank Transfer", payment_date="2025-03-01")
        pay(client, purchase["id"], 100, payment_method="Cheque", payment_date="2025-03-15")
        history = client.get(f"/purchases/{purchase['id']}/payments").json()
        assert [p["payment_method"] for p in history["payments"]] == ["Cheque", "Bank Transfer"]
        assert [p["balance_after"] for p in history["payments"]] == [408.0, 508.0]

    def test_supplier_pending_payments(self, client, purchase, supplier):
        pay(client, purchase["id"], 208)
        pending = client.get("/suppliers/pending-payments").json()
        assert len(pending) == 1
        assert pending[0]["supplier_id"] == supplier["id"]
        assert pending[0]["pending_purchases"] == 1
        assert pending[0]["balance_due"] == 500.0

        pay(client, purchase["id"], 500)
        assert client.get("/suppliers/pending-payments").json() == []


class TestPurchaseQueries:

    def test_supplier_purchases(self, client, purchase, supplier):
        response = client.get(f"/purchases/supplier/{supplier['id']}")
        assert [p["id"] for p in response.json()] == [purchase["id"]]
        assert client.get("/purchases/supplier/999").status_code == 404

    def test_unpaid_purchases(self, client, purchase):
        assert len(client.get("/purchases/unpaid").json()) == 1
        pay(client, purchase["id"], 708)
        assert client.get("/purchases/unpaid").json() == []

    def test_filter_by_status(self, client, purchase):
        assert client.get("/purchases/", params={"payment_status": "Unpaid"}).json()["total"] == 1
        assert client.get("/purchases/", params={"payment_status": "Paid"}).json()["total"] == 0


class TestPurchaseChanges:

    def test_edit_adjusts_stock(self, client, purchase, supplier, widget):
        response = client.put(f"/purchases/{purchase['id']}", json={
            "supplier_id": supplier["id"],
            "items": [{"product_id": widget["id"], "quantity": 4}]
        })
        assert response.status_code == 200
        assert response.json()["total_amount"] == 283.2
        assert client.get(f"/products/{widget['id']}").json()["stock_quantity"] == 24

    def test_edit_below_amount_paid_is_rejected(self, client, purchase, supplier, widget):
        pay(client, purchase["id"], 500)
        response = client.put(f"/purchases/{purchase['id']}", json={
            "supplier_id": supplier["id"],
            "items": [{"product_id": widget["id"], "quantity": 1}]
        })
        assert response.status_code == 400

    def test_delete_removes_received_stock(self, client, purchase, widget):
        assert client.delete(f"/purchases/{purchase['id']}").status_code == 200
        assert client.get(f"/products/{widget['id']}").json()["stock_quantity"] == 20

    def test_delete_fails_when_stock_was_sold(self, client, purchase, widget, customer):
        client.post("/invoices/", json={
            "customer_id": customer["id"],
            "items": [{"product_id": widget["id"], "quantity": 25}]
        })
        response = client.delete(f"/purchases/{purchase['id']}")
        assert response.status_code == 400
        assert client.get(f"/purchases/{purchase['id']}").status_code == 200

    def test_delete_with_payments_conflicts(self, client, purchase):
        pay(client, purchase["id"], 1)
        assert client.delete(f"/purchases/{purchase['id']}").status_code == 409
