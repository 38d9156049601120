"""
Tests for the invoices module

Covers invoice creation with computed totals and stock decrements,
partial and full payments, overpayment rejection, payment history,
edits and deletion rules.
"""

import pytest
from datetime import date, timedelta


# ===== FIXTURES =====

@pytest.fixture
def widget(make_product):
    return make_product(sku="WIDGET-1", unit_price=100, gst_rate=18, stock_quantity=20)


@pytest.fixture
def invoice(client, customer, widget):
    response = client.post("/invoices/", json={
        "customer_id": customer["id"],
        "items": [{"product_id": widget["id"], "quantity": 2, "discount_percentage": 10}]
    })
    assert response.status_code == 201, response.text
    return response.json()


def pay(client, invoice_id, amount, **extra):
    return client.post(f"/invoices/{invoice_id}/payments", json={"amount": amount, **extra})


# ===== CREATION =====

class TestInvoiceCreation:

    def test_totals_are_computed(self, invoice):
        assert invoice["subtotal"] == 180.0
        assert invoice["tax_amount"] == 32.4
        assert invoice["total_amount"] == 212.4
        assert invoice["amount_paid"] == 0
        assert invoice["balance_due"] == 212.4
        assert invoice["payment_status"] == "Unpaid"

    def test_line_snapshot_uses_product_defaults(self, invoice, widget):
        line = invoice["line_items"][0]
        assert line["product_name"] == widget["name"]
        assert line["unit_price"] == 100.0
        assert line["tax_rate"] == 18.0
        assert line["line_total"] == 180.0
        assert line["line_tax"] == 32.4

    def test_invoice_number_format(self, invoice):
        assert invoice["invoice_number"] == f"INV-{date.today().strftime('%Y%m%d')}-0001"

    def test_numbers_are_sequential(self, client, customer, widget, invoice):
        response = client.post("/invoices/", json={
            "customer_id": customer["id"],
            "items": [{"product_id": widget["id"], "quantity": 1}]
        })
        assert response.json()["invoice_number"].endswith("-0002")

    def test_due_date_defaults_to_payment_terms(self, invoice):
        expected = date.fromisoformat(invoice["invoice_date"]) + timedelta(days=30)
        assert invoice["due_date"] == expected.isoformat()

    def test_stock_is_decremented(self, client, invoice, widget):
        product = client.get(f"/products/{widget['id']}").json()
        assert product["stock_quantity"] == 18

    def test_insufficient_stock_is_rejected(self, client, customer, widget):
        response = client.post("/invoices/", json={
            "customer_id": customer["id"],
            "items": [{"product_id": widget["id"], "quantity": 21}]
        })
        assert response.status_code == 400
        assert "Insufficient stock" in response.json()["detail"]
        assert client.get(f"/products/{widget['id']}").json()["stock_quantity"] == 20

    def test_unknown_customer(self, client, widget):
        response = client.post("/invoices/", json={
            "customer_id": 999,
            "items": [{"product_id": widget["id"], "quantity": 1}]
        })
        assert response.status_code == 404

    def test_unknown_product(self, client, customer):
        response = client.post("/invoices/", json={
            "customer_id": customer["id"],
            "items": [{"product_id": 999, "quantity": 1}]
        })
        assert response.status_code == 404

    @pytest.mark.parametrize("item", [
        {"quantity": 0},
        {"quantity": 1, "discount_percentage": 101},
        {"quantity": 1, "unit_price": -5},
    ])
    def test_invalid_lines_are_rejected(self, client, customer, widget, item):
        response = client.post("/invoices/", json={
            "customer_id": customer["id"],
            "items": [{"product_id": widget["id"], **item}]
        })
        assert response.status_code == 422

    def test_at_least_one_line_is_required(self, client, customer):
        response = client.post("/invoices/", json={"customer_id": customer["id"], "items": []})
        assert response.status_code == 422

    def test_due_date_before_invoice_date(self, client, customer, widget):
        response = client.post("/invoices/", json={
            "customer_id": customer["id"],
            "invoice_date": "2025-05-10",
            "due_date": "2025-05-01",
            "items": [{"product_id": widget["id"], "quantity": 1}]
        })
        assert response.status_code == 422

    def test_initial_payment(self, client, customer, widget):
        response = client.post("/invoices/", json={
            "customer_id": customer["id"],
            "items": [{"product_id": widget["id"], "quantity": 1, "tax_rate": 0}],
            "initial_payment": {"amount": 40, "payment_method": "UPI"}
        })
        assert response.status_code == 201
        data = response.json()
        assert data["amount_paid"] == 40.0
        assert data["balance_due"] == 60.0
        assert data["payment_status"] == "Partially Paid"
        assert data["payments"][0]["payment_method"] == "UPI"

    @pytest.mark.parametrize("field,value", [
        ("unit_price", "33.333"),
        ("discount_percentage", "2.505"),
        ("tax_rate", "18.001"),
    ])
    def test_line_values_are_limited_to_two_decimals(self, client, customer, widget, field, value):
        response = client.post("/invoices/", json={
            "customer_id": customer["id"],
            "items": [{"product_id": widget["id"], "quantity": 3, field: value}]
        })
        assert response.status_code == 422

    def test_stored_line_reproduces_its_total(self, client, customer, widget):
        response = client.post("/invoices/", json={
            "customer_id": customer["id"],
            "items": [{"product_id": widget["id"], "quantity": 3, "unit_price": "33.33", "tax_rate": 0}]
        })
        line = response.json()["line_items"][0]
        assert line["unit_price"] == 33.33
        assert line["line_total"] == 99.99
        assert response.json()["subtotal"] == 99.99

    def test_initial_payment_before_invoice_date(self, client, customer, widget):
        response = client.post("/invoices/", json={
            "customer_id": customer["id"],
            "invoice_date": "2025-03-01",
            "items": [{"product_id": widget["id"], "quantity": 1}],
            "initial_payment": {"amount": 10, "payment_date": "2025-02-01"}
        })
        assert response.status_code == 422
        assert client.get("/invoices/").json()["total"] == 0

    def test_initial_overpayment_leaves_nothing_behind(self, client, customer, widget):
        response = client.post("/invoices/", json={
            "customer_id": customer["id"],
            "items": [{"product_id": widget["id"], "quantity": 1, "tax_rate": 0}],
            "initial_payment": {"amount": 150}
        })
        assert response.status_code == 400
        assert client.get("/invoices/").json()["total"] == 0
        assert client.get(f"/products/{widget['id']}").json()["stock_quantity"] == 20


# ===== PAYMENTS =====

class TestInvoicePayments:

    def test_partial_then_full_payment(self, client, invoice):
        response = pay(client, invoice["id"], 100)
        assert response.status_code == 201
        data = client.get(f"/invoices/{invoice['id']}").json()
        assert data["payment_status"] == "Partially Paid"
        assert data["balance_due"] == 112.4

        assert pay(client, invoice["id"], 112.40).status_code == 201
        data = client.get(f"/invoices/{invoice['id']}").json()
        assert data["payment_status"] == "Paid"
        assert data["balance_due"] == 0

    def test_overpayment_is_rejected(self, client, invoice):
        pay(client, invoice["id"], 212.40)
        response = pay(client, invoice["id"], 50)
        assert response.status_code == 400
        assert response.json()["balance_due"] == 0
        history = client.get(f"/invoices/{invoice['id']}/payments").json()
        assert len(history["payments"]) == 1

    def test_overpayment_on_open_balance(self, client, invoice):
        response = pay(client, invoice["id"], 212.41)
        assert response.status_code == 400
        assert response.json()["balance_due"] == 212.4

    def test_non_positive_amount(self, client, invoice):
        assert pay(client, invoice["id"], 0).status_code == 422

    @pytest.mark.parametrize("amount", ["0.004", "100.005"])
    def test_fractions_of_a_cent_are_rejected(self, client, invoice, amount):
        response = pay(client, invoice["id"], amount)
        assert response.status_code == 422
        assert response.json()["field"] == "amount"
        assert client.get(f"/invoices/{invoice['id']}/payments").json()["payments"] == []

    def test_payment_before_invoice_date(self, client, customer, widget):
        invoice = client.post("/invoices/", json={
            "customer_id": customer["id"],
            "invoice_date": "2025-03-01",
            "items": [{"product_id": widget["id"], "quantity": 1}]
        }).json()
        response = pay(client, invoice["id"], 10, payment_date="2025-02-28")
        assert response.status_code == 422
        assert response.json()["field"] == "payment_date"
        assert pay(client, invoice["id"], 10, payment_date="2025-03-01").status_code == 201

    def test_unknown_payment_method(self, client, invoice):
        assert pay(client, invoice["id"], 10, payment_method="Barter").status_code == 422

    def test_payment_on_missing_invoice(self, client):
        assert pay(client, 999, 10).status_code == 404

    def test_history_is_newest_first_with_running_balance(self, client, customer, widget):
        invoice = client.post("/invoices/", json={
            "customer_id": customer["id"],
            "invoice_date": "2024-12-20",
            "items": [{"product_id": widget["id"], "quantity": 2, "discount_percentage": 10}]
        }).json()
        pay(client, invoice["id"], 50, payment_date="2025-01-01")
        pay(client, invoice["id"], 100, payment_date="2025-02-01", reference_number="UTR-1")
        history = client.get(f"/invoices/{invoice['id']}/payments").json()

        assert history["document_number"] == invoice["invoice_number"]
        assert history["amount_paid"] == 150.0
        assert history["balance_due"] == 62.4
        assert history["payment_status"] == "Partially Paid"
        assert [p["amount"] for p in history["payments"]] == [100.0, 50.0]
        assert [p["balance_after"] for p in history["payments"]] == [62.4, 162.4]
        assert history["payments"][0]["reference_number"] == "UTR-1"


# ===== QUERIES =====

class TestInvoiceQueries:

    def test_filter_by_payment_status(self, client, customer, widget, invoice):
        second = client.post("/invoices/", json={
            "customer_id": customer["id"],
            "items": [{"product_id": widget["id"], "quantity": 1, "tax_rate": 0}]
        }).json()
        pay(client, second["id"], 100)

        paid = client.get("/invoices/", params={"payment_status": "Paid"}).json()
        assert [i["id"] for i in paid["invoices"]] == [second["id"]]
        unpaid = client.get("/invoices/", params={"payment_status": "Unpaid"}).json()
        assert [i["id"] for i in unpaid["invoices"]] == [invoice["id"]]

    def test_unpaid_list_excludes_paid_invoices(self, client, invoice):
        assert len(client.get("/invoices/unpaid").json()) == 1
        pay(client, invoice["id"], 212.40)
        assert client.get("/invoices/unpaid").json() == []

    def test_filter_by_customer(self, client, invoice, customer):
        assert client.get("/invoices/", params={"customer_id": customer["id"]}).json()["total"] == 1
        assert client.get("/invoices/", params={"customer_id": 999}).json()["total"] == 0

    def test_missing_invoice(self, client):
        assert client.get("/invoices/999").status_code == 404


# ===== EDIT / DELETE =====

class TestInvoiceChanges:

    def test_edit_recomputes_totals_and_stock(self, client, invoice, customer, widget):
        response = client.put(f"/invoices/{invoice['id']}", json={
            "customer_id": customer["id"],
            "items": [{"product_id": widget["id"], "quantity": 5}]
        })
        assert response.status_code == 200
        data = response.json()
        assert data["subtotal"] == 500.0
        assert data["total_amount"] == 590.0
        assert len(data["line_items"]) == 1
        assert data["invoice_number"] == invoice["invoice_number"]
        assert client.get(f"/products/{widget['id']}").json()["stock_quantity"] == 15

    def test_edit_below_amount_paid_is_rejected(self, client, invoice, customer, widget):
        pay(client, invoice["id"], 150)
        response = client.put(f"/invoices/{invoice['id']}", json={
            "customer_id": customer["id"],
            "items": [{"product_id": widget["id"], "quantity": 1}]
        })
        assert response.status_code == 400
        data = client.get(f"/invoices/{invoice['id']}").json()
        assert data["total_amount"] == 212.4
        assert client.get(f"/products/{widget['id']}").json()["stock_quantity"] == 18

    def test_edit_cannot_move_invoice_date_past_a_payment(self, client, invoice, customer, widget):
        pay(client, invoice["id"], 10)
        later = (date.fromisoformat(invoice["invoice_date"]) + timedelta(days=5)).isoformat()
        response = client.put(f"/invoices/{invoice['id']}", json={
            "customer_id": customer["id"],
            "invoice_date": later,
            "items": [{"product_id": widget["id"], "quantity": 2, "discount_percentage": 10}]
        })
        assert response.status_code == 422
        assert response.json()["field"] == "payment_date"

    def test_delete_returns_stock(self, client, invoice, widget):
        response = client.delete(f"/invoices/{invoice['id']}")
        assert response.status_code == 200
        assert client.get(f"/invoices/{invoice['id']}").status_code == 404
        assert client.get(f"/products/{widget['id']}").json()["stock_quantity"] == 20

    def test_delete_with_payments_conflicts(self, client, invoice):
        pay(client, invoice["id"], 10)
        assert client.delete(f"/invoices/{invoice['id']}").status_code == 409

    def test_viewer_cannot_create(self, viewer_client):
        response = viewer_client.post("/invoices/", json={"customer_id": 1, "items": [{"product_id": 1, "quantity": 1}]})
        assert response.status_code == 403
