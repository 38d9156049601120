"""
Tests for the reports module

A small fixed ledger (one purchase, three invoices, a few payments on known
dates) is built through the API and every report is checked against it,
including the as-of-date behaviour of the aging reports and CSV export.
"""

import pytest

YEAR = {"start_date": "2025-01-01", "end_date": "2025-12-31"}


# ===== FIXTURES =====

@pytest.fixture
def ledger(client, customer, supplier, make_product):
    gadget = make_product(sku="GADGET", name="Gadget", unit_price=100, cost_price=50, gst_rate=18, stock_quantity=0)
    basic = make_product(sku="BASIC", name="Basic", unit_price=100, cost_price=40, gst_rate=5, stock_quantity=0)

    def post(url, payload):
        response = client.post(url, json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    purchase = post("/purchases/", {
        "supplier_id": supplier["id"],
        "purchase_date": "2025-01-05",
        "due_date": "2025-02-04",
        "items": [
            {"product_id": gadget["id"], "quantity": 10},
            {"product_id": basic["id"], "quantity": 10},
        ]
    })
    post(f"/purchases/{purchase['id']}/payments", {"amount": 400, "payment_date": "2025-02-01"})

    overdue = post("/invoices/", {
        "customer_id": customer["id"],
        "invoice_date": "2025-01-10",
        "due_date": "2025-01-15",
        "items": [{"product_id": gadget["id"], "quantity": 1}]
    })
    current = post("/invoices/", {
        "customer_id": customer["id"],
        "invoice_date": "2025-02-20",
        "due_date": "2025-03-10",
        "items": [{"product_id": basic["id"], "quantity": 2}]
    })
    settled = post("/invoices/", {
        "customer_id": customer["id"],
        "invoice_date": "2025-02-01",
        "due_date": "2025-02-15",
        "items": [{"product_id": basic["id"], "quantity": 1}]
    })
    post(f"/invoices/{settled['id']}/payments", {"amount": 105, "payment_date": "2025-02-10"})
    post(f"/invoices/{overdue['id']}/payments", {"amount": 30, "payment_date": "2025-03-05"})

    return {"purchase": purchase, "overdue": overdue, "current": current, "settled": settled}


# ===== ACCOUNTS RECEIVABLE / PAYABLE =====

class TestAccountsReceivable:

    def test_aging_as_of_date(self, client, ledger):
        report = client.get("/reports/financial/accounts-receivable", params={"as_of_date": "2025-03-01"}).json()

        assert report["total_documents"] == 2
        assert report["total_outstanding"] == 328.0
        first, second = report["documents"]
        assert first["document_id"] == ledger["overdue"]["id"]
        assert first["days_overdue"] == 45
        assert first["aging_bucket"] == "31-60"
        # The payment dated after the report date is not counted
        assert first["balance_due"] == 118.0
        assert second["document_id"] == ledger["current"]["id"]
        assert second["aging_bucket"] == "current"

    def test_summary_covers_every_bucket(self, client, ledger):
        report = client.get("/reports/financial/accounts-receivable", params={"as_of_date": "2025-03-01"}).json()
        summary = report["aging_summary"]
        assert set(summary) == {"current", "1-30", "31-60", "61-90", "90+"}
        assert summary["31-60"] == {"count": 1, "total": 118.0}
        assert summary["current"] == {"count": 1, "total": 210.0}
        assert summary["90+"]["count"] == 0

    def test_later_payments_reduce_the_balance(self, client, ledger):
        report = client.get("/reports/financial/accounts-receivable", params={"as_of_date": "2025-03-10"}).json()
        overdue = report["documents"][0]
        assert overdue["balance_due"] == 88.0
        assert overdue["amount_paid"] == 30.0
        assert overdue["days_overdue"] == 54

    def test_aging_period_filter(self, client, ledger):
        report = client.get("/reports/financial/accounts-receivable", params={
            "as_of_date": "2025-03-01", "aging_period": "31-60"
        }).json()
        assert [d["document_id"] for d in report["documents"]] == [ledger["overdue"]["id"]]
        assert report["total_outstanding"] == 118.0
        assert report["aging_summary"]["current"]["count"] == 1

    def test_unknown_customer_has_nothing_outstanding(self, client, ledger):
        report = client.get("/reports/financial/accounts-receivable", params={
            "as_of_date": "2025-03-01", "customer_id": 999
        }).json()
        assert report["documents"] == []
        assert report["total_outstanding"] == 0

    def test_csv_export(self, client, ledger):
        response = client.get("/reports/financial/accounts-receivable", params={
            "as_of_date": "2025-03-01", "export": "csv"
        })
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "accounts_receivable_2025-03-01.csv" in response.headers["content-disposition"]
        lines = response.text.splitlines()
        assert lines[0].startswith("Number,Customer,Date,Due Date")
        assert len(lines) == 3
        assert lines[1].endswith("118.00,0.00,118.00,45,31-60")

    def test_invalid_export_format(self, client):
        response = client.get("/reports/financial/accounts-receivable", params={"export": "pdf"})
        assert response.status_code == 422


class TestAccountsPayable:

    def test_outstanding_purchase(self, client, ledger):
        report = client.get("/reports/financial/accounts-payable", params={"as_of_date": "2025-03-01"}).json()
        assert report["total_documents"] == 1
        document = report["documents"][0]
        assert document["total_amount"] == 1010.0
        assert document["balance_due"] == 610.0
        assert document["days_overdue"] == 25
        assert document["aging_bucket"] == "1-30"

    def test_before_the_purchase_date(self, client, ledger):
        report = client.get("/reports/financial/accounts-payable", params={"as_of_date": "2025-01-01"}).json()
        assert report["total_documents"] == 0


# ===== SALES / PURCHASES =====

class TestSalesReport:

    def test_period_totals(self, client, ledger):
        report = client.get("/reports/sales/", params=YEAR).json()
        summary = report["summary"]
        assert summary["document_count"] == 3
        assert summary["total_subtotal"] == 400.0
        assert summary["total_tax"] == 33.0
        assert summary["total_amount"] == 433.0
        assert summary["total_paid"] == 135.0
        assert summary["total_outstanding"] == 298.0
        assert (summary["paid_count"], summary["partially_paid_count"], summary["unpaid_count"]) == (1, 1, 1)

    def test_top_customers_and_products(self, client, ledger, customer):
        report = client.get("/reports/sales/", params=YEAR).json()
        assert report["top_customers"][0]["party_id"] == customer["id"]
        assert report["top_customers"][0]["document_count"] == 3
        assert [(p["product_name"], p["quantity"]) for p in report["top_products"]] == [("Basic", 3), ("Gadget", 1)]

    def test_period_bounds(self, client, ledger):
        report = client.get("/reports/sales/", params={"start_date": "2025-02-01", "end_date": "2025-02-28"}).json()
        assert {i["document_id"] for i in report["invoices"]} == {ledger["current"]["id"], ledger["settled"]["id"]}

    def test_end_before_start(self, client):
        response = client.get("/reports/sales/", params={"start_date": "2025-02-01", "end_date": "2025-01-01"})
        assert response.status_code == 422
        assert response.json()["field"] == "end_date"

    def test_csv_export(self, client, ledger):
        response = client.get("/reports/sales/", params={**YEAR, "export": "csv"})
        lines = response.text.splitlines()
        assert lines[0] == "Invoice,Date,Due Date,Customer,Subtotal,Tax,Total,Paid,Balance Due,Status"
        assert len(lines) == 4
        assert any(line.endswith("Partially Paid") for line in lines[1:])


class TestPurchaseReport:

    def test_period_totals(self, client, ledger, supplier):
        report = client.get("/reports/purchases/", params=YEAR).json()
        assert report["summary"]["document_count"] == 1
        assert report["summary"]["total_amount"] == 1010.0
        assert report["summary"]["total_paid"] == 400.0
        assert report["summary"]["partially_paid_count"] == 1
        assert report["top_suppliers"][0]["party_id"] == supplier["id"]
        assert report["top_products"][0]["product_name"] == "Gadget"


# ===== TAX / PROFIT & LOSS =====

class TestTaxReport:

    def test_grouped_by_rate(self, client, ledger):
        report = client.get("/reports/financial/tax", params=YEAR).json()
        five, eighteen = report["rates"]

        assert five["tax_rate"] == 5.0
        assert five["taxable_sales"] == 300.0
        assert five["tax_collected"] == 15.0
        assert five["invoice_count"] == 2
        assert five["tax_paid"] == 20.0
        assert five["net_tax"] == -5.0

        assert eighteen["tax_rate"] == 18.0
        assert eighteen["tax_collected"] == 18.0
        assert eighteen["tax_paid"] == 90.0

        assert report["total_tax_collected"] == 33.0
        assert report["total_tax_paid"] == 110.0
        assert report["net_tax_payable"] == -77.0

    def test_viewer_is_forbidden(self, viewer_client):
        assert viewer_client.get("/reports/financial/tax", params=YEAR).status_code == 403


class TestProfitLoss:

    def test_period_figures(self, client, ledger):
        report = client.get("/reports/financial/profit-loss", params=YEAR).json()
        assert report["revenue"] == 400.0
        assert report["purchase_cost"] == 900.0
        assert report["gross_profit"] == -500.0
        assert report["profit_margin"] == -125.0
        assert report["cash_collected"] == 135.0
        assert report["cash_paid"] == 400.0
        assert report["net_cash_flow"] == -265.0
        assert [m["month"] for m in report["monthly"]] == ["2025-01", "2025-02"]
        assert report["monthly"][0]["gross_profit"] == -800.0

    def test_csv_total_row(self, client, ledger):
        response = client.get("/reports/financial/profit-loss", params={**YEAR, "export": "csv"})
        assert response.text.splitlines()[-1] == "Total,400.00,900.00,-500.00"


# ===== INVENTORY =====

@pytest.fixture
def stock(client, make_product):
    def category(name):
        response = client.post("/categories/", json={"name": name})
        assert response.status_code == 201, response.text
        return response.json()

    beverages = category("Beverages")
    stationery = category("Stationery")
    make_product(sku="TEA", name="Green Tea", cost_price="12.50", stock_quantity=40, category_id=beverages["id"])
    make_product(sku="JUICE", name="Mango Juice", cost_price=30, stock_quantity=5, category_id=beverages["id"])
    make_product(sku="PENS", name="Ball Pens", cost_price="4.25", stock_quantity=8,
                 low_stock_threshold=5, category_id=stationery["id"])
    make_product(sku="TWINE", name="Loose Twine", cost_price=10, stock_quantity=0)
    return {"beverages": beverages, "stationery": stationery}


class TestInventoryReport:

    def test_stock_valued_at_cost(self, client, stock):
        report = client.get("/reports/inventory/").json()
        assert report["summary"] == {
            "total_products": 4,
            "total_items_in_stock": 53,
            "total_inventory_value": 684.0,
            "low_stock_count": 2,
        }
        items = {item["sku"]: item for item in report["items"]}
        assert items["TEA"]["stock_value"] == 500.0
        assert items["TEA"]["category_name"] == "Beverages"
        assert items["PENS"]["stock_value"] == 34.0
        assert items["TWINE"]["category_name"] == "Uncategorized"

    def test_low_stock_flags(self, client, stock):
        items = {item["sku"]: item["is_low_stock"] for item in client.get("/reports/inventory/").json()["items"]}
        assert items == {"TEA": False, "JUICE": True, "PENS": False, "TWINE": True}

    def test_totals_by_category(self, client, stock):
        by_category = client.get("/reports/inventory/").json()["by_category"]
        assert [(c["category_name"], c["product_count"], c["total_quantity"], c["total_value"]) for c in by_category] == [
            ("Beverages", 2, 45, 650.0),
            ("Stationery", 1, 8, 34.0),
            ("Uncategorized", 1, 0, 0.0),
        ]

    def test_low_stock_only_keeps_the_full_summary(self, client, stock):
        report = client.get("/reports/inventory/", params={"low_stock_only": True}).json()
        assert [item["sku"] for item in report["items"]] == ["TWINE", "JUICE"]
        assert report["summary"]["total_products"] == 4

    def test_category_filter(self, client, stock):
        report = client.get("/reports/inventory/", params={"category_id": stock["beverages"]["id"]}).json()
        assert {item["sku"] for item in report["items"]} == {"TEA", "JUICE"}
        assert report["summary"]["total_inventory_value"] == 650.0

    def test_last_movement_date(self, client, stock):
        items = {item["sku"]: item for item in client.get("/reports/inventory/").json()["items"]}
        assert items["TEA"]["last_movement_date"] is not None
        assert items["TWINE"]["last_movement_date"] is None

    def test_sales_reduce_stock_value(self, client, stock, customer):
        tea = client.get("/products/sku/TEA").json()
        response = client.post("/invoices/", json={
            "customer_id": customer["id"],
            "items": [{"product_id": tea["id"], "quantity": 10}]
        })
        assert response.status_code == 201, response.text

        items = {item["sku"]: item for item in client.get("/reports/inventory/").json()["items"]}
        assert items["TEA"]["stock_quantity"] == 30
        assert items["TEA"]["stock_value"] == 375.0

    def test_csv_export(self, client, stock):
        response = client.get("/reports/inventory/", params={"export": "csv"})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        lines = response.text.splitlines()
        assert lines[0] == "SKU,Product,Category,Stock,Low Stock Threshold,Cost Price,Stock Value,Low Stock,Last Movement"
        assert len(lines) == 6
        juice = next(line for line in lines if line.startswith("JUICE,"))
        assert juice.startswith("JUICE,Mango Juice,Beverages,5,10,30.00,150.00,Yes,")
        assert lines[-1] == ",Total,,53,,,684.00,,"

    def test_viewer_can_read(self, viewer_client):
        assert viewer_client.get("/reports/inventory/").status_code == 200
