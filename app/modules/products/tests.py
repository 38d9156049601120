"""
Tests for the products module

Product catalogue, stock adjustments and the movement log.
"""

import pytest


class TestProductCatalogue:

    def test_create_with_opening_stock(self, client, make_product):
        product = make_product(sku="  pen-01 ", stock_quantity=12)
        assert product["sku"] == "PEN-01"
        assert product["stock_quantity"] == 12
        assert product["low_stock_threshold"] == 10
        assert product["is_low_stock"] is False

        movements = client.get(f"/products/{product['id']}/movements").json()
        assert len(movements) == 1
        assert movements[0]["movement_type"] == "ADJ"
        assert movements[0]["quantity"] == 12

    def test_duplicate_sku_conflicts(self, client, make_product):
        make_product(sku="PEN-01")
        response = client.post("/products/", json={"name": "Another pen", "sku": "pen-01"})
        assert response.status_code == 409

    def test_unknown_category(self, client):
        response = client.post("/products/", json={"name": "Pen", "sku": "PEN-01", "category_id": 999})
        assert response.status_code == 404

    def test_gst_rate_above_100_is_rejected(self, client):
        response = client.post("/products/", json={"name": "Pen", "sku": "PEN-01", "gst_rate": 101})
        assert response.status_code == 422

    def test_prices_are_limited_to_two_decimals(self, client, make_product):
        response = client.post("/products/", json={"name": "Pen", "sku": "PEN-01", "unit_price": "12.345"})
        assert response.status_code == 422

        product = make_product(sku="PEN-02")
        response = client.patch(f"/products/{product['id']}", json={"cost_price": "4.999"})
        assert response.status_code == 422

    def test_search_and_lookup_by_sku(self, client, make_product):
        make_product(sku="PEN-01", name="Blue pen")
        make_product(sku="NB-01", name="Notebook")

        found = client.get("/products/", params={"search": "pen"}).json()
        assert found["total"] == 1
        assert found["products"][0]["name"] == "Blue pen"
        assert client.get("/products/sku/nb-01").json()["name"] == "Notebook"
        assert client.get("/products/sku/NOPE").status_code == 404

    def test_update(self, client, make_product):
        product = make_product(sku="PEN-01")
        response = client.patch(f"/products/{product['id']}", json={"unit_price": 12.5, "gst_rate": 12})
        assert response.status_code == 200
        assert response.json()["unit_price"] == 12.5
        assert response.json()["gst_rate"] == 12.0

    def test_low_stock_listing(self, client, make_product):
        make_product(sku="LOW", stock_quantity=3)
        make_product(sku="PLENTY", stock_quantity=50)
        low = client.get("/products/low-stock").json()
        assert [p["sku"] for p in low] == ["LOW"]


class TestStockAdjustments:

    def test_adjust_up_and_down(self, client, make_product):
        product = make_product(sku="PEN-01", stock_quantity=5)
        assert client.patch(f"/products/{product['id']}/stock", json={"quantity_change": 7}).json()["stock_quantity"] == 12
        assert client.patch(f"/products/{product['id']}/stock", json={"quantity_change": -2}).json()["stock_quantity"] == 10

    def test_cannot_go_below_zero(self, client, make_product):
        product = make_product(sku="PEN-01", stock_quantity=5)
        response = client.patch(f"/products/{product['id']}/stock", json={"quantity_change": -6})
        assert response.status_code == 400
        assert client.get(f"/products/{product['id']}").json()["stock_quantity"] == 5

    def test_zero_change_is_rejected(self, client, make_product):
        product = make_product(sku="PEN-01")
        assert client.patch(f"/products/{product['id']}/stock", json={"quantity_change": 0}).status_code == 422

    def test_viewer_cannot_adjust(self, viewer_client):
        assert viewer_client.patch("/products/1/stock", json={"quantity_change": 1}).status_code == 403


class TestProductDeletion:

    def test_delete_unused_product(self, client, make_product):
        product = make_product(sku="PEN-01")
        assert client.delete(f"/products/{product['id']}").status_code == 204
        assert client.get(f"/products/{product['id']}").status_code == 404

    def test_delete_invoiced_product_conflicts(self, client, make_product, customer):
        product = make_product(sku="PEN-01")
        client.post("/invoices/", json={
            "customer_id": customer["id"],
            "items": [{"product_id": product["id"], "quantity": 1}]
        })
        assert client.delete(f"/products/{product['id']}").status_code == 409
