"""
Tests for the categories module
"""


class TestCategories:

    def test_create_and_list(self, client):
        response = client.post("/categories/", json={"name": "Stationery", "description": "Pens and paper"})
        assert response.status_code == 201
        assert response.json()["product_count"] == 0

        listing = client.get("/categories/").json()
        assert listing["total"] == 1
        assert listing["categories"][0]["name"] == "Stationery"

    def test_duplicate_name_conflicts(self, client):
        client.post("/categories/", json={"name": "Stationery"})
        assert client.post("/categories/", json={"name": "Stationery"}).status_code == 409

    def test_product_count(self, client, make_product):
        category = client.post("/categories/", json={"name": "Stationery"}).json()
        make_product(sku="PEN-01", category_id=category["id"])
        assert client.get(f"/categories/{category['id']}").json()["product_count"] == 1

    def test_update(self, client):
        category = client.post("/categories/", json={"name": "Stationary"}).json()
        response = client.patch(f"/categories/{category['id']}", json={"name": "Stationery"})
        assert response.status_code == 200
        assert response.json()["name"] == "Stationery"

    def test_delete_with_products_conflicts(self, client, make_product):
        category = client.post("/categories/", json={"name": "Stationery"}).json()
        make_product(sku="PEN-01", category_id=category["id"])
        assert client.delete(f"/categories/{category['id']}").status_code == 409

    def test_delete_empty_category(self, client):
        category = client.post("/categories/", json={"name": "Stationery"}).json()
        assert client.delete(f"/categories/{category['id']}").status_code == 204
        assert client.get(f"/categories/{category['id']}").status_code == 404

    def test_viewer_cannot_create(self, viewer_client):
        assert viewer_client.post("/categories/", json={"name": "Stationery"}).status_code == 403
