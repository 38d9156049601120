"""
Tests for the auth module

Registration, login with bearer tokens and role management. These tests
go through the real token check, without dependency overrides.
"""

import pytest


# ===== FIXTURES =====

def register(client, email, password="Secret123!", full_name="Test User"):
    return client.post("/auth/register", json={"email": email, "password": password, "full_name": full_name})


def login(client, email, password="Secret123!"):
    response = client.post("/auth/login", data={"username": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def owner_headers(anonymous_client):
    register(anonymous_client, "owner@test.shop")
    return login(anonymous_client, "owner@test.shop")


class TestRegistration:

    def test_first_user_is_owner(self, anonymous_client):
        first = register(anonymous_client, "owner@test.shop").json()
        second = register(anonymous_client, "clerk@test.shop").json()
        assert first["role"] == "owner"
        assert second["role"] == "viewer"
        assert "password" not in first

    def test_duplicate_email_conflicts(self, anonymous_client):
        register(anonymous_client, "owner@test.shop")
        assert register(anonymous_client, "owner@test.shop").status_code == 409

    def test_short_password_is_rejected(self, anonymous_client):
        assert register(anonymous_client, "owner@test.shop", password="short").status_code == 422


class TestLogin:

    def test_token_grants_access(self, anonymous_client, owner_headers):
        response = anonymous_client.get("/auth/me", headers=owner_headers)
        assert response.status_code == 200
        assert response.json()["email"] == "owner@test.shop"
        assert response.json()["last_login"] is not None

    def test_wrong_password(self, anonymous_client):
        register(anonymous_client, "owner@test.shop")
        response = anonymous_client.post("/auth/login", data={"username": "owner@test.shop", "password": "wrong-pass"})
        assert response.status_code == 401

    def test_missing_token(self, anonymous_client):
        assert anonymous_client.get("/customers/").status_code in (401, 403)

    def test_invalid_token(self, anonymous_client):
        response = anonymous_client.get("/customers/", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401


class TestRoles:

    def test_owner_promotes_user(self, anonymous_client, owner_headers):
        clerk = register(anonymous_client, "clerk@test.shop").json()
        response = anonymous_client.patch(
            f"/auth/users/{clerk['id']}/role", json={"role": "seller"}, headers=owner_headers
        )
        assert response.status_code == 200
        assert response.json()["role"] == "seller"

    def test_viewer_cannot_write(self, anonymous_client, owner_headers):
        register(anonymous_client, "clerk@test.shop")
        viewer_headers = login(anonymous_client, "clerk@test.shop")
        response = anonymous_client.post("/customers/", json={"name": "Acme"}, headers=viewer_headers)
        assert response.status_code == 403
        assert anonymous_client.get("/customers/", headers=viewer_headers).status_code == 200

    def test_last_owner_cannot_step_down(self, anonymous_client, owner_headers):
        me = anonymous_client.get("/auth/me", headers=owner_headers).json()
        response = anonymous_client.patch(
            f"/auth/users/{me['id']}/role", json={"role": "viewer"}, headers=owner_headers
        )
        assert response.status_code == 409

    def test_unknown_role_is_rejected(self, anonymous_client, owner_headers):
        response = anonymous_client.patch("/auth/users/1/role", json={"role": "superuser"}, headers=owner_headers)
        assert response.status_code == 422
