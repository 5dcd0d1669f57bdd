# This file tests registration, login and the favorites endpoints through the HTTP layer.
# Favorites always require a bearer token; the tests walk a user through a full add/toggle/remove flow.

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import pytest
from fastapi.testclient import TestClient

from servicemap.api.db_access import DatabaseClient
from tests.api.support import api_test_client, bearer, build_services, build_test_config
from tests.integration.support import add_service, add_service_type

REGISTER = "/api/v1/auth/register"
LOGIN = "/api/v1/auth/login"
FAVORITES = "/api/v1/favorites"


@pytest.fixture
def client(db_client: DatabaseClient) -> Iterator[TestClient]:
    with api_test_client(**build_services(db_client, build_test_config())) as test_client:
        yield test_client


@pytest.fixture
def token(client: TestClient) -> str:
    response = client.post(
        REGISTER,
        json={"username": "alice", "email": "alice@example.com", "password": "secret1"},
    )
    return response.json()["data"]["token"]


@pytest.fixture
def service_id(db_client: DatabaseClient) -> int:
    return add_service(db_client, service_type_id=add_service_type(db_client, "Cafe"), name="Cong Caphe")


def test_register_login_and_me(client: TestClient) -> None:
    registered = client.post(
        REGISTER,
        json={"username": "alice", "email": "alice@example.com", "password": "secret1"},
    )
    assert registered.status_code == 201
    assert registered.json()["message"] == "User registered successfully"

    login = client.post(LOGIN, json={"email": "alice@example.com", "password": "secret1"})
    assert login.status_code == 200
    login_token = login.json()["data"]["token"]

    me = client.get("/api/v1/auth/me", headers=bearer(login_token))
    assert me.status_code == 200
    assert me.json()["data"]["username"] == "alice"
    assert "password_hash" not in me.json()["data"]


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ({"username": "alice", "email": "alice@example.com"}, "Username, email, and password are required"),
        ({"username": "al", "email": "alice@example.com", "password": "secret1"},
         "Username must be between 3 and 50 characters"),
        ({"username": "alice", "email": "not-an-email", "password": "secret1"}, "Invalid email format"),
        ({"username": "alice", "email": "alice@example.com", "password": "123"},
         "Password must be at least 6 characters long"),
    ],
)
def test_register_validation_messages(client: TestClient, body: dict[str, Any], message: str) -> None:
    response = client.post(REGISTER, json=body)
    assert response.status_code == 400
    assert response.json()["message"] == message


def test_duplicate_registration_and_bad_login(client: TestClient, token: str) -> None:
    duplicate = client.post(
        REGISTER,
        json={"username": "alice", "email": "alice@example.com", "password": "secret1"},
    )
    bad_login = client.post(LOGIN, json={"email": "alice@example.com", "password": "wrong-pass"})
    empty_login = client.post(LOGIN, json={})

    assert duplicate.status_code == 409
    assert bad_login.status_code == 401
    assert bad_login.json()["message"] == "Invalid email or password"
    assert empty_login.status_code == 400
    assert empty_login.json()["message"] == "Email and password are required"


def test_favorites_require_token(client: TestClient) -> None:
    missing = client.get(FAVORITES)
    invalid = client.get(FAVORITES, headers=bearer("garbage"))

    assert missing.status_code == 401
    assert missing.json()["message"] == "Access token required"
    assert invalid.status_code == 403
    assert invalid.json()["message"] == "Invalid token"


def test_favorite_flow(client: TestClient, token: str, service_id: int) -> None:
    headers = bearer(token)

    added = client.post(FAVORITES, json={"service_id": service_id}, headers=headers)
    assert added.status_code == 201
    assert added.json()["message"] == "Service added to favorites"
    assert added.json()["data"]["service_id"] == service_id

    duplicate = client.post(FAVORITES, json={"service_id": service_id}, headers=headers)
    assert duplicate.status_code == 409
    assert duplicate.json()["message"] == "Service is already in favorites"

    listed = client.get(FAVORITES, headers=headers).json()["data"]
    assert [f["id"] for f in listed["favorites"]] == [service_id]
    assert listed["favorites"][0]["favorited_at"]
    assert listed["total"] == 1

    status = client.get(f"{FAVORITES}/{service_id}/status", headers=headers).json()["data"]
    assert status == {"is_favorite": True}

    toggled = client.put(f"{FAVORITES}/{service_id}/toggle", headers=headers).json()
    assert toggled["data"] == {"is_favorite": False}
    assert toggled["message"] == "Service removed from favorites"

    removed = client.delete(f"{FAVORITES}/{service_id}", headers=headers)
    assert removed.status_code == 404
    assert removed.json()["message"] == "Service is not in favorites"

    client.put(f"{FAVORITES}/{service_id}/toggle", headers=headers)
    cleared = client.delete(FAVORITES, headers=headers)
    assert cleared.json()["message"] == "All favorites cleared"
    assert client.get(FAVORITES, headers=headers).json()["data"]["total"] == 0


def test_add_favorite_validation(client: TestClient, token: str) -> None:
    headers = bearer(token)

    missing = client.post(FAVORITES, json={}, headers=headers)
    unknown = client.post(FAVORITES, json={"service_id": 404}, headers=headers)

    assert missing.status_code == 400
    assert missing.json()["message"] == "Service ID is required"
    assert unknown.status_code == 404
    assert unknown.json()["message"] == "Service not found"


def test_service_detail_counts_favorites(client: TestClient, token: str, service_id: int) -> None:
    client.post(FAVORITES, json={"service_id": service_id}, headers=bearer(token))

    detail = client.get(f"/api/v1/services/{service_id}", headers=bearer(token)).json()["data"]

    assert detail["favorite_count"] == 1
    assert detail["is_favorite"] is True
