"""
Integration tests for customer registration, login and profile endpoints.
"""

from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

NEW_CUSTOMER = {
    "firstName": "Nikos",
    "lastName": "Georgiou",
    "email": "nikos.georgiou@gmail.com",
    "phone": "+35799555111",
    "password": "kalimera-2030",
}


@pytest.mark.integration
def test_register_creates_customer(client: TestClient) -> None:
    """Test that registering with a password creates a verified account."""
    response = client.post("/api/auth/register", json=NEW_CUSTOMER)

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["type"] == "CREATED"
    assert body["customer"]["has_password"] is True
    assert body["customer"]["verified"] is True
    assert "password_hash" not in body["customer"]


@pytest.mark.integration
def test_login(client: TestClient) -> None:
    """Test login with the right password, a wrong one and an unknown email."""
    client.post("/api/auth/register", json=NEW_CUSTOMER)

    ok = client.post(
        "/api/auth/login",
        json={"email": "Nikos.Georgiou@gmail.com", "password": NEW_CUSTOMER["password"]},
    )
    wrong = client.post(
        "/api/auth/login", json={"email": NEW_CUSTOMER["email"], "password": "nope-nope"}
    )
    unknown = client.post(
        "/api/auth/login", json={"email": "nobody.here@gmail.com", "password": "whatever"}
    )

    assert ok.status_code == 200
    assert ok.json()["customer"]["email"] == NEW_CUSTOMER["email"]
    assert wrong.status_code == 401
    assert unknown.status_code == 401
    assert wrong.json()["message"] == unknown.json()["message"]


@pytest.mark.integration
def test_login_guest_without_password(client: TestClient, customer: dict[str, Any]) -> None:
    """Test that guests are told to set a password instead of a generic failure."""
    response = client.post(
        "/api/auth/login", json={"email": customer["email"], "password": "anything"}
    )

    assert response.status_code == 401
    assert response.json()["type"] == "NO_PASSWORD"


@pytest.mark.integration
def test_register_upgrades_guest(client: TestClient, customer: dict[str, Any]) -> None:
    """Test that registering a guest's email with matching details sets the password."""
    response = client.post(
        "/api/auth/register",
        json={
            "firstName": "anna",
            "lastName": "IVANOVA",
            "email": customer["email"],
            "password": "new-password-1",
        },
    )

    assert response.status_code == 200, response.text
    assert response.json()["type"] == "UPGRADED"
    assert response.json()["customer"]["id"] == customer["id"]
    assert response.json()["customer"]["has_password"] is True


@pytest.mark.integration
def test_register_guest_again_returns_existing(
    client: TestClient, customer: dict[str, Any]
) -> None:
    response = client.post(
        "/api/auth/register",
        json={"firstName": "Anna", "lastName": "Ivanova", "email": customer["email"]},
    )

    assert response.status_code == 200
    assert response.json()["type"] == "EXISTING"


@pytest.mark.integration
def test_register_with_different_details_conflicts(
    client: TestClient, customer: dict[str, Any]
) -> None:
    """Test that someone else's email cannot be claimed with other details."""
    response = client.post(
        "/api/auth/register",
        json={
            "firstName": "Maria",
            "lastName": "Ivanova",
            "email": customer["email"],
            "phone": "+35799000999",
        },
    )

    assert response.status_code == 409
    body = response.json()
    assert body["type"] == "DATA_CONFLICT"
    assert sorted(c["field"] for c in body["conflicts"]) == ["first_name", "phone"]


@pytest.mark.integration
def test_register_existing_account_conflicts(client: TestClient) -> None:
    client.post("/api/auth/register", json=NEW_CUSTOMER)

    response = client.post("/api/auth/register", json=NEW_CUSTOMER)

    assert response.status_code == 409
    assert response.json()["type"] == "ACCOUNT_EXISTS"


@pytest.mark.integration
def test_register_rejects_invalid_email(client: TestClient) -> None:
    response = client.post("/api/auth/register", json={**NEW_CUSTOMER, "email": "not-an-email"})

    assert response.status_code == 400
    assert "email" in response.json()["errors"]


@pytest.mark.integration
def test_set_password_once(client: TestClient, customer: dict[str, Any]) -> None:
    """Test that a guest can set a password once and then log in."""
    first = client.post(
        "/api/auth/set-password", json={"email": customer["email"], "password": "secret-pw"}
    )
    second = client.post(
        "/api/auth/set-password", json={"email": customer["email"], "password": "other-pw"}
    )
    login = client.post(
        "/api/auth/login", json={"email": customer["email"], "password": "secret-pw"}
    )

    assert first.status_code == 200
    assert first.json()["customer"]["verified"] is True
    assert second.status_code == 409
    assert login.status_code == 200


@pytest.mark.integration
def test_find_customer(client: TestClient, customer: dict[str, Any]) -> None:
    found = client.post("/api/auth/find-customer", json={"email": customer["email"]})
    missing = client.post("/api/auth/find-customer", json={"email": "ghost.user@gmail.com"})

    assert found.json()["customer"]["id"] == customer["id"]
    assert missing.status_code == 404


@pytest.mark.integration
def test_update_customer_changes_only_sent_fields(
    client: TestClient, customer: dict[str, Any]
) -> None:
    response = client.post(
        "/api/auth/update-customer",
        json={"customerId": customer["id"], "address": "12 Makariou Ave, Larnaca"},
    )

    assert response.status_code == 200
    updated = response.json()["customer"]
    assert updated["address"] == "12 Makariou Ave, Larnaca"
    assert updated["phone"] == customer["phone"]
