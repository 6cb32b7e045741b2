"""
Integration tests for promotions, blog posts, locations, customers, settings
and the payment log view.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any
from unittest.mock import Mock, patch

import pytest
from fastapi.testclient import TestClient

PROMOTION = {
    "name": "Spring",
    "code": "spring10",
    "discount": 10,
    "startDate": "2030-03-01",
    "endDate": "2030-05-31",
}


@pytest.mark.integration
def test_promotion_codes_are_unique_and_upper_case(
    client: TestClient, admin_headers: dict[str, str]
) -> None:
    created = client.post("/api/admin/promotions", json=PROMOTION, headers=admin_headers)
    duplicate = client.post(
        "/api/admin/promotions", json={**PROMOTION, "code": "SPRING10"}, headers=admin_headers
    )

    assert created.status_code == 201, created.text
    assert created.json()["promotion"]["code"] == "SPRING10"
    assert duplicate.status_code == 409


@pytest.mark.integration
def test_promotion_update_rejects_reversed_dates(
    client: TestClient, admin_headers: dict[str, str]
) -> None:
    """Test that an update moving the end before the start is refused."""
    promotion = client.post(
        "/api/admin/promotions", json=PROMOTION, headers=admin_headers
    ).json()["promotion"]

    response = client.put(
        f"/api/admin/promotions/{promotion['id']}",
        json={"endDate": "2030-02-01"},
        headers=admin_headers,
    )

    assert response.status_code == 400


@pytest.mark.integration
def test_post_slugs_and_read_time(client: TestClient, admin_headers: dict[str, str]) -> None:
    """Test that posts get slugs from their titles, suffixed when already taken."""
    body = " ".join(["word"] * 401)
    first = client.post(
        "/api/admin/posts",
        json={"title": "Best Beaches in Cyprus", "titleRu": "Лучшие пляжи", "content": body},
        headers=admin_headers,
    )
    second = client.post(
        "/api/admin/posts",
        json={"title": "Best Beaches in Cyprus", "content": "Short"},
        headers=admin_headers,
    )

    assert first.status_code == 201, first.text
    post = first.json()["post"]
    assert post["slug"] == "best-beaches-in-cyprus"
    assert post["slug_ru"] == "лучшие-пляжи"
    assert post["read_time"] == 3

    other_slug = second.json()["post"]["slug"]
    assert other_slug.startswith("best-beaches-in-cyprus-")
    assert other_slug != post["slug"]


@pytest.mark.integration
def test_post_title_change_regenerates_slug(
    client: TestClient, admin_headers: dict[str, str]
) -> None:
    post = client.post(
        "/api/admin/posts",
        json={"title": "Driving in Cyprus", "content": "Keep left."},
        headers=admin_headers,
    ).json()["post"]

    response = client.put(
        f"/api/admin/posts/{post['id']}",
        json={"title": "Driving Tips"},
        headers=admin_headers,
    )

    assert response.json()["post"]["slug"] == "driving-tips"


@pytest.mark.integration
def test_location_move(client: TestClient, admin_headers: dict[str, str]) -> None:
    """Test that moving a location swaps it with its neighbour."""
    ids = []
    for name in ("Larnaca Airport", "Paphos Airport", "Limassol Office"):
        response = client.post("/api/admin/locations", json={"name": name}, headers=admin_headers)
        assert response.status_code == 201, response.text
        ids.append(response.json()["location"]["id"])

    moved = client.post(
        f"/api/admin/locations/{ids[2]}/move", json={"direction": "up"}, headers=admin_headers
    )
    unchanged = client.post(
        f"/api/admin/locations/{ids[0]}/move", json={"direction": "up"}, headers=admin_headers
    )

    assert [loc["id"] for loc in moved.json()["locations"]] == [ids[0], ids[2], ids[1]]
    assert [loc["id"] for loc in unchanged.json()["locations"]] == [ids[0], ids[2], ids[1]]


@pytest.mark.integration
def test_settings_defaults_and_update(client: TestClient, admin_headers: dict[str, str]) -> None:
    """Test that settings start from defaults and keep counters out of reach."""
    initial = client.get("/api/admin/settings", headers=admin_headers).json()["settings"]
    updated = client.put(
        "/api/admin/settings",
        json={"payOnlineDiscount": 12, "nextOrderNumber": 999},
        headers=admin_headers,
    ).json()["settings"]

    assert Decimal(str(initial["pay_online_discount"])) == 15
    assert Decimal(str(updated["pay_online_discount"])) == 12
    assert updated["next_order_number"] == 1


@pytest.mark.integration
def test_customer_admin_edit_and_delete(
    client: TestClient,
    customer: dict[str, Any],
    pending_booking: dict[str, Any],
    admin_headers: dict[str, str],
) -> None:
    """Test that customers can be edited but not deleted while they have bookings."""
    edited = client.put(
        f"/api/admin/customers/{customer['id']}",
        json={"phone": "+35799000000", "verified": True},
        headers=admin_headers,
    )
    deleted = client.delete(f"/api/admin/customers/{customer['id']}", headers=admin_headers)

    assert edited.status_code == 200
    assert edited.json()["customer"]["phone"] == "+35799000000"
    assert "password_hash" not in edited.json()["customer"]
    assert deleted.status_code == 409


@pytest.mark.integration
def test_customer_search(
    client: TestClient, customer: dict[str, Any], admin_headers: dict[str, str]
) -> None:
    found = client.get(
        "/api/admin/customers", params={"search": "ivanova"}, headers=admin_headers
    )
    missing = client.get(
        "/api/admin/customers", params={"search": "petrov"}, headers=admin_headers
    )

    assert [c["id"] for c in found.json()["customers"]] == [customer["id"]]
    assert missing.json()["customers"] == []


@pytest.mark.integration
@patch("car_rental.services.payments.register_order")
def test_payment_logs_with_stats(
    mock_register: Mock,
    client: TestClient,
    pending_booking: dict[str, Any],
    admin_headers: dict[str, str],
) -> None:
    """Test that gateway attempts show up in the payment log with statistics."""
    mock_register.return_value = {
        "success": False,
        "error_code": "1",
        "error_message": "Duplicate order",
        "raw": {"errorCode": 1},
    }
    client.post("/api/payment/create-order", json={"bookingId": pending_booking["id"]})

    response = client.get(
        "/api/admin/payment-logs", params={"dateRange": "1d"}, headers=admin_headers
    )

    assert response.status_code == 200, response.text
    logs = response.json()["logs"]
    assert [log["payment_type"] for log in logs] == ["create_order"]
    assert logs[0]["status"] == "failed"
    stats = response.json()["stats"]
    assert stats["total"] == 1
    assert stats["failed"] == 1
    assert stats["successful"] == 0
