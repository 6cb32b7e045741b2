"""
Integration tests for season management and bulk repricing.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import pytest
from fastapi.testclient import TestClient

PRICE_KEYS = ("price_3_to_6_days", "price_7_to_14_days", "price_15_plus_days")


def money(value: Any) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"))


def season_prices(client: TestClient, season_id: str, headers: dict[str, str]) -> list[Decimal]:
    response = client.get(
        "/api/admin/seasonal-pricing", params={"seasonId": season_id}, headers=headers
    )
    assert response.status_code == 200, response.text
    row = response.json()["pricing"][0]
    return [money(row[key]) for key in PRICE_KEYS]


@pytest.mark.integration
def test_admin_pricing_requires_auth(client: TestClient) -> None:
    """Test that pricing routes are closed without credentials."""
    response = client.get("/api/admin/seasons")

    assert response.status_code == 401


@pytest.mark.integration
def test_update_by_percent_then_reset_to_base(
    client: TestClient, catalog: dict[str, Any], admin_headers: dict[str, str]
) -> None:
    """Test that a percentage raise can be undone by resetting to base prices."""
    season_id = catalog["season_id"]

    raised = client.post(
        "/api/admin/seasonal-pricing/update-by-percent",
        json={"seasonId": season_id, "percent": 10},
        headers=admin_headers,
    )
    assert raised.status_code == 200, raised.text
    assert raised.json()["updated"] == 1
    assert season_prices(client, season_id, admin_headers) == [
        Decimal("27.50"),
        Decimal("22.00"),
        Decimal("16.50"),
    ]

    reset = client.post(
        "/api/admin/seasonal-pricing/reset-to-base",
        json={"seasonId": season_id},
        headers=admin_headers,
    )
    assert reset.status_code == 200
    assert season_prices(client, season_id, admin_headers) == [
        Decimal("25.00"),
        Decimal("20.00"),
        Decimal("15.00"),
    ]


@pytest.mark.integration
def test_update_by_percent_unknown_season(
    client: TestClient, admin_headers: dict[str, str]
) -> None:
    response = client.post(
        "/api/admin/seasonal-pricing/update-by-percent",
        json={"seasonId": "missing", "percent": 5},
        headers=admin_headers,
    )

    assert response.status_code == 404


@pytest.mark.integration
def test_update_by_percent_below_minus_hundred(
    client: TestClient, catalog: dict[str, Any], admin_headers: dict[str, str]
) -> None:
    """Test that a cut of more than 100% fails validation."""
    response = client.post(
        "/api/admin/seasonal-pricing/update-by-percent",
        json={"seasonId": catalog["season_id"], "percent": -150},
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert "percent" in response.json()["errors"]


@pytest.mark.integration
def test_snapshot_base_keeps_raised_prices(
    client: TestClient, catalog: dict[str, Any], admin_headers: dict[str, str]
) -> None:
    """Test that after a snapshot, reset restores the raised prices."""
    season_id = catalog["season_id"]
    client.post(
        "/api/admin/seasonal-pricing/update-by-percent",
        json={"seasonId": season_id, "percent": 10},
        headers=admin_headers,
    )
    client.post(
        "/api/admin/seasonal-pricing/snapshot-base",
        json={"seasonId": season_id},
        headers=admin_headers,
    )
    client.post(
        "/api/admin/seasonal-pricing/reset-to-base",
        json={"seasonId": season_id},
        headers=admin_headers,
    )

    assert season_prices(client, season_id, admin_headers)[0] == Decimal("27.50")


@pytest.mark.integration
def test_save_pricing_row_sets_base_prices(
    client: TestClient, catalog: dict[str, Any], admin_headers: dict[str, str]
) -> None:
    """Test that a new price row also records its base prices."""
    response = client.post(
        "/api/admin/seasonal-pricing",
        json={
            "seasonId": catalog["season_id"],
            "categoryId": catalog["category_id"],
            "group": "B1",
            "price3to6": 40,
            "price7to14": 35,
            "price15Plus": 30,
        },
        headers=admin_headers,
    )

    assert response.status_code == 200, response.text
    row = response.json()["pricing"]
    assert row["group"] == "B1"
    assert money(row["price_3_to_6_days"]) == Decimal("40.00")
    assert money(row["base_price_15_plus_days"]) == Decimal("30.00")


@pytest.mark.integration
def test_save_pricing_grid(
    client: TestClient, catalog: dict[str, Any], admin_headers: dict[str, str]
) -> None:
    """Test that edited grid rows are saved and unknown rows fail the whole batch."""
    season_id = catalog["season_id"]
    grid = client.get(
        "/api/admin/seasonal-pricing", params={"seasonId": season_id}, headers=admin_headers
    ).json()["pricing"]
    row_id = grid[0]["id"]

    saved = client.put(
        "/api/admin/seasonal-pricing",
        json={"rows": [{"id": row_id, "price3to6": 26}]},
        headers=admin_headers,
    )
    rejected = client.put(
        "/api/admin/seasonal-pricing",
        json={"rows": [{"id": row_id, "price3to6": 99}, {"id": "missing", "price3to6": 1}]},
        headers=admin_headers,
    )

    assert saved.status_code == 200
    assert saved.json()["updated"] == 1
    assert rejected.status_code == 404
    assert season_prices(client, season_id, admin_headers)[0] == Decimal("26.00")


@pytest.mark.integration
def test_season_pricing_requires_season_id(
    client: TestClient, admin_headers: dict[str, str]
) -> None:
    response = client.get("/api/admin/seasonal-pricing", headers=admin_headers)

    assert response.status_code == 400


@pytest.mark.integration
def test_create_season_rejects_overlap(
    client: TestClient, catalog: dict[str, Any], admin_headers: dict[str, str]
) -> None:
    """Test that a season overlapping another one is a conflict."""
    response = client.post(
        "/api/admin/seasons",
        json={"name": "Late summer", "startDate": "2030-09-15", "endDate": "2030-10-15"},
        headers=admin_headers,
    )

    assert response.status_code == 409
    assert "Summer 2030" in response.json()["detail"]


@pytest.mark.integration
def test_create_season_rejects_reversed_dates(
    client: TestClient, admin_headers: dict[str, str]
) -> None:
    response = client.post(
        "/api/admin/seasons",
        json={"name": "Broken", "startDate": "2031-05-01", "endDate": "2031-04-01"},
        headers=admin_headers,
    )

    assert response.status_code == 400


@pytest.mark.integration
def test_create_season_copies_prices_and_delete_removes_them(
    client: TestClient, catalog: dict[str, Any], admin_headers: dict[str, str]
) -> None:
    """Test that a copied season gets the source grid and deleting it removes the grid."""
    created = client.post(
        "/api/admin/seasons",
        json={
            "name": "Summer 2031",
            "startDate": "2031-06-01",
            "endDate": "2031-09-30",
            "copyFromId": catalog["season_id"],
        },
        headers=admin_headers,
    )
    assert created.status_code == 201, created.text
    assert created.json()["copied_rows"] == 1
    new_id = created.json()["season"]["id"]
    assert season_prices(client, new_id, admin_headers) == [
        Decimal("25.00"),
        Decimal("20.00"),
        Decimal("15.00"),
    ]

    deleted = client.delete(f"/api/admin/seasons/{new_id}", headers=admin_headers)

    assert deleted.status_code == 200
    assert deleted.json()["pricing_rows_deleted"] == 1
    seasons = client.get("/api/admin/seasons", headers=admin_headers).json()["seasons"]
    assert [s["id"] for s in seasons] == [catalog["season_id"]]


@pytest.mark.integration
def test_update_season_checks_overlap(
    client: TestClient, catalog: dict[str, Any], admin_headers: dict[str, str]
) -> None:
    """Test that moving a season onto another one is refused."""
    other = client.post(
        "/api/admin/seasons",
        json={"name": "Winter", "startDate": "2030-11-01", "endDate": "2031-02-28"},
        headers=admin_headers,
    ).json()["season"]

    renamed = client.put(
        f"/api/admin/seasons/{other['id']}", json={"name": "Winter 30/31"}, headers=admin_headers
    )
    moved = client.put(
        f"/api/admin/seasons/{other['id']}",
        json={"startDate": "2030-09-01"},
        headers=admin_headers,
    )

    assert renamed.status_code == 200
    assert renamed.json()["season"]["name"] == "Winter 30/31"
    assert moved.status_code == 409
