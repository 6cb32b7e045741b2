"""
Integration tests for the public catalog and the localized page endpoints.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import pytest
from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from car_rental.db.engine import engine
from car_rental.db.writers.rows import insert_row
from car_rental.models.catalog import Vehicle
from car_rental.models.content import Post, SiteContent
from car_rental.models.locations import Location


def money(value: Any) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"))


@pytest.fixture
def published_post() -> dict[str, Any]:
    """Seed a post published in both languages."""
    data = {
        "title": "Driving in Cyprus",
        "title_ru": "Вождение на Кипре",
        "slug": "driving-in-cyprus",
        "slug_ru": "vozhdenie-na-kipre",
        "content": "Traffic keeps left.",
        "content_ru": "Движение левостороннее.",
        "published": True,
        "published_ru": True,
    }
    with engine.begin() as conn:
        post_id = insert_row(conn, Post, data)
    return {"id": post_id, **data}


@pytest.mark.integration
def test_locations_are_cacheable(client: TestClient) -> None:
    """Test that only visible locations are listed, with a cache header."""
    with engine.begin() as conn:
        insert_row(conn, Location, {"name": "Larnaca Airport", "display_order": 0})
        insert_row(conn, Location, {"name": "Closed Office", "display_order": 1, "visible": False})

    response = client.get("/api/locations")

    assert response.status_code == 200
    assert [loc["name"] for loc in response.json()["locations"]] == ["Larnaca Airport"]
    assert "max-age=300" in response.headers["Cache-Control"]


@pytest.mark.integration
def test_vehicle_search_prices_each_vehicle(client: TestClient, catalog: dict[str, Any]) -> None:
    """Test that search returns online and pay-on-arrival prices."""
    response = client.get(
        "/api/vehicles/search", params={"pickupDate": "2030-07-01", "dropoffDate": "2030-07-11"}
    )

    assert response.status_code == 200, response.text
    (vehicle,) = response.json()["vehicles"]
    assert vehicle["id"] == catalog["vehicle_id"]
    assert vehicle["days"] == 10
    assert money(vehicle["online_price"]) == Decimal("170.00")
    assert money(vehicle["arrival_price"]) == Decimal("180.00")


@pytest.mark.integration
def test_vehicle_search_skips_unpriced_vehicles_quietly(
    client: TestClient, catalog: dict[str, Any]
) -> None:
    """Test that vehicles without a price row are left out and not counted as failed quotes."""
    with engine.begin() as conn:
        insert_row(
            conn,
            Vehicle,
            {
                "category_id": catalog["category_id"],
                "name": "Fiat 500",
                "code": "Z9",
                "group": "Z9",
            },
        )

    def not_configured() -> float:
        value = REGISTRY.get_sample_value(
            "car_rental_price_quotes_total", {"status": "not_configured"}
        )
        return value or 0.0

    before = not_configured()
    response = client.get(
        "/api/vehicles/search", params={"pickupDate": "2030-07-01", "dropoffDate": "2030-07-11"}
    )

    assert response.status_code == 200
    assert [v["id"] for v in response.json()["vehicles"]] == [catalog["vehicle_id"]]
    assert not_configured() == before



@pytest.mark.integration
def test_vehicle_search_rejects_reversed_dates(client: TestClient) -> None:
    response = client.get(
        "/api/vehicles/search", params={"pickupDate": "2030-07-11", "dropoffDate": "2030-07-01"}
    )

    assert response.status_code == 400


@pytest.mark.integration
def test_translation_bundles(client: TestClient) -> None:
    """Test that bundles are served for supported locales only."""
    ru = client.get("/api/i18n/ru")
    de = client.get("/api/i18n/de")

    assert ru.status_code == 200
    assert ru.json()["messages"]["blog"]["notFound"] == "Статья не найдена"
    assert de.status_code == 404


@pytest.mark.integration
def test_recent_posts_route_is_not_a_locale_page(
    client: TestClient, published_post: dict[str, Any]
) -> None:
    """Test that /api/blog/recent is the JSON listing, not a blog page for locale 'api'."""
    response = client.get("/api/blog/recent")

    assert response.status_code == 200
    assert [p["slug"] for p in response.json()["posts"]] == ["driving-in-cyprus"]


@pytest.mark.integration
def test_home_page(client: TestClient, published_post: dict[str, Any]) -> None:
    en = client.get("/en/home")
    de = client.get("/de/home")

    assert en.status_code == 200
    assert en.json()["messages"]["nav"]["home"] == "Home"
    assert [p["title"] for p in en.json()["posts"]] == ["Driving in Cyprus"]
    assert de.status_code == 404


@pytest.mark.integration
def test_russian_blog_post_accepts_either_slug(
    client: TestClient, published_post: dict[str, Any]
) -> None:
    """Test that Russian pages resolve both slugs and show Russian fields."""
    by_ru_slug = client.get("/ru/blog/vozhdenie-na-kipre")
    by_en_slug = client.get("/ru/blog/driving-in-cyprus")

    assert by_ru_slug.status_code == 200
    post = by_ru_slug.json()["post"]
    assert post["title"] == "Вождение на Кипре"
    assert post["slug"] == "vozhdenie-na-kipre"
    assert "title_ru" not in post
    assert by_en_slug.json()["post"]["id"] == published_post["id"]


@pytest.mark.integration
def test_missing_blog_post_uses_translated_message(client: TestClient) -> None:
    response = client.get("/ru/blog/missing")

    assert response.status_code == 404
    assert response.json()["detail"] == "Статья не найдена"


@pytest.mark.integration
def test_content_prefers_localized_key(client: TestClient) -> None:
    """Test that <key>_<locale> wins over the plain key."""
    with engine.begin() as conn:
        insert_row(conn, SiteContent, {"key": "hero_title", "value": "Rent a car in Cyprus"})
        insert_row(
            conn, SiteContent, {"key": "hero_title_ru", "value": "Аренда авто на Кипре"}
        )

    en = client.get("/en/content/hero_title")
    ru = client.get("/ru/content/hero_title")
    missing = client.get("/ru/content/nothing")

    assert en.json()["value"] == "Rent a car in Cyprus"
    assert ru.json()["value"] == "Аренда авто на Кипре"
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Page not found"


@pytest.mark.integration
def test_search_page_without_results(client: TestClient, catalog: dict[str, Any]) -> None:
    """Test that a search outside every season explains the empty result."""
    response = client.get(
        "/en/search", params={"pickupDate": "2031-01-10", "dropoffDate": "2031-01-20"}
    )

    assert response.status_code == 200
    assert response.json()["vehicles"] == []
    assert response.json()["message"] == "No cars are available for the selected dates"


@pytest.mark.integration
def test_search_page_with_results(client: TestClient, catalog: dict[str, Any]) -> None:
    response = client.get(
        "/ru/search", params={"pickupDate": "2030-07-01", "dropoffDate": "2030-07-04"}
    )

    assert response.status_code == 200
    assert [v["id"] for v in response.json()["vehicles"]] == [catalog["vehicle_id"]]
    assert response.json()["message"] is None


@pytest.mark.integration
def test_search_page_rejects_reversed_dates(client: TestClient) -> None:
    response = client.get(
        "/en/search", params={"pickupDate": "2030-07-11", "dropoffDate": "2030-07-01"}
    )

    assert response.status_code == 400
