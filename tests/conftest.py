"""
Shared fixtures: an in-memory SQLite schema, API clients and seed data.
"""

from __future__ import annotations

import base64
import os
from datetime import date
from decimal import Decimal
from typing import Any, Generator

# Configuration is read at import time, so the environment is set first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("ALLOWED_ORIGINS", "*")
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import delete  # noqa: E402

from car_rental import config  # noqa: E402
from car_rental.db.engine import engine  # noqa: E402
from car_rental.db.writers.pricing import upsert_pricing_rows  # noqa: E402
from car_rental.db.writers.rows import insert_row  # noqa: E402
from car_rental.main import app  # noqa: E402
from car_rental.models.base import Base  # noqa: E402
from car_rental.models.catalog import Vehicle, VehicleCategory  # noqa: E402
from car_rental.models.customers import Customer  # noqa: E402
from car_rental.models.pricing import Season  # noqa: E402

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "s3cret-admin"

SEASON_START = date(2030, 6, 1)
SEASON_END = date(2030, 9, 30)


def basic_auth(username: str, password: str) -> dict[str, str]:
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return {"Authorization": f"Basic {token}"}


@pytest.fixture(scope="session", autouse=True)
def db_schema() -> Generator[None, None, None]:
    """Create every table once for the test session."""
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture(autouse=True)
def clean_tables() -> Generator[None, None, None]:
    """Empty all tables after each test, children before parents."""
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(delete(table))


@pytest.fixture
def client() -> TestClient:
    """FastAPI test client."""
    return TestClient(app)


@pytest.fixture
def admin_headers(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Configure admin credentials and return a matching Authorization header."""
    monkeypatch.setattr(config, "ADMIN_USERNAME", ADMIN_USERNAME)
    monkeypatch.setattr(config, "ADMIN_PASSWORD", ADMIN_PASSWORD)
    return basic_auth(ADMIN_USERNAME, ADMIN_PASSWORD)


@pytest.fixture
def upload_root(tmp_path: Any, monkeypatch: pytest.MonkeyPatch) -> Any:
    """Point image uploads at a temporary directory."""
    monkeypatch.setattr(config, "UPLOAD_ROOT", str(tmp_path))
    return tmp_path


@pytest.fixture
def catalog() -> dict[str, Any]:
    """
    Seed one priced vehicle.

    Creates a "Saloon Manual" category with a group A3 vehicle, a summer
    season and a price row of 25.00 / 20.00 / 15.00 per day for the
    3-6, 7-14 and 15+ day tiers (base prices equal to the tiers).
    """
    with engine.begin() as conn:
        category_id = insert_row(conn, VehicleCategory, {"name": "Saloon Manual"})
        vehicle_id = insert_row(
            conn,
            Vehicle,
            {
                "category_id": category_id,
                "name": "Toyota Yaris",
                "code": "A3",
                "group": "A3",
                "image": "/vehicles/saloon-manual/vehicle-placeholder.jpg",
                "seats": 5,
            },
        )
        season_id = insert_row(
            conn,
            Season,
            {"name": "Summer 2030", "start_date": SEASON_START, "end_date": SEASON_END},
        )
        prices = [Decimal("25.00"), Decimal("20.00"), Decimal("15.00")]
        upsert_pricing_rows(
            conn,
            [
                {
                    "category_id": category_id,
                    "group": "A3",
                    "season_id": season_id,
                    "price_3_to_6_days": prices[0],
                    "price_7_to_14_days": prices[1],
                    "price_15_plus_days": prices[2],
                    "base_price_3_to_6_days": prices[0],
                    "base_price_7_to_14_days": prices[1],
                    "base_price_15_plus_days": prices[2],
                }
            ],
        )

    return {"category_id": category_id, "vehicle_id": vehicle_id, "season_id": season_id}


@pytest.fixture
def customer() -> dict[str, Any]:
    """Seed a guest customer without a password."""
    data = {
        "first_name": "Anna",
        "last_name": "Ivanova",
        "email": "anna.ivanova@gmail.com",
        "phone": "+35799123456",
    }
    with engine.begin() as conn:
        customer_id = insert_row(conn, Customer, data)
    return {"id": customer_id, **data}


@pytest.fixture
def booking_payload(catalog: dict[str, Any], customer: dict[str, Any]) -> dict[str, Any]:
    """A ten-day online booking request in camelCase, as the storefront sends it."""
    return {
        "customerId": customer["id"],
        "vehicleId": catalog["vehicle_id"],
        "pickupDate": "2030-07-01",
        "dropoffDate": "2030-07-11",
        "pickupLocation": "Larnaca Airport",
        "dropoffLocation": "Paphos Airport",
        "paymentType": "online",
    }


@pytest.fixture
def pending_booking(client: TestClient, booking_payload: dict[str, Any]) -> dict[str, Any]:
    """Create an online booking through the API and return it."""
    response = client.post("/api/bookings/create", json=booking_payload)
    assert response.status_code == 201, response.text
    return response.json()["booking"]
