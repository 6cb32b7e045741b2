"""
Integration tests for the seasonal pricing writers and the upsert helper.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import pytest

from car_rental.db.engine import engine
from car_rental.db.readers.pricing import get_pricing_row
from car_rental.db.writers.pricing import (
    copy_tiers_to_base,
    restore_base_prices,
    scale_season_prices,
    upsert_pricing_rows,
)


def price_row(catalog: dict[str, Any], **prices: Decimal) -> dict[str, Any]:
    row = {
        "category_id": catalog["category_id"],
        "group": "A3",
        "season_id": catalog["season_id"],
        "price_3_to_6_days": Decimal("25.00"),
        "price_7_to_14_days": Decimal("20.00"),
        "price_15_plus_days": Decimal("15.00"),
    }
    row.update(prices)
    return row


def read_row(catalog: dict[str, Any]) -> dict[str, Any]:
    with engine.connect() as conn:
        row = get_pricing_row(conn, catalog["category_id"], "A3", catalog["season_id"])
    assert row is not None
    return row


@pytest.mark.integration
def test_upsert_updates_existing_row_in_place(catalog: dict[str, Any]) -> None:
    """Test that upserting the same key changes prices without adding a row."""
    original_id = read_row(catalog)["id"]

    with engine.begin() as conn:
        upsert_pricing_rows(conn, [price_row(catalog, price_3_to_6_days=Decimal("30.00"))])

    row = read_row(catalog)
    assert row["id"] == original_id
    assert row["price_3_to_6_days"] == Decimal("30.00")


@pytest.mark.integration
def test_upsert_skips_unchanged_rows(catalog: dict[str, Any]) -> None:
    """Test that a no-op upsert leaves updated_at alone."""
    before = read_row(catalog)
    same = price_row(
        catalog,
        base_price_3_to_6_days=Decimal("25.00"),
        base_price_7_to_14_days=Decimal("20.00"),
        base_price_15_plus_days=Decimal("15.00"),
    )

    with engine.begin() as conn:
        upsert_pricing_rows(conn, [same])

    assert read_row(catalog)["updated_at"] == before["updated_at"]


@pytest.mark.integration
def test_scale_and_restore_round_trip(catalog: dict[str, Any]) -> None:
    """Test that scaling rounds to cents and restoring brings the base back."""
    with engine.begin() as conn:
        scaled = scale_season_prices(conn, catalog["season_id"], Decimal("0.9"))

    assert scaled == 1
    row = read_row(catalog)
    assert row["price_3_to_6_days"] == Decimal("22.50")
    assert row["price_15_plus_days"] == Decimal("13.50")

    with engine.begin() as conn:
        restored = restore_base_prices(conn, catalog["season_id"])

    assert restored == 1
    assert read_row(catalog)["price_3_to_6_days"] == Decimal("25.00")


@pytest.mark.integration
def test_restore_skips_rows_without_base_prices(catalog: dict[str, Any]) -> None:
    with engine.begin() as conn:
        upsert_pricing_rows(
            conn, [price_row(catalog, group="B1", price_3_to_6_days=Decimal("40.00"))]
        )
        restored = restore_base_prices(conn, catalog["season_id"])

    assert restored == 1


@pytest.mark.integration
def test_copy_tiers_to_base(catalog: dict[str, Any]) -> None:
    with engine.begin() as conn:
        scale_season_prices(conn, catalog["season_id"], Decimal("2"))
        copy_tiers_to_base(conn, catalog["season_id"])

    row = read_row(catalog)
    assert row["base_price_7_to_14_days"] == Decimal("40.00")
