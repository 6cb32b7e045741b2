import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse
import json
import logging
from decimal import Decimal
from typing import Any

from car_rental.db.engine import engine
from car_rental.db.readers.catalog import get_category_by_name
from car_rental.db.readers.pricing import get_season
from car_rental.db.writers.pricing import BASE_COLUMNS, TIER_COLUMNS, upsert_pricing_rows
from car_rental.logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)


def load_grid(path: str) -> list[dict[str, Any]]:
    """
    Read a pricing grid file.

    Expected format, one entry per category/group:

        [{"category": "Saloon Manual", "group": "A3",
          "prices": [25.00, 22.00, 19.50]}, ...]

    Prices are the 3-6, 7-14 and 15+ day tiers in that order.
    """
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def build_rows(conn: Any, season_id: str, grid: list[dict[str, Any]]) -> list[dict[str, Any]]:
    rows = []
    for entry in grid:
        category = get_category_by_name(conn, entry["category"])
        if category is None:
            raise ValueError(f"Unknown category: {entry['category']}")
        if len(entry["prices"]) != len(TIER_COLUMNS):
            raise ValueError(f"Expected 3 prices for {entry['category']}/{entry['group']}")

        prices = [Decimal(str(p)) for p in entry["prices"]]
        row = {"category_id": category["id"], "group": entry["group"], "season_id": season_id}
        row.update(zip(TIER_COLUMNS, prices))
        row.update(zip(BASE_COLUMNS, prices))
        rows.append(row)
    return rows


def main() -> None:
    """
    Load the price grid of one season from JSON.

    Tier prices and base prices are both set, so a later reset-to-base
    returns the season to exactly these values.
    """
    parser = argparse.ArgumentParser(description="Seed a season's price grid")
    parser.add_argument("season_id", help="Season to load prices into")
    parser.add_argument("grid_file", help="JSON file with category/group prices")
    args = parser.parse_args()

    grid = load_grid(args.grid_file)
    logger.info("Seeding %s pricing rows into season %s", len(grid), args.season_id)

    try:
        with engine.begin() as conn:
            if get_season(conn, args.season_id) is None:
                raise ValueError(f"Unknown season: {args.season_id}")
            upsert_pricing_rows(conn, build_rows(conn, args.season_id, grid))
        logger.info("Seeded season %s", args.season_id)
    except Exception:
        logger.exception("Seeding failed for season %s", args.season_id)
        raise


if __name__ == "__main__":
    main()
