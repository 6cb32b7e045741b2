"""
Seasonal price resolution and booking quotes.

A vehicle's daily rate depends on three things: the season containing the
pickup date, the vehicle's category and group, and the length of the rental
(3-6, 7-14 or 15+ days). On top of the base rental price a quote applies the
payment-type discount, an optional promotion code and the selected extras.
"""

from __future__ import annotations

from datetime import date, time
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

import structlog
from sqlalchemy.engine import Connection

from car_rental.db.readers.catalog import get_vehicle, list_vehicles
from car_rental.db.readers.content import find_active_promotion
from car_rental.db.readers.pricing import (
    find_season_for_date,
    get_pricing_row,
    list_option_pricing,
    list_rental_options,
)
from car_rental.db.readers.settings import get_settings
from car_rental.metrics import price_quotes
from car_rental.utils.datetime import rental_days

logger = structlog.get_logger(__name__)

CENT = Decimal("0.01")

TIER_3_TO_6 = "price_3_to_6_days"
TIER_7_TO_14 = "price_7_to_14_days"
TIER_15_PLUS = "price_15_plus_days"

PER_DAY_PRICE_TYPES = {"per day", "per day per driver"}


class PricingNotConfiguredError(LookupError):
    """Raised when no season or no seasonal pricing row covers a rental."""


class InvalidPromotionError(ValueError):
    """Raised when a promotion code is unknown, hidden or outside its window."""


def money(value: Any) -> Decimal:
    """Convert a number to Decimal rounded half-up to cents."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def tier_for_days(days: int) -> str:
    """
    Pick the pricing tier column for a rental length.

    Example:
        >>> tier_for_days(10)
        'price_7_to_14_days'
    """
    if days <= 6:
        return TIER_3_TO_6
    if days <= 14:
        return TIER_7_TO_14
    return TIER_15_PLUS


def resolve_rental_price(
    conn: Connection,
    vehicle: dict[str, Any],
    pickup: date,
    dropoff: date,
    pickup_time: Optional[time] = None,
    dropoff_time: Optional[time] = None,
) -> dict[str, Any]:
    """
    Resolve the base rental price of a vehicle for a date range.

    The season is chosen by the pickup date only; a rental running past the
    end of that season is still charged at its rate.

    Args:
        conn: Database connection
        vehicle: Vehicle row (needs id, category_id and group)
        pickup: Pickup date
        dropoff: Dropoff date
        pickup_time: Pickup time of day (optional)
        dropoff_time: Dropoff time of day (optional)

    Returns:
        dict: season_id, season_name, tier, days, daily_rate and total

    Raises:
        PricingNotConfiguredError: If no season or pricing row applies
        ValueError: If dropoff is before pickup
    """
    days = rental_days(pickup, dropoff, pickup_time, dropoff_time)

    season = find_season_for_date(conn, pickup)
    if season is None:
        price_quotes.labels(status="not_configured").inc()
        logger.warning("season_not_found", vehicle_id=vehicle["id"], pickup=str(pickup))
        raise PricingNotConfiguredError(f"No season configured for {pickup.isoformat()}")

    row = get_pricing_row(conn, vehicle["category_id"], vehicle["group"], season["id"])
    if row is None:
        price_quotes.labels(status="not_configured").inc()
        logger.warning(
            "seasonal_pricing_not_found",
            vehicle_id=vehicle["id"],
            category_id=vehicle["category_id"],
            group=vehicle["group"],
            season_id=season["id"],
        )
        raise PricingNotConfiguredError(
            f"No pricing configured for group {vehicle['group']} in season {season['name']}"
        )

    if dropoff > season["end_date"]:
        logger.warning(
            "rental_spans_season_boundary",
            vehicle_id=vehicle["id"],
            season_id=season["id"],
            season_end=str(season["end_date"]),
            dropoff=str(dropoff),
        )

    tier = tier_for_days(days)
    daily_rate = money(row[tier])
    price_quotes.labels(status="success").inc()

    return {
        "season_id": season["id"],
        "season_name": season["name"],
        "tier": tier,
        "days": days,
        "daily_rate": daily_rate,
        "total": money(daily_rate * days),
    }


def extra_cost(option: dict[str, Any], unit_price: Any, quantity: int, days: int) -> Decimal:
    """
    Price one selected extra for the whole rental.

    Args:
        option: Rental option row (price_type, max_qty, max_cost, free_over_days)
        unit_price: Price from the tier matching the vehicle group
        quantity: Requested quantity, capped at the option's max_qty
        days: Billable rental days

    Returns:
        Decimal: Cost of the extra, zero when free for long rentals
    """
    free_over_days = option.get("free_over_days")
    if free_over_days and days >= free_over_days:
        return Decimal("0.00")

    quantity = min(quantity, option.get("max_qty") or quantity)
    price = Decimal(str(unit_price)) * quantity
    if (option.get("price_type") or "").lower() in PER_DAY_PRICE_TYPES:
        price *= days

    max_cost = option.get("max_cost")
    if max_cost and price > Decimal(str(max_cost)):
        price = Decimal(str(max_cost))
    return money(price)


def price_extras(
    conn: Connection,
    vehicle_group: str,
    selected: dict[str, int],
    days: int,
) -> list[dict[str, Any]]:
    """
    Price the selected extras for a vehicle group.

    Args:
        conn: Database connection
        vehicle_group: Group code of the booked vehicle
        selected: Mapping of rental option code to requested quantity
        days: Billable rental days

    Returns:
        list: One entry per priced extra (code, name, quantity, unit_price, total).
        Unknown codes, hidden options and options without a tier for the group
        are skipped.
    """
    wanted = {code: qty for code, qty in selected.items() if qty and qty > 0}
    if not wanted:
        return []

    options = [o for o in list_rental_options(conn, visible_only=True) if o["code"] in wanted]
    tiers = list_option_pricing(conn, [o["id"] for o in options])

    priced = []
    for option in options:
        tier = next(
            (
                t
                for t in tiers
                if t["rental_option_id"] == option["id"]
                and vehicle_group in [g.strip() for g in t["vehicle_groups"].split(",")]
            ),
            None,
        )
        if tier is None:
            logger.info("extra_not_priced_for_group", code=option["code"], group=vehicle_group)
            continue

        quantity = min(wanted[option["code"]], option.get("max_qty") or wanted[option["code"]])
        priced.append(
            {
                "code": option["code"],
                "name": option["name"],
                "quantity": quantity,
                "price_type": option["price_type"],
                "unit_price": money(tier["price"]),
                "total": extra_cost(option, tier["price"], quantity, days),
            }
        )
    return priced


def build_quote(
    conn: Connection,
    vehicle_id: str,
    pickup: date,
    dropoff: date,
    payment_type: str = "online",
    pickup_time: Optional[time] = None,
    dropoff_time: Optional[time] = None,
    extras: Optional[dict[str, int]] = None,
    promotion_code: Optional[str] = None,
    today: Optional[date] = None,
) -> dict[str, Any]:
    """
    Build a full price quote for a prospective booking.

    Args:
        conn: Database connection
        vehicle_id: Vehicle being booked
        pickup: Pickup date
        dropoff: Dropoff date
        payment_type: ``online`` or ``arrival``; selects the settings discount
        pickup_time: Pickup time of day (optional)
        dropoff_time: Dropoff time of day (optional)
        extras: Mapping of rental option code to quantity
        promotion_code: Promotion code entered by the customer
        today: Date the promotion is redeemed on (defaults to the current date)

    Returns:
        dict: Price breakdown ending in ``total``

    Raises:
        LookupError: If the vehicle does not exist or is hidden
        PricingNotConfiguredError: If no season or pricing row applies
        InvalidPromotionError: If the promotion code cannot be used
    """
    vehicle = get_vehicle(conn, vehicle_id)
    if vehicle is None or not vehicle["visible"]:
        raise LookupError(f"Vehicle {vehicle_id} not found")

    base = resolve_rental_price(conn, vehicle, pickup, dropoff, pickup_time, dropoff_time)
    settings = get_settings(conn)

    discount_field = (
        "pay_on_arrival_discount" if payment_type == "arrival" else "pay_online_discount"
    )
    payment_discount_percent = Decimal(str(settings[discount_field] or 0))
    vehicle_price = money(base["total"] * (1 - payment_discount_percent / 100))

    promotion_discount = Decimal("0.00")
    applied_code = None
    if promotion_code:
        promotion = find_active_promotion(conn, promotion_code, today or date.today())
        if promotion is None:
            raise InvalidPromotionError(f"Promotion code {promotion_code} is not valid")
        promotion_discount = money(base["total"] * Decimal(promotion["discount"]) / 100)
        applied_code = promotion["code"]

    priced_extras = price_extras(conn, vehicle["group"], extras or {}, base["days"])
    extras_total = money(sum((e["total"] for e in priced_extras), Decimal("0")))

    total = money(max(vehicle_price - promotion_discount, Decimal("0")) + extras_total)

    return {
        "vehicle_id": vehicle["id"],
        "vehicle_name": vehicle["name"],
        "vehicle_group": vehicle["group"],
        "category_name": vehicle["category_name"],
        "season_id": base["season_id"],
        "season_name": base["season_name"],
        "tier": base["tier"],
        "days": base["days"],
        "daily_rate": base["daily_rate"],
        "base_total": base["total"],
        "payment_type": payment_type,
        "payment_discount_percent": payment_discount_percent,
        "vehicle_price": vehicle_price,
        "promotion_code": applied_code,
        "promotion_discount": promotion_discount,
        "extras": priced_extras,
        "extras_total": extras_total,
        "total": total,
    }


def search_vehicles(
    conn: Connection,
    pickup: date,
    dropoff: date,
    pickup_time: Optional[time] = None,
    dropoff_time: Optional[time] = None,
) -> list[dict[str, Any]]:
    """
    Price every bookable vehicle for a date range.

    The pickup season is looked up once. Vehicles without a price row in it
    are left out and are not counted as failed quotes. Results are sorted by
    the cheaper of the online and pay-on-arrival prices.

    Args:
        conn: Database connection
        pickup: Pickup date
        dropoff: Dropoff date
        pickup_time: Pickup time of day (optional)
        dropoff_time: Dropoff time of day (optional)

    Returns:
        list: Vehicle rows with days, daily_rate, base_total, online_price and
        arrival_price
    """
    settings = get_settings(conn)
    online_factor = 1 - Decimal(str(settings["pay_online_discount"] or 0)) / 100
    arrival_factor = 1 - Decimal(str(settings["pay_on_arrival_discount"] or 0)) / 100

    days = rental_days(pickup, dropoff, pickup_time, dropoff_time)
    season = find_season_for_date(conn, pickup)
    if season is None:
        logger.info("search_without_season", pickup=str(pickup))
        return []
    tier = tier_for_days(days)

    results = []
    for vehicle in list_vehicles(conn, visible_only=True):
        row = get_pricing_row(conn, vehicle["category_id"], vehicle["group"], season["id"])
        if row is None:
            continue

        daily_rate = money(row[tier])
        base_total = money(daily_rate * days)
        result = dict(vehicle)
        result.update(
            days=days,
            tier=tier,
            daily_rate=daily_rate,
            base_total=base_total,
            online_price=money(base_total * online_factor),
            arrival_price=money(base_total * arrival_factor),
        )
        results.append(result)

    results.sort(key=lambda v: min(v["online_price"], v["arrival_price"]))
    return results
