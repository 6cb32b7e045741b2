"""UTC datetime and rental-day utilities."""

from __future__ import annotations

from datetime import date, datetime, time, timezone

# Dropoff this many minutes past the pickup time counts as an extra day
GRACE_PERIOD_MINUTES = 120

MINIMUM_RENTAL_DAYS = 3


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-aware datetime.

    Use this instead of datetime.now() or datetime.utcnow() so every stored
    timestamp is timezone-aware and in UTC.

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(timezone.utc)


def rental_days(
    pickup: date,
    dropoff: date,
    pickup_time: time | None = None,
    dropoff_time: time | None = None,
) -> int:
    """
    Count billable rental days between pickup and dropoff.

    Calendar days are counted between the two dates. When both clock times are
    known and the car comes back at least two hours later in the day than it
    left, one more day is charged. Rentals shorter than three days are billed
    as three days.

    Args:
        pickup: Pickup date
        dropoff: Dropoff date
        pickup_time: Pickup time of day (optional)
        dropoff_time: Dropoff time of day (optional)

    Returns:
        int: Billable days, never less than MINIMUM_RENTAL_DAYS

    Raises:
        ValueError: If dropoff is before pickup

    Example:
        >>> rental_days(date(2025, 6, 1), date(2025, 6, 11))
        10
        >>> rental_days(date(2025, 6, 1), date(2025, 6, 11), time(10, 0), time(13, 0))
        11
    """
    if dropoff < pickup:
        raise ValueError("Dropoff date must not be before pickup date")

    days = (dropoff - pickup).days

    if pickup_time is not None and dropoff_time is not None:
        pickup_minutes = pickup_time.hour * 60 + pickup_time.minute
        dropoff_minutes = dropoff_time.hour * 60 + dropoff_time.minute
        if dropoff_minutes >= pickup_minutes + GRACE_PERIOD_MINUTES:
            days += 1

    return max(days, MINIMUM_RENTAL_DAYS)
