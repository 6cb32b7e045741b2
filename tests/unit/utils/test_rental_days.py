"""
Unit tests for rental day counting.
"""

from __future__ import annotations

from datetime import date, time

import pytest

from car_rental.utils.datetime import rental_days, utc_now


@pytest.mark.unit
def test_rental_days_counts_calendar_days() -> None:
    """Test that a ten-night rental is billed as ten days."""
    assert rental_days(date(2030, 7, 1), date(2030, 7, 11)) == 10


@pytest.mark.unit
def test_rental_days_enforces_three_day_minimum() -> None:
    """Test that short rentals are billed as three days."""
    assert rental_days(date(2030, 7, 1), date(2030, 7, 2)) == 3
    assert rental_days(date(2030, 7, 1), date(2030, 7, 1)) == 3


@pytest.mark.unit
def test_rental_days_adds_day_after_grace_period() -> None:
    """Test that returning two hours later than pickup time costs one more day."""
    days = rental_days(date(2030, 7, 1), date(2030, 7, 11), time(10, 0), time(12, 0))

    assert days == 11


@pytest.mark.unit
def test_rental_days_within_grace_period() -> None:
    """Test that returning less than two hours late is free."""
    days = rental_days(date(2030, 7, 1), date(2030, 7, 11), time(10, 0), time(11, 59))

    assert days == 10


@pytest.mark.unit
def test_rental_days_ignores_single_clock_time() -> None:
    """Test that the grace rule only applies when both times are known."""
    days = rental_days(date(2030, 7, 1), date(2030, 7, 11), time(10, 0), None)

    assert days == 10


@pytest.mark.unit
def test_rental_days_rejects_reversed_dates() -> None:
    """Test that a dropoff before pickup raises ValueError."""
    with pytest.raises(ValueError):
        rental_days(date(2030, 7, 11), date(2030, 7, 1))


@pytest.mark.unit
def test_utc_now_is_timezone_aware() -> None:
    """Test that utc_now returns an aware datetime in UTC."""
    now = utc_now()

    assert now.tzinfo is not None
    assert now.utcoffset().total_seconds() == 0
