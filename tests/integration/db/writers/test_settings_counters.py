"""
Integration tests for the settings row and its document counters.
"""

from __future__ import annotations

import pytest

from car_rental.db.engine import engine
from car_rental.db.readers.settings import get_settings
from car_rental.db.writers.settings import allocate_number, save_settings


@pytest.mark.integration
def test_counters_are_independent() -> None:
    """Test that order and invoice numbers advance separately."""
    with engine.begin() as conn:
        orders = [allocate_number(conn, "next_order_number") for _ in range(2)]
        invoice = allocate_number(conn, "next_invoice_number")

    assert orders == ["K000001", "K000002"]
    assert invoice == "P000001"
    with engine.connect() as conn:
        settings = get_settings(conn)
    assert settings["next_order_number"] == 3
    assert settings["next_invoice_number"] == 2


@pytest.mark.integration
def test_rolled_back_allocation_is_not_consumed() -> None:
    """Test that a number taken in a failed transaction is handed out again."""
    with pytest.raises(RuntimeError):
        with engine.begin() as conn:
            allocate_number(conn, "next_order_number")
            raise RuntimeError("insert failed")

    with engine.begin() as conn:
        assert allocate_number(conn, "next_order_number") == "K000001"


@pytest.mark.integration
def test_save_settings_creates_row() -> None:
    with engine.begin() as conn:
        save_settings(conn, {"contact_phone": "+35724000000"})
        save_settings(conn, {})

    with engine.connect() as conn:
        settings = get_settings(conn)
    assert settings["contact_phone"] == "+35724000000"
    assert settings["next_order_number"] == 1
