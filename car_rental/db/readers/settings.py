from typing import Any

from sqlalchemy import select
from sqlalchemy.engine import Connection

from car_rental.models.settings import SETTINGS_ID, GeneralSetting

general_settings = GeneralSetting.__table__

DEFAULT_SETTINGS: dict[str, Any] = {
    "id": SETTINGS_ID,
    "vat_percentage": 19,
    "pay_online_discount": 15,
    "pay_on_arrival_discount": 10,
    "next_order_number": 1,
    "next_invoice_number": 1,
    "contact_email": None,
    "contact_phone": None,
    "max_rows_per_page": 20,
}


def get_settings(conn: Connection) -> dict[str, Any]:
    """
    Fetch the general settings row, falling back to defaults when absent.

    Args:
        conn (Connection): SQLAlchemy DB connection.

    Returns:
        dict[str, Any]: Settings values.
    """
    row = (
        conn.execute(select(general_settings).where(general_settings.c.id == SETTINGS_ID))
        .mappings()
        .fetchone()
    )
    return dict(row) if row else dict(DEFAULT_SETTINGS)
