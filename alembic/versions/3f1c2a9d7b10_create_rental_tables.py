"""Create car rental tables

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-19 09:12:31.418205

"""

import sqlalchemy as sa

from alembic import op  # type: ignore[attr-defined]

# revision identifiers, used by Alembic.
revision = "3f1c2a9d7b10"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "vehicle_categories",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image", sa.String(), nullable=True),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("visible", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "vehicles",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "category_id", sa.String(36), sa.ForeignKey("vehicle_categories.id"), nullable=False
        ),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("code", sa.String(), nullable=True),
        sa.Column("group", sa.String(), nullable=False),
        sa.Column("image", sa.String(), nullable=True),
        sa.Column("visible", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("engine_size", sa.String(), nullable=True),
        sa.Column("doors", sa.Integer(), nullable=True),
        sa.Column("seats", sa.Integer(), nullable=True),
        sa.Column("transmission", sa.String(), nullable=True),
        sa.Column("has_ac", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("adults", sa.Integer(), nullable=True),
        sa.Column("children", sa.Integer(), nullable=True),
        sa.Column("big_luggages", sa.Integer(), nullable=True),
        sa.Column("small_luggages", sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_vehicles_category_id", "vehicles", ["category_id"])
    op.create_index("ix_vehicles_group", "vehicles", ["group"])

    op.create_table(
        "seasons",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("type", sa.String(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("end_date > start_date", name="ck_seasons_date_order"),
    )
    op.create_index("ix_seasons_start_date", "seasons", ["start_date"])
    op.create_index("ix_seasons_end_date", "seasons", ["end_date"])

    op.create_table(
        "seasonal_pricing",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "category_id", sa.String(36), sa.ForeignKey("vehicle_categories.id"), nullable=False
        ),
        sa.Column("group", sa.String(), nullable=False),
        sa.Column(
            "season_id",
            sa.String(36),
            sa.ForeignKey("seasons.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("price_3_to_6_days", sa.Numeric(10, 2), nullable=False),
        sa.Column("price_7_to_14_days", sa.Numeric(10, 2), nullable=False),
        sa.Column("price_15_plus_days", sa.Numeric(10, 2), nullable=False),
        sa.Column("base_price_3_to_6_days", sa.Numeric(10, 2), nullable=True),
        sa.Column("base_price_7_to_14_days", sa.Numeric(10, 2), nullable=True),
        sa.Column("base_price_15_plus_days", sa.Numeric(10, 2), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint(
            "category_id", "group", "season_id", name="uq_seasonal_pricing_category_group_season"
        ),
        sa.CheckConstraint(
            "price_3_to_6_days >= 0 AND price_7_to_14_days >= 0 AND price_15_plus_days >= 0",
            name="ck_seasonal_pricing_non_negative",
        ),
    )
    op.create_index("ix_seasonal_pricing_category_id", "seasonal_pricing", ["category_id"])
    op.create_index("ix_seasonal_pricing_season_id", "seasonal_pricing", ["season_id"])

    op.create_table(
        "rental_options",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("code", sa.String(), nullable=False, unique=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("visible", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("max_qty", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("price_type", sa.String(), nullable=False, server_default="per Rental"),
        sa.Column("max_cost", sa.Numeric(10, 2), nullable=True),
        sa.Column("free_over_days", sa.Integer(), nullable=True),
        sa.Column("photo", sa.String(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "rental_option_pricing",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "rental_option_id",
            sa.String(36),
            sa.ForeignKey("rental_options.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("vehicle_groups", sa.String(), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
    )
    op.create_index(
        "ix_rental_option_pricing_rental_option_id", "rental_option_pricing", ["rental_option_id"]
    )

    op.create_table(
        "customers",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("last_name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("password_hash", sa.String(), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("address", sa.String(), nullable=True),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_customers_email", "customers", ["email"], unique=True)

    op.create_table(
        "bookings",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("customer_id", sa.String(36), sa.ForeignKey("customers.id"), nullable=False),
        sa.Column("vehicle_id", sa.String(36), sa.ForeignKey("vehicles.id"), nullable=False),
        sa.Column("start_date", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("end_date", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("pickup_location", sa.String(), nullable=False),
        sa.Column("dropoff_location", sa.String(), nullable=False),
        sa.Column("total_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="Pending"),
        sa.Column("payment_status", sa.String(), nullable=False, server_default="Pending"),
        sa.Column("payment_type", sa.String(), nullable=False, server_default="online"),
        sa.Column("order_number", sa.String(), nullable=True, unique=True),
        sa.Column("invoice_no", sa.String(), nullable=True),
        sa.Column("transaction_id", sa.String(), nullable=True),
        sa.Column("promotion_code", sa.String(), nullable=True),
        sa.Column("flight_info", sa.String(), nullable=True),
        sa.Column("comments", sa.Text(), nullable=True),
        sa.Column("extras", sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_bookings_customer_id", "bookings", ["customer_id"])
    op.create_index("ix_bookings_vehicle_id", "bookings", ["vehicle_id"])
    op.create_index("ix_bookings_status", "bookings", ["status"])
    op.create_index("ix_bookings_invoice_no", "bookings", ["invoice_no"], unique=True)
    op.create_index("ix_bookings_transaction_id", "bookings", ["transaction_id"])

    op.create_table(
        "payment_logs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "booking_id",
            sa.String(36),
            sa.ForeignKey("bookings.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("order_number", sa.String(), nullable=True),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(3), nullable=False, server_default="EUR"),
        sa.Column("customer_email", sa.String(), nullable=True),
        sa.Column("customer_first_name", sa.String(), nullable=True),
        sa.Column("customer_last_name", sa.String(), nullable=True),
        sa.Column("customer_phone", sa.String(), nullable=True),
        sa.Column("payment_type", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("gateway_order_id", sa.String(), nullable=True),
        sa.Column("gateway_status", sa.String(), nullable=True),
        sa.Column("gateway_error_code", sa.String(), nullable=True),
        sa.Column("gateway_error_message", sa.Text(), nullable=True),
        sa.Column("form_url", sa.String(), nullable=True),
        sa.Column("idempotency_key", sa.String(), nullable=True, unique=True),
        sa.Column("processing_time_ms", sa.Integer(), nullable=True),
        sa.Column("user_agent", sa.String(), nullable=True),
        sa.Column("ip_address", sa.String(), nullable=True),
        sa.Column("raw_response", sa.JSON(), nullable=True),
        sa.Column("error_details", sa.Text(), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
    )
    op.create_index("ix_payment_logs_booking_id", "payment_logs", ["booking_id"])
    op.create_index("ix_payment_logs_payment_type", "payment_logs", ["payment_type"])
    op.create_index("ix_payment_logs_status", "payment_logs", ["status"])
    op.create_index("ix_payment_logs_gateway_order_id", "payment_logs", ["gateway_order_id"])
    op.create_index("ix_payment_logs_created_at", "payment_logs", ["created_at"])

    op.create_table(
        "promotions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("code", sa.String(), nullable=False, unique=True),
        sa.Column("discount", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("visible", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("type", sa.String(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "site_content",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("key", sa.String(), nullable=False, unique=True),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("group", sa.String(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_site_content_group", "site_content", ["group"])

    op.create_table(
        "posts",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("slug", sa.String(), nullable=False, unique=True),
        sa.Column("slug_ru", sa.String(), nullable=True, unique=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("title_ru", sa.String(), nullable=True),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("summary_ru", sa.Text(), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("content_ru", sa.Text(), nullable=True),
        sa.Column("image_url", sa.String(), nullable=True),
        sa.Column("category", sa.String(), nullable=True),
        sa.Column("featured", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("published", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("published_ru", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("read_time", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
    )
    op.create_index("ix_posts_created_at", "posts", ["created_at"])

    op.create_table(
        "locations",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("type", sa.String(), nullable=False, server_default="office"),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("visible", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("address", sa.String(), nullable=True),
        sa.Column("city", sa.String(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("opening_hours", sa.String(), nullable=True),
        sa.Column("is_pickup_point", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_dropoff_point", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("has_delivery", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("delivery_fee", sa.Numeric(10, 2), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "general_settings",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("vat_percentage", sa.Numeric(5, 2), nullable=False, server_default="19"),
        sa.Column("pay_online_discount", sa.Numeric(5, 2), nullable=False, server_default="15"),
        sa.Column(
            "pay_on_arrival_discount", sa.Numeric(5, 2), nullable=False, server_default="10"
        ),
        sa.Column("next_order_number", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("next_invoice_number", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("contact_email", sa.String(), nullable=True),
        sa.Column("contact_phone", sa.String(), nullable=True),
        sa.Column("max_rows_per_page", sa.Integer(), nullable=False, server_default="20"),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False),
    )


def downgrade() -> None:
    """Downgrade schema."""
    for table in (
        "general_settings",
        "locations",
        "posts",
        "site_content",
        "promotions",
        "payment_logs",
        "bookings",
        "customers",
        "rental_option_pricing",
        "rental_options",
        "seasonal_pricing",
        "seasons",
        "vehicles",
        "vehicle_categories",
    ):
        op.drop_table(table)
