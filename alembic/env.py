from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool

from alembic import context  # type: ignore[attr-defined]
from car_rental.config import DATABASE_URL
from car_rental.models.base import Base
from car_rental.models.bookings import Booking  # noqa: F401
from car_rental.models.catalog import Vehicle, VehicleCategory  # noqa: F401
from car_rental.models.content import Post, Promotion, SiteContent  # noqa: F401
from car_rental.models.customers import Customer  # noqa: F401
from car_rental.models.locations import Location  # noqa: F401
from car_rental.models.options import RentalOption, RentalOptionPricing  # noqa: F401
from car_rental.models.payments import PaymentLog  # noqa: F401
from car_rental.models.pricing import Season, SeasonalPricing  # noqa: F401
from car_rental.models.settings import GeneralSetting  # noqa: F401

# this is the Alembic Config object, which provides
# access to the values within the .ini file in use.
config = context.config

# Interpret the config file for Python logging.
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata
config.set_main_option("sqlalchemy.url", DATABASE_URL)


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode.

    Configures the context with just a URL, so the SQL is emitted to the
    script output without a DBAPI connection.
    """
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode against a live connection."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
