"""
SQLAlchemy engine singleton with production-ready connection pooling.

A single engine instance is shared by every request. Server databases get a
sized pool; SQLite (local development and tests) gets a single shared
connection because pool sizing options do not apply to it.
"""

from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import StaticPool

from car_rental.config import DATABASE_URL

if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set.")


def build_engine(url: str) -> Engine:
    """
    Create an engine with pool settings suited to the database backend.

    Args:
        url: SQLAlchemy database URL

    Returns:
        Engine: Configured SQLAlchemy engine
    """
    options: dict[str, Any] = {"future": True, "echo": False}

    if make_url(url).get_backend_name() == "sqlite":
        options["connect_args"] = {"check_same_thread": False}
        options["poolclass"] = StaticPool
    else:
        options.update(
            pool_size=10,  # Number of connections to maintain in the pool
            max_overflow=20,  # Additional connections when pool is exhausted
            pool_pre_ping=True,  # Detect stale connections before use
            pool_recycle=3600,  # Recycle connections after 1 hour
        )

    return create_engine(url, **options)


engine: Engine = build_engine(DATABASE_URL)


def check_engine_health() -> bool:
    """
    Check if database engine is healthy and connections are working.

    Used by the /ready endpoint to verify database connectivity before
    allowing traffic to the service.

    Returns:
        bool: True if database is reachable and healthy, False otherwise
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
