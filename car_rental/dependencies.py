"""
FastAPI dependency injection providers.

Route handlers receive the database engine through these providers so tests
can swap it with app.dependency_overrides.
"""

from __future__ import annotations

from typing import Generator

from sqlalchemy.engine import Engine

from car_rental.db.engine import engine


def get_db_engine() -> Generator[Engine, None, None]:
    """
    Provide database engine for dependency injection.

    Yields:
        Engine: SQLAlchemy database engine

    Example:
        >>> from fastapi import Depends
        >>> from car_rental.dependencies import get_db_engine
        >>>
        >>> @router.get("/locations")
        >>> def list_locations(engine: Engine = Depends(get_db_engine)):
        ...     with engine.connect() as conn:
        ...         ...

    Testing Example:
        >>> app.dependency_overrides[get_db_engine] = lambda: sqlite_engine
    """
    yield engine
