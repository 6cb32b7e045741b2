import uuid

from sqlalchemy.orm import DeclarativeBase


def new_id() -> str:
    """Generate a string primary key."""
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Every table of the rental site inherits from this class so that a single
    metadata object drives migrations and test schema creation.
    """

    pass
