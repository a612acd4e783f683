"""SQLAlchemy ORM base for the fixed-shape tables.

The hybrid client/tag tables are built as Core tables by ``schema.py``
because their document column type is decided at startup.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for the store's ORM models."""

    pass
