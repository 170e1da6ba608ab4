"""
Base model class for all database models.

Provides common functionality and fields for entity models:
- Primary key (Integer)
- Timestamp fields (created_at, updated_at)
- Utility methods (to_dict, update_from_dict)
- SQLAlchemy declarative base

Junction tables with composite keys inherit from Base directly.
"""

from datetime import datetime
from typing import Any, Dict

from sqlalchemy import Column, Integer, DateTime
from sqlalchemy.orm import declarative_base

from grocery_planner.utils.datetime_utils import as_utc, utc_now

# Create the declarative base for all models
Base = declarative_base()


class BaseModel(Base):
    """
    Abstract base model with common fields and methods.

    All entity models inherit from this class to get:
    - id: Primary key
    - created_at: Timestamp when record was created
    - updated_at: Timestamp when record was last modified
    - to_dict(): Convert model to dictionary
    """

    __abstract__ = True

    id = Column(Integer, primary_key=True, autoincrement=True)

    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert model instance to dictionary.

        Returns:
            Dictionary of column values, datetimes as ISO strings
        """
        return columns_to_dict(self)

    # Columns update_from_dict never writes
    _protected_columns = frozenset({"id", "created_at", "updated_at"})

    def update_from_dict(self, data: Dict[str, Any]) -> bool:
        """
        Overwrite column values from ``data``.

        Keys that are not columns, and the id and timestamp columns, are
        ignored. updated_at is bumped only when a value actually changed.

        Args:
            data: Column names and new values

        Returns:
            True if any column changed
        """
        changed = False
        for column in self.__table__.columns:
            key = column.name
            if key in data and key not in self._protected_columns:
                if getattr(self, key) != data[key]:
                    setattr(self, key, data[key])
                    changed = True

        if changed:
            self.updated_at = utc_now()
        return changed

    def __repr__(self) -> str:
        fields = [
            f"{key}={getattr(self, key)!r}"
            for key in ("id", "name")
            if getattr(self, key, None) is not None
        ]
        return f"{type(self).__name__}({', '.join(fields)})"


def columns_to_dict(instance) -> Dict[str, Any]:
    """Column values of any mapped instance, datetimes as UTC ISO strings."""
    result = {}
    for column in instance.__table__.columns:
        value = getattr(instance, column.name)
        if isinstance(value, datetime):
            value = as_utc(value).isoformat()
        result[column.name] = value
    return result
