"""
Unit reference model for the Grocery Planner.

Units are referenced by ingredients (their default unit) and by
recipe-ingredient lines (the unit actually used in the recipe).
"""

from sqlalchemy import Column, String

from .base import BaseModel


class Unit(BaseModel):
    """
    Measurement unit.

    Attributes:
        name: Unique unit name (e.g., "g", "cup", "piece")
    """

    __tablename__ = "units"

    name = Column(String(50), unique=True, nullable=False, index=True)
