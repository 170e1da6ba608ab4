"""
Ingredient model.

Ingredient names are unique. The uniqueness constraint is what lets
concurrent recipe writers converge on a single row when they both try to
create the same new ingredient (see Querier.try_create_ingredient).
"""

from sqlalchemy import Column, String, Integer, ForeignKey
from sqlalchemy.orm import relationship

from .base import BaseModel


class Ingredient(BaseModel):
    """
    Ingredient catalog entry.

    Attributes:
        name: Unique ingredient name (e.g., "salt")
        default_unit_id: Unit suggested when the ingredient is added to a recipe
    """

    __tablename__ = "ingredients"

    name = Column(String(200), unique=True, nullable=False, index=True)
    default_unit_id = Column(Integer, ForeignKey("units.id"), nullable=True)

    default_unit = relationship("Unit", lazy="joined")
