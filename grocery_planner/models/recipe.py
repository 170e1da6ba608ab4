"""
Recipe models.

This module contains:
- Recipe: Recipe header owned by its author
- RecipeIngredient: Junction table linking recipes to ingredients with amount and unit
"""

from sqlalchemy import (
    Column,
    String,
    Float,
    Integer,
    Text,
    ForeignKey,
    CheckConstraint,
)
from sqlalchemy.orm import relationship

from .base import Base, BaseModel, columns_to_dict


class Recipe(BaseModel):
    """
    Recipe model.

    Attributes:
        name: Recipe name
        author_id: User who owns the recipe
        portion: Number of portions the recipe yields
        steps: Optional free-text preparation steps
        created_at / updated_at: Inherited timestamps
    """

    __tablename__ = "recipes"

    name = Column(String(200), nullable=False, index=True)
    author_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    portion = Column(Integer, nullable=False, default=1)
    steps = Column(Text, nullable=True)

    recipe_ingredients = relationship(
        "RecipeIngredient",
        back_populates="recipe",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (CheckConstraint("portion > 0", name="ck_recipe_portion_positive"),)


class RecipeIngredient(Base):
    """
    Junction row: "this recipe uses this much of this ingredient in this unit".

    One row per (recipe, ingredient) pair.

    Attributes:
        recipe_id: Recipe (part of the composite key)
        ingredient_id: Ingredient (part of the composite key)
        amount: Quantity of the ingredient
        unit_id: Unit the amount is measured in
    """

    __tablename__ = "recipe_ingredients"

    recipe_id = Column(
        Integer, ForeignKey("recipes.id", ondelete="CASCADE"), primary_key=True
    )
    ingredient_id = Column(
        Integer, ForeignKey("ingredients.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    amount = Column(Float, nullable=False)
    unit_id = Column(Integer, ForeignKey("units.id"), nullable=False)

    recipe = relationship("Recipe", back_populates="recipe_ingredients")
    ingredient = relationship("Ingredient")

    def to_dict(self):
        return columns_to_dict(self)

    def __repr__(self) -> str:
        return (
            f"RecipeIngredient(recipe_id={self.recipe_id}, "
            f"ingredient_id={self.ingredient_id}, amount={self.amount})"
        )
