"""
Database models package.

This package contains all SQLAlchemy ORM models for the application.
"""

from .base import Base, BaseModel
from .user import User
from .unit import Unit
from .ingredient import Ingredient
from .recipe import Recipe, RecipeIngredient
from .schedule import Schedule, ScheduleRecipe

__all__ = [
    "Base",
    "BaseModel",
    "User",
    "Unit",
    "Ingredient",
    "Recipe",
    "RecipeIngredient",
    "Schedule",
    "ScheduleRecipe",
]
