"""
Schedule models.

This module contains:
- Schedule: A container grouping recipes meant to be cooked together
- ScheduleRecipe: Junction table linking schedules to recipes with a portion multiplier
"""

from sqlalchemy import Column, String, Integer, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from .base import Base, BaseModel, columns_to_dict


class Schedule(BaseModel):
    """
    Meal schedule.

    Attributes:
        author_id: Optional user who created the schedule
        created_at: Inherited creation timestamp
    """

    __tablename__ = "schedules"

    author_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)

    schedule_recipes = relationship(
        "ScheduleRecipe",
        back_populates="schedule",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class ScheduleRecipe(Base):
    """
    Junction row: "cook this recipe, scaled to this many portions, in this schedule".

    Attributes:
        schedule_id: Schedule (part of the composite key)
        recipe_id: Recipe (part of the composite key)
        portion: Portion multiplier
    """

    __tablename__ = "schedule_recipes"

    schedule_id = Column(
        Integer, ForeignKey("schedules.id", ondelete="CASCADE"), primary_key=True
    )
    recipe_id = Column(
        Integer, ForeignKey("recipes.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    portion = Column(Integer, nullable=False, default=1)

    schedule = relationship("Schedule", back_populates="schedule_recipes")
    recipe = relationship("Recipe")

    __table_args__ = (CheckConstraint("portion > 0", name="ck_schedule_recipe_portion_positive"),)

    def to_dict(self):
        return columns_to_dict(self)

    def __repr__(self) -> str:
        return (
            f"ScheduleRecipe(schedule_id={self.schedule_id}, "
            f"recipe_id={self.recipe_id}, portion={self.portion})"
        )
