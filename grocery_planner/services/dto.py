"""Data Transfer Objects for the service layer.

This module provides the typed parameter and result structures of the
composition services, and the pagination structures used by list operations.

Parameter objects validate their own shape on construction and raise
ValueError, so a malformed request never opens a transaction. Result objects
are plain dataclasses built inside the unit of work; they stay usable after
the session closes.
"""

import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Generic, List, Optional, TypeVar

from grocery_planner.utils.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

T = TypeVar("T")


# ============================================================================
# Parameters
# ============================================================================


@dataclass
class IngredientLine:
    """One ingredient line of a recipe.

    Exactly one of ``ingredient_id`` (reference an existing ingredient) or
    ``name`` (get-or-create an ingredient by name) is meaningful. When both are
    given the id wins and the name is only informational.

    Attributes:
        amount: Quantity of the ingredient
        unit_id: Unit the amount is measured in
        ingredient_id: Existing ingredient to reference
        name: Ingredient name to resolve or create
    """

    amount: float
    unit_id: int
    ingredient_id: Optional[int] = None
    name: Optional[str] = None

    def __post_init__(self) -> None:
        if self.ingredient_id is None and not (self.name and self.name.strip()):
            raise ValueError("ingredient line needs an ingredient_id or a name")
        if self.amount < 0:
            raise ValueError("amount must be >= 0")

    @property
    def is_reference(self) -> bool:
        """True if the line references an existing ingredient id."""
        return self.ingredient_id is not None


@dataclass
class NewRecipeParams:
    """Input of create_recipe_with_ingredients."""

    name: str
    author_id: str
    portion: int
    steps: Optional[str] = None
    ingredients: List[IngredientLine] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("recipe name is required")
        if self.portion < 1:
            raise ValueError("portion must be >= 1")


@dataclass
class UpdateRecipeParams:
    """Input of update_recipe_composition."""

    recipe_id: int
    name: str
    portion: int
    steps: Optional[str] = None
    ingredients: List[IngredientLine] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("recipe name is required")
        if self.portion < 1:
            raise ValueError("portion must be >= 1")


@dataclass
class RecipePortion:
    """A recipe to cook as part of a schedule, scaled to ``portion``."""

    recipe_id: int
    portion: int = 1

    def __post_init__(self) -> None:
        if self.portion < 1:
            raise ValueError("portion must be >= 1")


@dataclass
class GenerateGroceriesParams:
    """Input of generate_grocery_list."""

    recipes: List[RecipePortion] = field(default_factory=list)
    author_id: Optional[str] = None


# ============================================================================
# Joined rows
# ============================================================================


@dataclass
class RecipeIngredientRow:
    """A recipe-ingredient junction row joined with ingredient and unit names."""

    recipe_id: int
    ingredient_id: int
    name: str
    amount: float
    unit_id: int
    unit_name: str


@dataclass
class ScheduleRecipeRow:
    """A schedule-recipe junction row joined with the recipe name."""

    schedule_id: int
    recipe_id: int
    name: str
    portion: int


@dataclass
class GroceryRow:
    """An ingredient needed by a schedule."""

    id: int
    name: str


# ============================================================================
# Compositions
# ============================================================================


@dataclass
class RecipeComposition:
    """A recipe together with its resolved ingredient rows.

    Attributes:
        recipe: The Recipe row (detached from its session once returned)
        ingredients: Junction rows for the recipe, ordered by ingredient name
    """

    recipe: Any
    ingredients: List[RecipeIngredientRow] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recipe": self.recipe.to_dict(),
            "ingredients": [asdict(row) for row in self.ingredients],
        }


@dataclass
class ScheduleComposition:
    """A schedule together with its recipe rows and its grocery list.

    Attributes:
        schedule: The Schedule row
        recipes: Schedule-recipe rows with recipe names
        groceries: Distinct ingredients needed, ordered by name
    """

    schedule: Any
    recipes: List[ScheduleRecipeRow] = field(default_factory=list)
    groceries: List[GroceryRow] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schedule": self.schedule.to_dict(),
            "recipes": [asdict(row) for row in self.recipes],
            "groceries": [asdict(row) for row in self.groceries],
        }


# ============================================================================
# Pagination
# ============================================================================


@dataclass
class PaginationParams:
    """Page window for the Querier's recipe and schedule listings.

    ``per_page`` is capped at MAX_PAGE_SIZE; pages are numbered from 1.

    Raises:
        ValueError: If page or per_page is out of range
    """

    page: int = 1
    per_page: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError(f"page must be >= 1, got {self.page}")
        if not 1 <= self.per_page <= MAX_PAGE_SIZE:
            raise ValueError(f"per_page must be between 1 and {MAX_PAGE_SIZE}, got {self.per_page}")

    def offset(self) -> int:
        """Rows to skip before this page, e.g. 50 for page 3 of 25."""
        return (self.page - 1) * self.per_page


@dataclass
class PaginatedResult(Generic[T]):
    """One page of rows plus the total the listing query matched."""

    items: List[T]
    total: int
    page: int
    per_page: int

    @property
    def pages(self) -> int:
        """Page count; an empty listing still has one (empty) page."""
        return max(math.ceil(self.total / self.per_page), 1)

    @property
    def has_next(self) -> bool:
        return self.page < self.pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1
