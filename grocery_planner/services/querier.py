"""
Querier - single-table reads and writes bound to one session.

The composition services never touch the session directly; every step of a
unit of work goes through a Querier created by database.run_in_transaction().
Each method does one thing against one table (or one joined read), flushes
its writes, and raises the matching *NotFound exception for missing rows.

The ingredient get-or-create is exposed as two explicit steps:
try_create_ingredient() returns None when the name is taken, and
find_ingredient_by_name() fetches the row that won.
"""

import time
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from ..models import (
    Ingredient,
    Recipe,
    RecipeIngredient,
    Schedule,
    ScheduleRecipe,
    Unit,
    User,
)
from ..utils.constants import ROLE_USER, USER_ROLES
from .dto import (
    GroceryRow,
    PaginatedResult,
    PaginationParams,
    RecipeIngredientRow,
    ScheduleRecipeRow,
)
from .exceptions import (
    ConflictError,
    IngredientNotFound,
    RecipeIngredientExists,
    RecipeIngredientNotFound,
    RecipeNotFound,
    ScheduleNotFound,
    ScheduleRecipeNotFound,
    TransactionTimeout,
    UnitNotFound,
    UserNotFound,
)


# SQLSTATE of a unique violation (PostgreSQL drivers)
UNIQUE_VIOLATION = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    """Whether an IntegrityError was raised by a UNIQUE constraint."""
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code is not None:
        return code == UNIQUE_VIOLATION
    return str(orig).startswith("UNIQUE constraint failed")


class Deadline:
    """A caller deadline for one unit of work."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        self.expires_at = time.monotonic() + timeout

    def remaining(self) -> float:
        """Seconds left before the deadline, never negative."""
        return max(self.expires_at - time.monotonic(), 0.0)

    def expired(self) -> bool:
        return time.monotonic() >= self.expires_at

    def check(self) -> None:
        """Raise TransactionTimeout once the deadline has passed."""
        if self.expired():
            raise TransactionTimeout(self.timeout)


class Querier:
    """
    Table-level operations for one transaction.

    Args:
        session: The transaction's session
        deadline: Optional caller deadline, checked before every operation
    """

    def __init__(self, session: Session, deadline: Optional[Deadline] = None):
        self.session = session
        self.deadline = deadline

    def _check_deadline(self) -> None:
        if self.deadline is not None:
            self.deadline.check()

    def _add(self, instance):
        self.session.add(instance)
        self.session.flush()
        return instance

    def reload(self, instance):
        """Re-read all columns of a persistent row from the database."""
        self._check_deadline()
        self.session.refresh(instance)
        return instance

    @staticmethod
    def _paginate(query: Query, pagination: Optional[PaginationParams]) -> PaginatedResult:
        total = query.count()
        if pagination is None:
            items = query.all()
            return PaginatedResult(items=items, total=total, page=1, per_page=max(total, 1))

        items = query.offset(pagination.offset()).limit(pagination.per_page).all()
        return PaginatedResult(
            items=items, total=total, page=pagination.page, per_page=pagination.per_page
        )

    # ========================================================================
    # Units
    # ========================================================================

    def create_unit(self, name: str) -> Unit:
        self._check_deadline()
        return self._add(Unit(name=name))

    def get_unit(self, unit_id: int) -> Unit:
        self._check_deadline()
        unit = self.session.get(Unit, unit_id)
        if unit is None:
            raise UnitNotFound(unit_id)
        return unit

    def list_units(self) -> List[Unit]:
        self._check_deadline()
        return self.session.query(Unit).order_by(Unit.name).all()

    def update_unit(self, unit_id: int, name: str) -> Unit:
        unit = self.get_unit(unit_id)
        unit.update_from_dict({"name": name})
        self.session.flush()
        return unit

    def delete_unit(self, unit_id: int) -> None:
        unit = self.get_unit(unit_id)
        self.session.delete(unit)
        self.session.flush()

    # ========================================================================
    # Users
    # ========================================================================

    def create_user(
        self,
        username: str,
        email: Optional[str] = None,
        role: str = ROLE_USER,
        user_id: Optional[str] = None,
    ) -> User:
        self._check_deadline()
        if role not in USER_ROLES:
            raise ValueError(f"Unknown role '{role}', expected one of {USER_ROLES}")
        user = User(username=username, email=email, role=role)
        if user_id is not None:
            user.id = user_id
        return self._add(user)

    def get_user(self, user_id: str) -> User:
        self._check_deadline()
        user = self.session.get(User, user_id)
        if user is None:
            raise UserNotFound(user_id)
        return user

    # ========================================================================
    # Ingredients
    # ========================================================================

    def create_ingredient(self, name: str, default_unit_id: Optional[int] = None) -> Ingredient:
        """Insert an ingredient; a duplicate name fails the transaction."""
        self._check_deadline()
        return self._add(Ingredient(name=name, default_unit_id=default_unit_id))

    def try_create_ingredient(
        self, name: str, default_unit_id: Optional[int] = None
    ) -> Optional[Ingredient]:
        """
        Insert an ingredient inside a SAVEPOINT.

        A duplicate name only rolls back the savepoint, so the enclosing
        transaction stays usable. Any other constraint violation (such as an
        unknown default unit) propagates and fails the transaction.

        Args:
            name: Ingredient name
            default_unit_id: Default unit of the new ingredient

        Returns:
            The new Ingredient, or None if the name already exists
        """
        self._check_deadline()
        ingredient = Ingredient(name=name, default_unit_id=default_unit_id)
        try:
            with self.session.begin_nested():
                self.session.add(ingredient)
        except IntegrityError as exc:
            if not is_unique_violation(exc):
                raise
            return None
        return ingredient

    def find_ingredient_by_name(self, name: str) -> Optional[Ingredient]:
        """Exact-name lookup."""
        self._check_deadline()
        return self.session.query(Ingredient).filter(Ingredient.name == name).first()

    def get_ingredient(self, ingredient_id: int) -> Ingredient:
        self._check_deadline()
        ingredient = self.session.get(Ingredient, ingredient_id)
        if ingredient is None:
            raise IngredientNotFound(ingredient_id)
        return ingredient

    def list_ingredients(self) -> List[Ingredient]:
        self._check_deadline()
        return self.session.query(Ingredient).order_by(Ingredient.name).all()

    def search_ingredients(self, term: str) -> List[Ingredient]:
        """Case-insensitive substring match on the ingredient name."""
        self._check_deadline()
        return (
            self.session.query(Ingredient)
            .filter(Ingredient.name.ilike(f"%{term}%"))
            .order_by(Ingredient.name)
            .all()
        )

    def update_ingredient(self, ingredient_id: int, data: Dict[str, Any]) -> Ingredient:
        """Update name and/or default_unit_id from ``data``."""
        ingredient = self.get_ingredient(ingredient_id)
        ingredient.update_from_dict(data)
        self.session.flush()
        return ingredient

    def delete_ingredient(self, ingredient_id: int) -> None:
        """Delete an ingredient; its recipe-ingredient rows cascade."""
        ingredient = self.get_ingredient(ingredient_id)
        self.session.delete(ingredient)
        self.session.flush()

    # ========================================================================
    # Recipes
    # ========================================================================

    def create_recipe(
        self, name: str, author_id: str, portion: int, steps: Optional[str] = None
    ) -> Recipe:
        self._check_deadline()
        return self._add(Recipe(name=name, author_id=author_id, portion=portion, steps=steps))

    def get_recipe(self, recipe_id: int) -> Recipe:
        self._check_deadline()
        recipe = self.session.get(Recipe, recipe_id)
        if recipe is None:
            raise RecipeNotFound(recipe_id)
        return recipe

    def update_recipe(
        self, recipe_id: int, name: str, portion: int, steps: Optional[str] = None
    ) -> Recipe:
        """Overwrite the recipe header fields."""
        recipe = self.get_recipe(recipe_id)
        recipe.update_from_dict({"name": name, "portion": portion, "steps": steps})
        self.session.flush()
        return recipe

    def delete_recipe(self, recipe_id: int) -> None:
        """Delete a recipe; its junction rows cascade."""
        recipe = self.get_recipe(recipe_id)
        self.session.delete(recipe)
        self.session.flush()

    def list_recipes(
        self, pagination: Optional[PaginationParams] = None, author_id: Optional[str] = None
    ) -> PaginatedResult:
        self._check_deadline()
        query = self.session.query(Recipe)
        if author_id is not None:
            query = query.filter(Recipe.author_id == author_id)
        return self._paginate(query.order_by(Recipe.name, Recipe.id), pagination)

    def search_recipes(
        self, term: str, pagination: Optional[PaginationParams] = None
    ) -> PaginatedResult:
        self._check_deadline()
        query = self.session.query(Recipe).filter(Recipe.name.ilike(f"%{term}%"))
        return self._paginate(query.order_by(Recipe.name, Recipe.id), pagination)

    # ========================================================================
    # Recipe ingredients
    # ========================================================================

    def create_recipe_ingredient(
        self, recipe_id: int, ingredient_id: int, amount: float, unit_id: int
    ) -> RecipeIngredient:
        self._check_deadline()
        if self.session.get(RecipeIngredient, (recipe_id, ingredient_id)) is not None:
            raise RecipeIngredientExists(recipe_id, ingredient_id)
        return self._add(
            RecipeIngredient(
                recipe_id=recipe_id,
                ingredient_id=ingredient_id,
                amount=amount,
                unit_id=unit_id,
            )
        )

    def get_recipe_ingredient(self, recipe_id: int, ingredient_id: int) -> RecipeIngredient:
        self._check_deadline()
        row = self.session.get(RecipeIngredient, (recipe_id, ingredient_id))
        if row is None:
            raise RecipeIngredientNotFound(recipe_id, ingredient_id)
        return row

    def update_recipe_ingredient(
        self, recipe_id: int, ingredient_id: int, amount: float, unit_id: int
    ) -> RecipeIngredient:
        """Overwrite amount and unit of an existing junction row."""
        row = self.get_recipe_ingredient(recipe_id, ingredient_id)
        row.amount = amount
        row.unit_id = unit_id
        self.session.flush()
        return row

    def delete_recipe_ingredient(self, recipe_id: int, ingredient_id: int) -> None:
        row = self.get_recipe_ingredient(recipe_id, ingredient_id)
        self.session.delete(row)
        self.session.flush()

    def get_recipe_ingredients(self, recipe_id: int) -> List[RecipeIngredientRow]:
        """Junction rows of a recipe joined with ingredient and unit names."""
        self._check_deadline()
        rows = (
            self.session.query(
                RecipeIngredient.recipe_id,
                RecipeIngredient.ingredient_id,
                Ingredient.name,
                RecipeIngredient.amount,
                RecipeIngredient.unit_id,
                Unit.name.label("unit_name"),
            )
            .join(Ingredient, Ingredient.id == RecipeIngredient.ingredient_id)
            .join(Unit, Unit.id == RecipeIngredient.unit_id)
            .filter(RecipeIngredient.recipe_id == recipe_id)
            .order_by(Ingredient.name)
            .all()
        )
        return [RecipeIngredientRow(**row._asdict()) for row in rows]

    # ========================================================================
    # Schedules
    # ========================================================================

    def create_schedule(self, author_id: Optional[str] = None) -> Schedule:
        self._check_deadline()
        return self._add(Schedule(author_id=author_id))

    def get_schedule(self, schedule_id: int) -> Schedule:
        self._check_deadline()
        schedule = self.session.get(Schedule, schedule_id)
        if schedule is None:
            raise ScheduleNotFound(schedule_id)
        return schedule

    def list_schedules(
        self, pagination: Optional[PaginationParams] = None, author_id: Optional[str] = None
    ) -> PaginatedResult:
        """Schedules, newest first, optionally only those of one author."""
        self._check_deadline()
        query = self.session.query(Schedule)
        if author_id is not None:
            query = query.filter(Schedule.author_id == author_id)
        return self._paginate(
            query.order_by(Schedule.created_at.desc(), Schedule.id.desc()), pagination
        )

    def delete_schedule(self, schedule_id: int) -> None:
        """Delete a schedule; its schedule-recipe rows cascade."""
        schedule = self.get_schedule(schedule_id)
        self.session.delete(schedule)
        self.session.flush()

    # ========================================================================
    # Schedule recipes
    # ========================================================================

    def create_schedule_recipe(
        self, schedule_id: int, recipe_id: int, portion: int
    ) -> ScheduleRecipe:
        self._check_deadline()
        if self.session.get(ScheduleRecipe, (schedule_id, recipe_id)) is not None:
            raise ConflictError(f"Schedule {schedule_id} already contains recipe {recipe_id}")
        return self._add(
            ScheduleRecipe(schedule_id=schedule_id, recipe_id=recipe_id, portion=portion)
        )

    def delete_schedule_recipe(self, schedule_id: int, recipe_id: int) -> None:
        self._check_deadline()
        row = self.session.get(ScheduleRecipe, (schedule_id, recipe_id))
        if row is None:
            raise ScheduleRecipeNotFound(schedule_id, recipe_id)
        self.session.delete(row)
        self.session.flush()

    def get_schedule_recipes(self, schedule_id: int) -> List[ScheduleRecipeRow]:
        """Schedule-recipe rows joined with recipe names."""
        self._check_deadline()
        rows = (
            self.session.query(
                ScheduleRecipe.schedule_id,
                ScheduleRecipe.recipe_id,
                Recipe.name,
                ScheduleRecipe.portion,
            )
            .join(Recipe, Recipe.id == ScheduleRecipe.recipe_id)
            .filter(ScheduleRecipe.schedule_id == schedule_id)
            .order_by(Recipe.name, Recipe.id)
            .all()
        )
        return [ScheduleRecipeRow(**row._asdict()) for row in rows]

    def list_groceries(self, schedule_id: int) -> List[GroceryRow]:
        """
        Distinct ingredients used by any recipe of a schedule.

        schedule_recipes -> recipe_ingredients -> ingredients, deduplicated by
        ingredient id. Amounts are not summed.
        """
        self._check_deadline()
        rows = (
            self.session.query(Ingredient.id, Ingredient.name)
            .join(RecipeIngredient, RecipeIngredient.ingredient_id == Ingredient.id)
            .join(ScheduleRecipe, ScheduleRecipe.recipe_id == RecipeIngredient.recipe_id)
            .filter(ScheduleRecipe.schedule_id == schedule_id)
            .distinct()
            .order_by(Ingredient.name)
            .all()
        )
        return [GroceryRow(id=row.id, name=row.name) for row in rows]
