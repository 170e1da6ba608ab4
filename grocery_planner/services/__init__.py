"""Services package - Business logic layer for Grocery Planner.

Architecture:
- Querier: table-level reads and writes bound to one session
- Transactions: one unit of work per public operation, via run_in_transaction()
- Exceptions: consistent error handling via the ServiceError hierarchy
- DTOs: typed parameter and result dataclasses

Service Modules:
- recipe_composition_service: recipes written and read with their ingredients
- grocery_service: schedules and their grocery lists

Infrastructure:
- database: engine, sessions and the unit of work
- exceptions: custom exception classes for service layer errors
- logging_utils: structured operation logging
"""

from .database import run_in_transaction, session_scope
from .dto import (
    GenerateGroceriesParams,
    GroceryRow,
    IngredientLine,
    NewRecipeParams,
    PaginatedResult,
    PaginationParams,
    RecipeComposition,
    RecipeIngredientRow,
    RecipePortion,
    ScheduleComposition,
    ScheduleRecipeRow,
    UpdateRecipeParams,
)
from .grocery_service import generate_grocery_list, load_schedule_composition
from .querier import Querier
from .recipe_composition_service import (
    create_recipe_with_ingredients,
    load_recipe_composition,
    update_recipe_composition,
)

__all__ = [
    "run_in_transaction",
    "session_scope",
    "Querier",
    # Recipe compositions
    "create_recipe_with_ingredients",
    "load_recipe_composition",
    "update_recipe_composition",
    # Schedules and groceries
    "generate_grocery_list",
    "load_schedule_composition",
    # DTOs
    "IngredientLine",
    "NewRecipeParams",
    "UpdateRecipeParams",
    "RecipePortion",
    "GenerateGroceriesParams",
    "RecipeComposition",
    "RecipeIngredientRow",
    "ScheduleComposition",
    "ScheduleRecipeRow",
    "GroceryRow",
    "PaginationParams",
    "PaginatedResult",
]
