"""
Recipe Composition Service - recipes written and read together with their ingredients.

This service provides the multi-table recipe operations:
- create_recipe_with_ingredients: recipe row + ingredient resolution + junction rows
- load_recipe_composition: recipe row + joined ingredient rows, one snapshot
- update_recipe_composition: header update + per-line update or create

Each operation is a single unit of work (database.run_in_transaction): either
every row it writes is committed, or none is.

Ingredient lines either reference an existing ingredient id or name an
ingredient to get-or-create. Creation races between concurrent writers are
settled by the unique constraint on ingredients.name: the loser's insert fails
inside a savepoint and it picks up the winner's row by name.
"""

import logging
from typing import Optional

from .database import run_in_transaction
from .dto import IngredientLine, NewRecipeParams, RecipeComposition, UpdateRecipeParams
from .exceptions import IngredientNameConflict, ServiceError
from .logging_utils import get_service_logger, log_failure, log_operation
from .querier import Querier

logger = get_service_logger(__name__)


def resolve_ingredient(querier: Querier, line: IngredientLine) -> int:
    """
    Resolve an ingredient line to an ingredient id.

    Reference lines are used as-is. Name lines try to create the ingredient
    (with the line's unit as its default unit); if the name is already taken,
    the existing ingredient with that exact name is used instead.

    Args:
        querier: Querier of the current unit of work
        line: Ingredient line to resolve

    Returns:
        Ingredient id to link the recipe to

    Raises:
        IngredientNameConflict: If the name was taken but no ingredient with
            that name can be found
    """
    if line.is_reference:
        return line.ingredient_id

    name = line.name.strip()
    ingredient = querier.try_create_ingredient(name, default_unit_id=line.unit_id)
    if ingredient is not None:
        return ingredient.id

    existing = querier.find_ingredient_by_name(name)
    if existing is None:
        raise IngredientNameConflict(name)

    log_operation(
        logger,
        operation="resolve_ingredient",
        outcome="name_conflict_resolved",
        level=logging.DEBUG,
        ingredient_id=existing.id,
    )
    return existing.id


def create_recipe_with_ingredients(
    params: NewRecipeParams, timeout: Optional[float] = None
) -> RecipeComposition:
    """
    Create a recipe and its ingredient associations in one transaction.

    Args:
        params: Recipe header fields and ordered ingredient lines
        timeout: Optional deadline in seconds for the whole transaction

    Returns:
        RecipeComposition with the new recipe and its ingredient rows

    Raises:
        IngredientNameConflict: If a named ingredient can't be created or found
        RecipeIngredientExists: If two lines resolve to the same ingredient
        ConflictError: If a referenced author, ingredient or unit doesn't exist
        TransactionError: If commit or rollback fails
        TransactionTimeout: If the deadline passes
    """

    def _create(q: Querier) -> RecipeComposition:
        recipe = q.create_recipe(
            name=params.name.strip(),
            author_id=params.author_id,
            portion=params.portion,
            steps=params.steps,
        )

        for line in params.ingredients:
            ingredient_id = resolve_ingredient(q, line)
            q.create_recipe_ingredient(recipe.id, ingredient_id, line.amount, line.unit_id)

        return RecipeComposition(
            recipe=q.reload(recipe), ingredients=q.get_recipe_ingredients(recipe.id)
        )

    try:
        composition = run_in_transaction(_create, timeout=timeout)
    except ServiceError as e:
        log_failure(
            logger,
            "create_recipe_with_ingredients",
            e,
            line_count=len(params.ingredients),
        )
        raise

    log_operation(
        logger,
        operation="create_recipe_with_ingredients",
        outcome="success",
        recipe_id=composition.recipe.id,
        ingredient_count=len(composition.ingredients),
    )
    return composition


def load_recipe_composition(
    recipe_id: int, timeout: Optional[float] = None
) -> RecipeComposition:
    """
    Load a recipe and its ingredient rows from one consistent snapshot.

    Args:
        recipe_id: Recipe ID
        timeout: Optional deadline in seconds

    Returns:
        RecipeComposition

    Raises:
        RecipeNotFound: If the recipe doesn't exist
    """

    def _load(q: Querier) -> RecipeComposition:
        recipe = q.get_recipe(recipe_id)
        return RecipeComposition(recipe=recipe, ingredients=q.get_recipe_ingredients(recipe_id))

    return run_in_transaction(_load, timeout=timeout)


def update_recipe_composition(
    params: UpdateRecipeParams, timeout: Optional[float] = None
) -> RecipeComposition:
    """
    Update a recipe header and merge ingredient lines into it.

    Reference lines overwrite the amount and unit of the recipe's existing
    row for that ingredient. Name lines resolve or create the ingredient and
    add a new row. Rows not mentioned in ``params.ingredients`` are kept;
    removing an ingredient is done with Querier.delete_recipe_ingredient.

    Args:
        params: Recipe id, new header fields and ordered ingredient lines
        timeout: Optional deadline in seconds

    Returns:
        RecipeComposition with all of the recipe's ingredient rows

    Raises:
        RecipeNotFound: If the recipe doesn't exist
        RecipeIngredientNotFound: If a reference line names an ingredient the
            recipe doesn't use
        RecipeIngredientExists: If a name line resolves to an ingredient the
            recipe already uses
        IngredientNameConflict: If a named ingredient can't be created or found
    """

    def _update(q: Querier) -> RecipeComposition:
        recipe = q.update_recipe(
            params.recipe_id,
            name=params.name.strip(),
            portion=params.portion,
            steps=params.steps,
        )

        for line in params.ingredients:
            if line.is_reference:
                q.update_recipe_ingredient(
                    recipe.id, line.ingredient_id, line.amount, line.unit_id
                )
            else:
                ingredient_id = resolve_ingredient(q, line)
                q.create_recipe_ingredient(recipe.id, ingredient_id, line.amount, line.unit_id)

        return RecipeComposition(
            recipe=q.reload(recipe), ingredients=q.get_recipe_ingredients(recipe.id)
        )

    try:
        composition = run_in_transaction(_update, timeout=timeout)
    except ServiceError as e:
        log_failure(
            logger,
            "update_recipe_composition",
            e,
            recipe_id=params.recipe_id,
            line_count=len(params.ingredients),
        )
        raise

    log_operation(
        logger,
        operation="update_recipe_composition",
        outcome="success",
        recipe_id=composition.recipe.id,
        line_count=len(params.ingredients),
        ingredient_count=len(composition.ingredients),
    )
    return composition
