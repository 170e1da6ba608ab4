"""
Grocery Service - schedules and the grocery lists derived from them.

A schedule groups recipes to cook together, each scaled to a number of
portions. Its grocery list is the set of distinct ingredients used by those
recipes: every ingredient appears once however many recipes use it, and
amounts are not summed.
"""

from typing import Optional

from .database import run_in_transaction
from .dto import GenerateGroceriesParams, ScheduleComposition
from .exceptions import ServiceError
from .logging_utils import get_service_logger, log_failure, log_operation
from .querier import Querier

logger = get_service_logger(__name__)


def _compose(q: Querier, schedule) -> ScheduleComposition:
    return ScheduleComposition(
        schedule=schedule,
        recipes=q.get_schedule_recipes(schedule.id),
        groceries=q.list_groceries(schedule.id),
    )


def generate_grocery_list(
    params: GenerateGroceriesParams, timeout: Optional[float] = None
) -> ScheduleComposition:
    """
    Create a schedule with its recipes and return it with its grocery list.

    Args:
        params: Optional author and ordered (recipe, portion) pairs
        timeout: Optional deadline in seconds

    Returns:
        ScheduleComposition with schedule, recipe rows and grocery rows

    Raises:
        ConflictError: If a recipe appears twice, or a recipe or author
            doesn't exist
        TransactionError: If commit or rollback fails
    """

    def _generate(q: Querier) -> ScheduleComposition:
        schedule = q.create_schedule(author_id=params.author_id)

        for item in params.recipes:
            q.create_schedule_recipe(schedule.id, item.recipe_id, item.portion)

        return _compose(q, q.reload(schedule))

    try:
        composition = run_in_transaction(_generate, timeout=timeout)
    except ServiceError as e:
        log_failure(logger, "generate_grocery_list", e, recipe_count=len(params.recipes))
        raise

    log_operation(
        logger,
        operation="generate_grocery_list",
        outcome="success",
        schedule_id=composition.schedule.id,
        recipe_count=len(composition.recipes),
        grocery_count=len(composition.groceries),
    )
    return composition


def load_schedule_composition(
    schedule_id: int, timeout: Optional[float] = None
) -> ScheduleComposition:
    """
    Load a schedule with its recipe rows and current grocery list.

    Args:
        schedule_id: Schedule ID
        timeout: Optional deadline in seconds

    Returns:
        ScheduleComposition

    Raises:
        ScheduleNotFound: If the schedule doesn't exist
    """
    return run_in_transaction(lambda q: _compose(q, q.get_schedule(schedule_id)), timeout=timeout)
