"""Service layer exception classes for Grocery Planner.

This module defines all custom exceptions used by the service layer to provide
consistent error handling across the application. The request layer maps the
families to responses: NotFoundError -> 404, ConflictError -> 400,
TransactionError / TransactionTimeout / ConnectivityError / DatabaseError -> 500.

Exception Hierarchy:
    ServiceError (base)
    ├── NotFoundError
    │   ├── RecipeNotFound
    │   ├── IngredientNotFound
    │   ├── UnitNotFound
    │   ├── UserNotFound
    │   ├── ScheduleNotFound
    │   ├── RecipeIngredientNotFound
    │   └── ScheduleRecipeNotFound
    ├── ConflictError
    │   ├── IngredientNameConflict
    │   └── RecipeIngredientExists
    ├── TransactionError
    ├── TransactionTimeout
    ├── ConnectivityError
    └── DatabaseError
"""

from typing import Optional


class ServiceError(Exception):
    """Base exception for all service layer errors.

    All service-specific exceptions should inherit from this class.
    """

    pass


# ============================================================================
# Not found
# ============================================================================


class NotFoundError(ServiceError):
    """Base class for lookups of rows that do not exist."""

    pass


class RecipeNotFound(NotFoundError):
    """Raised when a recipe cannot be found by ID.

    Example:
        >>> raise RecipeNotFound(12)
        RecipeNotFound: Recipe with ID 12 not found
    """

    def __init__(self, recipe_id: int):
        self.recipe_id = recipe_id
        super().__init__(f"Recipe with ID {recipe_id} not found")


class IngredientNotFound(NotFoundError):
    """Raised when an ingredient cannot be found by ID."""

    def __init__(self, ingredient_id: int):
        self.ingredient_id = ingredient_id
        super().__init__(f"Ingredient with ID {ingredient_id} not found")


class UnitNotFound(NotFoundError):
    """Raised when a unit cannot be found by ID."""

    def __init__(self, unit_id: int):
        self.unit_id = unit_id
        super().__init__(f"Unit with ID {unit_id} not found")


class UserNotFound(NotFoundError):
    """Raised when a user cannot be found by ID."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User with ID {user_id} not found")


class ScheduleNotFound(NotFoundError):
    """Raised when a schedule cannot be found by ID."""

    def __init__(self, schedule_id: int):
        self.schedule_id = schedule_id
        super().__init__(f"Schedule with ID {schedule_id} not found")


class RecipeIngredientNotFound(NotFoundError):
    """Raised when a recipe does not use the given ingredient.

    Example:
        >>> raise RecipeIngredientNotFound(3, 7)
        RecipeIngredientNotFound: Ingredient 7 is not part of recipe 3
    """

    def __init__(self, recipe_id: int, ingredient_id: int):
        self.recipe_id = recipe_id
        self.ingredient_id = ingredient_id
        super().__init__(f"Ingredient {ingredient_id} is not part of recipe {recipe_id}")


class ScheduleRecipeNotFound(NotFoundError):
    """Raised when a schedule does not contain the given recipe."""

    def __init__(self, schedule_id: int, recipe_id: int):
        self.schedule_id = schedule_id
        self.recipe_id = recipe_id
        super().__init__(f"Recipe {recipe_id} is not part of schedule {schedule_id}")


# ============================================================================
# Conflicts
# ============================================================================


class ConflictError(ServiceError):
    """Raised when a write violates a uniqueness or reference constraint.

    Args:
        message: Description of the conflict
        original_error: The store error that signalled the conflict, if any
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(message)


class IngredientNameConflict(ConflictError):
    """Raised when an ingredient could neither be created nor found by name.

    Creating the ingredient failed on a constraint, and the fallback lookup by
    name found nothing, so the failure was not a plain duplicate name.
    """

    def __init__(self, name: str, original_error: Optional[Exception] = None):
        self.name = name
        super().__init__(
            f"Ingredient '{name}' could not be created or found", original_error
        )


class RecipeIngredientExists(ConflictError):
    """Raised when a recipe already uses the given ingredient."""

    def __init__(self, recipe_id: int, ingredient_id: int):
        self.recipe_id = recipe_id
        self.ingredient_id = ingredient_id
        super().__init__(f"Recipe {recipe_id} already uses ingredient {ingredient_id}")


# ============================================================================
# Transactions and the store
# ============================================================================


class TransactionError(ServiceError):
    """Raised when a transaction cannot be committed or rolled back.

    Never retried by the service layer.

    Args:
        message: Description of the failure
        original_error: The error that caused the failure (the step error when
            rollback failed, or the commit error)
        rollback_error: The error raised by rollback, if rollback failed
    """

    def __init__(
        self,
        message: str,
        original_error: Optional[Exception] = None,
        rollback_error: Optional[Exception] = None,
    ):
        self.original_error = original_error
        self.rollback_error = rollback_error
        super().__init__(message)


class TransactionTimeout(ServiceError):
    """Raised when a unit of work runs past the caller's deadline."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"Transaction exceeded its {timeout}s deadline and was rolled back")


class ConnectivityError(ServiceError):
    """Raised when the database cannot be reached."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(f"Database unavailable: {message}")


class DatabaseError(ServiceError):
    """Raised when a database operation fails."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(f"Database error: {message}")
