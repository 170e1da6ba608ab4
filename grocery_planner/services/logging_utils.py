"""Service layer logging utilities.

Every public service operation logs one record when it finishes: its name,
an outcome ("success", or the exception class on failure) and structured
context (entity ids, counts) passed through ``extra``.

Usage:
    from grocery_planner.services.logging_utils import (
        get_service_logger,
        log_failure,
        log_operation,
    )

    logger = get_service_logger(__name__)

    log_operation(
        logger,
        operation="generate_grocery_list",
        outcome="success",
        schedule_id=7,
        grocery_count=12,
    )

    try:
        ...
    except ServiceError as e:
        log_failure(logger, "generate_grocery_list", e, recipe_count=3)
        raise
"""

import logging
from typing import Any, Dict

# Attributes every LogRecord already has; context keys must not overwrite them
_RECORD_ATTRIBUTES = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime"}


def get_service_logger(name: str) -> logging.Logger:
    """
    Get the logger of a service module.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Logger named 'grocery_planner.services.<module>'

    Example:
        >>> get_service_logger("grocery_planner.services.grocery_service").name
        'grocery_planner.services.grocery_service'
    """
    module = name.rsplit(".", 1)[-1]
    return logging.getLogger(f"grocery_planner.services.{module}")


def _record_extra(operation: str, outcome: str, context: Dict[str, Any]) -> Dict[str, Any]:
    extra = {"operation": operation, "outcome": outcome}
    for key, value in context.items():
        if key in _RECORD_ATTRIBUTES:
            key = f"ctx_{key}"
        extra[key] = value
    return extra


def log_operation(
    logger: logging.Logger,
    operation: str,
    outcome: str,
    level: int = logging.INFO,
    **context: Any,
) -> None:
    """
    Log a service operation with structured context.

    Context keys that clash with LogRecord attributes (``name``, ``args``,
    ``message`` ...) are stored with a ``ctx_`` prefix.

    Args:
        logger: Logger instance to use
        operation: Operation name (e.g., "create_recipe_with_ingredients")
        outcome: Outcome description (e.g., "success", "name_conflict_resolved")
        level: Log level (default: INFO). Use DEBUG for verbose/frequent logs.
        **context: Additional context fields (entity IDs, counts)
    """
    logger.log(level, f"{operation}: {outcome}", extra=_record_extra(operation, outcome, context))


def log_failure(
    logger: logging.Logger,
    operation: str,
    error: Exception,
    level: int = logging.WARNING,
    **context: Any,
) -> None:
    """
    Log a failed service operation.

    The outcome is the exception class name; its message goes into the
    ``error`` context field.

    Args:
        logger: Logger instance to use
        operation: Operation name
        error: The exception the operation is about to raise
        level: Log level (default: WARNING)
        **context: Additional context fields
    """
    log_operation(
        logger,
        operation,
        outcome=type(error).__name__,
        level=level,
        error=str(error),
        **context,
    )
