"""Tests for service operation logging."""

import logging

import pytest

from grocery_planner.services.dto import GenerateGroceriesParams, RecipePortion
from grocery_planner.services.exceptions import ConflictError, RecipeNotFound
from grocery_planner.services.grocery_service import generate_grocery_list
from grocery_planner.services.logging_utils import (
    get_service_logger,
    log_failure,
    log_operation,
)


@pytest.fixture
def service_logger():
    return get_service_logger("grocery_planner.services.test_module")


def test_logger_name():
    assert get_service_logger("a.b.grocery_service").name == "grocery_planner.services.grocery_service"
    assert get_service_logger("plain").name == "grocery_planner.services.plain"


def test_log_operation_context(service_logger, caplog):
    with caplog.at_level(logging.INFO, logger="grocery_planner.services"):
        log_operation(service_logger, "do_thing", "success", recipe_id=3, count=2)

    record = caplog.records[-1]
    assert record.getMessage() == "do_thing: success"
    assert record.operation == "do_thing"
    assert record.outcome == "success"
    assert record.recipe_id == 3
    assert record.count == 2


def test_reserved_context_keys_are_prefixed(service_logger, caplog):
    """Keys such as 'name' would make logging raise; they get a ctx_ prefix."""
    with caplog.at_level(logging.INFO, logger="grocery_planner.services"):
        log_operation(service_logger, "resolve", "success", name="salt", args=[1])

    record = caplog.records[-1]
    assert record.ctx_name == "salt"
    assert record.ctx_args == [1]
    assert record.name == "grocery_planner.services.test_module"


def test_log_failure(service_logger, caplog):
    with caplog.at_level(logging.WARNING, logger="grocery_planner.services"):
        log_failure(service_logger, "load", RecipeNotFound(9), recipe_id=9)

    record = caplog.records[-1]
    assert record.levelno == logging.WARNING
    assert record.getMessage() == "load: RecipeNotFound"
    assert record.error == "Recipe with ID 9 not found"
    assert record.recipe_id == 9


def test_service_failure_is_logged(test_db, caplog):
    with caplog.at_level(logging.WARNING, logger="grocery_planner.services"):
        with pytest.raises(ConflictError):
            generate_grocery_list(GenerateGroceriesParams(recipes=[RecipePortion(404)]))

    records = [r for r in caplog.records if r.getMessage() == "generate_grocery_list: ConflictError"]
    assert len(records) == 1
    assert records[0].recipe_count == 1
