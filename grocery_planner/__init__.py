"""Grocery Planner - recipes, meal schedules and grocery lists."""

from grocery_planner.utils.constants import APP_VERSION

__version__ = APP_VERSION
