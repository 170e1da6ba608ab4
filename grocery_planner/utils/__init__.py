"""Utilities package for grocery-planner."""
