"""
Constants for the Grocery Planner application.

This module defines system-wide constants including:
- Application metadata
- Default measurement units seeded into a new database
- User roles
"""

from typing import List

# ============================================================================
# Application Metadata
# ============================================================================

APP_NAME = "Grocery Planner"
APP_VERSION = "0.1.0"
DATABASE_FILENAME = "grocery_planner.db"

# ============================================================================
# Units
# ============================================================================

# Seeded on database initialization (see database.seed_units)
DEFAULT_UNITS: List[str] = [
    "g",
    "kg",
    "ml",
    "l",
    "tsp",
    "tbsp",
    "cup",
    "piece",
    "pinch",
]

# ============================================================================
# Users
# ============================================================================

ROLE_USER = "user"
ROLE_ADMIN = "admin"
USER_ROLES: List[str] = [ROLE_USER, ROLE_ADMIN]

# ============================================================================
# Pagination
# ============================================================================

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 1000
