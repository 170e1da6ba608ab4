"""
Configuration management for the Grocery Planner application.

This module handles:
- Database URL configuration
- Environment-specific configuration (development vs. production)
- Database connection settings (timeout, SQL echo)

Settings are read from the environment once, when a Config is created.
Code below the configuration layer receives plain values (URL, timeout)
and never reads the environment itself.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from .constants import DATABASE_FILENAME

logger = logging.getLogger(__name__)

ENV_ENVIRONMENT = "GROCERY_PLANNER_ENV"
ENV_DATABASE_URL = "GROCERY_PLANNER_DATABASE_URL"
ENV_DB_TIMEOUT = "GROCERY_PLANNER_DB_TIMEOUT"
ENV_ECHO_SQL = "GROCERY_PLANNER_ECHO_SQL"

DEFAULT_DB_TIMEOUT = 30


class Config:
    """
    Application configuration manager.

    Handles all configuration settings including database location,
    connection settings, and the environment mode.
    """

    def __init__(self, environment: str = "production"):
        """
        Initialize configuration.

        Args:
            environment: Environment mode - 'production' or 'development'
        """
        self.environment = environment

        if environment == "development":
            self._base_dir = self._get_project_data_dir()
        else:
            self._base_dir = self._get_user_data_dir()

        self._database_path = self._base_dir / DATABASE_FILENAME
        self._database_url = os.environ.get(ENV_DATABASE_URL)
        self._db_timeout = self._read_int(ENV_DB_TIMEOUT, DEFAULT_DB_TIMEOUT)
        self._echo_sql = os.environ.get(ENV_ECHO_SQL, "").lower() in ("1", "true", "yes")

    def _get_project_data_dir(self) -> Path:
        """
        Get the project's data directory for development.

        Returns:
            Path to project data/ directory
        """
        project_root = Path(__file__).parent.parent.parent
        return project_root / "data"

    def _get_user_data_dir(self) -> Path:
        """
        Get the per-user data directory for production.

        Returns:
            Path to ~/.grocery_planner
        """
        return Path.home() / ".grocery_planner"

    @staticmethod
    def _read_int(name: str, default: int) -> int:
        """Read a positive integer from the environment, falling back to default."""
        raw = os.environ.get(name)
        if raw is None:
            return default
        try:
            value = int(raw)
        except ValueError:
            logger.warning(f"Invalid {name}={raw!r}, using default {default}")
            return default
        if value <= 0:
            logger.warning(f"Invalid {name}={raw!r}, using default {default}")
            return default
        return value

    def ensure_directories(self) -> None:
        """Create the data directory if it doesn't exist."""
        self._base_dir.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        """Full path to the default SQLite database file."""
        return self._database_path

    @property
    def database_url(self) -> str:
        """
        SQLAlchemy database URL.

        Returns:
            GROCERY_PLANNER_DATABASE_URL if set, otherwise a SQLite URL
            pointing at database_path
        """
        if self._database_url:
            return self._database_url
        db_path_str = str(self._database_path).replace("\\", "/")
        return f"sqlite:///{db_path_str}"

    @property
    def db_timeout(self) -> int:
        """Seconds a connection waits on a locked database."""
        return self._db_timeout

    @property
    def echo_sql(self) -> bool:
        """Whether SQLAlchemy should log every SQL statement."""
        return self._echo_sql

    def database_exists(self) -> bool:
        """
        Check if the default SQLite database file exists.

        Always True when an explicit database URL is configured.
        """
        if self._database_url:
            return True
        return self._database_path.exists()

    def __repr__(self) -> str:
        """String representation of config."""
        return f"Config(environment='{self.environment}', database_url='{self.database_url}')"


_config_instance: Optional[Config] = None


def get_config(environment: Optional[str] = None) -> Config:
    """
    Get the global configuration instance.

    Once created, the singleton's environment cannot be changed by passing
    a different environment argument.

    Args:
        environment: Optional environment for initial creation. If None, uses
                    GROCERY_PLANNER_ENV or defaults to production. Ignored if
                    singleton already exists.

    Returns:
        Config instance
    """
    global _config_instance

    if _config_instance is None:
        if environment is None:
            environment = os.environ.get(ENV_ENVIRONMENT, "production")
        _config_instance = Config(environment)
    elif environment is not None and environment != _config_instance.environment:
        logger.warning(
            f"get_config() called with environment='{environment}' but singleton "
            f"already exists with environment='{_config_instance.environment}'. "
            f"Returning existing singleton."
        )

    return _config_instance


def reset_config():
    """
    Reset the global configuration instance.

    Useful for testing.
    """
    global _config_instance
    _config_instance = None

