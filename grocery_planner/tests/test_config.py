"""Unit tests for Config.

Tests cover:
- Database URL resolution (default SQLite file, environment override)
- Database connection settings (db_timeout, echo_sql)
- Invalid value handling (fallback to defaults with warning)
- The get_config() singleton
"""

import logging
from pathlib import Path

import pytest

from grocery_planner.utils.config import (
    DEFAULT_DB_TIMEOUT,
    ENV_DATABASE_URL,
    ENV_DB_TIMEOUT,
    ENV_ECHO_SQL,
    ENV_ENVIRONMENT,
    Config,
    get_config,
    reset_config,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Start every test without configuration variables or a singleton."""
    for name in (ENV_ENVIRONMENT, ENV_DATABASE_URL, ENV_DB_TIMEOUT, ENV_ECHO_SQL):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


class TestDatabaseUrl:
    """Tests for database location settings."""

    def test_production_uses_home_directory(self):
        """Production databases live under ~/.grocery_planner."""
        config = Config("production")
        assert config.database_path == Path.home() / ".grocery_planner" / "grocery_planner.db"
        assert config.database_url.startswith("sqlite:///")
        assert config.database_url.endswith("grocery_planner.db")

    def test_development_uses_project_data_directory(self):
        """Development databases live in the project's data/ directory."""
        config = Config("development")
        assert config.database_path.parent.name == "data"

    def test_env_override(self, monkeypatch):
        """GROCERY_PLANNER_DATABASE_URL replaces the default file URL."""
        monkeypatch.setenv(ENV_DATABASE_URL, "postgresql://planner@db/groceries")
        config = Config()
        assert config.database_url == "postgresql://planner@db/groceries"
        assert config.database_exists()

    def test_ensure_directories(self, tmp_path, monkeypatch):
        """ensure_directories() creates the data directory."""
        monkeypatch.setattr(Path, "home", lambda: tmp_path)
        config = Config("production")
        config.ensure_directories()
        assert (tmp_path / ".grocery_planner").is_dir()
        assert not config.database_exists()


class TestConnectionSettings:
    """Tests for db_timeout and echo_sql."""

    def test_db_timeout_default(self):
        """Default db_timeout is 30."""
        assert Config().db_timeout == DEFAULT_DB_TIMEOUT == 30

    def test_db_timeout_env_override(self, monkeypatch):
        """db_timeout can be overridden via environment variable."""
        monkeypatch.setenv(ENV_DB_TIMEOUT, "5")
        assert Config().db_timeout == 5

    def test_db_timeout_invalid_uses_default(self, monkeypatch, caplog):
        """Invalid db_timeout falls back to default with warning."""
        monkeypatch.setenv(ENV_DB_TIMEOUT, "soon")
        with caplog.at_level(logging.WARNING):
            config = Config()
            assert config.db_timeout == 30
        assert "Invalid GROCERY_PLANNER_DB_TIMEOUT" in caplog.text

    def test_db_timeout_non_positive_uses_default(self, monkeypatch, caplog):
        """Zero or negative db_timeout falls back to default with warning."""
        monkeypatch.setenv(ENV_DB_TIMEOUT, "0")
        with caplog.at_level(logging.WARNING):
            assert Config().db_timeout == 30
        assert "Invalid GROCERY_PLANNER_DB_TIMEOUT" in caplog.text

    @pytest.mark.parametrize("raw,expected", [("1", True), ("TRUE", True), ("no", False)])
    def test_echo_sql(self, monkeypatch, raw, expected):
        """echo_sql accepts 1/true/yes."""
        monkeypatch.setenv(ENV_ECHO_SQL, raw)
        assert Config().echo_sql is expected

    def test_echo_sql_default(self):
        assert Config().echo_sql is False


class TestGetConfig:
    """Tests for the configuration singleton."""

    def test_singleton(self):
        assert get_config() is get_config()

    def test_environment_from_env(self, monkeypatch):
        monkeypatch.setenv(ENV_ENVIRONMENT, "development")
        assert get_config().environment == "development"

    def test_environment_mismatch_warns(self, caplog):
        """A different environment after creation keeps the singleton and warns."""
        first = get_config("production")
        with caplog.at_level(logging.WARNING):
            second = get_config("development")
        assert second is first
        assert "singleton already exists" in caplog.text

    def test_reset_config(self):
        first = get_config()
        reset_config()
        assert get_config() is not first

