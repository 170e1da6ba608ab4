"""Pytest configuration and fixtures for service layer tests."""

import pytest
from sqlalchemy.orm import sessionmaker, scoped_session

from grocery_planner.models import Base, Ingredient, Unit, User
from grocery_planner.services.database import create_database_engine


@pytest.fixture(scope="function")
def test_db():
    """Provide a clean test database for each test function.

    This fixture:
    1. Creates an in-memory SQLite database (foreign keys on)
    2. Creates all tables
    3. Patches the global session factory to a scoped session
    4. Drops all tables after the test completes
    """
    engine = create_database_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)

    session_factory = sessionmaker(bind=engine, expire_on_commit=False)
    Session = scoped_session(session_factory)

    # Monkey-patch the global session factory for tests
    import grocery_planner.services.database as db_module

    original_get_session_factory = db_module.get_session_factory
    db_module.get_session_factory = lambda: Session

    yield Session

    # Cleanup
    Session.remove()
    Base.metadata.drop_all(engine)
    engine.dispose()
    db_module.get_session_factory = original_get_session_factory


@pytest.fixture(scope="function")
def units(test_db):
    """Provide two committed units, keyed by name."""
    session = test_db()
    gram = Unit(name="g")
    piece = Unit(name="piece")
    session.add_all([gram, piece])
    session.commit()
    return {"g": gram, "piece": piece}


@pytest.fixture(scope="function")
def author(test_db):
    """Provide a committed recipe author."""
    session = test_db()
    user = User(username="cook", email="cook@example.com")
    session.add(user)
    session.commit()
    return user


@pytest.fixture(scope="function")
def pantry(test_db, units):
    """Provide committed ingredients flour, sugar and eggs, keyed by name."""
    session = test_db()
    ingredients = {
        "flour": Ingredient(name="flour", default_unit_id=units["g"].id),
        "sugar": Ingredient(name="sugar", default_unit_id=units["g"].id),
        "eggs": Ingredient(name="eggs", default_unit_id=units["piece"].id),
    }
    session.add_all(ingredients.values())
    session.commit()
    return ingredients


@pytest.fixture(scope="function")
def count_rows(test_db):
    """Provide a function counting committed rows of a model."""

    def _count(model, **filters) -> int:
        session = test_db()
        try:
            return session.query(model).filter_by(**filters).count()
        finally:
            session.rollback()

    return _count
