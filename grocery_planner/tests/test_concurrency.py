"""
Concurrent recipe writers naming the same new ingredient.

Runs against a file-backed SQLite database so that each worker gets its own
connection and transaction.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy.orm import sessionmaker

import grocery_planner.services.database as db_module
from grocery_planner.models import Base, Ingredient, Recipe, RecipeIngredient, Unit, User
from grocery_planner.services.database import create_database_engine
from grocery_planner.services.dto import IngredientLine, NewRecipeParams
from grocery_planner.services.recipe_composition_service import create_recipe_with_ingredients

WORKERS = 4


@pytest.fixture
def file_db(tmp_path, monkeypatch):
    """A file-backed database shared by several threads."""
    engine = create_database_engine(f"sqlite:///{tmp_path / 'concurrent.db'}", timeout=30)
    Base.metadata.create_all(engine)

    factory = sessionmaker(bind=engine, expire_on_commit=False)
    monkeypatch.setattr(db_module, "get_session_factory", lambda: factory)

    session = factory()
    gram = Unit(name="g")
    cook = User(username="cook")
    session.add_all([gram, cook])
    session.commit()
    ids = {"unit_id": gram.id, "author_id": cook.id}
    session.close()

    yield factory, ids

    engine.dispose()


def test_same_new_ingredient_created_once(file_db):
    factory, ids = file_db
    barrier = threading.Barrier(WORKERS)

    def _write(i):
        params = NewRecipeParams(
            name=f"Curry {i}",
            author_id=ids["author_id"],
            portion=2,
            ingredients=[IngredientLine(amount=i + 1, unit_id=ids["unit_id"], name="garam masala")],
        )
        barrier.wait(timeout=10)
        return create_recipe_with_ingredients(params)

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        results = list(pool.map(_write, range(WORKERS)))

    ingredient_ids = {r.ingredients[0].ingredient_id for r in results}
    assert len(ingredient_ids) == 1

    session = factory()
    try:
        assert session.query(Ingredient).filter_by(name="garam masala").count() == 1
        assert session.query(Recipe).count() == WORKERS
        rows = session.query(RecipeIngredient).all()
        assert len(rows) == WORKERS
        assert {row.ingredient_id for row in rows} == ingredient_ids
    finally:
        session.close()
