"""Tests for the service layer DTOs."""

import pytest

from grocery_planner.services.dto import (
    IngredientLine,
    NewRecipeParams,
    PaginatedResult,
    PaginationParams,
    RecipePortion,
    UpdateRecipeParams,
)


class TestIngredientLine:
    def test_reference_line(self):
        line = IngredientLine(amount=2, unit_id=1, ingredient_id=5)
        assert line.is_reference

    def test_name_line(self):
        line = IngredientLine(amount=2, unit_id=1, name="salt")
        assert not line.is_reference

    def test_id_wins_over_name(self):
        line = IngredientLine(amount=2, unit_id=1, ingredient_id=5, name="salt")
        assert line.is_reference

    @pytest.mark.parametrize("name", [None, "", "   "])
    def test_needs_id_or_name(self, name):
        with pytest.raises(ValueError, match="ingredient_id or a name"):
            IngredientLine(amount=1, unit_id=1, name=name)

    def test_negative_amount(self):
        with pytest.raises(ValueError, match="amount"):
            IngredientLine(amount=-1, unit_id=1, name="salt")

    def test_zero_amount_allowed(self):
        assert IngredientLine(amount=0, unit_id=1, name="salt").amount == 0


class TestRecipeParams:
    def test_new_recipe_defaults(self):
        params = NewRecipeParams(name="Soup", author_id="u1", portion=2)
        assert params.ingredients == []
        assert params.steps is None

    def test_blank_name_rejected(self):
        with pytest.raises(ValueError, match="name"):
            NewRecipeParams(name="  ", author_id="u1", portion=2)
        with pytest.raises(ValueError, match="name"):
            UpdateRecipeParams(recipe_id=1, name="", portion=2)

    def test_portion_must_be_positive(self):
        with pytest.raises(ValueError, match="portion"):
            NewRecipeParams(name="Soup", author_id="u1", portion=0)
        with pytest.raises(ValueError, match="portion"):
            UpdateRecipeParams(recipe_id=1, name="Soup", portion=0)

    def test_recipe_portion_default(self):
        assert RecipePortion(recipe_id=3).portion == 1

    def test_recipe_portion_must_be_positive(self):
        with pytest.raises(ValueError):
            RecipePortion(recipe_id=3, portion=0)


class TestPagination:
    def test_offset(self):
        assert PaginationParams(page=1, per_page=50).offset() == 0
        assert PaginationParams(page=3, per_page=25).offset() == 50

    @pytest.mark.parametrize("page,per_page", [(0, 10), (1, 0), (1, 1001)])
    def test_invalid(self, page, per_page):
        with pytest.raises(ValueError):
            PaginationParams(page=page, per_page=per_page)

    def test_result_pages(self):
        result = PaginatedResult(items=[], total=101, page=3, per_page=50)
        assert result.pages == 3
        assert not result.has_next
        assert result.has_prev

    def test_empty_result_has_one_page(self):
        result = PaginatedResult(items=[], total=0, page=1, per_page=50)
        assert result.pages == 1
        assert not result.has_next
        assert not result.has_prev
