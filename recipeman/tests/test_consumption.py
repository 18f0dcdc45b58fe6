"""
Tests for flattening recipes into inventory consumption.
"""

import pytest
from decimal import Decimal

from recipeman import RecipeNotFound, RecipeValidationError, recipes
from recipeman.tests.lines import inv, raw_recipe, sub


@pytest.fixture
def pizza_base(db, inventory):
    return recipes.create_recipe({"name": "Pizza Base", "ingredients": [inv("dough", 200, "g")]})


@pytest.fixture
def pizza(pizza_base):
    return recipes.create_recipe({"name": "Pizza", "ingredients": [sub(pizza_base, 1)]})


class TestFlatten:
    def test_simple_flatten(self, pizza_base):
        assert recipes.flatten_consumption(pizza_base.uuid, 3) == {"dough": Decimal("600")}

    def test_sub_recipe_flatten(self, pizza):
        assert recipes.flatten_consumption(pizza.uuid, 2) == {"dough": Decimal("400")}

    def test_default_quantity_is_one(self, pizza):
        assert recipes.flatten_consumption("pizza") == {"dough": Decimal("200")}

    def test_lines_for_the_same_item_are_summed(self, pizza_base):
        margherita = recipes.create_recipe({
            "name": "Margherita",
            "ingredients": [sub(pizza_base), inv("dough", 50, "g"), inv("cheese", 120, "g")],
        })

        assert recipes.flatten_consumption(margherita.uuid, 2) == {
            "dough": Decimal("500"),
            "cheese": Decimal("240"),
        }

    def test_yield_scales_requested_quantity(self, db, inventory):
        # One batch of 10 rolls takes 1000 g dough
        rolls = recipes.create_recipe({
            "name": "Rolls",
            "output_quantity": "10",
            "ingredients": [inv("dough", 1000, "g")],
        })

        assert recipes.flatten_consumption(rolls.uuid, 4) == {"dough": Decimal("400")}

    def test_sub_recipe_yield_applies_at_each_level(self, db, inventory):
        sauce_batch = recipes.create_recipe({
            "name": "Sauce batch",
            "output_quantity": "4",
            "ingredients": [inv("sauce", 1000, "ml")],
        })
        pizza = recipes.create_recipe({"name": "Sauced pizza", "ingredients": [sub(sauce_batch, 1)]})

        assert recipes.flatten_consumption(pizza.uuid, 2) == {"sauce": Decimal("500")}

    def test_diamond_counts_each_path(self, db, inventory):
        """X and Y both use Z: Z's consumption is counted twice."""
        z = recipes.create_recipe({"name": "Z", "ingredients": [inv("cheese", 10, "g")]})
        x = recipes.create_recipe({"name": "X", "ingredients": [sub(z), inv("dough", 100, "g")]})
        y = recipes.create_recipe({"name": "Y", "ingredients": [sub(z)]})
        top = recipes.create_recipe({"name": "Top", "ingredients": [sub(x), sub(y)]})

        assert recipes.flatten_consumption(top.uuid, 1) == {
            "cheese": Decimal("20"),
            "dough": Decimal("100"),
        }

    def test_flatten_does_not_write(self, pizza):
        before = pizza.history.count()

        recipes.flatten_consumption(pizza.uuid, 5)

        assert pizza.history.count() == before


class TestFlattenErrors:
    def test_missing_recipe(self, db):
        with pytest.raises(RecipeNotFound) as exc:
            recipes.flatten_consumption("nope")

        assert exc.value.code == "RECIPE_NOT_FOUND"

    @pytest.mark.parametrize("quantity", [0, "-1"])
    def test_non_positive_quantity(self, pizza, quantity):
        with pytest.raises(RecipeValidationError) as exc:
            recipes.flatten_consumption(pizza.uuid, quantity)

        assert exc.value.code == "INVALID_QUANTITY"

    def test_non_numeric_quantity(self, pizza):
        with pytest.raises(RecipeValidationError) as exc:
            recipes.flatten_consumption(pizza.uuid, "lots")

        assert exc.value.code == "INVALID_NUMBER"

    def test_inactive_sub_recipe(self, pizza, pizza_base):
        recipes.update_recipe(pizza_base.uuid, {"is_active": False})

        with pytest.raises(RecipeValidationError) as exc:
            recipes.flatten_consumption(pizza.uuid)

        assert exc.value.code == "RECIPE_INACTIVE"

    def test_stored_cycle_is_detected(self, db):
        a = raw_recipe("Cycle A")
        b = raw_recipe("Cycle B", [sub(a)])
        a.ingredients = [sub(b)]
        a.save()

        with pytest.raises(RecipeValidationError) as exc:
            recipes.flatten_consumption(a.uuid)

        assert exc.value.code == "CIRCULAR_DEPENDENCY"
