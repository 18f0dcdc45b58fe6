"""
Tests for recipe dependency cycle detection.
"""

import pytest

from recipeman import RecipeValidationError, recipes
from recipeman.models import Recipe
from recipeman.tests.lines import inv, raw_recipe, sub


@pytest.fixture
def chain(db, inventory):
    """dough <- base <- pizza <- combo"""
    base = recipes.create_recipe({"name": "Base", "ingredients": [inv("dough", 200, "g")]})
    pizza = recipes.create_recipe({"name": "Pizza", "ingredients": [sub(base)]})
    combo = recipes.create_recipe({"name": "Combo", "ingredients": [sub(pizza), inv("box", 1, "un")]})
    return base, pizza, combo


class TestHasCycle:
    def test_no_cycle_for_new_recipe(self, chain):
        base, pizza, combo = chain

        assert recipes.has_cycle(None, [combo.uuid, base.uuid]) is False

    def test_self_reference(self, chain):
        base, _, _ = chain

        assert recipes.has_cycle(base.uuid, [base.uuid]) is True

    def test_direct_back_reference(self, chain):
        base, pizza, _ = chain

        # pizza -> base already stored; base -> pizza would close it
        assert recipes.has_cycle(base.uuid, [pizza.uuid]) is True

    def test_transitive_back_reference(self, chain):
        base, _, combo = chain

        assert recipes.has_cycle(base.uuid, [combo.uuid]) is True

    def test_forward_reference_is_fine(self, chain):
        base, pizza, combo = chain

        assert recipes.has_cycle(combo.uuid, [base.uuid]) is False
        assert recipes.has_cycle(pizza.uuid, [base.uuid]) is False

    def test_accepts_slugs_and_instances(self, chain):
        base, pizza, _ = chain

        assert recipes.has_cycle("base", ["pizza"]) is True
        assert recipes.has_cycle(base, [pizza]) is True

    def test_unknown_sub_recipe_is_not_a_cycle(self, chain):
        base, _, _ = chain

        assert recipes.has_cycle(base.uuid, ["00000000-0000-0000-0000-000000000000"]) is False


class TestCycleSymmetry:
    """A stored cycle is reported whichever recipe is asked about."""

    @pytest.fixture
    def loop(self, db):
        a = raw_recipe("Loop A")
        b = raw_recipe("Loop B", [sub(a)])
        c = raw_recipe("Loop C", [sub(b)])
        a.ingredients = [sub(c)]
        a.save()
        return a, b, c

    def test_every_member_sees_the_cycle(self, loop):
        for recipe in loop:
            stored = Recipe.objects.get(pk=recipe.pk)
            assert recipes.has_cycle(stored.uuid, stored.sub_recipe_ids) is True

    def test_walk_terminates_outside_the_loop(self, loop, inventory):
        outsider = recipes.create_recipe({"name": "Outsider", "ingredients": [inv("dough", 1, "g")]})

        assert recipes.has_cycle(outsider.uuid, [loop[0].uuid]) is False


class TestWritesRejectCycles:
    def test_update_closing_a_cycle_is_rejected(self, chain):
        base, pizza, _ = chain

        with pytest.raises(RecipeValidationError) as exc:
            recipes.update_recipe(base.uuid, {"ingredients": [sub(pizza)]})

        assert exc.value.code == "CIRCULAR_DEPENDENCY"
        base.refresh_from_db()
        assert base.sub_recipe_ids == []

    def test_update_referencing_itself_is_rejected(self, chain):
        _, pizza, _ = chain

        with pytest.raises(RecipeValidationError) as exc:
            recipes.update_recipe(pizza.uuid, {"ingredients": [sub(pizza)]})

        assert exc.value.code == "CIRCULAR_DEPENDENCY"
