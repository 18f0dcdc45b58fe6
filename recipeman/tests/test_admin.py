"""
Tests for the admin: cost inputs cannot be edited around the services.
"""

import pytest
from decimal import Decimal

from django.contrib import admin

from recipeman import recipes
from recipeman.admin import RecipeVariantInline
from recipeman.models import Recipe, RecipeVariant
from recipeman.tests.lines import inv


@pytest.fixture
def pizza(db, inventory):
    return recipes.create_recipe({"name": "Pizza", "ingredients": [inv("cheese", 100, "g")]})


@pytest.fixture
def large(pizza):
    return recipes.create_variant(pizza.uuid, {
        "name": "Large",
        "type": "size",
        "size_multiplier": "1",
        "ingredients": [inv("cheese", 100, "g")],
    })


class TestRegistration:
    def test_models_registered(self):
        assert admin.site.is_registered(Recipe)
        assert admin.site.is_registered(RecipeVariant)

    def test_recipe_costs_are_read_only(self):
        model_admin = admin.site._registry[Recipe]

        assert "total_cost" in model_admin.readonly_fields
        assert "ingredients" in model_admin.readonly_fields

    @pytest.mark.parametrize("field", ["size_multiplier", "base_cost_adjustment", "ingredients", "total_cost"])
    def test_variant_cost_inputs_are_read_only(self, field):
        assert field in admin.site._registry[RecipeVariant].readonly_fields
        if field != "ingredients":
            assert field in RecipeVariantInline.readonly_fields


class TestVariantChange:
    def test_cost_inputs_ignored_on_save(self, admin_client, large):
        assert large.total_cost == Decimal("5.0000")

        response = admin_client.post(
            f"/admin/recipeman/recipevariant/{large.pk}/change/",
            {
                "recipe": large.recipe.pk,
                "name": "Large XL",
                "description": "",
                "type": "size",
                "crust_type": "",
                "is_active": "on",
                "metadata": "{}",
                "size_multiplier": "3",
                "base_cost_adjustment": "10",
                "_save": "Save",
            },
        )

        assert response.status_code == 302
        large.refresh_from_db()
        assert large.name == "Large XL"
        assert large.size_multiplier == Decimal("1")
        assert large.base_cost_adjustment == Decimal("0")
        assert large.total_cost == Decimal("5.0000")

    def test_change_page_renders(self, admin_client, large):
        response = admin_client.get(f"/admin/recipeman/recipevariant/{large.pk}/change/")

        assert response.status_code == 200

    def test_variants_cannot_be_added(self, admin_client, pizza):
        response = admin_client.get("/admin/recipeman/recipevariant/add/")

        assert response.status_code == 403

    def test_recipe_page_offers_no_new_variant_rows(self, admin_client, pizza, large, rf):
        inline = RecipeVariantInline(Recipe, admin.site)

        assert inline.has_add_permission(rf.get("/"), pizza) is False
        response = admin_client.get(f"/admin/recipeman/recipe/{pizza.pk}/change/")
        assert response.status_code == 200
        assert b"Large" in response.content
