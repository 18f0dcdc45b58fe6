"""
Recipeman Admin - Basic Django admin for Recipe and RecipeVariant.

Costs, line snapshots and every input that feeds a cost (ingredient
lines, size multiplier, cost adjustment) are read-only here; they are
only written by the recipeman services (see recipeman.service.Recipes),
which reprice on every change. Variants are added through
``Recipes.create_variant`` for the same reason.
"""

from django.contrib import admin
from simple_history.admin import SimpleHistoryAdmin

from recipeman.models import Recipe, RecipeVariant

RECIPE_COST_FIELDS = ("ingredients", "total_cost")
VARIANT_COST_FIELDS = ("size_multiplier", "base_cost_adjustment", "ingredients", "total_cost")


class RecipeVariantInline(admin.TabularInline):
    """Inline for recipe variants."""

    model = RecipeVariant
    extra = 0
    fields = ("name", "type", "size_multiplier", "base_cost_adjustment", "total_cost", "is_active")
    readonly_fields = ("size_multiplier", "base_cost_adjustment", "total_cost")
    show_change_link = True

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Recipe)
class RecipeAdmin(SimpleHistoryAdmin):
    """Admin for recipes."""

    list_display = ("name", "slug", "type", "output_quantity", "total_cost", "is_active")
    list_filter = ("type", "is_active")
    search_fields = ("name", "custom_name", "slug", "code")
    inlines = [RecipeVariantInline]
    readonly_fields = ("uuid", *RECIPE_COST_FIELDS, "created_at", "updated_at")


@admin.register(RecipeVariant)
class RecipeVariantAdmin(SimpleHistoryAdmin):
    """Admin for recipe variants."""

    list_display = ("name", "recipe", "type", "size_multiplier", "total_cost", "is_active")
    list_filter = ("type", "is_active")
    search_fields = ("name", "recipe__name")
    raw_id_fields = ("recipe",)
    readonly_fields = ("uuid", *VARIANT_COST_FIELDS, "created_at", "updated_at")

    def get_readonly_fields(self, request, obj=None):
        fields = super().get_readonly_fields(request, obj)
        if obj is not None:
            # Moving a variant to another recipe would skip the name check
            return (*fields, "recipe")
        return fields

    def has_add_permission(self, request):
        return False
