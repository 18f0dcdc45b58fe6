"""
Recipeman Models.

- Recipe: ingredient lines + yield + cost snapshot
- RecipeVariant: size/flavor/crust variation with its own lines
- IngredientLine: embedded line value object (not a table)
"""

from recipeman.models.ingredient import IngredientLine, SourceType, parse_lines
from recipeman.models.recipe import COST_PLACES, Recipe, RecipeType, RecipeVariant, VariantType

__all__ = [
    "Recipe",
    "RecipeType",
    "RecipeVariant",
    "VariantType",
    "IngredientLine",
    "SourceType",
    "parse_lines",
    "COST_PLACES",
]
