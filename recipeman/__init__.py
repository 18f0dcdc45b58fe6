"""
Django Recipeman - Recipe cost & consumption engine.

Recipes are graphs of ingredient lines pointing at inventory items or at
other recipes. Recipeman prices them, keeps the graph acyclic, flattens
them into inventory consumption and creates a recipe with its variants
as one unit.

Usage:
    from recipeman import recipes, RecipeError

    result = recipes.create_recipe_with_variants({
        "name": "Pizza",
        "ingredients": [
            {"source_type": "recipe", "source_id": str(base.uuid), "quantity": 1},
        ],
        "variations": [
            {"name": "Large", "size_multiplier": 2},
        ],
    })

    try:
        needs = recipes.flatten_consumption("pizza", 2)
    except RecipeError as e:
        print(e.code, e.details)
"""

from recipeman.exceptions import (
    RecipeConflict,
    RecipeError,
    RecipeNotFound,
    RecipeValidationError,
)


def __getattr__(name):
    """Lazy import to avoid AppRegistryNotReady errors."""
    if name in ("recipes", "Recipes"):
        from recipeman.service import Recipes

        return Recipes
    if name == "CreationResult":
        from recipeman.results import CreationResult

        return CreationResult
    if name == "CreationSummary":
        from recipeman.results import CreationSummary

        return CreationSummary
    if name == "RecomputeResult":
        from recipeman.results import RecomputeResult

        return RecomputeResult
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "recipes",
    "Recipes",
    "RecipeError",
    "RecipeNotFound",
    "RecipeValidationError",
    "RecipeConflict",
    "CreationResult",
    "CreationSummary",
    "RecomputeResult",
]
__version__ = "0.1.0"
