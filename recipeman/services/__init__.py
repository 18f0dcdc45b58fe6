"""
Recipeman Services.

Business logic that doesn't belong in models:
- storage: recipe/variant lookups and writes, transaction support check
- costing: ingredient line pricing (cost resolver)
- graph: sub-recipe cycle detection
- consumption: multilevel flattening into inventory quantities
- recipes: single recipe/variant writes and cost recompute
- creation: create a recipe with variants atomically
"""

from recipeman.services.consumption import flatten_consumption
from recipeman.services.costing import CostResolution, resolve_cost, resolve_variant_cost
from recipeman.services.creation import CreationState, RecipeCreation
from recipeman.services.graph import assert_acyclic, has_cycle
from recipeman.services.recipes import RecipeCatalog
from recipeman.services.storage import RecipeStore, VariantStore, supports_transactions

__all__ = [
    "CostResolution",
    "CreationState",
    "RecipeCatalog",
    "RecipeCreation",
    "RecipeStore",
    "VariantStore",
    "assert_acyclic",
    "flatten_consumption",
    "has_cycle",
    "resolve_cost",
    "resolve_variant_cost",
    "supports_transactions",
]
