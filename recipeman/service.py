"""
Recipeman Service - Thin facade over the services package.

Usage:
    from recipeman import recipes, RecipeError

    # Costing
    resolution = recipes.resolve_cost([
        {"source_type": "inventory", "source_id": "dough", "quantity": 200, "unit": "g"},
    ])

    # Graph
    recipes.has_cycle(pizza.uuid, [base.uuid])

    # Consumption
    recipes.flatten_consumption("pizza", 2)   # {"dough": Decimal("400")}

    # Creation
    result = recipes.create_recipe_with_variants({
        "name": "Margherita",
        "ingredients": [...],
        "variations": [{"name": "Large", "size_multiplier": 2}],
    })
"""

import logging
from decimal import Decimal

from recipeman.results import CreationResult
from recipeman.services.consumption import flatten_consumption
from recipeman.services.costing import CostResolution, resolve_cost, resolve_variant_cost
from recipeman.services.creation import RecipeCreation
from recipeman.services.graph import has_cycle
from recipeman.services.recipes import RecipeCatalog

logger = logging.getLogger(__name__)


class Recipes(RecipeCatalog):
    """
    Main API for Recipeman (thin wrapper).

    Recipe/variant CRUD, search, bundles and recompute come from RecipeCatalog.
    """

    @classmethod
    def resolve_cost(cls, lines, using: str | None = None) -> CostResolution:
        """Price ingredient lines; returns enriched lines and their total."""
        return resolve_cost(lines, using)

    @classmethod
    def resolve_variant_cost(
        cls, lines, size_multiplier=1, base_cost_adjustment=0, using: str | None = None
    ) -> CostResolution:
        return resolve_variant_cost(lines, size_multiplier, base_cost_adjustment, using)

    @classmethod
    def has_cycle(cls, parent_id, sub_recipe_ids, using: str | None = None) -> bool:
        """Would parent_id referencing sub_recipe_ids create a cycle?"""
        return has_cycle(parent_id, sub_recipe_ids, using)

    @classmethod
    def flatten_consumption(cls, recipe_id, quantity=1, using: str | None = None) -> dict[str, Decimal]:
        """Inventory item id -> quantity needed for ``quantity`` output units."""
        return flatten_consumption(recipe_id, quantity, using)

    @classmethod
    def create_recipe_with_variants(cls, payload: dict, using: str | None = None) -> CreationResult:
        """
        Create a recipe and all its variants as one unit.

        Raises:
            RecipeValidationError: payload, units, cycles, duplicate variant names
            RecipeConflict: slug already taken
            RecipeNotFound: referenced inventory item or sub-recipe missing
        """
        return RecipeCreation(payload, using=using).run()
