"""
Consumption flattening for multilevel recipes.

Expands a recipe into the base inventory quantities needed to produce
N output units. Sub-recipes are expanded recursively:

    factor = requested_quantity / recipe.output_quantity

    inventory line -> item total += line.quantity * factor
    recipe line    -> recurse with line.quantity * factor, then merge

Quantities reached through different paths (diamond dependencies) are
summed. Downstream systems (production, stock deduction) consume the
resulting mapping; nothing here touches stock.

Usage:
    from recipeman.services.consumption import flatten_consumption

    flatten_consumption("pizza", 2)   # {"dough": Decimal("400")}
"""

from __future__ import annotations

import logging
from collections import defaultdict
from decimal import Decimal

from recipeman.exceptions import RecipeValidationError
from recipeman.models import Recipe
from recipeman.models.ingredient import to_decimal
from recipeman.services.storage import RecipeStore

logger = logging.getLogger(__name__)


def _merge(into: dict[str, Decimal], other: dict[str, Decimal]) -> None:
    for item_id, quantity in other.items():
        into[item_id] += quantity


def _expand(
    recipe_ref,
    quantity: Decimal,
    path: set[str],
    using: str | None,
) -> dict[str, Decimal]:
    """
    Flatten one recipe.

    ``path`` holds the recipes on the current call stack. Re-entering one
    of them is a cycle; ids are removed on the way back out so the same
    sub-recipe can appear in sibling branches.
    """
    recipe: Recipe = RecipeStore.get(recipe_ref, using)
    key = recipe.ref
    if key in path:
        raise RecipeValidationError("CIRCULAR_DEPENDENCY", recipe=key, name=recipe.name)
    if not recipe.is_active:
        raise RecipeValidationError("RECIPE_INACTIVE", recipe=key, name=recipe.name)

    path.add(key)
    try:
        output = recipe.output_quantity if recipe.output_quantity and recipe.output_quantity > 0 else Decimal("1")
        factor = quantity / output

        totals: dict[str, Decimal] = defaultdict(Decimal)
        for line in recipe.lines:
            if line.quantity <= 0:
                continue
            needed = line.quantity * factor
            if line.is_inventory:
                totals[line.source_id] += needed
            else:
                _merge(totals, _expand(line.source_id, needed, path, using))
    finally:
        path.discard(key)

    return totals


def flatten_consumption(recipe_id, quantity=1, using: str | None = None) -> dict[str, Decimal]:
    """
    Flatten a recipe into inventory item id -> total quantity.

    Args:
        recipe_id: Recipe uuid, slug or instance
        quantity: Output units to produce (default 1)
        using: Database alias

    Returns:
        Dict of inventory item id to Decimal quantity

    Raises:
        RecipeNotFound: recipe or sub-recipe missing
        RecipeValidationError: inactive recipe, cycle, non-positive quantity
    """
    quantity = to_decimal(quantity, "quantity")
    if quantity <= 0:
        raise RecipeValidationError("INVALID_QUANTITY", quantity=str(quantity))

    totals = _expand(recipe_id, quantity, set(), using)

    logger.debug(
        "Flattened recipe %s x%s into %d inventory items",
        recipe_id if not isinstance(recipe_id, Recipe) else recipe_id.slug,
        quantity,
        len(totals),
    )
    return dict(totals)
