"""
Recipe dependency graph -- cycle detection.

A recipe's recipe-typed ingredient lines form edges to its sub-recipes.
Before a recipe is created, or its ingredients are replaced, the new
edge set is checked: starting from every referenced sub-recipe, walk the
graph depth-first and look for the recipe being written.

Each call walks the current graph from scratch. The visited set lives
only for the duration of one call.
"""

from __future__ import annotations

import logging
from typing import Iterable

from recipeman.exceptions import RecipeValidationError
from recipeman.services.storage import RecipeStore, normalize_ref

logger = logging.getLogger(__name__)


def _reaches(target: str | None, refs: Iterable, visited: set[str], using: str | None) -> bool:
    for ref in refs:
        key = normalize_ref(ref)
        if target is not None and key == target:
            return True

        recipe = RecipeStore.find(ref, using)
        if recipe is None:
            # Missing sub-recipes are reported by the cost resolver
            continue
        if target is not None and recipe.ref == target:
            return True
        if recipe.ref in visited:
            continue
        visited.add(recipe.ref)

        if _reaches(target, recipe.sub_recipe_ids, visited, using):
            return True
    return False


def has_cycle(parent_id, sub_recipe_ids: Iterable, using: str | None = None) -> bool:
    """
    Would referencing ``sub_recipe_ids`` from ``parent_id`` create a cycle?

    Args:
        parent_id: Recipe being written (uuid, slug, Recipe), or None for
            a recipe that does not exist yet
        sub_recipe_ids: Sub-recipes its ingredient lines reference
        using: Database alias

    Returns:
        True if any referenced sub-recipe leads back to parent_id.
        A recipe listing itself is the one-hop case.
    """
    target = None
    if parent_id is not None:
        parent = RecipeStore.find(parent_id, using)
        target = parent.ref if parent is not None else normalize_ref(parent_id)

    return _reaches(target, list(sub_recipe_ids or []), set(), using)


def assert_acyclic(parent_id, sub_recipe_ids: Iterable, using: str | None = None) -> None:
    """Raise RecipeValidationError if the reference set would create a cycle."""
    sub_recipe_ids = list(sub_recipe_ids or [])
    if has_cycle(parent_id, sub_recipe_ids, using):
        logger.warning(
            "Rejected circular recipe dependency",
            extra={"recipe": normalize_ref(parent_id) if parent_id else None},
        )
        raise RecipeValidationError(
            "CIRCULAR_DEPENDENCY",
            recipe=normalize_ref(parent_id) if parent_id is not None else None,
            sub_recipes=[normalize_ref(ref) for ref in sub_recipe_ids],
        )
