"""
Cost resolution.

Given a list of ingredient lines, resolve each line's unit cost and
stamp the snapshot fields:

- inventory line: cost from the caller, else the inventory item's cost;
  the line's unit must be the item's canonical unit (no conversion).
- recipe line: cost is the sub-recipe's current total_cost; the
  sub-recipe counts as one indivisible unit.

Pure apart from two lookups (inventory backend, recipe store). Nothing
is written and nothing is cached between calls.

Usage:
    from recipeman.services.costing import resolve_cost

    resolution = resolve_cost([
        {"source_type": "inventory", "source_id": "dough", "quantity": "200", "unit": "g"},
    ])
    resolution.total        # Decimal('2.0000')
    resolution.as_json()    # lines ready for Recipe.ingredients
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable

from recipeman.conf import get_inventory_backend
from recipeman.exceptions import RecipeNotFound, RecipeValidationError
from recipeman.models import COST_PLACES, IngredientLine, parse_lines
from recipeman.services.storage import RecipeStore

logger = logging.getLogger(__name__)

DEFAULT_RECIPE_UNIT = "un"


@dataclass
class CostResolution:
    """Enriched lines plus their summed cost."""

    lines: list[IngredientLine] = field(default_factory=list)
    total: Decimal = Decimal("0")

    def as_json(self) -> list[dict]:
        return [line.as_dict() for line in self.lines]


def _money(value: Decimal) -> Decimal:
    return value.quantize(COST_PLACES)


def _resolve_inventory_line(line: IngredientLine, backend) -> IngredientLine:
    item = backend.get(line.source_id)
    if item is None:
        raise RecipeNotFound(
            "INVENTORY_ITEM_NOT_FOUND",
            item=line.source_id,
            name=line.name_snapshot or None,
        )

    unit = line.unit or item.unit
    if item.unit and unit != item.unit:
        raise RecipeValidationError(
            "UNIT_MISMATCH",
            item=line.source_id,
            name=item.name,
            expected=item.unit,
            got=unit,
        )

    if line.cost_per_unit is not None:
        cost_per_unit = line.cost_per_unit
    else:
        cost_per_unit = item.unit_cost if item.unit_cost is not None else Decimal("0")

    return line.stamped(
        name_snapshot=item.name,
        unit=unit,
        cost_per_unit=cost_per_unit,
        total_cost=_money(line.quantity * cost_per_unit),
    )


def _resolve_recipe_line(line: IngredientLine, using: str | None) -> IngredientLine:
    sub = RecipeStore.find(line.source_id, using)
    if sub is None:
        raise RecipeNotFound(
            "RECIPE_NOT_FOUND",
            recipe=line.source_id,
            name=line.name_snapshot or None,
        )
    if not sub.is_active:
        raise RecipeValidationError("RECIPE_INACTIVE", recipe=sub.ref, name=sub.name)

    cost_per_unit = sub.total_cost
    return line.stamped(
        source_id=sub.ref,
        name_snapshot=sub.name,
        unit=line.unit or DEFAULT_RECIPE_UNIT,
        cost_per_unit=cost_per_unit,
        total_cost=_money(line.quantity * cost_per_unit),
    )


def resolve_cost(lines: Iterable, using: str | None = None) -> CostResolution:
    """
    Resolve and price a list of ingredient lines.

    Args:
        lines: IngredientLines or dicts with source_type/source_id/quantity/unit
        using: Database alias for recipe lookups

    Returns:
        CostResolution with stamped lines and their total

    Raises:
        RecipeNotFound: inventory item or sub-recipe missing
        RecipeValidationError: unit mismatch, inactive sub-recipe, bad quantity
    """
    parsed = parse_lines(list(lines) if lines is not None else None)
    resolution = CostResolution()
    if not parsed:
        return resolution

    backend = None
    for position, line in enumerate(parsed, start=1):
        if line.quantity <= 0:
            raise RecipeValidationError(
                "INVALID_QUANTITY",
                line=position,
                source=line.source_id,
                quantity=str(line.quantity),
            )

        if line.is_inventory:
            if backend is None:
                backend = get_inventory_backend()
            resolved = _resolve_inventory_line(line, backend)
        else:
            resolved = _resolve_recipe_line(line, using)

        resolution.lines.append(resolved)
        resolution.total += resolved.total_cost

    resolution.total = _money(resolution.total)
    logger.debug("Resolved %d ingredient lines, total %s", len(resolution.lines), resolution.total)
    return resolution


def resolve_variant_cost(
    lines: Iterable,
    size_multiplier=Decimal("1"),
    base_cost_adjustment=Decimal("0"),
    using: str | None = None,
) -> CostResolution:
    """
    Price a variant's own lines.

    total = sum(own lines) * size_multiplier + base_cost_adjustment

    The base recipe's lines are never folded in.
    """
    size_multiplier = Decimal(str(size_multiplier if size_multiplier is not None else 1))
    base_cost_adjustment = Decimal(str(base_cost_adjustment or 0))
    if size_multiplier <= 0:
        raise RecipeValidationError("INVALID_SIZE_MULTIPLIER", size_multiplier=str(size_multiplier))

    resolution = resolve_cost(lines, using)
    resolution.total = _money(resolution.total * size_multiplier + base_cost_adjustment)
    return resolution
