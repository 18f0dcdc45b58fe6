"""
Ingredient lines.

An ingredient line is embedded in a Recipe or RecipeVariant (stored in
their ``ingredients`` JSON list). It is a tagged union on ``source_type``:

- inventory: ``source_id`` is an inventory item id, ``unit`` must be the
  item's canonical unit.
- recipe: ``source_id`` is a sub-recipe uuid; the whole sub-recipe counts
  as one unit for costing.

``name_snapshot``, ``cost_per_unit`` and ``total_cost`` are snapshots taken
when the line was last resolved.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from typing import Any

from django.db import models
from django.utils.translation import gettext_lazy as _

from recipeman.exceptions import RecipeValidationError


class SourceType(models.TextChoices):
    """What an ingredient line points at."""

    INVENTORY = "inventory", _("Inventory item")
    RECIPE = "recipe", _("Sub-recipe")


def to_decimal(value, field: str = "value") -> Decimal:
    """Coerce JSON/user input into a Decimal."""
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise RecipeValidationError("INVALID_NUMBER", field=field, value=value)


@dataclass(frozen=True)
class IngredientLine:
    """One line of a recipe or variant."""

    source_type: str
    source_id: str
    quantity: Decimal
    unit: str = ""
    name_snapshot: str = ""
    cost_per_unit: Decimal | None = None
    total_cost: Decimal = Decimal("0")

    @property
    def is_recipe(self) -> bool:
        return self.source_type == SourceType.RECIPE

    @property
    def is_inventory(self) -> bool:
        return self.source_type == SourceType.INVENTORY

    @classmethod
    def from_dict(cls, data: dict[str, Any] | IngredientLine) -> IngredientLine:
        """Build a line from stored JSON or caller input."""
        if isinstance(data, IngredientLine):
            return data

        source_type = str(data.get("source_type") or "").strip()
        if source_type not in SourceType.values:
            raise RecipeValidationError(
                "INVALID_SOURCE_TYPE",
                source_type=source_type,
                expected=list(SourceType.values),
            )
        source_id = data.get("source_id")
        if source_id in (None, ""):
            raise RecipeValidationError("MISSING_SOURCE_ID", source_type=source_type)

        cost = data.get("cost_per_unit")
        return cls(
            source_type=source_type,
            source_id=str(source_id),
            quantity=to_decimal(data.get("quantity", 0), "quantity"),
            unit=str(data.get("unit") or "").strip(),
            name_snapshot=str(data.get("name_snapshot") or ""),
            cost_per_unit=to_decimal(cost, "cost_per_unit") if cost not in (None, "") else None,
            total_cost=to_decimal(data.get("total_cost") or 0, "total_cost"),
        )

    def as_dict(self) -> dict[str, Any]:
        """JSON-safe representation (decimals as strings)."""
        return {
            "source_type": self.source_type,
            "source_id": self.source_id,
            "quantity": str(self.quantity),
            "unit": self.unit,
            "name_snapshot": self.name_snapshot,
            "cost_per_unit": str(self.cost_per_unit or Decimal("0")),
            "total_cost": str(self.total_cost),
        }

    def stamped(self, **changes) -> IngredientLine:
        return replace(self, **changes)


def parse_lines(raw) -> list[IngredientLine]:
    """Parse a list of dicts (or lines) into IngredientLines."""
    if raw is None:
        return []
    if not isinstance(raw, (list, tuple)):
        raise RecipeValidationError("INVALID_INGREDIENTS", reason="must be a list")
    return [IngredientLine.from_dict(item) for item in raw]


def sub_recipe_ids(lines) -> list[str]:
    """Ids of the sub-recipes referenced by recipe-typed lines, in order."""
    return [line.source_id for line in parse_lines(lines) if line.is_recipe]
