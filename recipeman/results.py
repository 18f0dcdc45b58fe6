"""
Recipeman Result Types.

Structured results for recipe creation and cost refresh.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from recipeman.exceptions import RecipeError
    from recipeman.models import Recipe, RecipeVariant


@dataclass(frozen=True)
class CreationSummary:
    """Counts and timing for a create-with-variants run."""

    recipe_id: str
    recipe_name: str
    recipe_slug: str
    recipe_cost: Decimal
    variant_count: int
    total_ingredients: int
    processing_time_ms: int
    transactional: bool

    def as_dict(self) -> dict:
        data = asdict(self)
        data["recipe_cost"] = str(self.recipe_cost)
        return data


@dataclass
class CreationResult:
    """
    Outcome of creating a recipe with its variants.

    Same shape on both write paths (transactional or compensating).
    """

    recipe: Recipe
    variants: list[RecipeVariant] = field(default_factory=list)
    summary: CreationSummary | None = None

    def as_dict(self) -> dict:
        """Response payload: serialized recipe, variants and summary."""
        from recipeman.serializers import RecipeSerializer, RecipeVariantSerializer

        return {
            "recipe": RecipeSerializer(self.recipe).data,
            "variants": RecipeVariantSerializer(self.variants, many=True).data,
            "summary": self.summary.as_dict() if self.summary else None,
        }


@dataclass
class RecomputeResult:
    """
    Outcome of a cost refresh.

    A recipe that cannot be repriced (inactive or missing sub-recipe,
    unit mismatch...) keeps its old snapshot and is listed in
    ``failures``; the rest of the run carries on.
    """

    totals: dict[str, Decimal] = field(default_factory=dict)
    failures: dict[str, RecipeError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures

    def as_dict(self) -> dict:
        return {
            "totals": {ref: str(total) for ref, total in self.totals.items()},
            "failures": {ref: error.as_dict() for ref, error in self.failures.items()},
        }
