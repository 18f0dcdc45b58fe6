"""
Recipe service -- single recipe and variant writes, bundles, recompute.

Every write that changes ingredient lines re-checks the dependency graph
(recipes only) and reprices the lines before anything is saved, so
total_cost always matches the stored lines.

All methods are @classmethod so the mixin can be composed into the
Recipes facade without instantiation.
"""

from __future__ import annotations

import logging

from django.utils.text import slugify

from recipeman.exceptions import RecipeConflict, RecipeError, RecipeValidationError
from recipeman.models import Recipe, RecipeVariant
from recipeman.models.ingredient import sub_recipe_ids, to_decimal
from recipeman.results import RecomputeResult
from recipeman.serializers import (
    RecipePayloadSerializer,
    VariantPayloadSerializer,
    validate_payload,
)
from recipeman.services.costing import resolve_cost, resolve_variant_cost
from recipeman.services.graph import assert_acyclic
from recipeman.services.storage import RecipeStore, VariantStore, paginate

logger = logging.getLogger(__name__)

VARIANT_COST_FIELDS = ("ingredients", "size_multiplier", "base_cost_adjustment")


def make_slug(value: str) -> str:
    slug = slugify(value or "")
    if not slug:
        raise RecipeValidationError("INVALID_SLUG", value=value)
    return slug


def _fresh(lines) -> list:
    """Drop stored inventory prices so the backend's current cost is used."""
    return [line.stamped(cost_per_unit=None) if line.is_inventory else line for line in lines]


def recipe_fields(data: dict, slug: str, resolution) -> dict:
    """Model fields for a new Recipe from validated payload data."""
    return {
        "name": data["name"],
        "custom_name": data.get("custom_name", ""),
        "slug": slug,
        "code": data.get("code", ""),
        "description": data.get("description", ""),
        "type": data.get("type", Recipe._meta.get_field("type").default),
        "ingredients": resolution.as_json(),
        "total_cost": resolution.total,
        "output_quantity": to_decimal(data.get("output_quantity", 1), "output_quantity"),
        "is_active": data.get("is_active", True),
        "metadata": data.get("metadata") or {},
    }


def variant_fields(data: dict, resolution) -> dict:
    """Model fields for a new RecipeVariant from validated payload data."""
    return {
        "name": data["name"].strip(),
        "description": data.get("description", ""),
        "type": data.get("type", RecipeVariant._meta.get_field("type").default),
        "size_multiplier": to_decimal(data.get("size_multiplier", 1), "size_multiplier"),
        "base_cost_adjustment": to_decimal(data.get("base_cost_adjustment", 0), "base_cost_adjustment"),
        "crust_type": data.get("crust_type", ""),
        "ingredients": resolution.as_json(),
        "total_cost": resolution.total,
        "is_active": data.get("is_active", True),
        "metadata": data.get("metadata") or {},
    }


class RecipeCatalog:
    """Recipe and variant operations outside the create-with-variants flow."""

    # ── Recipes ──

    @classmethod
    def create_recipe(cls, payload: dict, using: str | None = None) -> Recipe:
        """
        Create one recipe (no variants).

        Order: validate -> slug check -> cycle check -> cost -> write.
        """
        data = validate_payload(RecipePayloadSerializer, payload)

        slug = make_slug(data.get("slug") or data["name"])
        if RecipeStore.slug_exists(slug, using=using):
            raise RecipeConflict("SLUG_EXISTS", slug=slug)

        assert_acyclic(None, sub_recipe_ids(data["ingredients"]), using)
        resolution = resolve_cost(data["ingredients"], using)

        return RecipeStore.create(using=using, **recipe_fields(data, slug, resolution))

    @classmethod
    def update_recipe(cls, recipe_id, patch: dict, using: str | None = None) -> Recipe:
        """
        Update a recipe.

        Changing ``ingredients`` re-checks cycles against the recipe itself
        and reprices every line. Changing ``name`` without ``slug``
        re-derives the slug.
        """
        recipe = RecipeStore.get(recipe_id, using)
        data = dict(validate_payload(RecipePayloadSerializer, patch, partial=True))
        changes: dict = {}

        if data.get("slug") or "name" in data:
            slug = make_slug(data.get("slug") or data["name"])
            if slug != recipe.slug and RecipeStore.slug_exists(slug, exclude=recipe, using=using):
                raise RecipeConflict("SLUG_EXISTS", slug=slug)
            changes["slug"] = slug
        data.pop("slug", None)

        if "ingredients" in data:
            assert_acyclic(recipe, sub_recipe_ids(data["ingredients"]), using)
            resolution = resolve_cost(data.pop("ingredients"), using)
            changes["ingredients"] = resolution.as_json()
            changes["total_cost"] = resolution.total

        if "output_quantity" in data:
            changes["output_quantity"] = to_decimal(data.pop("output_quantity"), "output_quantity")

        changes.update(data)
        recipe = RecipeStore.update(recipe, using=using, **changes)
        logger.info(
            f"Updated recipe {recipe.slug}",
            extra={"recipe": recipe.ref, "fields": sorted(changes)},
        )
        return recipe

    @classmethod
    def get_recipe(cls, recipe_id, using: str | None = None) -> Recipe:
        return RecipeStore.get(recipe_id, using)

    @classmethod
    def get_with_variants(
        cls,
        recipe_id,
        active_only: bool = True,
        page=1,
        limit=50,
        sort: str = "created_at",
        order: str = "desc",
        using: str | None = None,
    ) -> dict:
        """
        Recipe with one page of its variants (active ones by default).

        Returns:
            Dict with recipe, variants, count (all matching variants),
            page and limit
        """
        recipe = RecipeStore.get(recipe_id, using)
        qs = VariantStore.search(
            recipe=recipe,
            is_active=True if active_only else None,
            sort=sort,
            order=order,
            using=using,
        )
        result = paginate(qs, page, limit)
        return {"recipe": recipe, "variants": result.pop("items"), **result}

    @classmethod
    def search_recipes(
        cls,
        q: str | None = None,
        type: str | None = None,
        is_active=None,
        page=1,
        limit=None,
        sort: str = "created_at",
        order: str = "desc",
        using: str | None = None,
    ) -> dict:
        """
        One page of recipes.

        Args:
            q: Case-insensitive text matched against name, display name,
                slug and code
            type: RecipeType value
            is_active: True/False (or "true"/"false"); None for both
            sort: One of RECIPE_SORT_FIELDS; order "asc" or "desc"

        Returns:
            Dict with items, count, page and limit
        """
        qs = RecipeStore.search(q=q, type=type, is_active=is_active, sort=sort, order=order, using=using)
        return paginate(qs, page, limit)

    @classmethod
    def search_variants(
        cls,
        q: str | None = None,
        recipe_id=None,
        type: str | None = None,
        is_active=None,
        page=1,
        limit=None,
        sort: str = "created_at",
        order: str = "desc",
        using: str | None = None,
    ) -> dict:
        """One page of variants, optionally of a single recipe; ``q`` matches name or description."""
        recipe = RecipeStore.get(recipe_id, using) if recipe_id is not None else None
        qs = VariantStore.search(
            q=q, recipe=recipe, type=type, is_active=is_active, sort=sort, order=order, using=using
        )
        return paginate(qs, page, limit)

    # ── Variants ──

    @classmethod
    def create_variant(cls, recipe_id, payload: dict, using: str | None = None) -> RecipeVariant:
        """Add a variant to an existing recipe."""
        recipe = RecipeStore.get(recipe_id, using)
        data = validate_payload(VariantPayloadSerializer, payload)

        if data.get("is_active", True) and VariantStore.name_taken(recipe, data["name"], using=using):
            raise RecipeValidationError(
                "DUPLICATE_VARIANT_NAME", recipe=recipe.ref, name=data["name"]
            )

        resolution = resolve_variant_cost(
            data["ingredients"],
            data.get("size_multiplier", 1),
            data.get("base_cost_adjustment", 0),
            using,
        )
        return VariantStore.create(recipe, using=using, **variant_fields(data, resolution))

    @classmethod
    def update_variant(cls, variant_id, patch: dict, using: str | None = None) -> RecipeVariant:
        """
        Update a variant.

        Touching ingredients, size_multiplier or base_cost_adjustment
        reprices the variant with the merged values.
        """
        variant = VariantStore.get(variant_id, using)
        data = dict(validate_payload(VariantPayloadSerializer, patch, partial=True))

        name = data.get("name", variant.name)
        is_active = data.get("is_active", variant.is_active)
        if is_active and VariantStore.name_taken(variant.recipe, name, exclude=variant, using=using):
            raise RecipeValidationError(
                "DUPLICATE_VARIANT_NAME", recipe=variant.recipe.ref, name=name
            )

        for field in ("size_multiplier", "base_cost_adjustment"):
            if field in data:
                data[field] = to_decimal(data[field], field)

        if any(field in data for field in VARIANT_COST_FIELDS):
            lines = data.pop("ingredients", variant.ingredients)
            resolution = resolve_variant_cost(
                lines,
                data.get("size_multiplier", variant.size_multiplier),
                data.get("base_cost_adjustment", variant.base_cost_adjustment),
                using,
            )
            data["ingredients"] = resolution.as_json()
            data["total_cost"] = resolution.total

        variant = VariantStore.update(variant, using=using, **data)
        logger.info(
            f"Updated variant {variant.name}",
            extra={"variant": variant.ref, "fields": sorted(data)},
        )
        return variant

    # ── Recompute ──

    @classmethod
    def recompute_costs(cls, recipe_ids=None, using: str | None = None) -> RecomputeResult:
        """
        Refresh cost snapshots explicitly.

        Sub-recipes are repriced before the recipes that use them, then
        each recipe's variants. Inactive recipes are skipped.

        A recipe that cannot be repriced is logged, keeps its old snapshot
        and lands in ``failures``; recipes that use it fail with
        SUB_RECIPE_FAILED. Everything else is still repriced.

        Args:
            recipe_ids: Recipes to refresh (with their sub-recipes);
                None means every active recipe

        Returns:
            RecomputeResult with recipe uuid -> new total_cost and
            recipe/variant uuid -> RecipeError

        Raises:
            RecipeNotFound: one of ``recipe_ids`` does not exist
        """
        if recipe_ids is None:
            roots = list(RecipeStore.queryset(using).filter(is_active=True))
        else:
            roots = [RecipeStore.get(ref, using) for ref in recipe_ids]

        result = RecomputeResult()
        for root in roots:
            cls._recompute(root, result, set(), using)

        logger.info(
            f"Recomputed costs for {len(result.totals)} recipes, {len(result.failures)} skipped",
            extra={"failures": sorted(result.failures)},
        )
        return result

    @classmethod
    def _recompute(cls, recipe: Recipe, result: RecomputeResult, path: set, using: str | None) -> None:
        if recipe.ref in result.totals or recipe.ref in result.failures or not recipe.is_active:
            return

        path.add(recipe.ref)
        try:
            for ref in recipe.sub_recipe_ids:
                sub = RecipeStore.find(ref, using)
                if sub is None:
                    continue  # reported by resolve_cost
                if sub.ref in path:
                    raise RecipeValidationError(
                        "CIRCULAR_DEPENDENCY", recipe=recipe.ref, sub_recipe=sub.ref
                    )
                cls._recompute(sub, result, path, using)
                if sub.ref in result.failures:
                    raise RecipeValidationError(
                        "SUB_RECIPE_FAILED",
                        recipe=recipe.ref,
                        sub_recipe=sub.ref,
                        cause=result.failures[sub.ref].code,
                    )
            resolution = resolve_cost(_fresh(recipe.lines), using)
        except RecipeError as exc:
            cls._skip(recipe.ref, recipe.name, exc, result)
            return
        finally:
            path.discard(recipe.ref)

        recipe = RecipeStore.update(
            recipe, using=using, ingredients=resolution.as_json(), total_cost=resolution.total
        )
        result.totals[recipe.ref] = recipe.total_cost

        for variant in VariantStore.for_recipe(recipe, using=using):
            try:
                priced = resolve_variant_cost(
                    _fresh(variant.lines), variant.size_multiplier, variant.base_cost_adjustment, using
                )
            except RecipeError as exc:
                cls._skip(variant.ref, str(variant), exc, result)
                continue
            VariantStore.update(
                variant, using=using, ingredients=priced.as_json(), total_cost=priced.total
            )

    @staticmethod
    def _skip(ref: str, name: str, exc: RecipeError, result: RecomputeResult) -> None:
        logger.warning(
            f"Cost recompute skipped {name}: {exc}",
            extra={"target": ref, "code": exc.code},
        )
        result.failures[ref] = exc
