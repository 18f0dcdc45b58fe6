"""
Storage service -- recipe and variant persistence.

Thin data-access layer the engine reads and writes through. Every
lookup either returns the stored model or raises RecipeNotFound, so
callers never have to check for None.

All methods are @classmethod and take an optional ``using`` alias so
the host project can route tenants to different databases.
"""

from __future__ import annotations

import logging
import uuid

from django.core.paginator import EmptyPage, Paginator
from django.db import connections, router
from django.db.models import Q

from recipeman.conf import get_setting
from recipeman.exceptions import RecipeNotFound, RecipeValidationError
from recipeman.models import Recipe, RecipeVariant

logger = logging.getLogger(__name__)


def normalize_ref(ref) -> str:
    """Canonical string form of a recipe/variant reference."""
    if isinstance(ref, (Recipe, RecipeVariant)):
        return ref.ref
    if isinstance(ref, uuid.UUID):
        return str(ref)
    text = str(ref).strip()
    try:
        return str(uuid.UUID(text))
    except ValueError:
        return text


def _as_uuid(ref) -> uuid.UUID | None:
    try:
        return uuid.UUID(normalize_ref(ref))
    except ValueError:
        return None


def db_alias(using: str | None = None, model=Recipe) -> str:
    return using or router.db_for_write(model)


def supports_transactions(using: str | None = None) -> bool:
    """
    Does this backend support multi-statement transactions right now?

    The TRANSACTIONS setting wins when set; otherwise the connection is
    asked (MySQL/MyISAM and some proxies answer False).
    """
    forced = get_setting("TRANSACTIONS")
    if forced is not None:
        return bool(forced)
    return bool(connections[db_alias(using)].features.supports_transactions)


RECIPE_SORT_FIELDS = ("name", "slug", "code", "type", "total_cost", "created_at", "updated_at")
VARIANT_SORT_FIELDS = ("name", "type", "size_multiplier", "total_cost", "created_at", "updated_at")


def as_bool(value) -> bool | None:
    """None stays None; "true"/"1"/"yes" (any case) and True are true."""
    if value is None or isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


def ordering(sort: str, order: str, allowed) -> list[str]:
    if sort not in allowed:
        raise RecipeValidationError("INVALID_SORT", sort=sort, allowed=list(allowed))
    prefix = "" if order == "asc" else "-"
    # pk breaks ties so pages never overlap
    return [f"{prefix}{sort}", f"{prefix}pk"]


def paginate(queryset, page=1, limit=None) -> dict:
    """
    Slice an ordered queryset into one page.

    Returns:
        Dict with items, count (all matches), page and limit. A page past
        the end has no items.
    """
    try:
        page = int(page)
        limit = int(limit if limit is not None else get_setting("PAGE_SIZE"))
    except (TypeError, ValueError):
        raise RecipeValidationError("INVALID_PAGE", page=page, limit=limit)
    if page < 1 or limit < 1:
        raise RecipeValidationError("INVALID_PAGE", page=page, limit=limit)
    limit = min(limit, get_setting("MAX_PAGE_SIZE"))

    paginator = Paginator(queryset, limit)
    try:
        items = list(paginator.page(page).object_list)
    except EmptyPage:
        items = []
    return {"items": items, "count": paginator.count, "page": page, "limit": limit}


def _purge_history(model, pk, alias: str) -> None:
    """Drop the audit rows of a row that was written and then undone."""
    model.history.model._default_manager.using(alias).filter(id=pk).delete()


class RecipeStore:
    """Recipe persistence."""

    @classmethod
    def queryset(cls, using: str | None = None):
        return Recipe.objects.using(db_alias(using))

    @classmethod
    def find(cls, ref, using: str | None = None) -> Recipe | None:
        """Look up by uuid or slug; None when absent."""
        if isinstance(ref, Recipe):
            return ref
        qs = cls.queryset(using)
        key = _as_uuid(ref)
        if key is not None:
            return qs.filter(uuid=key).first()
        return qs.filter(slug=str(ref).strip()).first()

    @classmethod
    def get(cls, ref, using: str | None = None) -> Recipe:
        recipe = cls.find(ref, using)
        if recipe is None:
            raise RecipeNotFound("RECIPE_NOT_FOUND", recipe=normalize_ref(ref))
        return recipe

    @classmethod
    def slug_exists(cls, slug: str, exclude=None, using: str | None = None) -> bool:
        qs = cls.queryset(using).filter(slug=slug)
        if exclude is not None:
            qs = qs.exclude(pk=exclude.pk)
        return qs.exists()

    @classmethod
    def create(cls, using: str | None = None, **fields) -> Recipe:
        recipe = Recipe(**fields)
        recipe.save(using=db_alias(using))
        logger.info(
            f"Created recipe {recipe.slug}",
            extra={"recipe": recipe.ref, "total_cost": str(recipe.total_cost)},
        )
        return recipe

    @classmethod
    def update(cls, ref, using: str | None = None, **patch) -> Recipe:
        recipe = cls.get(ref, using)
        for field, value in patch.items():
            setattr(recipe, field, value)
        recipe.save(using=db_alias(using))
        return recipe

    @classmethod
    def search(
        cls,
        q: str | None = None,
        type: str | None = None,
        is_active=None,
        sort: str = "created_at",
        order: str = "desc",
        using: str | None = None,
    ):
        """Filtered, ordered queryset; ``q`` matches name, display name, slug or code."""
        qs = cls.queryset(using)
        if q:
            qs = qs.filter(
                Q(name__icontains=q)
                | Q(custom_name__icontains=q)
                | Q(slug__icontains=q)
                | Q(code__icontains=q)
            )
        if type:
            qs = qs.filter(type=type)
        is_active = as_bool(is_active)
        if is_active is not None:
            qs = qs.filter(is_active=is_active)
        return qs.order_by(*ordering(sort, order, RECIPE_SORT_FIELDS))

    @classmethod
    def delete(cls, ref, using: str | None = None, purge_history: bool = False) -> Recipe:
        recipe = cls.get(ref, using)
        pk, alias = recipe.pk, db_alias(using)
        recipe.delete(using=alias)
        if purge_history:
            _purge_history(Recipe, pk, alias)
        logger.info(f"Deleted recipe {recipe.slug}", extra={"recipe": normalize_ref(ref)})
        return recipe


class VariantStore:
    """RecipeVariant persistence, scoped by recipe."""

    @classmethod
    def queryset(cls, using: str | None = None):
        return RecipeVariant.objects.using(db_alias(using, RecipeVariant)).select_related("recipe")

    @classmethod
    def get(cls, ref, using: str | None = None) -> RecipeVariant:
        if isinstance(ref, RecipeVariant):
            return ref
        key = _as_uuid(ref)
        variant = cls.queryset(using).filter(uuid=key).first() if key else None
        if variant is None:
            raise RecipeNotFound("VARIANT_NOT_FOUND", variant=normalize_ref(ref))
        return variant

    @classmethod
    def for_recipe(cls, recipe: Recipe, active_only: bool = False, using: str | None = None):
        qs = cls.queryset(using).filter(recipe=recipe)
        if active_only:
            qs = qs.filter(is_active=True)
        return qs

    @classmethod
    def name_taken(
        cls,
        recipe: Recipe,
        name: str,
        exclude: RecipeVariant | None = None,
        using: str | None = None,
    ) -> bool:
        """Case-insensitive check among the recipe's active variants."""
        qs = cls.for_recipe(recipe, active_only=True, using=using).filter(name__iexact=name.strip())
        if exclude is not None:
            qs = qs.exclude(pk=exclude.pk)
        return qs.exists()

    @classmethod
    def create(cls, recipe: Recipe, using: str | None = None, **fields) -> RecipeVariant:
        variant = RecipeVariant(recipe=recipe, **fields)
        variant.save(using=db_alias(using, RecipeVariant))
        logger.info(
            f"Created variant {variant.name} for recipe {recipe.slug}",
            extra={"recipe": recipe.ref, "variant": variant.ref},
        )
        return variant

    @classmethod
    def update(cls, ref, using: str | None = None, **patch) -> RecipeVariant:
        variant = cls.get(ref, using)
        for field, value in patch.items():
            setattr(variant, field, value)
        variant.save(using=db_alias(using, RecipeVariant))
        return variant

    @classmethod
    def search(
        cls,
        q: str | None = None,
        recipe: Recipe | None = None,
        type: str | None = None,
        is_active=None,
        sort: str = "created_at",
        order: str = "desc",
        using: str | None = None,
    ):
        """Filtered, ordered queryset; ``q`` matches name or description."""
        qs = cls.queryset(using)
        if q:
            qs = qs.filter(Q(name__icontains=q) | Q(description__icontains=q))
        if recipe is not None:
            qs = qs.filter(recipe=recipe)
        if type:
            qs = qs.filter(type=type)
        is_active = as_bool(is_active)
        if is_active is not None:
            qs = qs.filter(is_active=is_active)
        return qs.order_by(*ordering(sort, order, VARIANT_SORT_FIELDS))

    @classmethod
    def delete(cls, ref, using: str | None = None, purge_history: bool = False) -> RecipeVariant:
        variant = cls.get(ref, using)
        pk, alias = variant.pk, db_alias(using, RecipeVariant)
        variant.delete(using=alias)
        if purge_history:
            _purge_history(RecipeVariant, pk, alias)
        logger.info(f"Deleted variant {variant.name}", extra={"variant": normalize_ref(ref)})
        return variant
