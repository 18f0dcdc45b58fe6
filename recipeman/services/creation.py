"""
Create a recipe together with its variants as one logical unit.

State machine:

    VALIDATING -> COSTING_BASE -> PERSISTING_BASE
               -> COSTING_VARIANTS -> PERSISTING_VARIANTS -> COMMITTED

FAILED is reachable from every state.

Two write paths, chosen once per call:

- transactional: PERSISTING_BASE .. PERSISTING_VARIANTS run inside one
  transaction.atomic() block; any error rolls all of it back.
- compensating: each write registers an undo (delete, plus the
  simple-history rows the write and the delete produced). On error the
  undos run newest-first (variants, then the base recipe) and the
  original error is re-raised. A failing undo is logged as CRITICAL and
  never replaces the original error.

Variants are priced in COSTING_VARIANTS, after the base recipe has been
written. A variant that cannot be priced (missing inventory item, unit
mismatch, inactive sub-recipe) therefore fails a run that already holds
a write, and the rollback or the undo stack removes it.

Known residual risk (compensating path only): if the process dies between
a write and its undo, the written rows and their history stay behind.
Detecting and removing such orphans needs an out-of-band reconciliation
job.

Usage:
    from recipeman.services.creation import RecipeCreation

    result = RecipeCreation({
        "name": "Margherita",
        "ingredients": [...],
        "variations": [{"name": "Large", "size_multiplier": "2"}],
    }).run()
    result.recipe, result.variants, result.summary
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.db.models import TextChoices
from django.utils.translation import gettext_lazy as _

from recipeman.exceptions import RecipeConflict, RecipeValidationError
from recipeman.models import Recipe, RecipeVariant
from recipeman.results import CreationResult, CreationSummary
from recipeman.serializers import RecipeWithVariantsSerializer, validate_payload
from recipeman.services.costing import CostResolution, resolve_cost, resolve_variant_cost
from recipeman.services.graph import assert_acyclic
from recipeman.models.ingredient import sub_recipe_ids
from recipeman.services.recipes import make_slug, recipe_fields, variant_fields
from recipeman.services.storage import RecipeStore, VariantStore, db_alias, supports_transactions

logger = logging.getLogger(__name__)


class CreationState(TextChoices):
    """Where a RecipeCreation currently is."""

    PENDING = "pending", _("Pending")
    VALIDATING = "validating", _("Validating")
    COSTING_BASE = "costing_base", _("Costing base recipe")
    PERSISTING_BASE = "persisting_base", _("Persisting base recipe")
    COSTING_VARIANTS = "costing_variants", _("Costing variants")
    PERSISTING_VARIANTS = "persisting_variants", _("Persisting variants")
    COMMITTED = "committed", _("Committed")
    FAILED = "failed", _("Failed")


def _duplicate_names(variations: list[dict]) -> list[str]:
    seen: set[str] = set()
    duplicates: list[str] = []
    for variant in variations:
        key = variant["name"].strip().lower()
        if key in seen and key not in duplicates:
            duplicates.append(key)
        seen.add(key)
    return duplicates


class RecipeCreation:
    """
    One create-recipe-with-variants run.

    Instances are single use: build, call run(), read the result.
    """

    def __init__(self, payload: dict, using: str | None = None):
        self.payload = payload
        self.using = db_alias(using)
        self.state = CreationState.PENDING
        self.transactional: bool | None = None
        self.recipe: Recipe | None = None
        self.variants: list[RecipeVariant] = []
        self._compensations: list[tuple[str, Callable[[], object]]] = []
        self._data: dict = {}
        self._slug = ""
        self._base: CostResolution | None = None
        self._priced_variants: list[tuple[dict, CostResolution]] = []

    # ── Public ──

    def run(self) -> CreationResult:
        if self.state != CreationState.PENDING:
            raise RecipeValidationError("CREATION_ALREADY_RUN", state=self.state)

        started = time.monotonic()
        try:
            self._validate()
            self._cost_base()

            self.transactional = supports_transactions(self.using)
            if self.transactional:
                with transaction.atomic(using=self.using):
                    self._persist_all()
            else:
                self._persist_all()
        except Exception as exc:
            self._fail(exc)
            translated = self._translate(exc)
            if translated is exc:
                raise
            raise translated from exc

        self._advance(CreationState.COMMITTED)
        elapsed_ms = int((time.monotonic() - started) * 1000)
        summary = CreationSummary(
            recipe_id=self.recipe.ref,
            recipe_name=self.recipe.name,
            recipe_slug=self.recipe.slug,
            recipe_cost=self.recipe.total_cost,
            variant_count=len(self.variants),
            total_ingredients=len(self.recipe.ingredients),
            processing_time_ms=elapsed_ms,
            transactional=self.transactional,
        )
        logger.info(
            f"Recipe {self.recipe.slug} created with {len(self.variants)} variant(s)",
            extra={
                "recipe": self.recipe.ref,
                "variant_count": len(self.variants),
                "duration_ms": elapsed_ms,
                "transactional": self.transactional,
            },
        )
        return CreationResult(recipe=self.recipe, variants=list(self.variants), summary=summary)

    # ── States ──

    def _advance(self, state: CreationState) -> None:
        logger.debug(f"RecipeCreation {self.state} -> {state}", extra={"slug": self._slug})
        self.state = state

    def _validate(self) -> None:
        self._advance(CreationState.VALIDATING)
        data = validate_payload(RecipeWithVariantsSerializer, self.payload)

        duplicates = _duplicate_names(data["variations"])
        if duplicates:
            raise RecipeValidationError("DUPLICATE_VARIANT_NAME", names=duplicates)

        slug = make_slug(data.get("slug") or data["name"])
        if RecipeStore.slug_exists(slug, using=self.using):
            raise RecipeConflict("SLUG_EXISTS", slug=slug)

        assert_acyclic(None, sub_recipe_ids(data["ingredients"]), self.using)

        self._data = data
        self._slug = slug

    def _cost_base(self) -> None:
        self._advance(CreationState.COSTING_BASE)
        logger.info(
            f"Costing base recipe {self._slug}",
            extra={"ingredient_count": len(self._data["ingredients"])},
        )
        self._base = resolve_cost(self._data["ingredients"], self.using)

    def _persist_all(self) -> None:
        self._persist_base()
        self._cost_variants()
        self._persist_variants()

    def _persist_base(self) -> None:
        self._advance(CreationState.PERSISTING_BASE)
        recipe = RecipeStore.create(
            using=self.using, **recipe_fields(self._data, self._slug, self._base)
        )
        self.recipe = recipe
        self._compensations.append(
            (
                f"recipe {recipe.ref}",
                lambda: RecipeStore.delete(recipe.ref, self.using, purge_history=True),
            )
        )

    def _cost_variants(self) -> None:
        self._advance(CreationState.COSTING_VARIANTS)
        self._priced_variants = [
            (
                variant,
                resolve_variant_cost(
                    variant["ingredients"],
                    variant.get("size_multiplier", 1),
                    variant.get("base_cost_adjustment", 0),
                    self.using,
                ),
            )
            for variant in self._data["variations"]
        ]

    def _persist_variants(self) -> None:
        self._advance(CreationState.PERSISTING_VARIANTS)
        for data, resolution in self._priced_variants:
            variant = VariantStore.create(
                self.recipe, using=self.using, **variant_fields(data, resolution)
            )
            self.variants.append(variant)
            self._compensations.append(
                (
                    f"variant {variant.ref}",
                    lambda v=variant: VariantStore.delete(v.ref, self.using, purge_history=True),
                )
            )

    # ── Failure ──

    def _fail(self, exc: Exception) -> None:
        failed_in = self.state
        self._advance(CreationState.FAILED)

        if self.transactional:
            # transaction.atomic() already rolled back
            logger.error(
                f"Recipe creation aborted in {failed_in}, transaction rolled back: {exc}",
                extra={"slug": self._slug, "state": failed_in},
            )
        elif self._compensations:
            logger.error(
                f"Recipe creation failed in {failed_in}, compensating {len(self._compensations)} write(s): {exc}",
                extra={"slug": self._slug, "state": failed_in},
            )
            self._compensate()
        else:
            logger.info(
                f"Recipe creation rejected in {failed_in}: {exc}",
                extra={"slug": self._slug, "state": failed_in},
            )

        self.recipe = None
        self.variants = []

    def _compensate(self) -> None:
        """Undo writes newest-first; keep going past failures."""
        while self._compensations:
            label, undo = self._compensations.pop()
            try:
                undo()
            except Exception as undo_exc:
                logger.critical(
                    f"Compensation failed for {label}, manual intervention required: {undo_exc}",
                    extra={"slug": self._slug, "target": label},
                    exc_info=True,
                )

    @staticmethod
    def _translate(exc: Exception) -> Exception:
        """Surface database errors in the recipeman taxonomy."""
        if isinstance(exc, IntegrityError):
            return RecipeConflict("DUPLICATE", detail=str(exc))
        if isinstance(exc, DjangoValidationError):
            errors = exc.message_dict if hasattr(exc, "error_dict") else exc.messages
            return RecipeValidationError("INVALID_RECORD", errors=errors)
        return exc
