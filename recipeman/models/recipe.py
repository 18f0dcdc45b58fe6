"""
Recipe and RecipeVariant models.

Recipe = ordered list of ingredient lines (inventory items or sub-recipes)
plus a yield. RecipeVariant = size/flavor/crust variation of a recipe with
its own extra lines, a size multiplier and a flat cost adjustment.

Both keep a denormalized ``total_cost`` that the services recompute
whenever the ingredient lines change.
"""

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models.functions import Lower
from django.utils.translation import gettext_lazy as _
from simple_history.models import HistoricalRecords

from recipeman.models.ingredient import IngredientLine, parse_lines, sub_recipe_ids

COST_PLACES = Decimal("0.0001")


class RecipeType(models.TextChoices):
    """Whether a recipe is sold on its own or only used inside others."""

    SUB = "sub", _("Sub-recipe")
    FINAL = "final", _("Final")


class VariantType(models.TextChoices):
    SIZE = "size", _("Size")
    FLAVOR = "flavor", _("Flavor")
    CRUST = "crust", _("Crust")
    STYLE = "style", _("Style")
    CUSTOM = "custom", _("Custom")


def _clean_ingredients(value) -> None:
    if not isinstance(value, list):
        raise ValidationError({"ingredients": _("Must be a list of ingredient lines.")})
    for i, line in enumerate(value):
        if not isinstance(line, dict):
            raise ValidationError({"ingredients": _("Line %(n)s must be an object.") % {"n": i + 1}})


class Recipe(models.Model):
    """
    Restaurant recipe.

    Defines:
    - Ingredient lines (inventory items and sub-recipes)
    - Yield (output_quantity) per full execution
    - Total cost snapshot
    """

    # UUID for external references (ingredient lines point here)
    uuid = models.UUIDField(
        default=uuid.uuid4,
        editable=False,
        unique=True,
        verbose_name=_("UUID"),
    )

    # Identification
    name = models.CharField(
        max_length=160,
        verbose_name=_("Name"),
    )
    custom_name = models.CharField(
        max_length=160,
        blank=True,
        verbose_name=_("Display name"),
    )
    slug = models.SlugField(
        unique=True,
        max_length=180,
        verbose_name=_("Slug"),
    )
    code = models.CharField(
        max_length=50,
        blank=True,
        verbose_name=_("Code"),
        help_text=_("Optional short code"),
    )
    description = models.TextField(
        blank=True,
        verbose_name=_("Description"),
    )
    type = models.CharField(
        max_length=10,
        choices=RecipeType.choices,
        default=RecipeType.FINAL,
        verbose_name=_("Type"),
    )

    ingredients = models.JSONField(
        default=list,
        blank=True,
        verbose_name=_("Ingredients"),
        help_text=_("Ingredient lines with name/cost snapshots"),
    )

    output_quantity = models.DecimalField(
        max_digits=10,
        decimal_places=3,
        default=Decimal("1"),
        verbose_name=_("Yield"),
        help_text=_("Output units produced by one execution of the recipe"),
    )
    total_cost = models.DecimalField(
        max_digits=14,
        decimal_places=4,
        default=Decimal("0"),
        verbose_name=_("Total cost"),
    )

    is_active = models.BooleanField(
        default=True,
        verbose_name=_("Active"),
    )

    metadata = models.JSONField(
        default=dict,
        blank=True,
        verbose_name=_("Metadata"),
    )

    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("created at"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("updated at"))

    history = HistoricalRecords()

    class Meta:
        db_table = "recipeman_recipe"
        verbose_name = _("Recipe")
        verbose_name_plural = _("Recipes")
        ordering = ["name"]
        indexes = [
            models.Index(fields=["name"], name="recipeman_r_name_7c1e2a_idx"),
            models.Index(fields=["is_active"], name="recipeman_r_is_acti_3f0b9d_idx"),
        ]

    def clean(self):
        super().clean()
        if self.output_quantity is not None and self.output_quantity <= 0:
            raise ValidationError({"output_quantity": _("Must be greater than zero.")})
        _clean_ingredients(self.ingredients)

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return self.name

    @property
    def ref(self) -> str:
        """Id used by ingredient lines to reference this recipe."""
        return str(self.uuid)

    @property
    def lines(self) -> list[IngredientLine]:
        return parse_lines(self.ingredients)

    @property
    def sub_recipe_ids(self) -> list[str]:
        return sub_recipe_ids(self.lines)


class RecipeVariant(models.Model):
    """
    Variation of a recipe (size, flavor, crust...).

    Cost:
        total_cost = sum(own lines) * size_multiplier + base_cost_adjustment

    The base recipe's lines are NOT included; a variant without lines
    costs exactly its adjustment.
    """

    uuid = models.UUIDField(
        default=uuid.uuid4,
        editable=False,
        unique=True,
        verbose_name=_("UUID"),
    )

    recipe = models.ForeignKey(
        Recipe,
        on_delete=models.CASCADE,
        related_name="variants",
        verbose_name=_("Recipe"),
    )

    name = models.CharField(
        max_length=160,
        verbose_name=_("Name"),
    )
    description = models.TextField(
        blank=True,
        verbose_name=_("Description"),
    )
    type = models.CharField(
        max_length=10,
        choices=VariantType.choices,
        default=VariantType.CUSTOM,
        verbose_name=_("Type"),
    )

    # e.g. Large = 2, Medium = 1.5
    size_multiplier = models.DecimalField(
        max_digits=8,
        decimal_places=3,
        default=Decimal("1"),
        verbose_name=_("Size multiplier"),
    )
    # Packaging, fixed labor... may be negative
    base_cost_adjustment = models.DecimalField(
        max_digits=14,
        decimal_places=4,
        default=Decimal("0"),
        verbose_name=_("Base cost adjustment"),
    )
    crust_type = models.CharField(
        max_length=60,
        blank=True,
        verbose_name=_("Crust type"),
    )

    ingredients = models.JSONField(
        default=list,
        blank=True,
        verbose_name=_("Ingredients"),
        help_text=_("Additional/override lines for this variant only"),
    )
    total_cost = models.DecimalField(
        max_digits=14,
        decimal_places=4,
        default=Decimal("0"),
        verbose_name=_("Total cost"),
    )

    is_active = models.BooleanField(
        default=True,
        verbose_name=_("Active"),
    )
    metadata = models.JSONField(
        default=dict,
        blank=True,
        verbose_name=_("Metadata"),
    )

    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("created at"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("updated at"))

    history = HistoricalRecords()

    class Meta:
        db_table = "recipeman_recipe_variant"
        verbose_name = _("Recipe variant")
        verbose_name_plural = _("Recipe variants")
        ordering = ["recipe", "name"]
        indexes = [
            models.Index(fields=["recipe", "is_active"], name="recipeman_r_recipe__5d2c81_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                Lower("name"),
                "recipe",
                condition=models.Q(is_active=True),
                name="recipeman_variant_active_name_unique",
            ),
        ]

    def clean(self):
        super().clean()
        if self.size_multiplier is not None and self.size_multiplier <= 0:
            raise ValidationError({"size_multiplier": _("Must be greater than zero.")})
        if not (self.name or "").strip():
            raise ValidationError({"name": _("Name is required.")})
        _clean_ingredients(self.ingredients)

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.recipe.name} / {self.name}"

    @property
    def ref(self) -> str:
        return str(self.uuid)

    @property
    def lines(self) -> list[IngredientLine]:
        return parse_lines(self.ingredients)
