import uuid
from decimal import Decimal

import django.db.models.deletion
import django.db.models.functions.text
import simple_history.models
from django.conf import settings
from django.db import migrations, models


RECIPE_TYPES = [("sub", "Sub-recipe"), ("final", "Final")]
VARIANT_TYPES = [
    ("size", "Size"),
    ("flavor", "Flavor"),
    ("crust", "Crust"),
    ("style", "Style"),
    ("custom", "Custom"),
]
HISTORY_TYPES = [("+", "Created"), ("~", "Changed"), ("-", "Deleted")]


def history_fields():
    return [
        ("history_id", models.AutoField(primary_key=True, serialize=False)),
        ("history_date", models.DateTimeField(db_index=True)),
        ("history_change_reason", models.CharField(max_length=100, null=True)),
        ("history_type", models.CharField(choices=HISTORY_TYPES, max_length=1)),
        (
            "history_user",
            models.ForeignKey(
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="+",
                to=settings.AUTH_USER_MODEL,
            ),
        ),
    ]


def history_options(name, plural):
    return {
        "verbose_name": f"historical {name}",
        "verbose_name_plural": f"historical {plural}",
        "ordering": ("-history_date", "-history_id"),
        "get_latest_by": ("history_date", "history_id"),
    }


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Recipe",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("uuid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True, verbose_name="UUID")),
                ("name", models.CharField(max_length=160, verbose_name="Name")),
                ("custom_name", models.CharField(blank=True, max_length=160, verbose_name="Display name")),
                ("slug", models.SlugField(max_length=180, unique=True, verbose_name="Slug")),
                ("code", models.CharField(blank=True, help_text="Optional short code", max_length=50, verbose_name="Code")),
                ("description", models.TextField(blank=True, verbose_name="Description")),
                ("type", models.CharField(choices=RECIPE_TYPES, default="final", max_length=10, verbose_name="Type")),
                (
                    "ingredients",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text="Ingredient lines with name/cost snapshots",
                        verbose_name="Ingredients",
                    ),
                ),
                (
                    "output_quantity",
                    models.DecimalField(
                        decimal_places=3,
                        default=Decimal("1"),
                        help_text="Output units produced by one execution of the recipe",
                        max_digits=10,
                        verbose_name="Yield",
                    ),
                ),
                ("total_cost", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=14, verbose_name="Total cost")),
                ("is_active", models.BooleanField(default=True, verbose_name="Active")),
                ("metadata", models.JSONField(blank=True, default=dict, verbose_name="Metadata")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
            ],
            options={
                "verbose_name": "Recipe",
                "verbose_name_plural": "Recipes",
                "db_table": "recipeman_recipe",
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["name"], name="recipeman_r_name_7c1e2a_idx"),
                    models.Index(fields=["is_active"], name="recipeman_r_is_acti_3f0b9d_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="RecipeVariant",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("uuid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True, verbose_name="UUID")),
                ("name", models.CharField(max_length=160, verbose_name="Name")),
                ("description", models.TextField(blank=True, verbose_name="Description")),
                ("type", models.CharField(choices=VARIANT_TYPES, default="custom", max_length=10, verbose_name="Type")),
                ("size_multiplier", models.DecimalField(decimal_places=3, default=Decimal("1"), max_digits=8, verbose_name="Size multiplier")),
                (
                    "base_cost_adjustment",
                    models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=14, verbose_name="Base cost adjustment"),
                ),
                ("crust_type", models.CharField(blank=True, max_length=60, verbose_name="Crust type")),
                (
                    "ingredients",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text="Additional/override lines for this variant only",
                        verbose_name="Ingredients",
                    ),
                ),
                ("total_cost", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=14, verbose_name="Total cost")),
                ("is_active", models.BooleanField(default=True, verbose_name="Active")),
                ("metadata", models.JSONField(blank=True, default=dict, verbose_name="Metadata")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                (
                    "recipe",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="variants",
                        to="recipeman.recipe",
                        verbose_name="Recipe",
                    ),
                ),
            ],
            options={
                "verbose_name": "Recipe variant",
                "verbose_name_plural": "Recipe variants",
                "db_table": "recipeman_recipe_variant",
                "ordering": ["recipe", "name"],
                "indexes": [
                    models.Index(fields=["recipe", "is_active"], name="recipeman_r_recipe__5d2c81_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        django.db.models.functions.text.Lower("name"),
                        models.F("recipe"),
                        condition=models.Q(is_active=True),
                        name="recipeman_variant_active_name_unique",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="HistoricalRecipe",
            fields=[
                ("id", models.BigIntegerField(auto_created=True, blank=True, db_index=True, verbose_name="ID")),
                ("uuid", models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, verbose_name="UUID")),
                ("name", models.CharField(max_length=160, verbose_name="Name")),
                ("custom_name", models.CharField(blank=True, max_length=160, verbose_name="Display name")),
                ("slug", models.SlugField(max_length=180, verbose_name="Slug")),
                ("code", models.CharField(blank=True, help_text="Optional short code", max_length=50, verbose_name="Code")),
                ("description", models.TextField(blank=True, verbose_name="Description")),
                ("type", models.CharField(choices=RECIPE_TYPES, default="final", max_length=10, verbose_name="Type")),
                (
                    "ingredients",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text="Ingredient lines with name/cost snapshots",
                        verbose_name="Ingredients",
                    ),
                ),
                (
                    "output_quantity",
                    models.DecimalField(
                        decimal_places=3,
                        default=Decimal("1"),
                        help_text="Output units produced by one execution of the recipe",
                        max_digits=10,
                        verbose_name="Yield",
                    ),
                ),
                ("total_cost", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=14, verbose_name="Total cost")),
                ("is_active", models.BooleanField(default=True, verbose_name="Active")),
                ("metadata", models.JSONField(blank=True, default=dict, verbose_name="Metadata")),
                ("created_at", models.DateTimeField(blank=True, editable=False, verbose_name="created at")),
                ("updated_at", models.DateTimeField(blank=True, editable=False, verbose_name="updated at")),
                *history_fields(),
            ],
            options=history_options("Recipe", "Recipes"),
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
        migrations.CreateModel(
            name="HistoricalRecipeVariant",
            fields=[
                ("id", models.BigIntegerField(auto_created=True, blank=True, db_index=True, verbose_name="ID")),
                ("uuid", models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, verbose_name="UUID")),
                ("name", models.CharField(max_length=160, verbose_name="Name")),
                ("description", models.TextField(blank=True, verbose_name="Description")),
                ("type", models.CharField(choices=VARIANT_TYPES, default="custom", max_length=10, verbose_name="Type")),
                ("size_multiplier", models.DecimalField(decimal_places=3, default=Decimal("1"), max_digits=8, verbose_name="Size multiplier")),
                (
                    "base_cost_adjustment",
                    models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=14, verbose_name="Base cost adjustment"),
                ),
                ("crust_type", models.CharField(blank=True, max_length=60, verbose_name="Crust type")),
                (
                    "ingredients",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text="Additional/override lines for this variant only",
                        verbose_name="Ingredients",
                    ),
                ),
                ("total_cost", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=14, verbose_name="Total cost")),
                ("is_active", models.BooleanField(default=True, verbose_name="Active")),
                ("metadata", models.JSONField(blank=True, default=dict, verbose_name="Metadata")),
                ("created_at", models.DateTimeField(blank=True, editable=False, verbose_name="created at")),
                ("updated_at", models.DateTimeField(blank=True, editable=False, verbose_name="updated at")),
                (
                    "recipe",
                    models.ForeignKey(
                        blank=True,
                        db_constraint=False,
                        null=True,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="+",
                        to="recipeman.recipe",
                        verbose_name="Recipe",
                    ),
                ),
                *history_fields(),
            ],
            options=history_options("Recipe variant", "Recipe variants"),
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
    ]
