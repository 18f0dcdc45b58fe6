"""
Refresh recipe and variant cost snapshots.

Line snapshots (name, unit cost, total) are taken when a recipe is
written and go stale when inventory prices change. This command reprices
them, sub-recipes first.

Usage:
    python manage.py recompute_recipe_costs
    python manage.py recompute_recipe_costs pizza-base margherita
    python manage.py recompute_recipe_costs --database tenant_a
"""

from django.core.management.base import BaseCommand, CommandError

from recipeman.exceptions import RecipeError


class Command(BaseCommand):
    help = "Recomputes recipe and variant costs from current inventory prices"

    def add_arguments(self, parser):
        parser.add_argument(
            "recipes",
            nargs="*",
            help="Recipe uuids or slugs (default: every active recipe)",
        )
        parser.add_argument(
            "--database",
            default=None,
            help="Database alias to use",
        )

    def handle(self, *args, **options):
        from recipeman.service import Recipes

        refs = options["recipes"] or None
        try:
            result = Recipes.recompute_costs(refs, using=options["database"])
        except RecipeError as e:
            raise CommandError(str(e)) from e

        for ref, total in result.totals.items():
            self.stdout.write(f"{ref}: {total}")
        for ref, error in result.failures.items():
            self.stderr.write(self.style.WARNING(f"{ref}: skipped, {error}"))

        self.stdout.write(self.style.SUCCESS(f"✓ {len(result.totals)} recipe(s) recomputed"))
        if result.failures:
            self.stdout.write(self.style.WARNING(f"⚠ {len(result.failures)} skipped, see above"))
