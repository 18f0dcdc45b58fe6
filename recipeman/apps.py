"""
Django Recipeman app configuration.
"""

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class RecipemanConfig(AppConfig):
    """Recipeman application configuration."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "recipeman"
    verbose_name = _("Recipes")
