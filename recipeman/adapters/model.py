"""
Model Inventory Backend.

Implements InventoryBackend on top of any Django model that stores
inventory items. The model and its field names come from settings:

    RECIPEMAN = {
        "INVENTORY_BACKEND": "recipeman.adapters.model.ModelInventoryBackend",
        "INVENTORY_MODEL": "inventory.InventoryItem",
        "INVENTORY_FIELDS": {
            "id": "pk",
            "name": "name",
            "unit": "base_unit",
            "unit_cost": "cost_per_unit",
        },
    }

Field names may traverse JSON/attribute paths with dots
(e.g. "metadata.cost_per_unit").
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from django.apps import apps
from django.core.exceptions import ImproperlyConfigured, ValidationError

from recipeman.conf import DEFAULTS, get_setting
from recipeman.protocols.inventory import InventoryItemInfo

logger = logging.getLogger(__name__)


def _read(obj, path: str):
    """Follow a dotted path through attributes and dict keys."""
    value = obj
    for part in path.split("."):
        if value is None:
            return None
        if isinstance(value, dict):
            value = value.get(part)
        else:
            value = getattr(value, part, None)
    return value


class ModelInventoryBackend:
    """
    InventoryBackend reading from a configured Django model.

    Usage:
        backend = ModelInventoryBackend()
        info = backend.get("42")
    """

    def __init__(self, model=None, fields: dict[str, str] | None = None):
        self._model = model
        self._fields = {**DEFAULTS["INVENTORY_FIELDS"], **(fields or get_setting("INVENTORY_FIELDS"))}

    @property
    def model(self):
        if self._model is None:
            label = get_setting("INVENTORY_MODEL")
            if not label:
                raise ImproperlyConfigured(
                    "RECIPEMAN['INVENTORY_MODEL'] must be set to use ModelInventoryBackend."
                )
            self._model = apps.get_model(label)
        return self._model

    def get(self, item_id) -> InventoryItemInfo | None:
        lookup = {self._fields["id"]: item_id}
        try:
            obj = self.model._default_manager.filter(**lookup).first()
        except (ValueError, ValidationError):
            # Malformed id for the key type (e.g. text for an integer pk)
            logger.debug("Invalid inventory item id: %r", item_id)
            return None
        if obj is None:
            return None

        raw_cost = _read(obj, self._fields["unit_cost"])
        try:
            unit_cost = Decimal(str(raw_cost)) if raw_cost not in (None, "") else None
        except InvalidOperation:
            logger.warning("Inventory item %s has a non-numeric cost: %r", item_id, raw_cost)
            unit_cost = None

        return InventoryItemInfo(
            item_id=str(item_id),
            name=str(_read(obj, self._fields["name"]) or ""),
            unit=str(_read(obj, self._fields["unit"]) or ""),
            unit_cost=unit_cost,
        )
