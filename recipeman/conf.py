"""
Recipeman Settings.

Supports two formats (dict takes priority):

    # Option 1: Dict
    RECIPEMAN = {
        "INVENTORY_BACKEND": "recipeman.adapters.model.ModelInventoryBackend",
        "INVENTORY_MODEL": "inventory.InventoryItem",
    }

    # Option 2: Flat
    RECIPEMAN_INVENTORY_BACKEND = "recipeman.adapters.model.ModelInventoryBackend"
    RECIPEMAN_TRANSACTIONS = False

TRANSACTIONS:
    None  -> ask the database connection (features.supports_transactions)
    True  -> always write inside transaction.atomic()
    False -> always use compensating deletes
"""

import threading

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string


# ── Defaults ──

DEFAULTS = {
    "INVENTORY_BACKEND": None,
    "INVENTORY_MODEL": None,
    "INVENTORY_FIELDS": {
        "id": "pk",
        "name": "name",
        "unit": "base_unit",
        "unit_cost": "cost_per_unit",
    },
    "TRANSACTIONS": None,
    "MAX_VARIANTS": 100,
    "PAGE_SIZE": 20,
    "MAX_PAGE_SIZE": 100,
}


# ── Accessors ──

_sentinel = object()


def get_setting(name, default=_sentinel):
    """
    Get a recipeman setting.

    Looks up in order:
    1. RECIPEMAN dict (e.g. RECIPEMAN = {"TRANSACTIONS": False})
    2. Flat setting (e.g. RECIPEMAN_TRANSACTIONS = False)
    3. DEFAULTS
    """
    recipeman_dict = getattr(settings, "RECIPEMAN", {})
    if name in recipeman_dict:
        return recipeman_dict[name]

    flat_value = getattr(settings, f"RECIPEMAN_{name}", _sentinel)
    if flat_value is not _sentinel:
        return flat_value

    if default is not _sentinel:
        return default

    return DEFAULTS.get(name)


_inventory_backend_lock = threading.Lock()
_inventory_backend_instance = None


def get_inventory_backend():
    """
    Return the configured inventory backend instance.

    The inventory backend resolves an item id into its canonical unit
    and unit cost. Recipeman never stores inventory itself.

    Raises:
        ImproperlyConfigured: If INVENTORY_BACKEND is missing or cannot be imported
    """
    global _inventory_backend_instance

    if _inventory_backend_instance is None:
        with _inventory_backend_lock:
            if _inventory_backend_instance is None:  # double-checked
                path = get_setting("INVENTORY_BACKEND")
                if not path:
                    raise ImproperlyConfigured(
                        "RECIPEMAN['INVENTORY_BACKEND'] must be configured. "
                        "Example: 'recipeman.adapters.model.ModelInventoryBackend'"
                    )
                try:
                    _inventory_backend_instance = import_string(path)()
                except ImportError as e:
                    raise ImproperlyConfigured(
                        f"Failed to import inventory backend '{path}': {e}"
                    ) from e

    return _inventory_backend_instance


def reset_inventory_backend() -> None:
    """Reset singleton (for tests)."""
    global _inventory_backend_instance
    _inventory_backend_instance = None
