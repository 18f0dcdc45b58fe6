"""
In-memory Inventory Backend -- items held in a plain dict.

Use this adapter for development, fixtures or tests when the real
inventory system is not available.

Configuration:
    RECIPEMAN = {
        "INVENTORY_BACKEND": "recipeman.adapters.memory.DictInventoryBackend",
    }

    from recipeman.conf import get_inventory_backend

    get_inventory_backend().add("dough", name="Dough", unit="g", unit_cost="0.01")
"""

from __future__ import annotations

from decimal import Decimal

from recipeman.protocols.inventory import InventoryItemInfo


class DictInventoryBackend:
    """
    Dict-backed implementation of the InventoryBackend protocol.

    Items are keyed by their string id.
    """

    def __init__(self, items: dict[str, InventoryItemInfo] | None = None):
        self._items: dict[str, InventoryItemInfo] = dict(items or {})

    def add(self, item_id, name: str, unit: str, unit_cost=None) -> InventoryItemInfo:
        """Register (or replace) an item."""
        info = InventoryItemInfo(
            item_id=str(item_id),
            name=name,
            unit=unit,
            unit_cost=Decimal(str(unit_cost)) if unit_cost is not None else None,
        )
        self._items[info.item_id] = info
        return info

    def remove(self, item_id) -> None:
        self._items.pop(str(item_id), None)

    def clear(self) -> None:
        self._items.clear()

    def get(self, item_id) -> InventoryItemInfo | None:
        return self._items.get(str(item_id))
