"""
Inventory Protocol - Interface for inventory item lookups.

Recipeman defines this protocol. The host project's inventory system
implements it. Recipeman only ever reads an item's name, canonical unit
and unit cost; stock levels and item storage stay outside.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class InventoryItemInfo:
    """Inventory item as seen by the cost resolver."""

    item_id: str
    name: str
    unit: str
    unit_cost: Decimal | None = None


@runtime_checkable
class InventoryBackend(Protocol):
    """
    Protocol for inventory lookups.

    Implementations resolve an item id into an InventoryItemInfo,
    or None when the item does not exist.
    """

    def get(self, item_id: str) -> InventoryItemInfo | None:
        """
        Get inventory item information.

        Args:
            item_id: Inventory item identifier

        Returns:
            InventoryItemInfo or None if not found
        """
        ...
