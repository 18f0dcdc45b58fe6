"""
Recipeman Protocols.

Defines interfaces for external integrations.
"""

from recipeman.protocols.inventory import InventoryBackend, InventoryItemInfo

__all__ = [
    "InventoryBackend",
    "InventoryItemInfo",
]
