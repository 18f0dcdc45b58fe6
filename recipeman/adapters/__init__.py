"""
Recipeman Adapters.

Implementations of protocols for external systems.
"""

from recipeman.adapters.memory import DictInventoryBackend
from recipeman.adapters.model import ModelInventoryBackend

__all__ = [
    "DictInventoryBackend",
    "ModelInventoryBackend",
]
