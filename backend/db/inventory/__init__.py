"""
Inventory (single location).

Models:
- InventoryItem (named stock; recipes join on the name)
- InventoryMovement (append-only deltas written alongside every stock change)
"""

from .item import InventoryItem
from .movement import InventoryMovement

__all__ = ["InventoryItem", "InventoryMovement"]
