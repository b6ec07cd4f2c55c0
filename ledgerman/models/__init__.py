"""
Ledgerman Models.

Core models for the inventory ledger:
- Warehouse / Location: Where stock exists
- Product: What is stocked (stock levels derived, never stored)
- InventoryMove: Receipt, Delivery or Adjustment document
- InventoryMoveLine: Product/quantity/location entries of a move
- ReferenceCounter: Sequence state for document references
"""

from ledgerman.models.counter import ReferenceCounter
from ledgerman.models.enums import TYPE_CODES, MoveStatus, MoveType
from ledgerman.models.move import InventoryMove, InventoryMoveLine
from ledgerman.models.product import Product
from ledgerman.models.warehouse import Location, Warehouse

__all__ = [
    'MoveType',
    'MoveStatus',
    'TYPE_CODES',
    'Warehouse',
    'Location',
    'Product',
    'InventoryMove',
    'InventoryMoveLine',
    'ReferenceCounter',
]
