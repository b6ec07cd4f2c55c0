"""
Ledgerman: Inventory ledger and fulfillment state machine.

Receipts, deliveries and adjustments move products between warehouse
locations. Stock is derived from the move ledger, never stored.

Uso:
    from ledgerman import ledger, LedgerError

    ledger.create_move('DELIVERY', 'WH', lines)   # READY or WAITING
    ledger.transition_status(move, 'DONE')
    ledger.compute_stock(product)                 # on_hand, reserved, free_to_use
    ledger.reconcile_waiting_deliveries()
"""


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name == 'ledger':
        from ledgerman.service import Ledger
        return Ledger
    elif name == 'LedgerError':
        from ledgerman.exceptions import LedgerError
        return LedgerError
    elif name == 'TransitionError':
        from ledgerman.exceptions import TransitionError
        return TransitionError
    elif name in ('MoveType', 'MoveStatus'):
        from ledgerman.models import enums
        return getattr(enums, name)
    elif name in ('Warehouse', 'Location', 'Product', 'InventoryMove',
                  'InventoryMoveLine', 'ReferenceCounter'):
        from ledgerman import models
        return getattr(models, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'ledger',
    'LedgerError',
    'TransitionError',
    'MoveType',
    'MoveStatus',
    'Warehouse',
    'Location',
    'Product',
    'InventoryMove',
    'InventoryMoveLine',
    'ReferenceCounter',
]

__version__ = '0.1.0'
