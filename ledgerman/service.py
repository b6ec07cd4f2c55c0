"""
Ledger Service: The single public interface for all ledger operations.

Usage:
    from ledgerman import ledger, LedgerError

    outcome = ledger.create_move('RECEIPT', 'WH', [
        {'product': widget, 'quantity': 10, 'to_location': shelf},
    ])
    ledger.transition_status(outcome.move, 'READY')
    ledger.transition_status(outcome.move, 'DONE')
    ledger.compute_stock(widget)  # StockSnapshot(on_hand=10, reserved=0)

Parameter convention: (move_type, warehouse, lines, ...) for creation,
(move, target) for transitions. Moves and products may be given as
instances or primary keys.
"""

from ledgerman.services import (
    MoveDocuments,
    MoveTransitions,
    Reconciliation,
    ReferenceSequence,
    StockQueries,
)


class Ledger(StockQueries, ReferenceSequence, MoveTransitions, MoveDocuments, Reconciliation):
    """
    Single interface for all ledger operations.

    IMPORTANT: All state-changing methods use atomic transactions
    with appropriate locking. See each method's docstring.
    """
