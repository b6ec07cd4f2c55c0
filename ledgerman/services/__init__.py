"""
Ledger services: modular organization of ledger operations.

    from ledgerman.services import StockQueries, ReferenceSequence, MoveTransitions, ...
"""

from ledgerman.services.documents import MoveDocuments
from ledgerman.services.queries import StockQueries
from ledgerman.services.reconciliation import Reconciliation
from ledgerman.services.references import ReferenceSequence
from ledgerman.services.transitions import MoveTransitions

__all__ = [
    'StockQueries',
    'ReferenceSequence',
    'MoveTransitions',
    'MoveDocuments',
    'Reconciliation',
]
