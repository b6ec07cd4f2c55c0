"""
Move transitions: the document state machine.

The legal moves are a closed table per move type; check_transition() is a
pure function over it. MoveTransitions applies a transition to a locked
document, gating delivery readiness on stock computed inside the same
transaction.

Rejections (INVALID_TRANSITION, STOCK_SHORTFALL) are returned inside a
MoveOutcome, never raised.
"""

import logging

from django.db import transaction

from ledgerman.exceptions import LedgerError, TransitionError
from ledgerman.models.enums import MoveStatus, MoveType
from ledgerman.models.move import InventoryMove
from ledgerman.models.product import Product
from ledgerman.results import MoveOutcome, StockCheck
from ledgerman.services.queries import StockQueries, as_pk

logger = logging.getLogger('ledgerman')

# move_type -> current status -> allowed targets. DONE never appears as a
# key: it is terminal for every type.
TRANSITIONS = {
    MoveType.RECEIPT: {
        MoveStatus.DRAFT: (MoveStatus.READY,),
        MoveStatus.READY: (MoveStatus.DONE,),
    },
    MoveType.DELIVERY: {
        MoveStatus.DRAFT: (MoveStatus.READY, MoveStatus.WAITING),
        MoveStatus.WAITING: (MoveStatus.READY,),
        MoveStatus.READY: (MoveStatus.DONE,),
    },
    MoveType.ADJUSTMENT: {},
}

# (move_type, target) pairs that require all lines to be in stock
STOCK_GATED = {
    (MoveType.DELIVERY, MoveStatus.READY),
}


def allowed_targets(move_type: str, status: str) -> list[str]:
    """Statuses reachable in one step from `status`."""
    return [str(s) for s in TRANSITIONS.get(move_type, {}).get(status, ())]


def check_transition(move_type: str, current: str, target: str) -> TransitionError | None:
    """
    Validate a status change against the transition table.

    Returns:
        None if legal, otherwise a TransitionError('INVALID_TRANSITION')
        naming the current status and the legal targets.
    """
    allowed = allowed_targets(move_type, current)
    if target in allowed:
        return None

    if current == MoveStatus.DONE:
        message = f'{current} é um status final: nenhuma transição permitida'
    elif not allowed:
        message = f'{move_type} não possui transições de status'
    else:
        message = f'De {current} só é possível ir para {", ".join(allowed)}'

    return TransitionError(
        'INVALID_TRANSITION',
        current_status=str(current),
        allowed_targets=allowed,
        target_status=target,
        message=message,
    )


def requires_stock(move_type: str, target: str) -> bool:
    return (move_type, target) in STOCK_GATED


class MoveTransitions:
    """Status change methods."""

    @classmethod
    def stock_checks(cls, move: InventoryMove) -> list[StockCheck]:
        """
        Check every line of a move against current free-to-use stock.

        One StockCheck per line, in line order. Each line is compared on
        its own against its product's free-to-use; lines of the same
        product are not added together. Availability leaves out the
        move's own reservation, so a WAITING delivery is not blocked by
        itself.

        Concurrency:
            - Must run under transaction.atomic()
            - Locks the involved Product rows (ordered by pk) before
              reading the ledger, serializing concurrent gated checks
        """
        lines = list(move.lines.order_by('pk').values_list('pk', 'product_id', 'quantity'))
        if not lines:
            return []

        product_ids = sorted({product_id for _, product_id, _ in lines})
        list(Product.objects.select_for_update().filter(pk__in=product_ids).order_by('pk'))
        snapshots = StockQueries.compute_all_stock(product_ids=product_ids, exclude_move=move)

        return [
            StockCheck(
                product_id=product_id,
                required=quantity,
                available=snapshots[product_id].free_to_use,
                line_id=line_id,
            )
            for line_id, product_id, quantity in lines
        ]

    @classmethod
    def apply(cls, move: InventoryMove, target: str) -> MoveOutcome:
        """
        Apply a transition to an already locked move.

        Callers hold the row lock (select_for_update inside
        transaction.atomic()); transition_status() is the public entry.
        """
        current = move.status
        error = check_transition(move.move_type, current, target)
        checks: tuple[StockCheck, ...] = ()

        if error is None and requires_stock(move.move_type, target):
            checks = tuple(cls.stock_checks(move))
            if not all(check.satisfied for check in checks):
                error = TransitionError(
                    'STOCK_SHORTFALL',
                    current_status=str(current),
                    allowed_targets=allowed_targets(move.move_type, current),
                    target_status=target,
                    shortfalls=checks,
                )

        if error is not None:
            logger.info(
                "ledger.move.rejected",
                extra={
                    "move_id": move.pk,
                    "reference": move.reference,
                    "current": str(current),
                    "target": str(target),
                    "code": error.code,
                },
            )
            return MoveOutcome(move=move, error=error, stock_checks=checks)

        move.status = target
        move.save(update_fields=['status', 'updated_at'])
        logger.info(
            "ledger.move.transition",
            extra={
                "move_id": move.pk,
                "reference": move.reference,
                "from": str(current),
                "to": str(target),
            },
        )
        return MoveOutcome(move=move, stock_checks=checks)

    @classmethod
    def transition_status(cls, move, target: str) -> MoveOutcome:
        """
        Attempt a status change on a document.

        Args:
            move: InventoryMove instance or pk
            target: MoveStatus value

        Returns:
            MoveOutcome; ok=False carries a TransitionError with the
            current status, the legal targets and, when blocked by stock,
            every line's StockCheck.

        Raises:
            LedgerError('NOT_FOUND'): If the move does not exist

        Concurrency:
            - Runs under transaction.atomic()
            - Uses select_for_update() on the move; a concurrent attempt
              waits, then sees the new status and is rejected
        """
        pk = as_pk(move)

        with transaction.atomic():
            try:
                locked = InventoryMove.objects.select_for_update().get(pk=pk)
            except InventoryMove.DoesNotExist:
                raise LedgerError('NOT_FOUND', model='InventoryMove', pk=pk) from None

            outcome = cls.apply(locked, target)

        if outcome.ok and target == MoveStatus.DONE:
            from ledgerman.services.reconciliation import Reconciliation
            Reconciliation.after_stock_change()

        return outcome
