"""
Reconciliation: promote WAITING deliveries once stock allows.

Usage:
    from ledgerman import ledger

    # Run after stock changes (done automatically unless disabled),
    # periodically, or via `manage.py reconcile_waiting_deliveries`
    report = ledger.reconcile_waiting_deliveries()
    report.promoted  # [move ids now READY]
"""

import logging

from django.db import DatabaseError, transaction

from ledgerman.conf import ledgerman_settings
from ledgerman.exceptions import LedgerError
from ledgerman.models.enums import MoveStatus, MoveType
from ledgerman.models.move import InventoryMove
from ledgerman.results import ReconciliationReport
from ledgerman.services.transitions import MoveTransitions

logger = logging.getLogger('ledgerman')


class Reconciliation:
    """Waiting delivery sweep."""

    @classmethod
    def reconcile_waiting_deliveries(cls) -> ReconciliationReport:
        """
        Re-check every WAITING delivery and promote the satisfiable ones.

        Returns:
            ReconciliationReport(checked, promoted, failed)

        Concurrency:
            - Each document runs under its own transaction.atomic()
            - Uses select_for_update() with SKIP LOCKED: a document held
              by a concurrent transition or deletion is left to it
            - Documents that vanished or left WAITING are skipped
            - A failure on one document is recorded and the sweep goes on
        """
        report = ReconciliationReport()
        waiting_ids = list(
            InventoryMove.objects.waiting().order_by('created_at', 'pk').values_list('pk', flat=True)
        )

        for move_id in waiting_ids:
            try:
                with transaction.atomic():
                    move = (
                        InventoryMove.objects.select_for_update(skip_locked=True)
                        .filter(pk=move_id, move_type=MoveType.DELIVERY, status=MoveStatus.WAITING)
                        .first()
                    )
                    if move is None:
                        continue

                    report.checked += 1
                    outcome = MoveTransitions.apply(move, MoveStatus.READY)
            except (LedgerError, DatabaseError) as exc:
                report.failed[move_id] = str(exc)
                logger.warning(
                    "ledger.reconcile.failed",
                    extra={"move_id": move_id, "error": str(exc)},
                )
                continue

            if outcome.ok:
                report.promoted.append(move_id)

        logger.info(
            "ledger.reconcile.done",
            extra={
                "checked": report.checked,
                "promoted": len(report.promoted),
                "failed": len(report.failed),
            },
        )
        return report

    @classmethod
    def after_stock_change(cls) -> ReconciliationReport | None:
        """Run the sweep if RECONCILE_ON_STOCK_CHANGE is enabled."""
        if not ledgerman_settings.RECONCILE_ON_STOCK_CHANGE:
            return None
        return cls.reconcile_waiting_deliveries()
