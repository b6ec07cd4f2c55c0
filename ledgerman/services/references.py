"""
Reference sequence: collision-free document numbers.

Format: {warehouse short code}/{IN|OUT|ADJ}/{zero padded sequence}

Concurrency:
    The counter is bumped with a single UPDATE ... SET last_number =
    last_number + 1 inside transaction.atomic(). The UPDATE takes the row
    lock, so concurrent callers serialize on the counter row until the
    surrounding transaction commits. There is no read-then-write window.
"""

import logging

from django.db import transaction
from django.db.models import F

from ledgerman.conf import ledgerman_settings
from ledgerman.exceptions import LedgerError
from ledgerman.models.counter import ReferenceCounter
from ledgerman.models.enums import TYPE_CODES, MoveType
from ledgerman.models.warehouse import Warehouse

logger = logging.getLogger('ledgerman')


def format_reference(short_code: str, move_type: str, number: int) -> str:
    """WH/IN/00001"""
    digits = ledgerman_settings.REFERENCE_DIGITS
    return f"{short_code}/{TYPE_CODES[move_type]}/{number:0{digits}d}"


class ReferenceSequence:
    """Per (warehouse, move type) reference numbering."""

    @classmethod
    def next_number(cls, warehouse: Warehouse, move_type: str) -> int:
        """
        Atomically increment and return the counter for (warehouse, move_type).

        The counter row is created lazily, starting at 0.
        """
        if move_type not in MoveType.values:
            raise LedgerError('INVALID_MOVE_TYPE', move_type=move_type)

        with transaction.atomic():
            counter, created = ReferenceCounter.objects.get_or_create(
                warehouse=warehouse,
                move_type=move_type,
            )
            ReferenceCounter.objects.filter(pk=counter.pk).update(
                last_number=F('last_number') + 1,
            )
            counter.refresh_from_db(fields=['last_number'])
            return counter.last_number

    @classmethod
    def next_reference(cls, warehouse_short_code: str, move_type: str,
                       warehouse: Warehouse | None = None) -> str:
        """
        Issue the next reference for a warehouse and move type.

        Args:
            warehouse_short_code: Warehouse.short_code (e.g. 'WH')
            move_type: MoveType value
            warehouse: Already loaded warehouse (skips the lookup)

        Raises:
            LedgerError('NOT_FOUND'): Unknown warehouse
            LedgerError('INVALID_MOVE_TYPE'): Unknown move type
        """
        if warehouse is None:
            try:
                warehouse = Warehouse.objects.get(short_code=warehouse_short_code)
            except Warehouse.DoesNotExist:
                raise LedgerError(
                    'NOT_FOUND', model='Warehouse', short_code=warehouse_short_code
                ) from None

        number = cls.next_number(warehouse, move_type)
        reference = format_reference(warehouse.short_code, move_type, number)
        logger.debug(
            "ledger.reference.issued",
            extra={"reference": reference, "warehouse_id": warehouse.pk},
        )
        return reference
