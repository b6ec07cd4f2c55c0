"""
Enums for Ledgerman models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class MoveType(models.TextChoices):
    """
    Kind of movement document.

    RECEIPT:    Goods arriving into a location (adds to on-hand when DONE).
    DELIVERY:   Goods leaving a location (reserves while WAITING/READY,
                subtracts from on-hand when DONE).
    ADJUSTMENT: Inventory correction, posted DONE in one step.
    """
    RECEIPT = 'RECEIPT', _('Recebimento')
    DELIVERY = 'DELIVERY', _('Entrega')
    ADJUSTMENT = 'ADJUSTMENT', _('Ajuste')


class MoveStatus(models.TextChoices):
    """Document lifecycle status. DONE is terminal."""
    DRAFT = 'DRAFT', _('Rascunho')       # Editable, no effect on stock
    WAITING = 'WAITING', _('Aguardando')  # Delivery waiting on stock (reserves)
    READY = 'READY', _('Pronto')          # Ready to be completed
    DONE = 'DONE', _('Concluído')         # Applied to the ledger, frozen


# Sequence type codes used in references: WH/IN/00001
TYPE_CODES = {
    MoveType.RECEIPT: 'IN',
    MoveType.DELIVERY: 'OUT',
    MoveType.ADJUSTMENT: 'ADJ',
}


def location_side(move_type: str) -> tuple[str, str]:
    """(location field a line of this type sets, field it leaves empty)."""
    if move_type == MoveType.DELIVERY:
        return 'from_location', 'to_location'
    return 'to_location', 'from_location'
