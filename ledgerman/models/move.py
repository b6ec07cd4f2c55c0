"""
InventoryMove and InventoryMoveLine: the movement ledger.
"""

from datetime import date
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from ledgerman.exceptions import LedgerError
from ledgerman.models.enums import MoveStatus, MoveType, location_side


OPEN_STATUSES = [MoveStatus.DRAFT, MoveStatus.WAITING, MoveStatus.READY]


class InventoryMoveQuerySet(models.QuerySet):
    """Custom QuerySet for InventoryMove with convenience filters."""

    def receipts(self):
        return self.filter(move_type=MoveType.RECEIPT)

    def deliveries(self):
        return self.filter(move_type=MoveType.DELIVERY)

    def waiting(self):
        """Deliveries blocked on stock."""
        return self.filter(move_type=MoveType.DELIVERY, status=MoveStatus.WAITING)

    def open(self):
        """Moves not yet DONE."""
        return self.filter(status__in=OPEN_STATUSES)

    def late(self, today: date | None = None):
        """Open moves scheduled before today."""
        return self.open().filter(
            schedule_date__isnull=False,
            schedule_date__lt=today or date.today(),
        )


class InventoryMove(models.Model):
    """
    A movement document: Receipt, Delivery or Adjustment.

    LIFECYCLE:

        RECEIPT:     DRAFT ──► READY ──► DONE
        DELIVERY:    DRAFT ──► WAITING ──► READY ──► DONE
                       └──────────────────►┘ (stock gated)
        ADJUSTMENT:  posted DONE

    The status field only changes through MoveTransitions, which locks
    the row. Lines are editable only while DRAFT.
    """

    reference = models.CharField(
        max_length=50,
        unique=True,
        verbose_name=_('Referência'),
        help_text=_('Gerada automaticamente (ex: WH/IN/00001)'),
    )
    move_type = models.CharField(
        max_length=20,
        choices=MoveType.choices,
        db_index=True,
        verbose_name=_('Tipo'),
    )
    status = models.CharField(
        max_length=20,
        choices=MoveStatus.choices,
        default=MoveStatus.DRAFT,
        db_index=True,
        verbose_name=_('Status'),
    )
    warehouse = models.ForeignKey(
        'ledgerman.Warehouse',
        on_delete=models.PROTECT,
        related_name='moves',
        verbose_name=_('Armazém'),
    )
    contact = models.CharField(
        max_length=200,
        blank=True,
        default='',
        verbose_name=_('Contato'),
    )
    schedule_date = models.DateField(
        null=True,
        blank=True,
        db_index=True,
        verbose_name=_('Data Agendada'),
    )
    responsible = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Responsável'),
    )

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = InventoryMoveQuerySet.as_manager()

    class Meta:
        verbose_name = _('Movimentação')
        verbose_name_plural = _('Movimentações')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['move_type', 'status'], name='ledgerman_move_type_status'),
        ]

    @property
    def is_draft(self) -> bool:
        return self.status == MoveStatus.DRAFT

    @property
    def is_done(self) -> bool:
        return self.status == MoveStatus.DONE

    def __str__(self) -> str:
        return f"{self.reference} [{self.status}]"


class InventoryMoveLine(models.Model):
    """
    A single product/quantity/location entry of a move.

    RECEIPT and ADJUSTMENT lines set only to_location; DELIVERY lines set
    only from_location.

    Rules:
    - quantity >= 0 and exactly one location set (database constraints)
    - Existing lines change only while the parent is DRAFT
    - Nothing is added to a DONE parent
    """

    move = models.ForeignKey(
        InventoryMove,
        on_delete=models.CASCADE,
        related_name='lines',
        verbose_name=_('Movimentação'),
    )
    product = models.ForeignKey(
        'ledgerman.Product',
        on_delete=models.PROTECT,
        related_name='move_lines',
        verbose_name=_('Produto'),
    )
    quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal('0'),
        validators=[MinValueValidator(Decimal('0'))],
        verbose_name=_('Quantidade'),
    )
    from_location = models.ForeignKey(
        'ledgerman.Location',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='outgoing_lines',
        verbose_name=_('Origem'),
    )
    to_location = models.ForeignKey(
        'ledgerman.Location',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='incoming_lines',
        verbose_name=_('Destino'),
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _('Linha de Movimentação')
        verbose_name_plural = _('Linhas de Movimentação')
        ordering = ['pk']
        indexes = [
            models.Index(fields=['product', 'move'], name='ledgerman_line_product_move'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=0),
                name='ledgerman_line_qty_non_negative',
            ),
            models.CheckConstraint(
                condition=(
                    models.Q(from_location__isnull=False, to_location__isnull=True)
                    | models.Q(from_location__isnull=True, to_location__isnull=False)
                ),
                name='ledgerman_line_single_location',
            ),
        ]

    def clean(self):
        """Location side and warehouse must match the parent move."""
        super().clean()
        if self.move_id is None:
            return

        move = self.move
        side, other = location_side(move.move_type)
        errors = {}
        location = getattr(self, side)
        if location is None:
            errors[side] = _('Obrigatório para este tipo de movimentação.')
        elif location.warehouse_id != move.warehouse_id:
            errors[side] = _('Local não pertence ao armazém da movimentação.')
        if getattr(self, f'{other}_id') is not None:
            errors[other] = _('Deve ficar vazio para este tipo de movimentação.')
        if errors:
            raise ValidationError(errors)

    def _move_status(self) -> str | None:
        return InventoryMove.objects.filter(pk=self.move_id).values_list('status', flat=True).first()

    def save(self, *args, **kwargs):
        """Save line, refusing edits to non-draft moves."""
        status = self._move_status()
        if self.pk and status != MoveStatus.DRAFT:
            raise LedgerError('IMMUTABLE_STATE', move_id=self.move_id, status=status)
        if status == MoveStatus.DONE:
            raise LedgerError('IMMUTABLE_STATE', move_id=self.move_id, status=status)
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        """Delete line, only while the move is DRAFT."""
        status = self._move_status()
        if status != MoveStatus.DRAFT:
            raise LedgerError('IMMUTABLE_STATE', move_id=self.move_id, status=status)
        return super().delete(*args, **kwargs)

    def __str__(self) -> str:
        location = self.to_location or self.from_location
        return f"{self.quantity}x {self.product} @ {location}"
