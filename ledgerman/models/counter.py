"""
ReferenceCounter model: last issued sequence per (warehouse, move type).
"""

from django.db import models
from django.utils.translation import gettext_lazy as _

from ledgerman.models.enums import MoveType


class ReferenceCounter(models.Model):
    """
    Sequence state for document references.

    Rules:
    - Created lazily on first reference request (starting at 0)
    - last_number only grows, via an atomic F() increment
    - NEVER decremented or deleted
    """

    warehouse = models.ForeignKey(
        'ledgerman.Warehouse',
        on_delete=models.PROTECT,
        related_name='counters',
        verbose_name=_('Armazém'),
    )
    move_type = models.CharField(
        max_length=20,
        choices=MoveType.choices,
        verbose_name=_('Tipo'),
    )
    last_number = models.PositiveIntegerField(
        default=0,
        verbose_name=_('Último número'),
    )

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Contador de Referência')
        verbose_name_plural = _('Contadores de Referência')
        constraints = [
            models.UniqueConstraint(
                fields=['warehouse', 'move_type'],
                name='unique_counter_per_warehouse_type',
            ),
        ]

    def delete(self, *args, **kwargs):
        """Prevent deletion. Sequences never restart."""
        raise ValueError("Contadores de referência não podem ser removidos.")

    def __str__(self) -> str:
        return f"{self.warehouse.short_code}/{self.move_type}: {self.last_number}"
