"""
Product model: What is stocked.
"""

from decimal import Decimal

from django.db import models
from django.utils.translation import gettext_lazy as _


class Product(models.Model):
    """
    A stocked item.

    Stock levels are never stored here. They are derived from the move
    ledger on every read (see StockQueries.compute_stock).
    """

    name = models.CharField(
        max_length=200,
        verbose_name=_('Nome'),
    )
    description = models.TextField(
        blank=True,
        default='',
        verbose_name=_('Descrição'),
    )
    per_unit_cost = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0'),
        verbose_name=_('Custo unitário'),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Produto')
        verbose_name_plural = _('Produtos')
        ordering = ['name']

    @property
    def stock(self):
        """Current StockSnapshot, recomputed from the ledger."""
        from ledgerman.services.queries import StockQueries
        return StockQueries.compute_stock(self)

    def __str__(self) -> str:
        return self.name
