"""
Warehouse and Location models: Where stock exists.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class Warehouse(models.Model):
    """
    A physical site holding stock.

    The short code prefixes every document reference issued for the
    warehouse (WH/IN/00001).
    """

    name = models.CharField(
        max_length=100,
        verbose_name=_('Nome'),
    )
    short_code = models.CharField(
        unique=True,
        max_length=10,
        verbose_name=_('Código'),
        help_text=_('Prefixo das referências (ex: WH)'),
    )
    address = models.TextField(
        blank=True,
        default='',
        verbose_name=_('Endereço'),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Armazém')
        verbose_name_plural = _('Armazéns')
        ordering = ['short_code']

    def __str__(self) -> str:
        return f"{self.short_code} ({self.name})"


class Location(models.Model):
    """
    A place inside a warehouse (rack, shelf, zone).

    Short codes are unique per warehouse, not globally.
    """

    warehouse = models.ForeignKey(
        Warehouse,
        on_delete=models.PROTECT,
        related_name='locations',
        verbose_name=_('Armazém'),
    )
    name = models.CharField(
        max_length=100,
        verbose_name=_('Nome'),
    )
    short_code = models.CharField(
        max_length=20,
        verbose_name=_('Código'),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Local')
        verbose_name_plural = _('Locais')
        ordering = ['warehouse', 'short_code']
        constraints = [
            models.UniqueConstraint(
                fields=['warehouse', 'short_code'],
                name='unique_location_code_per_warehouse',
            ),
        ]

    def __str__(self) -> str:
        return f"{self.warehouse.short_code}/{self.short_code}"
