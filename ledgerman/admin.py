"""
Ledgerman Admin.

Provides views for setup and production debugging:
- Warehouse / Location: list + edit
- Product: editable, with derived stock columns
- InventoryMove: read-only lines once the move leaves DRAFT, with
  "reconcile waiting deliveries" action
- ReferenceCounter: read-only
"""

import logging

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from ledgerman.models import (
    InventoryMove,
    InventoryMoveLine,
    Location,
    MoveStatus,
    Product,
    ReferenceCounter,
    Warehouse,
)

logger = logging.getLogger(__name__)


# =========================================================================
# WAREHOUSE / LOCATION ADMIN
# =========================================================================

class LocationInline(admin.TabularInline):
    model = Location
    extra = 0
    fields = ['short_code', 'name']


@admin.register(Warehouse)
class WarehouseAdmin(admin.ModelAdmin):
    """Warehouse admin: editable."""

    list_display = ['short_code', 'name']
    search_fields = ['short_code', 'name']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [LocationInline]


@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    """Location admin: editable."""

    list_display = ['__str__', 'name', 'warehouse']
    list_filter = ['warehouse']
    search_fields = ['short_code', 'name']
    readonly_fields = ['created_at', 'updated_at']


# =========================================================================
# PRODUCT ADMIN
# =========================================================================

@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """Product admin: stock columns are computed from the ledger."""

    list_display = ['name', 'per_unit_cost', 'on_hand_display',
                    'reserved_display', 'free_to_use_display']
    search_fields = ['name']
    readonly_fields = ['created_at', 'updated_at']

    def get_changelist_instance(self, request):
        """Attach one batched stock snapshot to each product of the page."""
        from ledgerman.services.queries import StockQueries

        cl = super().get_changelist_instance(request)
        products = list(cl.result_list)
        snapshots = StockQueries.compute_all_stock(product_ids=[p.pk for p in products])
        for product in products:
            product.stock_snapshot = snapshots[product.pk]
        cl.result_list = products
        return cl

    def _snapshot(self, obj):
        return getattr(obj, 'stock_snapshot', None) or obj.stock

    @admin.display(description=_('Em mãos'))
    def on_hand_display(self, obj):
        return self._snapshot(obj).on_hand

    @admin.display(description=_('Reservado'))
    def reserved_display(self, obj):
        return self._snapshot(obj).reserved

    @admin.display(description=_('Livre'))
    def free_to_use_display(self, obj):
        return self._snapshot(obj).free_to_use


# =========================================================================
# MOVE ADMIN
# =========================================================================

class InventoryMoveLineInline(admin.TabularInline):
    model = InventoryMoveLine
    extra = 0
    fields = ['product', 'quantity', 'from_location', 'to_location']

    def has_add_permission(self, request, obj=None):
        return obj is None or obj.is_draft

    def has_change_permission(self, request, obj=None):
        return obj is None or obj.is_draft

    def has_delete_permission(self, request, obj=None):
        return obj is None or obj.is_draft


@admin.register(InventoryMove)
class InventoryMoveAdmin(admin.ModelAdmin):
    """Move admin: status only changes via the ledger service."""

    list_display = ['reference', 'move_type', 'status', 'warehouse',
                    'contact', 'schedule_date', 'created_at']
    list_filter = ['move_type', 'status', 'warehouse']
    search_fields = ['reference', 'contact']
    readonly_fields = ['reference', 'move_type', 'status', 'warehouse',
                       'responsible', 'created_at', 'updated_at']
    date_hierarchy = 'created_at'
    inlines = [InventoryMoveLineInline]
    actions = ['reconcile_waiting']

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return obj is None or obj.status == MoveStatus.DRAFT

    @admin.action(description=_('Reconciliar entregas aguardando estoque'))
    def reconcile_waiting(self, request, queryset):
        from ledgerman import ledger

        report = ledger.reconcile_waiting_deliveries()
        for move_id, error in report.failed.items():
            logger.warning("reconcile_waiting: failed to promote %s: %s", move_id, error)

        self.message_user(
            request,
            _('{checked} verificada(s), {promoted} liberada(s).').format(
                checked=report.checked, promoted=len(report.promoted)
            ),
        )


# =========================================================================
# REFERENCE COUNTER ADMIN (read-only)
# =========================================================================

@admin.register(ReferenceCounter)
class ReferenceCounterAdmin(admin.ModelAdmin):
    """ReferenceCounter admin: read-only. Numbers only grow."""

    list_display = ['warehouse', 'move_type', 'last_number', 'updated_at']
    list_filter = ['warehouse', 'move_type']
    readonly_fields = ['warehouse', 'move_type', 'last_number', 'updated_at']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
